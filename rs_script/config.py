"""
Runtime configuration.

Resolved once by the CLI entry point and passed down explicitly; nothing
in the package reads a module-level settings instance.
"""
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """rs-script settings"""

    model_config = SettingsConfigDict(
        env_prefix="RS_SCRIPT_",
        env_file=".env",
        extra="ignore",
        case_sensitive=True,
    )

    # Generated projects
    TMP_ROOT: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    NAMESPACE: str = "rs-script"
    DYNAMIC_SUBDIR: str = "rs_dyn"

    # Toolchain
    CARGO_HOME: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("RS_SCRIPT_CARGO_HOME", "CARGO_HOME"),
    )
    DEFAULT_EDITION: str = "2021"
    BUILD_TIMEOUT: int = 600  # seconds

    @property
    def project_root(self) -> Path:
        """Directory holding one generated project per script stem"""
        return self.TMP_ROOT / self.NAMESPACE

    @property
    def dynamic_dir(self) -> Path:
        """Directory where expression scripts are written"""
        return self.project_root / self.DYNAMIC_SUBDIR

    @property
    def cargo_home(self) -> Path:
        if self.CARGO_HOME is not None:
            return self.CARGO_HOME
        return Path.home() / ".cargo"

    @property
    def cargo_bin(self) -> str:
        """cargo executable: the one under CARGO_HOME if installed there, else PATH lookup"""
        for name in ("cargo", "cargo.exe"):
            candidate = self.cargo_home / "bin" / name
            if candidate.is_file():
                return str(candidate)
        return shutil.which("cargo") or "cargo"


def load_settings(**overrides) -> Settings:
    """Build the settings once at process start."""
    return Settings(**overrides)
