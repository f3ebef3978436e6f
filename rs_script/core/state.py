"""
BuildState — per-invocation working context.

Created fresh for every script run and threaded through extract → infer →
merge → staleness → orchestration. Only the merge (descriptor fields and the
binary name) and the staleness evaluator (must_gen / must_build) write to it.

Layout of the generated project:
    <TMP_ROOT>/<NAMESPACE>/<stem>/<stem>.rs
    <TMP_ROOT>/<NAMESPACE>/<stem>/Cargo.toml
    <TMP_ROOT>/<NAMESPACE>/<stem>/target/debug/<bin name>
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rs_script import RS_SUFFIX, TOML_NAME
from rs_script.config import Settings
from rs_script.io.schema import PackageDescriptor


def binary_path(target_dir_path: Path, bin_name: str) -> Path:
    """Where ``cargo build`` puts the debug binary named *bin_name*."""
    exe_name = f"{bin_name}.exe" if sys.platform == "win32" else bin_name
    return target_dir_path / "target" / "debug" / exe_name


@dataclass
class BuildState:
    working_dir_path: Path
    source_stem: str
    source_name: str
    source_dir_path: Path
    source_path: Path
    cargo_home: Path
    target_dir_path: Path
    target_path: Path
    cargo_toml_path: Path
    rs_manifest: Optional[PackageDescriptor] = None
    cargo_manifest: Optional[PackageDescriptor] = None
    must_gen: bool = False
    must_build: bool = False

    @classmethod
    def for_script(cls, script_path: Path, settings: Settings) -> BuildState:
        """Derive every path for *script_path* from the settings."""
        source_path = Path(script_path).resolve()
        source_name = source_path.name
        source_stem = source_path.stem if source_name.endswith(RS_SUFFIX) else source_name

        target_dir_path = settings.project_root / source_stem

        return cls(
            working_dir_path=Path.cwd(),
            source_stem=source_stem,
            source_name=source_name,
            source_dir_path=source_path.parent,
            source_path=source_path,
            cargo_home=settings.cargo_home,
            target_dir_path=target_dir_path,
            target_path=binary_path(target_dir_path, source_stem),
            cargo_toml_path=target_dir_path / TOML_NAME,
        )

    def set_cargo_manifest(self, cargo_manifest: PackageDescriptor) -> None:
        """Record the merged descriptor; the binary is named by its first [[bin]]."""
        self.cargo_manifest = cargo_manifest
        bin_name = None
        if cargo_manifest.bin:
            bin_name = cargo_manifest.bin[0].name
        # cargo names an unnamed bin after the package
        if not bin_name and cargo_manifest.package is not None:
            bin_name = cargo_manifest.package.name
        self.target_path = binary_path(self.target_dir_path, bin_name or self.source_stem)

    @property
    def generated_source_path(self) -> Path:
        """Copy of the script body inside the generated project (extension preserved)."""
        return self.target_dir_path / self.source_name
