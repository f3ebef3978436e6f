"""
Error taxonomy for the generate / build / run pipeline.

Every error aborts the remaining stages of the invocation. Only the CLI
entry point catches these and turns them into an exit status.
"""
from pathlib import Path
from typing import Optional


class BuildRunError(Exception):
    """Base class for all pipeline failures."""
    exit_code = 1


class IoError(BuildRunError):
    """Reading or writing a file failed."""

    def __init__(self, path: Path, cause: OSError):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O error on {self.path}: {cause}")


class DescriptorParseError(BuildRunError):
    """The embedded descriptor is not well-formed TOML or has the wrong shape."""

    def __init__(self, diagnostic: str):
        self.diagnostic = diagnostic
        super().__init__(f"Invalid embedded manifest: {diagnostic}")


class ConflictingOptions(BuildRunError):
    """Mutually exclusive switches were given together."""
    exit_code = 2


class ToolchainInvocationError(BuildRunError):
    """cargo, or the compiled program, exited unsuccessfully."""

    def __init__(
        self,
        stage: str,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        message: Optional[str] = None,
    ):
        self.stage = stage
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message or f"{stage} failed with exit code {exit_code}")
