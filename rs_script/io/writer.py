"""
Writer — materialise the generated cargo project.

Filesystem layout per script:
    <target_dir>/<script name>   compilable body
    <target_dir>/Cargo.toml      merged descriptor

Each file is written to a temp file in the same directory and renamed into
place, so a failed write never leaves a half-written file behind.

The body's mtime is what staleness checks, so it is written last: if the
Cargo.toml write fails the old body keeps its old mtime and the next run
regenerates both.
"""
import logging
import tempfile
from pathlib import Path

from rs_script.core.state import BuildState
from rs_script.errors import IoError
from rs_script.io.schema import PackageDescriptor

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, content: str) -> Path:
    """Replace *path* with *content* in one rename."""
    temp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(content)
        temp_path.replace(path)
    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise IoError(path, e) from e
    return path


def write_source(path: Path, rs_source: str) -> Path:
    logger.debug("Writing source to %s", path)
    return write_text_atomic(path, rs_source)


def write_manifest(path: Path, manifest: PackageDescriptor) -> Path:
    logger.debug("Writing manifest to %s", path)
    return write_text_atomic(path, manifest.to_toml())


def write_project(build_state: BuildState, rs_source: str) -> Path:
    """
    Write the body and merged Cargo.toml into the project directory.

    Returns the project directory.
    """
    if build_state.cargo_manifest is None:
        raise ValueError("BuildState has no merged manifest; merge before generating")

    write_manifest(build_state.cargo_toml_path, build_state.cargo_manifest)
    write_source(build_state.generated_source_path, rs_source)
    return build_state.target_dir_path
