"""
Toolchain — the two external process calls: ``cargo build`` and the
compiled program itself.

cargo's stdout/stderr are captured and handed back untouched on failure.
The compiled program inherits this process's stdio, and its arguments are
forwarded verbatim.
"""
from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rs_script.config import Settings
from rs_script.core.state import BuildState
from rs_script.errors import ToolchainInvocationError

logger = logging.getLogger(__name__)

# Exit status used when the executable could not be started at all
EXIT_NOT_FOUND = 127


@dataclass
class CommandResult:
    cmd: List[str]
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int


def build_command(build_state: BuildState, settings: Settings, verbose: bool = False) -> List[str]:
    cmd = [
        settings.cargo_bin,
        "build",
        "--manifest-path",
        str(build_state.cargo_toml_path),
    ]
    if verbose:
        cmd.append("--verbose")
    return cmd


def cargo_build(
    build_state: BuildState,
    settings: Settings,
    verbose: bool = False,
) -> CommandResult:
    """
    Compile the generated project.

    Raises
    ------
    ToolchainInvocationError
        If cargo cannot be started, times out, or exits non-zero.
    """
    cmd = build_command(build_state, settings, verbose)
    env = dict(os.environ, CARGO_HOME=str(build_state.cargo_home))
    logger.debug("Running %s in %s", " ".join(cmd), build_state.target_dir_path)

    t0 = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            cwd=str(build_state.target_dir_path),
            env=env,
            capture_output=True,
            text=True,
            timeout=settings.BUILD_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise ToolchainInvocationError(
            "build", EXIT_NOT_FOUND, stderr=str(e),
            message=f"cargo not found ({cmd[0]})",
        ) from e
    except subprocess.TimeoutExpired as e:
        raise ToolchainInvocationError(
            "build", -1,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            message=f"cargo build timed out after {settings.BUILD_TIMEOUT}s",
        ) from e
    duration = int((time.monotonic() - t0) * 1000)

    if result.returncode != 0:
        raise ToolchainInvocationError(
            "build", result.returncode, stdout=result.stdout, stderr=result.stderr
        )

    logger.debug("cargo build finished in %dms\n%s", duration, result.stderr)
    return CommandResult(
        cmd=cmd,
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        duration_ms=duration,
    )


def run_program(build_state: BuildState, args: Sequence[str] = ()) -> int:
    """
    Run the compiled binary with *args* appended, stdio inherited.

    Raises
    ------
    ToolchainInvocationError
        If the binary cannot be started or exits non-zero.
    """
    cmd = [str(build_state.target_path), *args]
    logger.debug("Running %s", cmd)
    try:
        result = subprocess.run(cmd, cwd=str(build_state.working_dir_path))
    except OSError as e:
        raise ToolchainInvocationError(
            "run", EXIT_NOT_FOUND, stderr=str(e),
            message=f"Could not start {build_state.target_path}: {e}",
        ) from e

    if result.returncode != 0:
        raise ToolchainInvocationError("run", result.returncode)
    return result.returncode


def _as_text(output: Optional[object]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return str(output)
