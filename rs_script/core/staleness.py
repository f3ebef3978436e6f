"""
Staleness — decide whether generation and/or compilation can be skipped.

``decide`` is a pure function over existence flags and modification times;
``evaluate_staleness`` gathers those facts from the filesystem and records
the decision on the BuildState.

Invariant: must_gen implies must_build.
"""
from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from rs_script.core.state import BuildState
from rs_script.errors import IoError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StalenessInputs:
    """Filesystem facts for one script. A missing file has mtime None."""

    script_mtime: float
    target_dir_exists: bool
    cargo_toml_exists: bool
    generated_source_mtime: Optional[float]
    target_mtime: Optional[float]
    force_generate: bool = False
    force_build: bool = False


@dataclass(frozen=True)
class StalenessDecision:
    must_gen: bool
    must_build: bool
    reasons: Tuple[str, ...] = ()


def decide(inputs: StalenessInputs) -> StalenessDecision:
    reasons: List[str] = []

    # ── Generation ───────────────────────────────────────────────────
    if inputs.force_generate:
        reasons.append("GENERATE_REQUESTED")
    if not inputs.target_dir_exists:
        reasons.append("NO_PROJECT_DIR")
    if not inputs.cargo_toml_exists:
        reasons.append("NO_CARGO_TOML")
    if inputs.generated_source_mtime is None:
        reasons.append("NO_GENERATED_SOURCE")
    elif inputs.script_mtime > inputs.generated_source_mtime:
        reasons.append("SCRIPT_MODIFIED")
    must_gen = bool(reasons)

    # ── Build ────────────────────────────────────────────────────────
    if inputs.force_build:
        reasons.append("BUILD_REQUESTED")
    if inputs.target_mtime is None:
        reasons.append("NO_TARGET")
    elif (
        inputs.generated_source_mtime is not None
        and inputs.target_mtime < inputs.generated_source_mtime
    ):
        reasons.append("TARGET_OLDER_THAN_SOURCE")
    must_build = must_gen or bool(reasons)

    return StalenessDecision(must_gen=must_gen, must_build=must_build, reasons=tuple(reasons))


def _stat(path: Path) -> Optional[os.stat_result]:
    """stat() of *path*, or None when it does not exist."""
    try:
        return path.stat()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise IoError(path, e) from e


def _mtime(path: Path) -> Optional[float]:
    st = _stat(path)
    return st.st_mtime if st is not None else None


def _is_dir(path: Path) -> bool:
    st = _stat(path)
    return st is not None and stat.S_ISDIR(st.st_mode)


def _is_file(path: Path) -> bool:
    st = _stat(path)
    return st is not None and stat.S_ISREG(st.st_mode)


def gather_inputs(
    build_state: BuildState,
    script_mtime: Optional[float] = None,
    force_generate: bool = False,
    force_build: bool = False,
) -> StalenessInputs:
    """
    Stat the script and the generated project.

    Raises
    ------
    IoError
        If a path cannot be inspected for any reason other than not existing,
        or the script itself is missing.
    """
    if script_mtime is None:
        try:
            script_mtime = build_state.source_path.stat().st_mtime
        except OSError as e:
            raise IoError(build_state.source_path, e) from e
    return StalenessInputs(
        script_mtime=script_mtime,
        target_dir_exists=_is_dir(build_state.target_dir_path),
        cargo_toml_exists=_is_file(build_state.cargo_toml_path),
        generated_source_mtime=_mtime(build_state.generated_source_path),
        target_mtime=_mtime(build_state.target_path),
        force_generate=force_generate,
        force_build=force_build,
    )


def evaluate_staleness(
    build_state: BuildState,
    script_mtime: Optional[float] = None,
    force_generate: bool = False,
    force_build: bool = False,
) -> StalenessDecision:
    """Stat the generated project and set ``must_gen`` / ``must_build`` on *build_state*."""
    decision = decide(
        gather_inputs(build_state, script_mtime, force_generate, force_build)
    )
    build_state.must_gen = decision.must_gen
    build_state.must_build = decision.must_build
    logger.debug(
        "Staleness for %s: must_gen=%s must_build=%s reasons=%s",
        build_state.source_stem,
        decision.must_gen,
        decision.must_build,
        list(decision.reasons),
    )
    return decision
