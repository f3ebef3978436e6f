"""
Runner — top-level orchestration: script → generated project → binary → run.

Stages, in order:
  1. extract   embedded descriptor + compilable body
  2. infer     dependency names from the body
  3. merge     one canonical Cargo.toml model
  4. staleness decide what can be skipped
  5. generate  write body + Cargo.toml (only if stale)
  6. build     ``cargo build`` (only if stale)
  7. run       the compiled program (only if RUN is set)

Any failure aborts the remaining stages. ``execute`` is the programmatic
entry point; ``main`` is the CLI.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rs_script import __version__
from rs_script.config import Settings, load_settings
from rs_script.core.expr import create_temp_source_file
from rs_script.core.inference import infer_dependencies
from rs_script.core.manifest import ScriptSource, parse_source, read_script
from rs_script.core.merge import merge_manifest
from rs_script.core.staleness import StalenessDecision, evaluate_staleness
from rs_script.core.state import BuildState
from rs_script.core.timing import TimingLog, timed_stage
from rs_script.core.toolchain import cargo_build, run_program
from rs_script.errors import BuildRunError, ConflictingOptions, ToolchainInvocationError
from rs_script.io.writer import write_project
from rs_script.policy.flags import ProcFlags, resolve_proc_flags

logger = logging.getLogger(__name__)


@dataclass
class RunOutcome:
    """What one invocation actually did."""
    build_state: BuildState
    decision: StalenessDecision
    generated: bool = False
    built: bool = False
    ran: bool = False
    exit_code: int = 0
    timings: TimingLog = field(default_factory=TimingLog)


def prepare(
    script: ScriptSource,
    settings: Settings,
    timing_log: Optional[TimingLog] = None,
    timings: bool = False,
) -> Tuple[BuildState, str]:
    """Stages 1-3: the BuildState with its merged descriptor, plus the compilable body."""
    build_state = BuildState.for_script(script.path, settings)

    with timed_stage("extract", timings, timing_log):
        rs_manifest, rs_source = parse_source(script)
    build_state.rs_manifest = rs_manifest

    with timed_stage("infer", timings, timing_log):
        inferred = infer_dependencies(rs_source)

    with timed_stage("merge", timings, timing_log):
        build_state.set_cargo_manifest(
            merge_manifest(
                rs_manifest,
                inferred,
                source_stem=build_state.source_stem,
                source_path=build_state.generated_source_path,
                edition=settings.DEFAULT_EDITION,
            )
        )
    return build_state, rs_source


def gen_build_run(
    script: ScriptSource,
    proc_flags: ProcFlags,
    settings: Settings,
    args: Sequence[str] = (),
    force: bool = False,
) -> RunOutcome:
    """
    Run the pipeline for one script, skipping stages that are up to date.

    Raises
    ------
    BuildRunError
        From whichever stage failed; later stages are not attempted.
    """
    timing_log = TimingLog()
    timings = proc_flags.timings

    build_state, rs_source = prepare(script, settings, timing_log, timings)

    with timed_stage("staleness", timings, timing_log):
        decision = evaluate_staleness(
            build_state,
            script_mtime=script.mtime,
            force_generate=force or proc_flags.generate,
            force_build=force or proc_flags.build,
        )
    outcome = RunOutcome(build_state=build_state, decision=decision, timings=timing_log)

    if build_state.must_gen:
        with timed_stage("generate", timings, timing_log):
            write_project(build_state, rs_source)
        outcome.generated = True
        logger.info("Generated project %s", build_state.target_dir_path)
    else:
        logger.debug("Skipping generation, project is up to date")

    if build_state.must_build:
        with timed_stage("build", timings, timing_log):
            cargo_build(build_state, settings, verbose=proc_flags.verbose)
        outcome.built = True
        logger.info("Built %s", build_state.target_path)
    else:
        logger.debug("Skipping build, binary is up to date")

    if proc_flags.run:
        with timed_stage("run", timings, timing_log):
            outcome.exit_code = run_program(build_state, args)
        outcome.ran = True

    if timings:
        logger.info("Timings: %s", timing_log.summary())
    return outcome


def execute(
    script_path: Optional[Path],
    proc_flags: ProcFlags,
    settings: Settings,
    args: Sequence[str] = (),
    expr: Optional[str] = None,
    force: bool = False,
) -> RunOutcome:
    """
    Read the script (or materialise *expr*) and run the pipeline.

    Raises
    ------
    ConflictingOptions
        If both a script path and an expression are given.
    """
    if expr is not None and script_path is not None:
        raise ConflictingOptions("A script path and --expr cannot be used together")
    if expr is not None:
        script_path = create_temp_source_file(expr, settings)
    if script_path is None:
        raise ValueError("Either a script path or an expression is required")

    script = read_script(Path(script_path))
    return gen_build_run(script, proc_flags, settings, args=args, force=force)


# ── CLI ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rs-script",
        description="rs-script — run a single-file Rust program as a script",
    )
    parser.add_argument("script", nargs="?", type=Path, help="Path to the .rs script")
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed verbatim to the compiled program",
    )
    parser.add_argument("-e", "--expr", default=None, help="Evaluate a Rust expression instead of a script")
    parser.add_argument("-g", "--generate", action="store_true", help="Regenerate the cargo project")
    parser.add_argument("-b", "--build", action="store_true", help="Rebuild the binary")
    parser.add_argument("-a", "--all", action="store_true", help="Generate, build and run")
    parser.add_argument("-n", "--no-run", action="store_true", help="Don't run the compiled program")
    parser.add_argument("-f", "--force", action="store_true", help="Regenerate and rebuild regardless of timestamps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-t", "--timings", action="store_true", help="Report stage timings")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for rs-script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.script is None and args.expr is None:
        parser.error("a script path or --expr is required")
    if args.script is not None and args.expr is not None:
        parser.error("a script path and --expr are mutually exclusive")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        proc_flags = resolve_proc_flags(
            generate=args.generate,
            build=args.build,
            all=args.all,
            no_run=args.no_run,
            verbose=args.verbose,
            timings=args.timings,
        )
        logger.debug("flags=%s", proc_flags)

        settings = load_settings()
        outcome = execute(
            args.script,
            proc_flags,
            settings,
            args=args.args,
            expr=args.expr,
            force=args.force,
        )
    except ToolchainInvocationError as e:
        # cargo's own output goes through untouched
        if e.stdout:
            sys.stdout.write(e.stdout)
        if e.stderr:
            sys.stderr.write(e.stderr)
        if e.stage != "run":
            logger.error("%s", e)
        return e.exit_code or 1
    except BuildRunError as e:
        logger.error("%s", e)
        return e.exit_code

    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
