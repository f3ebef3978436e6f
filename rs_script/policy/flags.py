"""
ProcFlags — the resolved set of processing switches for one invocation.

Raw CLI intent (generate / build / all / no_run / verbose / timings) is
turned into a closed record of six named booleans. The record has a
canonical text form (``"GENERATE | BUILD | RUN"``) that parses back to an
equal value.

Resolution rules:
  - ``all`` together with ``no_run`` is rejected
  - GENERATE = generate or all, BUILD = build or all, RUN = not no_run
  - ALL = all, or generate and build given individually while running
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import List

from rs_script.errors import ConflictingOptions

FLAG_SEPARATOR = " | "


@dataclass(frozen=True)
class ProcFlags:
    """Processing switches. Field order is the canonical rendering order."""

    generate: bool = False
    build: bool = False
    verbose: bool = False
    timings: bool = False
    run: bool = False
    all: bool = False

    @classmethod
    def empty(cls) -> ProcFlags:
        return cls()

    @classmethod
    def flag_names(cls) -> List[str]:
        return [f.name.upper() for f in fields(cls)]

    def names(self) -> List[str]:
        """Names of the switches that are set, in canonical order."""
        return [f.name.upper() for f in fields(self) if getattr(self, f.name)]

    def contains(self, *names: str) -> bool:
        return all(getattr(self, n.lower()) for n in names)

    def __str__(self) -> str:
        return FLAG_SEPARATOR.join(self.names())

    @classmethod
    def parse(cls, text: str) -> ProcFlags:
        """
        Parse the canonical text form. Whitespace and case are not significant.

        Raises
        ------
        ValueError
            On an unknown switch name.
        """
        known = {name.lower() for name in cls.flag_names()}
        values = {}
        for part in text.split("|"):
            name = part.strip().lower()
            if not name:
                continue
            if name not in known:
                raise ValueError(f"Unknown processing flag: {part.strip()!r}")
            values[name] = True
        return cls(**values)


def resolve_proc_flags(
    *,
    generate: bool = False,
    build: bool = False,
    all: bool = False,
    no_run: bool = False,
    verbose: bool = False,
    timings: bool = False,
) -> ProcFlags:
    """
    Set up the processing flags from the raw command-line switches.

    Raises
    ------
    ConflictingOptions
        If ``all`` and ``no_run`` are both set.
    """
    if all and no_run:
        raise ConflictingOptions("Conflicting options --all and --no-run specified")

    run = not no_run
    return ProcFlags(
        generate=generate or all,
        build=build or all,
        verbose=verbose,
        timings=timings,
        run=run,
        all=all or (generate and build and run),
    )
