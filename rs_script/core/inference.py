"""
Dependency inference — a best-effort guess at the external crates a script uses.

Text in, name set out. Three independent regex scans:
  1. ``use foo::bar;``              → foo
  2. ``#[macro_use] extern crate``  → the crate after the attribute
  3. ``extern crate foo;``          → foo

This is not a parser: names inside comments or string literals are picked
up too, and crates referenced only by fully qualified path are missed. The
embedded descriptor is the user's way to correct either mistake.
"""
import logging
import re
from typing import Iterable, Set

logger = logging.getLogger(__name__)

USE_RE = re.compile(r"\buse\s+([^;{]+)")
MACRO_USE_RE = re.compile(
    r"#\[macro_use\]\s*(?:pub\s+)?(?:extern\s+crate\s+|::\s*)([^;{]+)"
)
EXTERN_CRATE_RE = re.compile(r"\bextern\s+crate\s+([^;{]+)")

# Names starting with any of these are built in and never become dependencies.
BUILT_IN_CRATES = ("std", "core", "alloc", "collections", "fmt", "crate", "self", "super")


def _dependency_name(token: str) -> str:
    """First path segment of a captured token, without aliases or leading ``::``."""
    token = token.strip().lstrip(":").strip()
    if not token:
        return ""
    name = token.split("::", 1)[0]
    # "foo as bar", "foo\n    ::baz"
    return name.split()[0] if name.split() else ""


def _is_built_in(name: str, built_ins: Iterable[str]) -> bool:
    return any(name.startswith(b) for b in built_ins)


def infer_dependencies(code: str) -> Set[str]:
    """Return the distinct external crate names referenced by *code*."""
    dependencies: Set[str] = set()

    for pattern in (USE_RE, MACRO_USE_RE, EXTERN_CRATE_RE):
        for match in pattern.finditer(code):
            name = _dependency_name(match.group(1))
            if not name or _is_built_in(name, BUILT_IN_CRATES):
                continue
            dependencies.add(name)

    logger.debug("Inferred dependencies: %s", sorted(dependencies))
    return dependencies
