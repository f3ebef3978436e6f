"""
Manifest extraction — split a script into its embedded descriptor and the
compilable source body.

Two markers are recognised for the descriptor:
  - ``//!`` line comments: the marker and one following space are stripped
    and the remainder joins the fragment.
  - a ``/*[toml]`` ... ``*/`` block comment: every line inside joins the
    fragment.

Line ownership: a ``//!`` line belongs to the descriptor and is removed from
the body, so a descriptor line is never compiled and never dropped from both.
Block-comment lines are kept in the body since the block is a valid comment.
Every retained body line is left-trimmed.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from rs_script.errors import IoError
from rs_script.io.schema import PackageDescriptor

logger = logging.getLogger(__name__)

DESCRIPTOR_MARKER = "//!"
BLOCK_OPEN = "/*[toml]"
BLOCK_CLOSE = "*/"


@dataclass(frozen=True)
class ScriptSource:
    """Raw text of a script plus where it came from."""

    path: Path
    text: str
    mtime: float


def read_script(path: Path) -> ScriptSource:
    """Read a script once; I/O failures carry the path."""
    path = Path(path)
    logger.debug("Reading from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
        mtime = os.stat(path).st_mtime
    except OSError as e:
        raise IoError(path, e) from e
    return ScriptSource(path=path, text=text, mtime=mtime)


def extract_manifest_fragment(rs_contents: str) -> str:
    """Concatenate the descriptor lines of *rs_contents* in original order."""
    lines: List[str] = []
    in_block = False

    for raw in rs_contents.splitlines():
        line = raw.lstrip()

        if in_block:
            if line.startswith(BLOCK_CLOSE):
                in_block = False
                continue
            if BLOCK_CLOSE in line:
                lines.append(line.split(BLOCK_CLOSE, 1)[0])
                in_block = False
                continue
            lines.append(line)
            continue

        if line.startswith(BLOCK_OPEN):
            rest = line[len(BLOCK_OPEN):]
            if BLOCK_CLOSE in rest:
                lines.append(rest.split(BLOCK_CLOSE, 1)[0].strip())
            else:
                if rest.strip():
                    lines.append(rest.strip())
                in_block = True
            continue

        if line.startswith(DESCRIPTOR_MARKER):
            content = line[len(DESCRIPTOR_MARKER):]
            # "//! key = 1" → "key = 1"
            lines.append(content[1:] if content.startswith(" ") else content)

    fragment = "".join(f"{line}\n" for line in lines)
    logger.debug("Rust source manifest info (%d lines) = %s", len(lines), fragment)
    return fragment


def extract_source_body(rs_contents: str) -> str:
    """Every non-descriptor line, left-trimmed, newline-terminated."""
    body = "".join(
        f"{line}\n"
        for line in (raw.lstrip() for raw in rs_contents.splitlines())
        if not line.startswith(DESCRIPTOR_MARKER)
    )
    logger.debug("Rust source string (rs_source) = %s", body)
    return body


def parse_descriptor(fragment: str) -> Optional[PackageDescriptor]:
    """Parse a fragment; an empty fragment means no embedded descriptor."""
    if not fragment.strip():
        return None
    return PackageDescriptor.from_toml(fragment)


def extract_manifest(rs_contents: str) -> Optional[PackageDescriptor]:
    return parse_descriptor(extract_manifest_fragment(rs_contents))


def parse_source(script: ScriptSource) -> Tuple[Optional[PackageDescriptor], str]:
    """
    Split *script* into (embedded descriptor or None, compilable body).

    Raises
    ------
    DescriptorParseError
        If the descriptor lines are present but not valid TOML.
    """
    rs_manifest = extract_manifest(script.text)
    rs_source = extract_source_body(script.text)
    return rs_manifest, rs_source
