"""
Expression mode — wrap a literal Rust expression into a throwaway script.

The script lives at ``<dynamic_dir>/temp.rs`` and is only rewritten when
its text changes, so evaluating the same expression twice reuses the
previous build.
"""
import logging
from pathlib import Path

from rs_script import TEMP_SCRIPT_NAME
from rs_script.config import Settings
from rs_script.errors import IoError
from rs_script.io.writer import write_text_atomic

logger = logging.getLogger(__name__)

EXPR_TEMPLATE = """\
use std::error::Error;

fn main() -> Result<(), Box<dyn Error>> {{
    let result = {{
        {expr}
    }};
    println!("{{result:?}}");
    Ok(())
}}
"""


def wrap_expression(expr: str) -> str:
    """Rust source for a program that prints *expr* with ``{:?}``."""
    return EXPR_TEMPLATE.format(expr=expr.strip())


def create_temp_source_file(expr: str, settings: Settings) -> Path:
    """Write the wrapped expression (unless unchanged) and return the script path."""
    path = settings.dynamic_dir / TEMP_SCRIPT_NAME
    source = wrap_expression(expr)

    try:
        unchanged = path.is_file() and path.read_text(encoding="utf-8") == source
    except OSError as e:
        raise IoError(path, e) from e

    if unchanged:
        logger.debug("Expression unchanged, reusing %s", path)
        return path

    write_text_atomic(path, source)
    logger.debug("Wrote expression script %s", path)
    return path
