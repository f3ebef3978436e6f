"""
rs_script — run a single-file Rust program as if it were a script.

Turns the script into a cargo project under a per-script temp directory,
infers missing dependencies, and only regenerates / rebuilds when stale.
"""

__version__ = "0.1.0"

RS_SUFFIX = ".rs"
TOML_NAME = "Cargo.toml"
TEMP_SCRIPT_NAME = "temp.rs"
