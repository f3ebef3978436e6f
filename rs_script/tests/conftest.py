"""
Shared pytest fixtures for rs_script tests.

Provides sample scripts, a Settings object rooted in a temp directory so no
test touches the real temp dir, and a ``cargo_ok`` gate for the few tests
that need a real Rust toolchain.
"""
import shutil
import subprocess
import textwrap
from pathlib import Path

import pytest

from rs_script.config import Settings
from rs_script.core.state import BuildState

# Script without an embedded manifest and one external import.
PLAIN_SCRIPT = textwrap.dedent("""\
    use std::io;
    use serde_json;

    fn main() {
        let _ = io::stdout();
        println!("Hello, world!");
    }
""")

# Script declaring its own dependencies with //! lines.
MANIFEST_SCRIPT = textwrap.dedent("""\
    //! [dependencies]
    //! itertools = "0.13.0"
    //! serde = { version = "1.0", features = ["derive"] }

    use itertools::Itertools;
    use serde::Serialize;
    use regex::Regex;

    fn main() {
        println!("{}", [1, 2, 3].iter().join(","));
    }
""")

# Script using a /*[toml] block comment instead of //! lines.
BLOCK_SCRIPT = textwrap.dedent("""\
    /*[toml]
    [dependencies]
    log = "0.4.21"
    */

    use log::debug;

    fn main() {
        debug!("hi");
    }
""")

# Dependency-free program that echoes its arguments.
ECHO_SCRIPT = textwrap.dedent("""\
    fn main() {
        let args: Vec<String> = std::env::args().skip(1).collect();
        println!("{}", args.join(" "));
    }
""")

BAD_MANIFEST_SCRIPT = textwrap.dedent("""\
    //! [dependencies]
    //! itertools = "0.13.0"
    //! itertools = "0.12.0"

    fn main() {}
""")


def _cargo_available() -> bool:
    if shutil.which("cargo") is None:
        return False
    try:
        subprocess.run(["cargo", "--version"], check=True, capture_output=True, timeout=30)
    except (OSError, subprocess.SubprocessError):
        return False
    return True


@pytest.fixture(scope="session")
def cargo_ok():
    """Skip tests if cargo is not installed."""
    if not _cargo_available():
        pytest.skip("cargo not available - install a Rust toolchain to run these tests")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with every generated project under tmp_path."""
    return Settings(TMP_ROOT=tmp_path / "tmp", CARGO_HOME=tmp_path / "cargo_home")


@pytest.fixture
def scripts_dir(tmp_path) -> Path:
    d = tmp_path / "scripts"
    d.mkdir()
    return d


def _write(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.write_text(content)
    return path


@pytest.fixture
def plain_script(scripts_dir) -> Path:
    return _write(scripts_dir, "plain.rs", PLAIN_SCRIPT)


@pytest.fixture
def manifest_script(scripts_dir) -> Path:
    return _write(scripts_dir, "with_manifest.rs", MANIFEST_SCRIPT)


@pytest.fixture
def echo_script(scripts_dir) -> Path:
    return _write(scripts_dir, "echo_args.rs", ECHO_SCRIPT)


@pytest.fixture
def bad_manifest_script(scripts_dir) -> Path:
    return _write(scripts_dir, "bad_manifest.rs", BAD_MANIFEST_SCRIPT)


@pytest.fixture
def build_state(plain_script, settings) -> BuildState:
    return BuildState.for_script(plain_script, settings)
