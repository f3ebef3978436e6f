"""
test_manifest — splitting a script into embedded descriptor and body.

Invariants:
  - //! lines form the fragment, in order, with the marker stripped.
  - //! lines never appear in the body; every other line does, left-trimmed.
  - A /*[toml] block contributes its inner lines to the fragment.
  - Malformed descriptor text raises DescriptorParseError.
"""
import pytest

from rs_script.core.manifest import (
    extract_manifest,
    extract_manifest_fragment,
    extract_source_body,
    parse_descriptor,
    parse_source,
    read_script,
)
from rs_script.errors import DescriptorParseError, IoError
from rs_script.io.schema import DependencyDetail

from conftest import BAD_MANIFEST_SCRIPT, BLOCK_SCRIPT, MANIFEST_SCRIPT, PLAIN_SCRIPT


class TestFragment:
    """Descriptor fragment extraction."""

    def test_marker_lines_in_order(self):
        fragment = extract_manifest_fragment(MANIFEST_SCRIPT)
        assert fragment.splitlines() == [
            "[dependencies]",
            'itertools = "0.13.0"',
            'serde = { version = "1.0", features = ["derive"] }',
        ]

    def test_indented_marker_lines_count(self):
        text = "    //! [dependencies]\n\t//! rand = \"0.8\"\nfn main() {}\n"
        assert extract_manifest_fragment(text) == "[dependencies]\nrand = \"0.8\"\n"

    def test_no_marker_lines_gives_empty_fragment(self):
        assert extract_manifest_fragment(PLAIN_SCRIPT) == ""
        assert extract_manifest(PLAIN_SCRIPT) is None

    def test_plain_comments_ignored(self):
        text = "// [dependencies]\n/// rand = \"0.8\"\nfn main() {}\n"
        assert extract_manifest_fragment(text) == ""

    def test_block_comment_fragment(self):
        fragment = extract_manifest_fragment(BLOCK_SCRIPT)
        assert fragment.splitlines() == ["[dependencies]", 'log = "0.4.21"']

    def test_single_line_block(self):
        text = '/*[toml] [dependencies] */\nfn main() {}\n'
        assert extract_manifest_fragment(text) == "[dependencies]\n"


class TestBody:
    """Compilable body extraction."""

    def test_descriptor_lines_removed(self):
        body = extract_source_body(MANIFEST_SCRIPT)
        assert "//!" not in body
        assert "use itertools::Itertools;" in body

    def test_lines_left_trimmed(self):
        body = extract_source_body(MANIFEST_SCRIPT)
        assert 'println!("{}", [1, 2, 3].iter().join(","));' in body.splitlines()

    def test_no_line_lost_or_duplicated(self):
        body = extract_source_body(MANIFEST_SCRIPT).splitlines()
        fragment = extract_manifest_fragment(MANIFEST_SCRIPT).splitlines()
        assert len(body) + len(fragment) == len(MANIFEST_SCRIPT.splitlines())

    def test_block_comment_stays_in_body(self):
        body = extract_source_body(BLOCK_SCRIPT)
        assert body.startswith("/*[toml]\n")
        assert "*/" in body


class TestParse:
    """Parsing the fragment into a descriptor."""

    def test_parsed_dependencies(self):
        manifest = extract_manifest(MANIFEST_SCRIPT)
        assert manifest is not None
        assert manifest.package is None
        assert manifest.dependencies["itertools"] == "0.13.0"
        serde = manifest.dependencies["serde"]
        assert isinstance(serde, DependencyDetail)
        assert serde.version == "1.0"
        assert serde.features == ["derive"]

    def test_blank_fragment_is_none(self):
        assert parse_descriptor("  \n\n") is None

    def test_malformed_fragment_raises(self):
        with pytest.raises(DescriptorParseError) as exc_info:
            extract_manifest(BAD_MANIFEST_SCRIPT)
        assert exc_info.value.diagnostic

    def test_wrong_shape_raises(self):
        with pytest.raises(DescriptorParseError):
            parse_descriptor("dependencies = 3\n")


class TestReadScript:
    """Reading the script from disk."""

    def test_read_and_split(self, manifest_script):
        script = read_script(manifest_script)
        assert script.text == MANIFEST_SCRIPT
        assert script.mtime > 0

        rs_manifest, rs_source = parse_source(script)
        assert rs_manifest is not None
        assert "fn main()" in rs_source

    def test_missing_file_raises_io_error(self, tmp_path):
        missing = tmp_path / "nope.rs"
        with pytest.raises(IoError) as exc_info:
            read_script(missing)
        assert exc_info.value.path == missing
