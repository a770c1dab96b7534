"""
Tests for descriptor loading — load(), options, and validation policy.
"""

import logging
import textwrap
from pathlib import Path

import pytest

from shellenv.core.config.loader import (
    DescriptorError,
    DuplicateRequirement,
    EmptyDescriptor,
    MalformedDescriptor,
    load,
    load_with_warnings,
)
from shellenv.core.config.options import LoaderOptions

REFERENCE_TOOLS = ["bash", "pkg-config", "openssl", "clang", "lldb"]


def _write_nix(tmp_path: Path, tools: list[str], name: str = "shell.nix") -> Path:
    path = tmp_path / name
    path.write_text(
        "{ pkgs ? import <nixpkgs> { } }:\n\n"
        "pkgs.mkShell {\n"
        f"  buildInputs = [ {' '.join('pkgs.' + t for t in tools)} ];\n"
        "}\n"
    )
    return path


class TestLoad:
    """Tests for load()."""

    def test_reference_shell(self, shell_nix: Path):
        descriptor = load(shell_nix)
        assert len(descriptor.requirements) == 5
        assert descriptor.identifiers == REFERENCE_TOOLS
        assert descriptor.source == str(shell_nix)
        assert descriptor.source_format == "nix"

    def test_reference_yaml(self, devshell_yml: Path):
        descriptor = load(devshell_yml)
        assert descriptor.identifiers == REFERENCE_TOOLS
        assert descriptor.get("openssl").version == ">=3"
        assert descriptor.source_format == "yaml"

    @pytest.mark.parametrize("count", [1, 3, 12])
    def test_n_unique_tools_in_file_order(self, tmp_path: Path, count: int):
        tools = [f"tool{i}" for i in reversed(range(count))]
        descriptor = load(_write_nix(tmp_path, tools))
        assert len(descriptor) == count
        assert descriptor.identifiers == tools

    def test_accepts_string_path(self, shell_nix: Path):
        assert load(str(shell_nix)).identifiers == REFERENCE_TOOLS

    def test_nonexistent_path_raises_oserror(self, tmp_path: Path):
        with pytest.raises(OSError):
            load(tmp_path / "missing.nix")

    def test_nonexistent_path_is_ioerror(self, tmp_path: Path):
        with pytest.raises(IOError):
            load(tmp_path / "missing.nix")

    def test_directory_raises_oserror(self, tmp_path: Path):
        with pytest.raises(OSError):
            load(tmp_path)

    def test_malformed(self, tmp_path: Path):
        path = tmp_path / "shell.nix"
        path.write_text("mkShell { packages = [ bash ]; }\n")
        with pytest.raises(MalformedDescriptor):
            load(path)

    def test_invalid_utf8_is_malformed(self, tmp_path: Path):
        path = tmp_path / "shell.nix"
        path.write_bytes(b"mkShell {\n  buildInputs = [ bash ];\n} # \xff\xfe\n")
        with pytest.raises(MalformedDescriptor, match="not valid UTF-8") as exc:
            load(path)
        assert exc.value.line == 3

    def test_errors_share_a_base(self):
        for cls in (MalformedDescriptor, DuplicateRequirement, EmptyDescriptor):
            assert issubclass(cls, DescriptorError)

    def test_format_override(self, tmp_path: Path):
        path = tmp_path / "tools.txt"
        path.write_text("buildInputs: [bash]\n")
        descriptor = load(path, LoaderOptions(format="yaml"))
        assert descriptor.identifiers == ["bash"]

    def test_custom_list_field(self, tmp_path: Path):
        path = tmp_path / "shell.nix"
        path.write_text("mkShell { packages = [ jq ]; }\n")
        descriptor = load(path, LoaderOptions(list_field="packages"))
        assert descriptor.identifiers == ["jq"]
        assert descriptor.list_field == "packages"


class TestDuplicates:
    def test_strict_by_default(self, tmp_path: Path):
        path = _write_nix(tmp_path, ["bash", "clang", "bash"])
        with pytest.raises(DuplicateRequirement) as exc:
            load(path)
        assert exc.value.identifier == "bash"
        assert exc.value.first_line == 4
        assert exc.value.line == 4

    def test_same_identifier_different_channel_is_duplicate(self, tmp_path: Path):
        path = tmp_path / "shell.nix"
        path.write_text("mkShell { buildInputs = [ pkgs.clang llvmPackages.clang ]; }\n")
        with pytest.raises(DuplicateRequirement):
            load(path)

    def test_dedupe_mode(self, tmp_path: Path, caplog: pytest.LogCaptureFixture):
        path = _write_nix(tmp_path, ["bash", "clang", "bash", "lldb"])
        options = LoaderOptions(on_duplicate="dedupe")
        with caplog.at_level(logging.WARNING):
            descriptor, warnings = load_with_warnings(path, options)
        assert descriptor.identifiers == ["bash", "clang", "lldb"]
        assert len(warnings) == 1
        assert "Duplicate requirement 'bash'" in warnings[0]
        assert "Duplicate requirement 'bash'" in caplog.text


class TestEmpty:
    def test_empty_is_fatal_by_default(self, tmp_path: Path):
        path = _write_nix(tmp_path, [])
        with pytest.raises(EmptyDescriptor):
            load(path)

    def test_empty_yaml(self, tmp_path: Path):
        path = tmp_path / "devshell.yml"
        path.write_text("buildInputs: []\n")
        with pytest.raises(EmptyDescriptor):
            load(path)

    def test_empty_warn_mode(self, tmp_path: Path, caplog: pytest.LogCaptureFixture):
        path = _write_nix(tmp_path, [])
        with caplog.at_level(logging.WARNING):
            descriptor, warnings = load_with_warnings(path, LoaderOptions(on_empty="warn"))
        assert len(descriptor) == 0
        assert warnings == ["No tools listed in 'buildInputs'"]
        assert "No tools listed" in caplog.text


class TestLoaderOptions:
    def test_defaults_are_strict(self):
        options = LoaderOptions()
        assert options.strict
        assert options.on_empty == "error"
        assert options.list_field == "buildInputs"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("shell.nix", "nix"),
            ("default.nix", "nix"),
            ("devshell.yml", "yaml"),
            ("devshell.YAML", "yaml"),
            ("devshell.json", "yaml"),
            ("shell", "nix"),
        ],
    )
    def test_format_for(self, name: str, expected: str):
        assert LoaderOptions().format_for(Path(name)) == expected

    def test_explicit_format_wins(self):
        assert LoaderOptions(format="yaml").format_for(Path("shell.nix")) == "yaml"

    def test_blank_list_field_rejected(self):
        with pytest.raises(ValueError):
            LoaderOptions(list_field="  ")

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            LoaderOptions(on_duplicate="ignore")


def test_multiline_nix_reports_entry_lines(tmp_path: Path):
    path = tmp_path / "shell.nix"
    path.write_text(textwrap.dedent("""\
        with import <nixpkgs> { };
        mkShell {
          buildInputs = [
            bash
            openssl
            bash
          ];
        }
    """))
    with pytest.raises(DuplicateRequirement, match=r"line 6, first listed on line 4"):
        load(path)


def test_multiline_version_is_malformed(tmp_path: Path):
    path = tmp_path / "devshell.yml"
    path.write_text(textwrap.dedent("""\
        buildInputs:
          - name: bash
            version: "1\\nclang"
    """))
    with pytest.raises(MalformedDescriptor, match="control characters"):
        load(path)
