"""
Tests for resolver protocol, registry, mock, path and nix resolvers.
"""

import os
import stat
import subprocess
from pathlib import Path

from shellenv.adapters.mock import MockResolver
from shellenv.adapters.nix import NixResolver, nixpkgs_attribute
from shellenv.adapters.path import PathResolver
from shellenv.adapters.registry import ResolverRegistry, default_registry
from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import EnvironmentDescriptor, ToolRequirement


def _descriptor(*names: str) -> EnvironmentDescriptor:
    return EnvironmentDescriptor(
        requirements=tuple(ToolRequirement(identifier=n, channel="pkgs") for n in names)
    )


# ── Mock Resolver ────────────────────────────────────────────────────


class TestMockResolver:
    def test_default_success(self):
        mock = MockResolver()
        artifact = mock.resolve(ToolRequirement(identifier="bash"))
        assert artifact.ok
        assert artifact.path == "/mock/bin/bash"
        assert mock.call_count == 1

    def test_set_failure(self):
        mock = MockResolver()
        mock.set_failure("lldb", error="Intentional failure")
        artifact = mock.resolve(ToolRequirement(identifier="lldb"))
        assert artifact.failed
        assert artifact.error == "Intentional failure"

    def test_reset(self):
        mock = MockResolver()
        mock.set_failure("bash")
        mock.resolve(ToolRequirement(identifier="bash"))
        mock.reset()
        assert mock.call_count == 0
        assert mock.resolve(ToolRequirement(identifier="bash")).ok

    def test_repr(self):
        assert repr(MockResolver(resolver_name="fake")) == "<MockResolver name='fake'>"


# ── Path Resolver ────────────────────────────────────────────────────


class TestPathResolver:
    def _tool(self, directory: Path, name: str) -> Path:
        tool = directory / name
        tool.write_text("#!/bin/sh\n")
        tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
        return tool

    def test_found(self, tmp_path: Path):
        tool = self._tool(tmp_path, "pkg-config")
        resolver = PathResolver(search_path=str(tmp_path))
        artifact = resolver.resolve(ToolRequirement(identifier="pkg-config"))
        assert artifact.ok
        assert artifact.path == str(tool)

    def test_missing(self, tmp_path: Path):
        resolver = PathResolver(search_path=str(tmp_path))
        artifact = resolver.resolve(ToolRequirement(identifier="lldb"))
        assert artifact.failed
        assert "Tool not found on PATH" in artifact.error

    def test_always_available(self):
        assert PathResolver().is_available()


# ── Nix Resolver ─────────────────────────────────────────────────────


class TestNixAttribute:
    def test_root_channel_dropped(self):
        assert nixpkgs_attribute(ToolRequirement(identifier="bash", channel="pkgs")) == "bash"

    def test_no_channel(self):
        assert nixpkgs_attribute(ToolRequirement(identifier="bash")) == "bash"

    def test_nested_channel(self):
        req = ToolRequirement(identifier="lldb", channel="pkgs.llvmPackages_15")
        assert nixpkgs_attribute(req) == "llvmPackages_15.lldb"

    def test_foreign_channel_kept(self):
        req = ToolRequirement(identifier="hello", channel="unstable")
        assert nixpkgs_attribute(req) == "unstable.hello"


class TestNixResolver:
    def test_command(self):
        resolver = NixResolver()
        req = ToolRequirement(identifier="openssl", channel="pkgs")
        assert resolver.command(req) == [
            "nix-build", "<nixpkgs>", "-A", "openssl", "--no-out-link",
        ]

    def test_success(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout="/nix/store/abc-openssl-3.0\n", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        artifact = NixResolver().resolve(ToolRequirement(identifier="openssl"))
        assert artifact.ok
        assert artifact.path == "/nix/store/abc-openssl-3.0"

    def test_build_failure(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(
                cmd, 1, stdout="", stderr="error: attribute 'nope' missing\n"
            )

        monkeypatch.setattr(subprocess, "run", fake_run)
        artifact = NixResolver().resolve(ToolRequirement(identifier="nope"))
        assert artifact.failed
        assert "attribute 'nope' missing" in artifact.error

    def test_timeout(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        artifact = NixResolver(timeout=5).resolve(ToolRequirement(identifier="clang"))
        assert artifact.failed
        assert "timed out after 5s" in artifact.error

    def test_missing_binary(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", "nix-build")

        monkeypatch.setattr(subprocess, "run", fake_run)
        artifact = NixResolver().resolve(ToolRequirement(identifier="clang"))
        assert artifact.failed
        assert "Cannot run nix-build" in artifact.error

    def test_unavailable_without_nix(self, monkeypatch):
        monkeypatch.setenv("PATH", os.devnull)
        assert not NixResolver().is_available()


# ── Registry ─────────────────────────────────────────────────────────


class _ExplodingResolver(MockResolver):
    def resolve(self, requirement):
        raise RuntimeError("boom")


class TestResolverRegistry:
    def test_register_and_get(self):
        registry = ResolverRegistry()
        mock = MockResolver()
        registry.register(mock)
        assert registry.get("mock") is mock
        assert registry.list_resolvers() == ["mock"]

    def test_resolve_all_in_order(self):
        registry = ResolverRegistry()
        mock = MockResolver()
        mock.set_failure("clang")
        registry.register(mock)
        report = registry.resolve_all(_descriptor("bash", "clang", "lldb"), "mock")
        assert [a.identifier for a in report.artifacts] == ["bash", "clang", "lldb"]
        assert report.resolved == 2
        assert report.failed == 1
        assert not report.ok

    def test_unknown_resolver(self):
        registry = ResolverRegistry()
        artifact = registry.resolve(ToolRequirement(identifier="bash"), "apt")
        assert artifact.failed
        assert "No resolver registered for 'apt'" in artifact.error

    def test_raising_resolver_is_contained(self):
        registry = ResolverRegistry()
        registry.register(_ExplodingResolver(resolver_name="boom"))
        artifact = registry.resolve(ToolRequirement(identifier="bash"), "boom")
        assert isinstance(artifact, ArtifactPath)
        assert artifact.failed
        assert "boom" in artifact.error

    def test_resolver_status(self):
        registry = ResolverRegistry()
        registry.register(MockResolver(available=False))
        status = registry.resolver_status()
        assert status["mock"] == {"name": "mock", "available": False, "type": "MockResolver"}

    def test_report_to_dict(self):
        registry = ResolverRegistry()
        registry.register(MockResolver())
        data = registry.resolve_all(_descriptor("bash"), "mock").to_dict()
        assert data["total"] == 1
        assert data["resolved"] == 1
        assert data["artifacts"][0]["path"] == "/mock/bin/bash"

    def test_default_registry(self):
        assert set(default_registry().list_resolvers()) == {"path", "nix", "mock"}
