"""
shellenv — CLI entrypoint.

Usage:
    shellenv --help
    shellenv load shell.nix
    shellenv check shell.nix
    shellenv dump shell.nix --to yaml
    shellenv resolve shell.nix --resolver path
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click

from shellenv import __version__
from shellenv.core.config.errors import DescriptorError
from shellenv.core.config.options import DEFAULT_LIST_FIELD, LoaderOptions
from shellenv.core.models.environment import EnvironmentDescriptor
from shellenv.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="shellenv")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write full-detail logs to this file.",
)
def cli(
    verbose: bool,
    quiet: bool,
    debug: bool,
    log_file: str | None,
) -> None:
    """shellenv — load and validate development-shell descriptors."""
    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=log_file,
    )


# ── Shared helpers ──────────────────────────────────────────────


def loader_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the validation-policy options to a command."""
    decorators = [
        click.option(
            "--allow-duplicates",
            is_flag=True,
            help="Drop repeated tools with a warning instead of failing.",
        ),
        click.option(
            "--allow-empty",
            is_flag=True,
            help="Warn instead of failing when no tools are listed.",
        ),
        click.option(
            "--field",
            "list_field",
            default=DEFAULT_LIST_FIELD,
            show_default=True,
            help="Name of the list field holding the tools.",
        ),
        click.option(
            "--format",
            "fmt",
            type=click.Choice(["auto", "nix", "yaml"]),
            default="auto",
            show_default=True,
            help="Descriptor format (auto: by file extension).",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _options(
    allow_duplicates: bool,
    allow_empty: bool,
    list_field: str,
    fmt: str,
) -> LoaderOptions:
    try:
        return LoaderOptions(
            on_duplicate="dedupe" if allow_duplicates else "error",
            on_empty="warn" if allow_empty else "error",
            list_field=list_field,
            format=fmt,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _fail(message: str) -> NoReturn:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def _load_or_exit(path: Path, options: LoaderOptions) -> EnvironmentDescriptor:
    from shellenv.core.config.loader import load

    try:
        return load(path, options)
    except OSError as e:
        _fail(f"Cannot read {path}: {e.strerror or e}")
    except DescriptorError as e:
        _fail(f"{path}: {e}")


_PATH_ARG = click.Path(dir_okay=False, path_type=Path)


# ── Commands ────────────────────────────────────────────────────


@cli.command("load")
@click.argument("path", type=_PATH_ARG)
@loader_options
@click.option("--qualified", is_flag=True, help="Print channel-qualified names (pkgs.bash).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def load_cmd(
    path: Path,
    allow_duplicates: bool,
    allow_empty: bool,
    list_field: str,
    fmt: str,
    qualified: bool,
    as_json: bool,
) -> None:
    """Print the normalized tool list of a descriptor."""
    options = _options(allow_duplicates, allow_empty, list_field, fmt)
    descriptor = _load_or_exit(path, options)

    if as_json:
        click.echo(json.dumps(descriptor.to_dict(), indent=2))
        return

    for req in descriptor.requirements:
        click.echo(req.qualified_name if qualified else req.identifier)


@cli.command("check")
@click.argument("path", type=_PATH_ARG)
@loader_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def check_cmd(
    path: Path,
    allow_duplicates: bool,
    allow_empty: bool,
    list_field: str,
    fmt: str,
    as_json: bool,
) -> None:
    """Validate a descriptor and report errors and warnings."""
    from shellenv.core.use_cases.check import check_descriptor

    options = _options(allow_duplicates, allow_empty, list_field, fmt)
    result = check_descriptor(path, options)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.descriptor is not None  # guaranteed when valid
        click.secho("✅ Descriptor is valid", fg="green", bold=True)
        click.echo(f"   Invocation: {result.descriptor.invocation}")
        click.echo(f"   Tools: {len(result.descriptor.requirements)}")
        for req in result.descriptor.requirements:
            click.echo(f"     • {req}")
    else:
        click.secho("❌ Descriptor errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


@cli.command("dump")
@click.argument("path", type=_PATH_ARG)
@loader_options
@click.option(
    "--to",
    "target",
    type=click.Choice(["nix", "yaml"]),
    default="nix",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to a file instead of stdout.",
)
def dump_cmd(
    path: Path,
    allow_duplicates: bool,
    allow_empty: bool,
    list_field: str,
    fmt: str,
    target: str,
    output: Path | None,
) -> None:
    """Re-serialize a descriptor in the chosen format."""
    from shellenv.core.config.writer import dump

    options = _options(allow_duplicates, allow_empty, list_field, fmt)
    descriptor = _load_or_exit(path, options)
    try:
        text = dump(descriptor, target)
    except TypeError as e:
        _fail(f"Cannot render {path} as {target}: {e}")

    if output is None:
        click.echo(text, nl=False)
        return

    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot write {output}: {e.strerror or e}")
    click.secho(f"💾 Wrote {len(descriptor.requirements)} tools to {output}", fg="cyan", err=True)


@cli.command("resolve")
@click.argument("path", type=_PATH_ARG)
@loader_options
@click.option(
    "--resolver",
    "resolver_name",
    type=click.Choice(["path", "nix", "mock"]),
    default="path",
    show_default=True,
    help="How to locate each tool.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def resolve_cmd(
    path: Path,
    allow_duplicates: bool,
    allow_empty: bool,
    list_field: str,
    fmt: str,
    resolver_name: str,
    as_json: bool,
) -> None:
    """Locate every tool of a descriptor through a resolver."""
    from shellenv.adapters.registry import default_registry

    options = _options(allow_duplicates, allow_empty, list_field, fmt)
    descriptor = _load_or_exit(path, options)

    registry = default_registry()
    status = registry.resolver_status()
    if not status[resolver_name]["available"]:
        usable = [name for name, s in status.items() if s["available"]]
        _fail(
            f"Resolver '{resolver_name}' is not available on this system"
            f" (available: {', '.join(usable) or 'none'})"
        )

    report = registry.resolve_all(descriptor, resolver_name)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.ok else 1)

    for artifact in report.artifacts:
        if artifact.ok:
            click.secho(f"   ✓ {artifact.identifier} ", fg="green", nl=False)
            click.echo(f"→ {artifact.path}")
        else:
            click.secho(f"   ✗ {artifact.identifier} ", fg="red", nl=False)
            click.echo(f"({artifact.error})")

    click.echo()
    color = "green" if report.ok else "red"
    click.secho(
        f"   Result: {report.resolved}/{len(report.artifacts)} resolved",
        fg=color,
        bold=True,
    )

    if not report.ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
