"""
Host preflight — CLI entrypoint.

Usage:
    hostpreflight --help
    hostpreflight check
    hostpreflight fix --dry-run
    hostpreflight cleanup
    hostpreflight config check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from hostpreflight import __version__
from hostpreflight.core.observability.logging_config import resolve_level, setup_logging

_MARKERS = {
    "ok": ("✓", "green"),
    "fixed": ("✓", "green"),
    "warned": ("!", "yellow"),
    "skipped": ("⊘", "yellow"),
    "failed": ("✗", "red"),
}


@click.group()
@click.version_option(version=__version__, prog_name="hostpreflight")
@click.option("--verbose", "-v", is_flag=True, help="Show each check as it runs.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to preflight.yml (default: $HPF_CONFIG or ~/.config/hostpreflight).",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=None,
    help="Act on files below this directory instead of /.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    root: str | None,
) -> None:
    """Host preflight — verify and repair host network configuration."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["root"] = Path(root) if root else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _host(ctx: click.Context, dry_run: bool = False):
    from hostpreflight.core.host import Host

    if "host" in ctx.obj:
        host = ctx.obj["host"]
        host.dry_run = dry_run
        return host
    return Host.default(root=ctx.obj.get("root"), dry_run=dry_run)


def _print_report(ctx: click.Context, title: str, result) -> None:
    """Render a PreflightResult and exit 1 if anything failed."""
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        label = "[dry-run] " if report.dry_run else ""
        click.secho(f"\n🔎 {label}{title}", fg="cyan", bold=True)

    for r in report.results:
        if quiet and r.status != "failed":
            continue
        marker, color = _MARKERS[r.status]
        click.secho(f"   {marker} {r.description}", fg=color)
        if r.error:
            for line in r.error.split("\n")[:5]:
                click.echo(f"     │ {line}")
        elif r.detail and ctx.obj.get("verbose"):
            click.echo(f"     │ {r.detail}")

    if not quiet:
        click.echo()
        color = {"ok": "green", "partial": "yellow", "failed": "red"}[report.status]
        parts = [f"{report.passed} passed"]
        for count, name in ((report.fixed, "fixed"), (report.warned, "warned"),
                            (report.skipped, "skipped"), (report.failed, "failed")):
            if count:
                parts.append(f"{count} {name}")
        click.secho(f"   Result: {', '.join(parts)}", fg=color, bold=True)
        click.echo()

    if not report.all_ok:
        sys.exit(1)


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_checks(as_json: bool) -> None:
    """List the available checks, grouped by registry."""
    from hostpreflight.core.preflight.network import REGISTRIES

    data = {name: [c.describe() for c in checks] for name, checks in REGISTRIES.items()}
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    for name, checks in data.items():
        click.secho(f"\n📋 {name}", fg="cyan", bold=True)
        for c in checks:
            tags = []
            if not c["fixable"]:
                tags.append("no-fix")
            if c["undoable"]:
                tags.append("undoable")
            suffix = f"  [{', '.join(tags)}]" if tags else ""
            click.echo(f"   • {c['id']}{suffix}")
            click.echo(f"     {c['description']}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--fail-fast", is_flag=True, help="Stop at the first failing check.")
@click.pass_context
def check(ctx: click.Context, as_json: bool, fail_fast: bool) -> None:
    """Verify the host without changing anything."""
    from hostpreflight.core.use_cases.preflight import run_preflight

    result = run_preflight(
        "check",
        config_path=ctx.obj.get("config_path"),
        host=_host(ctx),
        fail_fast=fail_fast,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    _print_report(ctx, "Checking host", result)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--check-only", is_flag=True, help="Report what would need fixing, then stop.")
@click.option("--dry-run", is_flag=True, help="Show fixes without applying them.")
@click.pass_context
def fix(ctx: click.Context, as_json: bool, check_only: bool, dry_run: bool) -> None:
    """Check the host and fix what can be fixed.

    Examples:

        hostpreflight fix

        hostpreflight fix --dry-run

        hostpreflight --root /tmp/scratch fix
    """
    from hostpreflight.core.use_cases.preflight import run_preflight

    result = run_preflight(
        "fix",
        config_path=ctx.obj.get("config_path"),
        host=_host(ctx, dry_run=dry_run),
        check_only=check_only,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    _print_report(ctx, "Fixing host", result)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Show what would be removed.")
@click.pass_context
def cleanup(ctx: click.Context, as_json: bool, dry_run: bool) -> None:
    """Undo every change made by fix."""
    from hostpreflight.core.use_cases.preflight import run_preflight

    result = run_preflight(
        "cleanup",
        config_path=ctx.obj.get("config_path"),
        host=_host(ctx, dry_run=dry_run),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    _print_report(ctx, "Cleaning up host", result)


@cli.group()
def config() -> None:
    """Preflight settings commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate preflight.yml."""
    from hostpreflight.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.settings is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        if result.config_path:
            click.echo(f"   File: {result.config_path}")
        click.echo(f"   Skipped checks: {len(result.settings.skip)}")
        click.echo(f"   Warn-only checks: {len(result.settings.warn)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
