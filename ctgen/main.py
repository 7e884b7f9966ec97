"""
ctgen — CLI entrypoint.

Usage:
    ctgen --help
    ctgen generate
    ctgen generate --phase client --module clients
    ctgen config check
    ctgen cache clear --module server
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from ctgen import __version__
from ctgen.core.observability.logging_config import configure_cli_logging


@click.group()
@click.version_option(version=__version__, prog_name="ctgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ctgen.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """ctgen — compile-time client code generation for builds."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_cli_logging(debug=debug, verbose=verbose, quiet=quiet)


@cli.command()
@click.option(
    "--phase",
    type=click.Choice(["all", "server", "client"]),
    default="all",
    show_default=True,
    help="Which phase(s) to run.",
)
@click.option("--module", "-m", "modules", multiple=True, help="Target specific modules.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    phase: str,
    modules: tuple[str, ...],
    as_json: bool,
) -> None:
    """Run the server and client generation phases.

    Examples:

        ctgen generate

        ctgen generate --phase server --module api
    """
    from ctgen.core.use_cases.generate import run_generate

    result = run_generate(
        config_path=ctx.obj.get("config_path"),
        phase=phase,
        modules=list(modules) if modules else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    if not quiet:
        name = result.definition.name if result.definition else ""
        click.secho(f"\n⚙️  ctgen generate — {name or result.build_root}", fg="cyan", bold=True)
        click.echo()

    for phase_result in result.results:
        label = f"{phase_result.module} [{phase_result.phase}]"
        if phase_result.status == "failed":
            click.secho(f"   ✗ {label}", fg="red")
            for err in phase_result.errors:
                click.echo(f"     │ {err}")
        elif phase_result.status == "skipped":
            click.secho(f"   ⊘ {label} ", fg="yellow", nl=False)
            click.echo("(not configured)")
        else:
            click.secho(f"   ✓ {label} ", fg="green", nl=False)
            click.echo(f"{phase_result.status}, {len(phase_result.files)} file(s)")
            if ctx.obj.get("verbose"):
                for f in phase_result.files:
                    click.echo(f"     │ {f}")

    if not result.ok:
        click.echo()
        sys.exit(1)

    if not quiet:
        click.echo()


@cli.group()
def config() -> None:
    """Build configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate ctgen.yml configuration."""
    from ctgen.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.definition is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Modules: {len(result.definition.modules)}")
        click.echo(f"   Servers: {len(result.definition.server_modules())}")
        click.echo(f"   Clients: {len(result.definition.client_modules())}")
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


@cli.group()
def cache() -> None:
    """Generation cache commands."""


@cache.command("clear")
@click.option("--module", "-m", "module", default=None, help="Only clear this module.")
@click.pass_context
def cache_clear(ctx: click.Context, module: str | None) -> None:
    """Forget cached fingerprints so the next run regenerates."""
    from ctgen.core.use_cases.cache import clear_cache

    result = clear_cache(config_path=ctx.obj.get("config_path"), module=module)
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"🧹 Removed {result.removed} cache record(s)", fg="cyan")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
