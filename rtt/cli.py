"""rtt CLI: the main entry point for Registry Time Traveler."""

from __future__ import annotations

import sys
from contextlib import nullcontext
from pathlib import Path

import click
from rich.table import Table

from rtt import __version__
from rtt.errors import TimeTravelError
from rtt.logging import console, print_error, setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output, including git commands")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
@click.option("--config", "-c", "config_path", default=None, help="YAML config file")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: str | None):
    """rtt — Registry Time Traveler.

    Check out every package registry as it was on the day a package version
    was released, so installing that version only sees what existed then.
    """
    setup_logging("verbose" if verbose else "quiet" if quiet else "normal")
    ctx.obj = {"config_path": config_path}


def _settings(ctx: click.Context, registries_dir: str | None, layout: str | None, registry: tuple):
    from rtt.config import load_settings, parse_layout, parse_registry

    settings = load_settings(ctx.obj["config_path"])
    if registries_dir:
        settings.registries_dir = Path(registries_dir)
    if layout:
        settings.snapshot_layout = parse_layout(layout)
    if registry:
        settings.registries = [parse_registry(r) for r in registry]
    return settings


def _fail(error: TimeTravelError) -> None:
    print_error(error.message)
    sys.exit(int(error.exit_code))


_registry_options = [
    click.option(
        "--registry", "-r", multiple=True,
        help="Registry as NAME=URL (repeatable); defaults to the configured registries",
    ),
    click.option("--registries-dir", "-d", default=None, help="Where mirrors and snapshots are kept"),
]

_layout_option = click.option(
    "--layout", default=None, type=click.Choice(["by-name", "by-commit"]),
    help="Key snapshot directories by registry name or by commit",
)


def registry_options(func):
    for option in reversed(_registry_options):
        func = option(func)
    return func


# ── Travel ───────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.argument("version")
@registry_options
@_layout_option
@click.option("--workdir", "-w", default=None, help="Run from this directory (relative paths resolve here)")
@click.option("--dry-run", is_flag=True, help="Resolve commits but do not clone snapshots")
@click.pass_context
def travel(
    ctx: click.Context,
    name: str,
    version: str,
    registry: tuple,
    registries_dir: str | None,
    layout: str | None,
    workdir: str | None,
    dry_run: bool,
):
    """Check out all registries as of the release of NAME VERSION."""
    from rtt.models import PackageReference
    from rtt.traveler import TemporalRegistryResolver
    from rtt.utils.git_ops import working_directory

    package = PackageReference(name=name, version=version)
    console.print(f"\n[bold blue]rtt[/] — Traveling to the release of {package.qualified_id}\n")

    try:
        with working_directory(workdir) if workdir else nullcontext():
            settings = _settings(ctx, registries_dir, layout, registry)
            resolver = TemporalRegistryResolver.from_settings(settings)
            plan = resolver.plan(package, settings.sources())
            snapshots = [] if dry_run else resolver.materialize(plan)
            indexes = resolver.loader.load([s.path for s in snapshots])
    except TimeTravelError as e:
        _fail(e)
        return

    console.print(
        f"  Released in [cyan]{plan.release_registry.name}[/] at "
        f"[green]{plan.release.timestamp}[/] ({plan.release.short_hash})\n"
    )

    table = Table(title="Registries" + (" (dry run)" if dry_run else ""))
    table.add_column("Registry", style="cyan")
    table.add_column("Commit", style="dim")
    table.add_column("Date", style="green")
    if not dry_run:
        table.add_column("Packages", justify="right")
        table.add_column("Snapshot")

    for i, (source, commit) in enumerate(plan.pins):
        row = [source.name, commit.short_hash, commit.timestamp]
        if not dry_run:
            reused = " [yellow](reused)[/]" if snapshots[i].reused else ""
            row += [str(len(indexes[i])), f"{snapshots[i].path}{reused}"]
        table.add_row(*row)

    console.print(table)
    if not dry_run:
        console.print("\n[dim]Keep the package manager offline so it does not update these snapshots.[/]")


# ── Release date ─────────────────────────────────────────────────────


@main.command(name="release-date")
@click.argument("name")
@click.argument("version")
@registry_options
@click.pass_context
def release_date(
    ctx: click.Context,
    name: str,
    version: str,
    registry: tuple,
    registries_dir: str | None,
):
    """Print when NAME VERSION was released and by which commit."""
    from rtt.models import PackageReference
    from rtt.traveler import TemporalRegistryResolver

    package = PackageReference(name=name, version=version)
    try:
        settings = _settings(ctx, registries_dir, None, registry)
        resolver = TemporalRegistryResolver.from_settings(settings)
        mirrors = [resolver.history_cloner.ensure_history(s) for s in settings.sources()]
        mirror, record = resolver.locate_release(package, mirrors)
    except TimeTravelError as e:
        _fail(e)
        return

    click.echo(f"{mirror.source_name}\t{record.hash}\t{record.timestamp}")


# ── Registries ───────────────────────────────────────────────────────


@main.command()
@click.pass_context
def registries(ctx: click.Context):
    """List the registries a run would use."""
    try:
        settings = _settings(ctx, None, None, ())
        sources = settings.sources()
    except TimeTravelError as e:
        _fail(e)
        return

    table = Table(title=f"Registries ({len(sources)})")
    table.add_column("Name", style="cyan")
    table.add_column("URL")
    for source in sources:
        table.add_row(source.name, source.url)
    console.print(table)
    console.print(f"[dim]Mirrors and snapshots go to {settings.registries_dir}[/]")


if __name__ == "__main__":
    main()
