"""App Registry CLI -- manage app registrations from the command line."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from appregistry import __version__
from appregistry.config import AppRegistrySettings
from appregistry.registry.exceptions import AppRegistryError
from appregistry.registry.models import ApplicationType, PageRequest
from appregistry.resources.loader import ResourceError

console = Console()

TYPE_CHOICE = click.Choice([t.value for t in ApplicationType])


@click.group()
@click.version_option(version=__version__)
@click.option("--registry-dir", "-r", default=None, help="Registry directory")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def main(ctx: click.Context, registry_dir: str | None, verbose: bool):
    """App Registry -- register, import and inspect application artifacts."""
    settings = AppRegistrySettings.from_env()
    if registry_dir:
        settings = replace(settings, registry_dir=Path(registry_dir))
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@contextmanager
def _service(settings: AppRegistrySettings):
    """Yield a service whose background prefetches finish before the command exits."""
    from appregistry.registry.factory import build_service
    from appregistry.registry.prefetch import WorkerPool

    with WorkerPool(max_workers=settings.prefetch_workers) as pool:
        try:
            yield build_service(settings, pool)
        except (AppRegistryError, ResourceError) as exc:
            raise click.ClickException(str(exc))


def _registration_table(title: str, registrations) -> Table:
    table = Table(title=title)
    table.add_column("Type", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("URI")
    table.add_column("Metadata URI")
    for r in registrations:
        table.add_row(r.type.value, r.name, r.uri, r.metadata_uri or "")
    return table


# ── Apps ─────────────────────────────────────────────────────────────


@main.group()
def apps():
    """Manage app registrations."""


@apps.command(name="list")
@click.option("--type", "-t", "app_type", type=TYPE_CHOICE, default=None, help="Filter by type")
@click.option("--search", "-s", default=None, help="Filter by name substring")
@click.option("--page", default=0, show_default=True, help="Page number (0-based)")
@click.option("--size", default=20, show_default=True, help="Page size")
@click.pass_obj
def list_apps(settings: AppRegistrySettings, app_type: str | None, search: str | None, page: int, size: int):
    """List registered apps."""
    with _service(settings) as service:
        result = service.list(
            PageRequest(page=page, size=size),
            type=ApplicationType(app_type) if app_type else None,
            search=search,
        )

    if not result.content:
        console.print("[yellow]No registered apps found.[/]")
        return

    title = (
        f"Apps (page {result.number + 1} of {result.total_pages}, "
        f"{result.total_elements} total)"
    )
    console.print(_registration_table(title, result.content))


@apps.command()
@click.argument("app_type", type=TYPE_CHOICE)
@click.argument("name")
@click.option("--exhaustive", is_flag=True, help="Show every property, not only visible ones")
@click.pass_obj
def info(settings: AppRegistrySettings, app_type: str, name: str, exhaustive: bool):
    """Show an app and its configuration properties."""
    with _service(settings) as service:
        detailed = service.info(ApplicationType(app_type), name, exhaustive=exhaustive)

    reg = detailed.registration
    console.print(f"\n[bold blue]{reg.qualified_id}[/] {reg.uri}")
    if reg.metadata_uri:
        console.print(f"  metadata: {reg.metadata_uri}")

    if not detailed.options:
        console.print("[yellow]No configuration properties.[/]")
        return

    table = Table(title=f"Properties ({len(detailed.options)})")
    table.add_column("Property", style="cyan")
    table.add_column("Type")
    table.add_column("Default")
    table.add_column("Description")
    for option in detailed.options:
        default = "" if option.default_value is None else str(option.default_value)
        table.add_row(option.id, option.type, default, option.description[:60])
    console.print(table)


@apps.command()
@click.argument("app_type", type=TYPE_CHOICE)
@click.argument("name")
@click.argument("uri")
@click.option("--metadata-uri", "-m", default=None, help="URI of the metadata artifact")
@click.option("--force", is_flag=True, help="Overwrite an existing registration")
@click.pass_obj
def register(settings: AppRegistrySettings, app_type: str, name: str, uri: str, metadata_uri: str | None, force: bool):
    """Register an app artifact under TYPE and NAME."""
    with _service(settings) as service:
        registration = service.register(
            ApplicationType(app_type), name, uri, metadata_uri=metadata_uri, force=force
        )
    console.print(f"  Registered: [cyan]{registration.qualified_id}[/] -> {registration.uri}")


@apps.command()
@click.argument("app_type", type=TYPE_CHOICE)
@click.argument("name")
@click.pass_obj
def unregister(settings: AppRegistrySettings, app_type: str, name: str):
    """Remove the registration of TYPE and NAME."""
    with _service(settings) as service:
        service.unregister(ApplicationType(app_type), name)
    console.print(f"  Unregistered: [cyan]{app_type}/{name}[/]")


@apps.command(name="import")
@click.option("--uri", "-u", default=None, help="URI of a .properties file listing apps")
@click.option("--app", "-a", "inline", multiple=True, help="Inline <type>.<name>=<uri> entry")
@click.option("--force", is_flag=True, help="Overwrite existing registrations")
@click.pass_obj
def import_apps(settings: AppRegistrySettings, uri: str | None, inline: tuple, force: bool):
    """Register every app listed in a properties file or given inline."""
    with _service(settings) as service:
        apps_text = "\n".join(inline) if inline else None
        result = service.register_all(PageRequest(page=0, size=20), uri=uri, apps=apps_text, force=force)

    if not result.content:
        console.print("[yellow]Nothing imported.[/]")
        return
    console.print(
        _registration_table(
            f"Imported {len(result.content)} apps ({result.total_elements} registered)",
            result.content,
        )
    )


if __name__ == "__main__":
    main()
