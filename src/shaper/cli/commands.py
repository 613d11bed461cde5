"""Command implementations for CLI."""

from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shaper.errors import InvalidIDError, InvalidInputError
from shaper.models.selectors import NIL_UUID, IPXESelectors
from shaper.service import ShaperService


console = Console()


def _parse_uuid(value: Optional[str], what: str) -> UUID:
    if not value:
        return NIL_UUID
    try:
        return UUID(value)
    except ValueError as e:
        error_class = InvalidIDError if what == "content id" else InvalidInputError
        raise error_class(f"invalid {what} {value!r}") from e


def _write(data: bytes):
    typer.echo(data, nl=False)


async def render_boot_script(service: ShaperService, uuid: Optional[str], buildarch: str):
    """Render the iPXE script selected for a machine."""
    selectors = IPXESelectors(uuid=_parse_uuid(uuid, "uuid"), buildarch=buildarch)
    _write(await service.render_boot(selectors))


async def show_content(service: ShaperService, content_id: str, uuid: Optional[str], buildarch: str):
    """Resolve exposed content by its ID."""
    selectors = IPXESelectors(uuid=_parse_uuid(uuid, "uuid"), buildarch=buildarch)
    _write(await service.get_content(_parse_uuid(content_id, "content id"), selectors))


async def show_bootstrap(service: ShaperService):
    """Print the iPXE bootstrap script."""
    _write(service.bootstrap())


async def validate_config(service: ShaperService):
    """Show loaded profiles and assignments plus load errors."""
    loader = service.loader

    table = Table(title="Profiles")
    table.add_column("Name", style="cyan")
    table.add_column("Namespace")
    table.add_column("Content")
    table.add_column("Exposed IDs", style="dim")
    for name, profile in sorted(loader.profiles.items()):
        table.add_row(
            name,
            profile.namespace,
            ", ".join(profile.additional_content) or "-",
            "\n".join(f"{cid} ({n})" for cid, n in profile.content_id_to_name.items()) or "-",
        )
    console.print(table)
    console.print()

    table = Table(title="Assignments")
    table.add_column("Name", style="cyan")
    table.add_column("Profile", style="magenta")
    table.add_column("Default")
    table.add_column("Buildarch")
    table.add_column("UUIDs", style="dim")
    for name, assignment in sorted(loader.assignments.items()):
        selectors = assignment.subject_selectors.as_dict()
        table.add_row(
            name,
            assignment.profile_name,
            "yes" if assignment.is_default else "no",
            ", ".join(selectors.get("buildarch", [])) or "any",
            "\n".join(selectors.get("uuid", [])) or "-",
        )
    console.print(table)
    console.print()

    if loader.errors:
        console.print("[red]✗[/red] Configuration is invalid")
        for error in loader.errors:
            console.print(f"  Error: {escape(error)}", soft_wrap=True)
        raise typer.Exit(1)

    console.print("[green]✓[/green] Configuration is valid")
    console.print(f"  Profiles: {len(loader.profiles)}")
    console.print(f"  Assignments: {len(loader.assignments)}")
    console.print(f"  Objects: {len(loader.objects)}")
