"""Trino commands - map Trino metadata onto Permit resources."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from typing_extensions import Annotated

from ..config import settings
from ..errors import PermitCLIError
from ..export.hcl import render_resource_block, render_section
from ..export.orchestrator import validate_api_key
from ..models import ResourceDefinition
from ..permit_client import PermitClient
from ..trino import TrinoIntrospector, TrinoSchemaData, duplicate_keys, map_trino_schema_to_permit_resources

app = typer.Typer(help="Import Trino catalogs, schemas and tables as Permit resources")
console = Console(stderr=True)


def load_schema_file(schema_file: Path) -> TrinoSchemaData:
    """Load a Trino metadata tree from a JSON file."""
    try:
        return TrinoSchemaData.model_validate_json(schema_file.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[red]Invalid schema file {schema_file}:[/red]")
        console.print(str(e), markup=False)
        raise typer.Exit(1)


def warn_duplicate_keys(resources: List[ResourceDefinition]):
    for key in duplicate_keys(resources):
        console.print(
            f"Warning: several Trino objects map to '{key}' and are kept as one resource",
            style="yellow",
            markup=False,
        )


def render_resources(resources: List[ResourceDefinition], output_format: str) -> str:
    """Render resource definitions as JSON or as permitio_resource blocks."""
    if output_format == "json":
        payload = [r.model_dump(mode="json", exclude_none=True) for r in resources]
        return json.dumps(payload, indent=2) + "\n"
    if output_format == "hcl":
        section = render_section("Trino Resources", [render_resource_block(r) for r in resources])
        return section or ""
    raise typer.BadParameter(f"Unknown format '{output_format}' (use 'json' or 'hcl')")


@app.command("map")
def map_schema(
    schema_file: Path = typer.Option(..., "--schema-file", "-s", exists=True, dir_okay=False, help="Trino metadata JSON file"),
    output_format: str = typer.Option("json", "--format", help="Output format: 'json' or 'hcl'"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result to this file"),
):
    """
    Map a Trino metadata file to Permit resource definitions.

    Examples:
        permit-cli trino map --schema-file trino.json
        permit-cli trino map --schema-file trino.json --format hcl -o trino.tf
    """
    schema = load_schema_file(schema_file)
    resources = map_trino_schema_to_permit_resources(schema)
    warn_duplicate_keys(resources)
    text = render_resources(resources, output_format)

    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]Wrote {len(resources)} resources to {output}[/green]")
    else:
        typer.echo(text, nl=False)


async def push_resources(api_key: str, resources: List[ResourceDefinition], on_progress=None) -> int:
    """Create or update every resource in Permit, one at a time."""
    async with PermitClient(api_key=api_key) as client:
        for index, resource in enumerate(resources, start=1):
            if on_progress:
                on_progress(f"Syncing {resource.key} ({index}/{len(resources)})...")
            await client.upsert_resource(resource)
    return len(resources)


@app.command("apply")
def apply_schema(
    schema_file: Optional[Path] = typer.Option(None, "--schema-file", "-s", exists=True, dir_okay=False, help="Trino metadata JSON file (instead of a live cluster)"),
    host: Optional[str] = typer.Option(None, "--host", help="Trino host (or TRINO_HOST env)"),
    port: Optional[int] = typer.Option(None, "--port", help="Trino port (or TRINO_PORT env)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Trino user (or TRINO_USER env)"),
    catalog: Annotated[Optional[List[str]], typer.Option(
        "--catalog", "-c",
        help="Catalog to import. Can be specified multiple times (default: all)."
    )] = None,
    skip_functions: bool = typer.Option(False, "--skip-functions", help="Do not list functions"),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Permit API key (or PERMIT_API_KEY env)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the resources without creating them"),
):
    """
    Create (or update) a Permit resource for every Trino object.

    Examples:
        permit-cli trino apply --host trino.internal --catalog hive --dry-run
        permit-cli trino apply --schema-file trino.json --api-key permit_key_...
    """
    if schema_file:
        schema = load_schema_file(schema_file)
    else:
        try:
            with TrinoIntrospector(host=host, port=port, user=user) as introspector:
                schema = introspector.introspect(
                    catalog_filter=catalog, include_functions=not skip_functions
                )
        except ImportError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        except PermitCLIError as e:
            console.print(f"[red]Error reading Trino metadata: {e.message}[/red]")
            raise typer.Exit(1)

    resources = map_trino_schema_to_permit_resources(schema)
    if not resources:
        console.print("[yellow]No Trino objects found[/yellow]")
        raise typer.Exit(1)
    warn_duplicate_keys(resources)

    if dry_run:
        table = Table(title=f"{len(resources)} Permit resources")
        table.add_column("Key", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Actions", style="magenta")
        table.add_column("Attributes", style="blue")
        for resource in resources:
            table.add_row(
                resource.key,
                resource.name,
                str(len(resource.actions)),
                str(len(resource.attributes)),
            )
        console.print(table)
        console.print("\n[yellow]Dry run - nothing was created[/yellow]")
        return

    try:
        key = validate_api_key(api_key or settings.permit_api_key)
    except PermitCLIError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Connecting to Permit...", total=None)

        def on_progress(status: str):
            progress.update(task, description=status)

        try:
            count = asyncio.run(push_resources(key, resources, on_progress))
        except PermitCLIError as e:
            console.print(f"[red]Error syncing resources: {e.message}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Synced {count} resources to Permit[/green]")
