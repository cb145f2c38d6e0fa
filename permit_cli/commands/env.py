"""Environment commands - export a Permit environment to Terraform."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..config import settings
from ..errors import PermitCLIError
from ..export import export_config, validate_api_key
from ..models import ExportResult
from ..permit_client import PermitClient

app = typer.Typer(help="Permit environment commands")
# Status goes to stderr so the document can be piped from stdout
console = Console(stderr=True)


async def run_export(api_key: str, on_progress=None) -> ExportResult:
    """Resolve the API key's scope and export that environment."""
    async with PermitClient(api_key=api_key) as client:
        scope = await client.get_scope()
        client.scope = scope
        return await export_config(api_key, scope, client=client, on_progress=on_progress)


@app.command("export")
def export_environment(
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Permit API key (or PERMIT_API_KEY env)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Write the Terraform document to this file"),
):
    """
    Export the environment of an API key as Terraform (HCL).

    Resources, roles, user attributes, relations, condition set rules,
    resource sets, user sets and role derivations are exported in that order.

    Examples:
        permit-cli env export --api-key permit_key_... --file permit.tf
        PERMIT_API_KEY=permit_key_... permit-cli env export > permit.tf
    """
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
        task = progress.add_task("Validating API key...", total=None)

        def on_progress(status: str):
            progress.update(task, description=status)

        try:
            result = asyncio.run(run_export(key, on_progress))
        except PermitCLIError as e:
            console.print(f"[red]Export failed: {e.message}[/red]")
            raise typer.Exit(1)

    if file:
        file.write_text(result.document, encoding="utf-8")
        console.print(f"[green]Exported environment to {file}[/green]")
    else:
        typer.echo(result.document, nl=False)

    if result.warnings:
        console.print(f"\n[yellow]{len(result.warnings)} warning(s):[/yellow]")
        for warning in result.warnings:
            console.print(f"  - {warning}", style="yellow", markup=False, highlight=False)
