"""Permit CLI - Main entry point."""

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from .commands import env, trino
from .config import settings
from .permit_client import PermitClient

app = typer.Typer(
    name="permit-cli",
    help="Export Permit environments to Terraform and import Trino schemas",
    add_completion=False,
)

# Add subcommands
app.add_typer(env.app, name="env")
app.add_typer(trino.app, name="trino")

console = Console()


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Permit API URL: {settings.permit_api_url}")
    console.print(f"  API key configured: {'Yes' if settings.permit_api_key else 'No'}")
    console.print(f"  Terraform provider version: {settings.terraform_provider_version}")
    console.print(f"  Trino: {settings.trino_http_scheme}://{settings.trino_host or 'not set'}:{settings.trino_port} (user {settings.trino_user})")


@app.command()
def health():
    """Check that the configured API key is accepted by Permit."""
    async def check() -> bool:
        async with PermitClient() as client:
            return await client.health_check()

    if not settings.permit_api_key:
        console.print("[red]PERMIT_API_KEY is not set[/red]")
        raise typer.Exit(1)

    if asyncio.run(check()):
        console.print(f"[green]API key accepted by {settings.permit_api_url}[/green]")
    else:
        console.print(f"[red]Cannot authenticate with {settings.permit_api_url}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """
    Permit CLI - manage Permit policy as code.

    Examples:

        permit-cli env export --file permit.tf

        permit-cli trino map --schema-file trino.json --format hcl

        permit-cli trino apply --host trino.internal --dry-run
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
