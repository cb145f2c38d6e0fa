"""Typer sub-applications for permit-cli."""
