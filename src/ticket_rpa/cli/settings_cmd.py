"""CLI commands for inspecting and validating ticket-rpa settings."""

from __future__ import annotations

import json

import typer
from rich.console import Console

settings_app = typer.Typer(help="Inspect and validate ticket-rpa configuration.")
console = Console()

_SECRET_FIELDS = ("password",)


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings (secrets masked)."""
    from ticket_rpa.settings import get_settings

    data = get_settings().model_dump(mode="json")
    for field in _SECRET_FIELDS:
        if data["portal"].get(field):
            data["portal"][field] = "***"
    console.print_json(json.dumps(data, indent=2, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Validate settings and report any issues."""
    from ticket_rpa.settings import get_settings

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Settings are valid.")
    console.print(f"  Environment: {settings.env}")
    console.print(f"  Portal: {settings.portal.base_url}")
    console.print(f"  Project: {settings.portal.project_name}")
    console.print(f"  Headless: {settings.browser.headless}")
    console.print(f"  Screenshot dir: {settings.artifacts.screenshot_dir}")
    console.print(f"  Job store: {settings.job_store.backend}")
    if not settings.portal.email or not settings.portal.password:
        console.print("[yellow]⚠[/yellow] No default portal credentials; requests must supply them.")
