"""Unified CLI entry point for ticket-rpa.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (TRPA_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

from typing import Optional

import typer

from ticket_rpa import __version__
from ticket_rpa.cli.automate import run_automation
from ticket_rpa.cli.settings_cmd import settings_app

APP_HELP = (
    "ticket-rpa: files helpdesk tickets and log notes through the portal's web UI. "
    "Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml "
    "-> env vars (TRPA_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("run")(run_automation)
app.add_typer(settings_app, name="settings")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: api.host)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", envvar="PORT", help="Port (default: api.port)."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes (development only)."),
) -> None:
    """Start the HTTP API with uvicorn."""
    import uvicorn

    from ticket_rpa.logging_setup import configure_logging
    from ticket_rpa.settings import get_settings

    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "ticket_rpa.api.app:app",
        host=host or settings.api.host,
        port=port or settings.api.port,
        reload=reload,
        log_config=None,
        # Let in-flight automations finish on shutdown.
        timeout_graceful_shutdown=settings.api.request_timeout_sec,
    )


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context, version: bool = typer.Option(False, "--version", help="Show version and exit.")) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"ticket-rpa {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
