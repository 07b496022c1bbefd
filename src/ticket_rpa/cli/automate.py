"""CLI command that runs one portal automation from the terminal."""

from __future__ import annotations

from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ticket_rpa.models.ticket import (
    EMAIL_BODY,
    EMAIL_CUSTOMER,
    EMAIL_SUBJECT,
    HEADLESS,
    LOG_NOTE,
    PORTAL_EMAIL,
    PORTAL_PASSWORD,
    TICKET_TITLE,
)

console = Console()


def run_automation(
    subject: Optional[str] = typer.Option(
        None, "--subject", envvar=EMAIL_SUBJECT, help="Email subject: ticket title, description and log note."
    ),
    customer: Optional[str] = typer.Option(None, "--customer", envvar=EMAIL_CUSTOMER, help="Customer to set."),
    body: Optional[str] = typer.Option(None, "--body", envvar=EMAIL_BODY, help="Email body: description and log note."),
    ticket_title: Optional[str] = typer.Option(
        None, "--ticket-title", envvar=TICKET_TITLE, help="Existing ticket to add a log note to."
    ),
    log_note: Optional[str] = typer.Option(None, "--log-note", envvar=LOG_NOTE, help="Log note text."),
    email: Optional[str] = typer.Option(None, "--email", envvar=PORTAL_EMAIL, help="Portal login email."),
    password: Optional[str] = typer.Option(
        None, "--password", envvar=PORTAL_PASSWORD, help="Portal login password.", show_default=False
    ),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--headed", envvar=HEADLESS, help="Override the configured browser mode."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the run result as JSON."),
) -> None:
    """Create a ticket (or add a log note to an existing one) in the portal.

    With ``--ticket-title`` plus ``--log-note`` or ``--subject``, only a log
    note is posted to the existing ticket. Otherwise a new ticket is
    created, edited and annotated.
    """
    from ticket_rpa.automation import run_ticket_automation
    from ticket_rpa.logging_setup import configure_logging
    from ticket_rpa.models.ticket import TicketRequest
    from ticket_rpa.settings import get_settings

    configure_logging()
    settings = get_settings()

    payload: dict[str, Any] = {
        EMAIL_SUBJECT: subject,
        EMAIL_CUSTOMER: customer,
        EMAIL_BODY: body,
        TICKET_TITLE: ticket_title,
        LOG_NOTE: log_note,
        PORTAL_EMAIL: email,
        PORTAL_PASSWORD: password,
        HEADLESS: headless,
    }
    request = TicketRequest.from_payload(payload, settings)

    if request.credentials.is_placeholder:
        console.print(
            "[red]✗[/red] Portal credentials are missing or still placeholders. "
            f"Set {PORTAL_EMAIL} and {PORTAL_PASSWORD} (or TRPA_PORTAL__EMAIL / TRPA_PORTAL__PASSWORD)."
        )
        raise typer.Exit(code=1)

    if not json_output:
        console.print(
            Panel(
                f"[bold]Mode:[/bold] {request.mode.value}\n[bold]Title:[/bold] {request.title}",
                title="Ticket RPA",
                border_style="blue",
            )
        )

    result = run_ticket_automation(request, settings)

    if json_output:
        typer.echo(result.to_json())
    else:
        table = Table(title="Steps")
        table.add_column("Step")
        table.add_column("Result")
        table.add_column("Seconds", justify="right")
        for step in result.steps:
            if step.success:
                status = "[green]ok[/green]"
            elif step.fatal:
                status = "[red]failed[/red]"
            else:
                status = "[yellow]skipped[/yellow]"
            table.add_row(step.name, status, f"{step.duration_sec:.1f}")
        console.print(table)

        if result.success:
            console.print(f"\n[green]✓[/green] Automation completed (ticket id: {result.ticket_id or 'n/a'})")
        else:
            console.print(f"\n[red]✗[/red] Automation failed: {result.error}")
        if result.screenshots:
            console.print(f"  Screenshots: {len(result.screenshots)} saved under {settings.artifacts.screenshot_dir}")

    if not result.success:
        raise typer.Exit(code=1)
