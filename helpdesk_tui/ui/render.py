"""Rich-markup text for the detail pane, footer and error screen."""

from __future__ import annotations

from rich.markup import escape

from helpdesk_tui.desk.controller import DeskState
from helpdesk_tui.tickets.models import Followup, Ticket

TITLE_STYLE = "bold #FAFAFA on #7D56F4"
SECTION_STYLE = "bold #FAFAFA on #444444"
INFO_STYLE = "grey50"
DIVIDER_STYLE = "grey35"
AUTHOR_STYLE = "bold #00D7D7"

DETAIL_HINTS = "r: Reply • u: Refresh • a: Assign to me • Esc: Back"
COMPOSE_HINTS = "Ctrl+S: Send • Esc: Cancel"
LIST_HINTS = "Enter: Open • Ctrl+C: Quit"


def render_ticket_row(ticket: Ticket) -> str:
    """Two-line list entry: title, then coloured status and summary."""

    status = f"[{ticket.status_color}]{escape(ticket.status_label)}[/]"
    rest = f"Prio: {escape(ticket.priority_label)} | ID: {ticket.id} | {escape(ticket.formatted_date)}"
    return f"[bold]{escape(ticket.title)}[/bold]\n{status} | {rest}"


def _render_followup(followup: Followup) -> str:
    author = escape(followup.author_name or "Unknown")
    return (
        f"\n[{AUTHOR_STYLE}]{author}[/] on [{INFO_STYLE}]{escape(followup.formatted_date)}[/]\n"
        f"[{DIVIDER_STYLE}]{'-' * 20}[/]\n"
        f"{escape(followup.clean_content)}\n"
    )


def _render_followups(followups: list[Followup] | None) -> str:
    if followups is None:
        return f"\n\n[{INFO_STYLE}]Loading history...[/]"
    if not followups:
        return f"\n\n[{INFO_STYLE}]No followups yet.[/]"
    parts = [f"\n\n[{SECTION_STYLE}] Followups [/]\n"]
    parts.extend(_render_followup(followup) for followup in followups)
    return "".join(parts)


def render_detail(ticket: Ticket, width: int = 80) -> str:
    """Full detail pane: header, actors, description and followup history."""

    header = (
        f"[{TITLE_STYLE}] #{ticket.id} {escape(ticket.title)} [/]\n"
        f"[{INFO_STYLE}]Opened on: {escape(ticket.formatted_date)}[/]"
    )

    if ticket.actors is None:
        requester = technician = "Loading..."
    else:
        requester = ticket.requesters()
        technician = ticket.technicians()
    actors = (
        f"\nRequester: [bold]{escape(requester)}[/bold]\n"
        f"Technician: [bold]{escape(technician)}[/bold]\n"
    )

    divider = f"[{DIVIDER_STYLE}]{'─' * max(width, 1)}[/]"
    description = f"{divider}\n{escape(ticket.clean_content)}"

    return f"{header}\n{actors}\n{description}{_render_followups(ticket.followups)}"


def render_footer(state: DeskState) -> str:
    if state.composing:
        return f"[{DIVIDER_STYLE}]{COMPOSE_HINTS}[/]"
    if state.refreshing or state.assigning:
        return "[bold #FF8700]Updating... please wait.[/]"
    if state.error is not None and not state.error_fatal:
        return f"[bold yellow]{escape(str(state.error))}[/]"
    if state.selected is not None:
        return f"[{DIVIDER_STYLE}]{DETAIL_HINTS}[/]"
    return f"[{DIVIDER_STYLE}]{LIST_HINTS}[/]"


def render_error(error: Exception) -> str:
    return f"\n  [bold red]Error:[/] {escape(str(error))}\n\n  Press Ctrl+C to quit."
