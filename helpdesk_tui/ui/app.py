from __future__ import annotations

import asyncio
import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import Header, ListItem, ListView, LoadingIndicator, Static, TextArea

from helpdesk_tui.api.client import HelpdeskClient
from helpdesk_tui.desk.commands import Command, CommandRunner
from helpdesk_tui.desk.controller import DeskController, Phase
from helpdesk_tui.desk.messages import (
    AssignRequested,
    BackPressed,
    Message,
    RefreshRequested,
    ReplyEdited,
    ReplyRequested,
    ReplySubmitted,
    TicketSelected,
)
from helpdesk_tui.tickets.models import Ticket

from .render import render_detail, render_error, render_footer, render_ticket_row

logger = logging.getLogger(__name__)


class TicketListItem(ListItem):
    """List entry carrying the ticket it shows."""

    def __init__(self, ticket: Ticket) -> None:
        super().__init__(Static(render_ticket_row(ticket)))
        self.ticket = ticket


class HelpdeskApp(App):
    """Terminal front end: forwards keys to the controller and runs its commands."""

    TITLE = "GLPI Tickets"

    CSS = """
    #connecting {
        align: center middle;
        height: 1fr;
    }
    #connecting-label {
        width: auto;
    }
    #tickets {
        height: 1fr;
    }
    TicketListItem {
        padding: 0 1;
    }
    #detail {
        height: 1fr;
        padding: 0 1;
    }
    #reply {
        height: 8;
        border: round $accent;
    }
    #status {
        height: 1;
        padding: 0 1;
    }
    #error {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("ctrl+s", "submit_reply", "Send reply", priority=True, show=False),
        Binding("escape", "back", "Back", priority=True, show=False),
        Binding("r", "reply", "Reply", show=False),
        Binding("u", "refresh_followups", "Refresh", show=False),
        Binding("a", "assign", "Assign to me", show=False),
    ]

    def __init__(
        self,
        client: HelpdeskClient,
        *,
        controller: DeskController | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.controller = controller if controller is not None else DeskController()
        self.runner = runner if runner is not None else CommandRunner(client)
        self._shown_tickets: list[Ticket] | None = None
        self._shown_phase: Phase | None = None
        self._notified_error: Exception | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="connecting"):
            yield LoadingIndicator()
            yield Static("Connecting to the helpdesk...", id="connecting-label")
        yield ListView(id="tickets")
        with VerticalScroll(id="detail"):
            yield Static(id="detail-body")
        yield TextArea(id="reply")
        yield Static(id="status")
        yield Static(id="error")

    def on_mount(self) -> None:
        self._sync_view()
        self._issue(self.controller.start())

    # Controller plumbing

    def handle_desk_message(self, message: Message) -> None:
        """Feed one message to the controller and start the commands it returns."""

        commands = self.controller.dispatch(message)
        self._sync_view()
        self._issue(commands)

    def _issue(self, commands: list[Command]) -> None:
        for command in commands:
            logger.debug("Starting %s", command)
            self.run_worker(self._execute(command), group="commands")

    async def _execute(self, command: Command) -> None:
        message = await asyncio.to_thread(self.runner.run, command)
        self.handle_desk_message(message)

    # Key actions

    def action_back(self) -> None:
        self.handle_desk_message(BackPressed())

    def action_reply(self) -> None:
        self.handle_desk_message(ReplyRequested())

    def action_submit_reply(self) -> None:
        self.handle_desk_message(ReplySubmitted())

    def action_refresh_followups(self) -> None:
        self.handle_desk_message(RefreshRequested())

    def action_assign(self) -> None:
        self.handle_desk_message(AssignRequested())

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, TicketListItem):
            self.handle_desk_message(TicketSelected(event.item.ticket))

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self.handle_desk_message(ReplyEdited(event.text_area.text))

    # Rendering

    def _sync_view(self) -> None:
        state = self.controller.state
        phase = self.controller.phase

        connecting = self.query_one("#connecting")
        tickets = self.query_one("#tickets", ListView)
        detail = self.query_one("#detail", VerticalScroll)
        reply = self.query_one("#reply", TextArea)
        status = self.query_one("#status", Static)
        error = self.query_one("#error", Static)

        connecting.display = phase is Phase.CONNECTING
        tickets.display = phase is Phase.LISTING
        detail.display = phase in (Phase.VIEWING, Phase.COMPOSING)
        reply.display = phase is Phase.COMPOSING
        status.display = phase not in (Phase.CONNECTING, Phase.FAILED)
        error.display = phase is Phase.FAILED

        if phase is Phase.FAILED and state.error is not None:
            error.update(render_error(state.error))

        if state.tickets is not None and state.tickets is not self._shown_tickets:
            self._shown_tickets = state.tickets
            highlighted = tickets.highlighted_child
            keep_id = highlighted.ticket.id if isinstance(highlighted, TicketListItem) else None
            tickets.clear()
            tickets.extend(TicketListItem(ticket) for ticket in state.tickets)
            self.call_after_refresh(self._highlight_ticket, keep_id)

        if state.selected is not None:
            width = max(self.size.width - 4, 20)
            self.query_one("#detail-body", Static).update(render_detail(state.selected, width))

        status.update(render_footer(state))
        self._notify_transient_error()
        self._on_phase_change(phase)

    def _highlight_ticket(self, ticket_id: int | None) -> None:
        """Move the cursor back to ``ticket_id`` after a rebuild, else to the top."""

        tickets = self.query_one("#tickets", ListView)
        rows = [ticket.id for ticket in self._shown_tickets or []]
        if not rows or not len(tickets):
            return
        tickets.index = rows.index(ticket_id) if ticket_id in rows else 0

    def _notify_transient_error(self) -> None:
        state = self.controller.state
        if state.error is None or state.error_fatal or state.error is self._notified_error:
            return
        self._notified_error = state.error
        self.notify(str(state.error), severity="warning")

    def _on_phase_change(self, phase: Phase) -> None:
        if phase is self._shown_phase:
            return
        previous, self._shown_phase = self._shown_phase, phase

        reply = self.query_one("#reply", TextArea)
        if phase is Phase.COMPOSING:
            selected = self.controller.state.selected
            reply.border_title = f"Reply to ticket #{selected.id}" if selected else "Reply"
            reply.clear()
            reply.focus()
        elif previous is Phase.COMPOSING:
            reply.clear()

        if phase is Phase.LISTING:
            self.query_one("#tickets", ListView).focus()
        elif phase is Phase.VIEWING:
            detail = self.query_one("#detail", VerticalScroll)
            if previous is not Phase.COMPOSING:
                detail.scroll_home(animate=False)
            detail.focus()
