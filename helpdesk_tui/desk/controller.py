from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from helpdesk_tui.api.client import PreconditionError
from helpdesk_tui.tickets.models import Ticket
from helpdesk_tui.tickets.state import TicketStatus

from .commands import (
    AssignTicket,
    Authenticate,
    Command,
    FetchActors,
    FetchFollowups,
    IdentifyUser,
    LoadTickets,
    PostFollowup,
)
from .messages import (
    ActorsLoaded,
    AssignRequested,
    Authenticated,
    BackPressed,
    CommandFailed,
    FollowupCreated,
    FollowupsLoaded,
    Message,
    RefreshRequested,
    ReplyEdited,
    ReplyRequested,
    ReplySubmitted,
    TicketAssigned,
    TicketSelected,
    TicketsLoaded,
    UserIdentified,
)

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Coarse view of the state flags, used to pick what to draw."""

    CONNECTING = "connecting"
    LISTING = "listing"
    VIEWING = "viewing"
    COMPOSING = "composing"
    FAILED = "failed"


@dataclass(slots=True)
class DeskState:
    """Everything the UI shows. Only :class:`DeskController` mutates it."""

    tickets: list[Ticket] | None = None
    selected: Ticket | None = None
    reply_buffer: str = ""
    loading: bool = True
    refreshing: bool = False
    assigning: bool = False
    composing: bool = False
    user_id: int | None = None
    error: Exception | None = None
    error_fatal: bool = False


class DeskController:
    """Single-threaded state machine driving the terminal client.

    :meth:`dispatch` takes one message, updates :attr:`state` and returns the
    commands to run next. Results of those commands come back through
    :meth:`dispatch` as further messages.
    """

    def __init__(self, state: DeskState | None = None) -> None:
        self.state = state if state is not None else DeskState()
        self._handlers: dict[type, Callable[[Message], list[Command]]] = {
            TicketSelected: self._on_ticket_selected,
            BackPressed: self._on_back,
            ReplyRequested: self._on_reply_requested,
            ReplyEdited: self._on_reply_edited,
            ReplySubmitted: self._on_reply_submitted,
            RefreshRequested: self._on_refresh_requested,
            AssignRequested: self._on_assign_requested,
            Authenticated: self._on_authenticated,
            TicketsLoaded: self._on_tickets_loaded,
            UserIdentified: self._on_user_identified,
            ActorsLoaded: self._on_actors_loaded,
            FollowupsLoaded: self._on_followups_loaded,
            FollowupCreated: self._on_followup_created,
            TicketAssigned: self._on_ticket_assigned,
            CommandFailed: self._on_command_failed,
        }

    @property
    def phase(self) -> Phase:
        state = self.state
        if state.error is not None and state.error_fatal:
            return Phase.FAILED
        if state.loading:
            return Phase.CONNECTING
        if state.selected is None:
            return Phase.LISTING
        if state.composing:
            return Phase.COMPOSING
        return Phase.VIEWING

    def start(self) -> list[Command]:
        return [Authenticate()]

    def dispatch(self, message: Message) -> list[Command]:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise TypeError(f"Unsupported message: {message!r}")
        if self.phase is Phase.FAILED and not isinstance(message, CommandFailed):
            # Nothing recovers a failed session; late results are dropped.
            return []
        return handler(message)

    def _fetch_followups(self, ticket_id: int) -> FetchFollowups:
        self.state.refreshing = True
        return FetchFollowups(ticket_id)

    def _is_selected(self, ticket_id: int) -> bool:
        return self.state.selected is not None and self.state.selected.id == ticket_id

    def _clear_transient_error(self) -> None:
        if not self.state.error_fatal:
            self.state.error = None

    # Navigation

    def _on_ticket_selected(self, message: TicketSelected) -> list[Command]:
        state = self.state
        if state.composing or state.loading or state.selected is not None:
            return []
        ticket = message.ticket.without_details()
        state.selected = ticket
        self._clear_transient_error()
        return [FetchActors(ticket.id), self._fetch_followups(ticket.id)]

    def _on_back(self, message: BackPressed) -> list[Command]:
        state = self.state
        if state.composing:
            state.composing = False
            state.reply_buffer = ""
            return []
        if state.selected is not None:
            state.selected = None
            state.refreshing = False
            self._clear_transient_error()
        return []

    def _on_reply_requested(self, message: ReplyRequested) -> list[Command]:
        state = self.state
        if state.composing or state.selected is None:
            return []
        state.composing = True
        state.reply_buffer = ""
        return []

    def _on_reply_edited(self, message: ReplyEdited) -> list[Command]:
        if self.state.composing:
            self.state.reply_buffer = message.text
        return []

    def _on_reply_submitted(self, message: ReplySubmitted) -> list[Command]:
        state = self.state
        if not state.composing or state.selected is None:
            return []
        text = state.reply_buffer
        if not text.strip():
            return []
        state.composing = False
        state.reply_buffer = ""
        return [PostFollowup(state.selected.id, text)]

    def _on_refresh_requested(self, message: RefreshRequested) -> list[Command]:
        state = self.state
        if state.composing or state.selected is None or state.refreshing:
            return []
        return [self._fetch_followups(state.selected.id)]

    def _on_assign_requested(self, message: AssignRequested) -> list[Command]:
        state = self.state
        if state.composing or state.selected is None or state.assigning:
            return []
        if state.user_id is None:
            state.error = PreconditionError("Still loading your user profile, try again shortly")
            state.error_fatal = False
            return []
        state.assigning = True
        return [AssignTicket(state.selected.id, state.selected.entity_id)]

    # Results

    def _on_authenticated(self, message: Authenticated) -> list[Command]:
        return [LoadTickets(), IdentifyUser()]

    def _on_tickets_loaded(self, message: TicketsLoaded) -> list[Command]:
        self.state.tickets = list(message.tickets)
        self.state.loading = False
        return []

    def _on_user_identified(self, message: UserIdentified) -> list[Command]:
        self.state.user_id = message.user_id
        return []

    def _on_actors_loaded(self, message: ActorsLoaded) -> list[Command]:
        if not self._is_selected(message.ticket_id):
            logger.debug("Dropping actors for ticket %s, no longer selected", message.ticket_id)
            return []
        self.state.selected.actors = list(message.actors)
        return []

    def _on_followups_loaded(self, message: FollowupsLoaded) -> list[Command]:
        if not self._is_selected(message.ticket_id):
            logger.debug("Dropping followups for ticket %s, no longer selected", message.ticket_id)
            return []
        self.state.refreshing = False
        self.state.selected.followups = sorted(
            message.followups, key=lambda followup: followup.id, reverse=True
        )
        return []

    def _on_followup_created(self, message: FollowupCreated) -> list[Command]:
        if not self._is_selected(message.ticket_id):
            return []
        return [self._fetch_followups(message.ticket_id)]

    def _on_ticket_assigned(self, message: TicketAssigned) -> list[Command]:
        state = self.state
        state.assigning = False
        if state.tickets is not None:
            state.tickets = [
                replace(ticket, status_id=int(TicketStatus.ASSIGNED))
                if ticket.id == message.ticket_id
                else ticket
                for ticket in state.tickets
            ]
        if not self._is_selected(message.ticket_id):
            return []
        state.selected.status_id = int(TicketStatus.ASSIGNED)
        return [FetchActors(message.ticket_id)]

    def _on_command_failed(self, message: CommandFailed) -> list[Command]:
        state = self.state
        if state.error_fatal:
            return []
        state.error = message.error
        state.error_fatal = message.fatal
        if message.fatal:
            state.loading = False
        if isinstance(message.command, AssignTicket):
            state.assigning = False
        return []
