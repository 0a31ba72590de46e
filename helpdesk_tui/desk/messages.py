"""Events fed into the desk controller.

UI events come from key presses and widgets; result messages are produced by
:class:`~helpdesk_tui.desk.commands.CommandRunner`, exactly one per command.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from helpdesk_tui.tickets.models import Actor, Followup, Ticket

if TYPE_CHECKING:
    from .commands import Command


@dataclass(frozen=True, slots=True)
class TicketSelected:
    """Enter pressed on a ticket in the list."""

    ticket: Ticket


@dataclass(frozen=True, slots=True)
class BackPressed:
    """Escape: leave the reply box or the detail view."""


@dataclass(frozen=True, slots=True)
class ReplyRequested:
    pass


@dataclass(frozen=True, slots=True)
class ReplyEdited:
    text: str


@dataclass(frozen=True, slots=True)
class ReplySubmitted:
    pass


@dataclass(frozen=True, slots=True)
class RefreshRequested:
    pass


@dataclass(frozen=True, slots=True)
class AssignRequested:
    pass


@dataclass(frozen=True, slots=True)
class Authenticated:
    pass


@dataclass(frozen=True, slots=True)
class TicketsLoaded:
    tickets: list[Ticket]


@dataclass(frozen=True, slots=True)
class UserIdentified:
    user_id: int


@dataclass(frozen=True, slots=True)
class ActorsLoaded:
    ticket_id: int
    actors: list[Actor]


@dataclass(frozen=True, slots=True)
class FollowupsLoaded:
    ticket_id: int
    followups: list[Followup]


@dataclass(frozen=True, slots=True)
class FollowupCreated:
    ticket_id: int


@dataclass(frozen=True, slots=True)
class TicketAssigned:
    ticket_id: int


@dataclass(frozen=True, slots=True)
class CommandFailed:
    """A command's client call failed.

    Fatal failures end the session; the others are shown until the next
    navigation. ``command`` is the command that failed, so the controller can
    release the in-flight guard it holds.
    """

    error: Exception
    fatal: bool = False
    command: Command | None = None


UIEvent = (
    TicketSelected
    | BackPressed
    | ReplyRequested
    | ReplyEdited
    | ReplySubmitted
    | RefreshRequested
    | AssignRequested
)

ResultMessage = (
    Authenticated
    | TicketsLoaded
    | UserIdentified
    | ActorsLoaded
    | FollowupsLoaded
    | FollowupCreated
    | TicketAssigned
    | CommandFailed
)

Message = UIEvent | ResultMessage
