from __future__ import annotations

import logging
from dataclasses import dataclass

from helpdesk_tui.api.client import HelpdeskClient, HelpdeskError

from .messages import (
    ActorsLoaded,
    Authenticated,
    CommandFailed,
    FollowupCreated,
    FollowupsLoaded,
    ResultMessage,
    TicketAssigned,
    TicketsLoaded,
    UserIdentified,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Authenticate:
    pass


@dataclass(frozen=True, slots=True)
class LoadTickets:
    pass


@dataclass(frozen=True, slots=True)
class IdentifyUser:
    pass


@dataclass(frozen=True, slots=True)
class FetchActors:
    ticket_id: int


@dataclass(frozen=True, slots=True)
class FetchFollowups:
    ticket_id: int


@dataclass(frozen=True, slots=True)
class PostFollowup:
    ticket_id: int
    text: str


@dataclass(frozen=True, slots=True)
class AssignTicket:
    ticket_id: int
    entity_id: int


Command = (
    Authenticate
    | LoadTickets
    | IdentifyUser
    | FetchActors
    | FetchFollowups
    | PostFollowup
    | AssignTicket
)


class CommandRunner:
    """Execute commands against the client, one blocking call each.

    :meth:`run` never raises :class:`HelpdeskError`; every command resolves to
    exactly one result message.
    """

    def __init__(self, client: HelpdeskClient) -> None:
        self.client = client

    def run(self, command: Command) -> ResultMessage:
        if isinstance(command, Authenticate):
            return self._authenticate()
        if isinstance(command, LoadTickets):
            return self._load_tickets()
        if isinstance(command, IdentifyUser):
            return self._identify_user()
        if isinstance(command, FetchActors):
            return self._fetch_actors(command.ticket_id)
        if isinstance(command, FetchFollowups):
            return self._fetch_followups(command.ticket_id)
        if isinstance(command, PostFollowup):
            return self._post_followup(command)
        if isinstance(command, AssignTicket):
            return self._assign(command)
        raise TypeError(f"Unsupported command: {command!r}")

    def _authenticate(self) -> ResultMessage:
        try:
            self.client.authenticate()
        except HelpdeskError as exc:
            logger.error("Login failed: %s", exc)
            return CommandFailed(exc, fatal=True, command=Authenticate())
        return Authenticated()

    def _load_tickets(self) -> ResultMessage:
        try:
            tickets = self.client.list_tickets()
        except HelpdeskError as exc:
            logger.error("Loading tickets failed: %s", exc)
            return CommandFailed(exc, fatal=True, command=LoadTickets())
        return TicketsLoaded(tickets)

    def _identify_user(self) -> ResultMessage:
        try:
            user_id = self.client.fetch_authenticated_user_id()
        except HelpdeskError as exc:
            logger.error("Fetching the current user failed: %s", exc)
            return CommandFailed(exc, command=IdentifyUser())
        return UserIdentified(user_id)

    def _fetch_actors(self, ticket_id: int) -> ResultMessage:
        try:
            actors = self.client.get_ticket_actors(ticket_id)
        except HelpdeskError as exc:
            logger.warning("Actors of ticket %s unavailable: %s", ticket_id, exc)
            actors = []
        return ActorsLoaded(ticket_id, actors)

    def _fetch_followups(self, ticket_id: int) -> ResultMessage:
        try:
            followups = self.client.get_ticket_followups(ticket_id)
        except HelpdeskError as exc:
            logger.warning("Followups of ticket %s unavailable: %s", ticket_id, exc)
            followups = []
        return FollowupsLoaded(ticket_id, followups)

    def _post_followup(self, command: PostFollowup) -> ResultMessage:
        try:
            self.client.create_followup(command.ticket_id, command.text)
        except HelpdeskError as exc:
            logger.error("Reply to ticket %s failed: %s", command.ticket_id, exc)
            return CommandFailed(exc, command=command)
        return FollowupCreated(command.ticket_id)

    def _assign(self, command: AssignTicket) -> ResultMessage:
        try:
            self.client.assign_to_authenticated_user(command.ticket_id, command.entity_id)
        except HelpdeskError as exc:
            logger.error("Assigning ticket %s failed: %s", command.ticket_id, exc)
            return CommandFailed(exc, command=command)
        return TicketAssigned(command.ticket_id)
