from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .content import clean_html, format_timestamp
from .state import priority_label, status_color, status_label


class ActorRole(str, Enum):
    """Roles an actor can hold on a ticket."""

    REQUESTER = "requester"
    ASSIGNED = "assigned"
    OBSERVER = "observer"


@dataclass(frozen=True, slots=True)
class Actor:
    """Person, group or supplier attached to a ticket.

    ``type`` (User, Group or Supplier) and ``role`` are kept as the raw API
    strings; compare ``role`` with :class:`ActorRole` members.
    """

    id: int
    name: str
    type: str
    role: str


@dataclass(frozen=True, slots=True)
class Followup:
    """Message in a ticket's conversation history."""

    id: int
    date: str
    content: str
    author_id: int
    author_name: str

    @property
    def formatted_date(self) -> str:
        return format_timestamp(self.date)

    @property
    def clean_content(self) -> str:
        return clean_html(self.content)


def _names_with_role(actors: list[Actor] | None, role: ActorRole) -> list[str]:
    return [actor.name for actor in actors or [] if actor.role == role]


@dataclass(slots=True)
class Ticket:
    """Support request as listed by the helpdesk.

    ``actors`` and ``followups`` are ``None`` until fetched for the detail view
    and are always replaced as whole lists.
    """

    id: int
    title: str
    content: str
    date: str
    status_id: int
    status_name: str
    priority: int
    entity_id: int
    entity_name: str
    actors: list[Actor] | None = None
    followups: list[Followup] | None = None

    @property
    def status_label(self) -> str:
        return status_label(self.status_id, self.status_name)

    @property
    def status_color(self) -> str:
        return status_color(self.status_id)

    @property
    def priority_label(self) -> str:
        return priority_label(self.priority)

    @property
    def formatted_date(self) -> str:
        return format_timestamp(self.date)

    @property
    def clean_content(self) -> str:
        return clean_html(self.content)

    def requesters(self) -> str:
        names = _names_with_role(self.actors, ActorRole.REQUESTER)
        return ", ".join(names) if names else "N/A"

    def technicians(self) -> str:
        names = _names_with_role(self.actors, ActorRole.ASSIGNED)
        return ", ".join(names) if names else "Unassigned"

    def summary(self) -> str:
        """One-line description used under the title in the ticket list."""

        return f"{self.status_label} | Prio: {self.priority_label} | ID: {self.id} | {self.formatted_date}"

    def without_details(self) -> Ticket:
        return replace(self, actors=None, followups=None)
