from __future__ import annotations

from enum import IntEnum


class TicketStatus(IntEnum):
    """Ticket lifecycle states as numbered by the helpdesk API."""

    NEW = 1
    ASSIGNED = 2
    PLANNED = 3
    PENDING = 4
    SOLVED = 5
    CLOSED = 6


UNKNOWN_STATUS_COLOR = "#888888"

_STATUS_LABELS: dict[TicketStatus, str] = {
    TicketStatus.NEW: "New",
    TicketStatus.ASSIGNED: "Assigned",
    TicketStatus.PLANNED: "Planned",
    TicketStatus.PENDING: "Pending",
    TicketStatus.SOLVED: "Solved",
    TicketStatus.CLOSED: "Closed",
}

_STATUS_COLORS: dict[TicketStatus, str] = {
    TicketStatus.NEW: "#04B575",
    TicketStatus.ASSIGNED: "#007BFF",
    TicketStatus.PLANNED: "#FFC107",
    TicketStatus.PENDING: "#FF8800",
    TicketStatus.SOLVED: "#6C757D",
    TicketStatus.CLOSED: "#000000",
}

_PRIORITY_LABELS: dict[int, str] = {
    1: "Very low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Very high",
    6: "Major",
}


def _known_status(status_id: int) -> TicketStatus | None:
    try:
        return TicketStatus(status_id)
    except ValueError:
        return None


def status_label(status_id: int, name: str = "") -> str:
    """Human label for a status, falling back to the API name or ``Status N``."""

    status = _known_status(status_id)
    if status is not None:
        return _STATUS_LABELS[status]
    if name.strip():
        return name
    return f"Status {status_id}"


def status_color(status_id: int) -> str:
    status = _known_status(status_id)
    if status is None:
        return UNKNOWN_STATUS_COLOR
    return _STATUS_COLORS[status]


def priority_label(priority: int) -> str:
    return _PRIORITY_LABELS.get(priority, str(priority))
