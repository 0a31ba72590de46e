"""Helpdesk ticket domain models and formatting helpers."""

from .content import clean_html, format_timestamp, parse_timestamp
from .models import Actor, ActorRole, Followup, Ticket
from .state import TicketStatus, priority_label, status_color, status_label

__all__ = [
    "Actor",
    "ActorRole",
    "Followup",
    "Ticket",
    "TicketStatus",
    "clean_html",
    "format_timestamp",
    "parse_timestamp",
    "priority_label",
    "status_color",
    "status_label",
]
