"""Textual front end."""

from .app import HelpdeskApp, TicketListItem

__all__ = ["HelpdeskApp", "TicketListItem"]
