"""Message-driven controller coordinating API calls with UI state."""

from .commands import (
    AssignTicket,
    Authenticate,
    Command,
    CommandRunner,
    FetchActors,
    FetchFollowups,
    IdentifyUser,
    LoadTickets,
    PostFollowup,
)
from .controller import DeskController, DeskState, Phase

__all__ = [
    "AssignTicket",
    "Authenticate",
    "Command",
    "CommandRunner",
    "DeskController",
    "DeskState",
    "FetchActors",
    "FetchFollowups",
    "IdentifyUser",
    "LoadTickets",
    "Phase",
    "PostFollowup",
]
