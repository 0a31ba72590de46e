"""HTTP client for the helpdesk REST API."""

from .client import (
    APIError,
    AuthenticationError,
    DecodeError,
    HelpdeskClient,
    HelpdeskError,
    NotAuthenticatedError,
    PreconditionError,
    Session,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "DecodeError",
    "HelpdeskClient",
    "HelpdeskError",
    "NotAuthenticatedError",
    "PreconditionError",
    "Session",
]
