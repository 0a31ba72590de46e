from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from helpdesk_tui.tickets.models import Actor, Followup, Ticket
from helpdesk_tui.tickets.state import TicketStatus

from .schemas import (
    ActorPayload,
    CurrentUserPayload,
    TicketPayload,
    TimelineEntryPayload,
    TokenPayload,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
TICKET_PAGE_SIZE = 20
TICKET_SORT = "date_mod:desc"
ENTITY_HEADER = "GLPI-Entity"
HELPDESK_REQUEST_TYPE = 1

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class HelpdeskError(RuntimeError):
    """Base error for helpdesk client failures."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


class AuthenticationError(HelpdeskError):
    """Login was rejected or the token response could not be read."""


class NotAuthenticatedError(HelpdeskError):
    """An operation was attempted before a token was obtained."""


class APIError(HelpdeskError):
    """Non-success HTTP response or transport failure on a data endpoint."""


class DecodeError(HelpdeskError):
    """Response body was not the JSON shape the endpoint promises."""


class PreconditionError(HelpdeskError):
    """Operation requires state the session does not have yet."""


@dataclass(slots=True)
class Session:
    """Credentials plus the token and user id obtained from the server.

    ``token`` is written by :meth:`HelpdeskClient.authenticate` and ``user_id``
    by :meth:`HelpdeskClient.fetch_authenticated_user_id`; both are read-only
    afterwards. Callers must not run those two writers concurrently with
    requests that depend on them.
    """

    base_url: str
    client_id: str
    client_secret: str
    username: str
    password: str = field(repr=False)
    token: str | None = field(default=None, repr=False)
    user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


def _body_text(response: httpx.Response) -> str:
    try:
        return response.text
    except UnicodeDecodeError:
        return repr(response.content)


def _paragraph(text: str) -> str:
    lines = (html.escape(line, quote=False) for line in text.strip().splitlines())
    return f"<p>{'<br>'.join(lines)}</p>"


class HelpdeskClient:
    """Blocking client for the helpdesk high-level REST API."""

    def __init__(
        self,
        session: Session,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.Client | None = None

    def __enter__(self) -> HelpdeskClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(transport=self._transport, timeout=self.timeout)
        return self._http

    def _build_url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.session.base_url.rstrip('/')}{normalized}"

    def _require_token(self) -> str:
        if not self.session.is_authenticated:
            raise NotAuthenticatedError("Client is not authenticated: no token")
        return self.session.token

    def _send(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        request_headers: dict[str, str] = {"Accept": "application/json"}
        if authenticated:
            request_headers["Authorization"] = f"Bearer {self._require_token()}"
        request_headers.update(headers or {})

        url = self._build_url(path)
        try:
            response = self.http.request(method, url, headers=request_headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise APIError(f"Request to {path} failed: {exc}") from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    def _request(
        self,
        method: str,
        path: str,
        *,
        accept: Iterable[int],
        **kwargs: Any,
    ) -> httpx.Response:
        response = self._send(method, path, **kwargs)
        if response.status_code not in set(accept):
            body = _body_text(response)
            raise APIError(
                f"{method} {path} returned HTTP {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, adapter: TypeAdapter[Any], what: str) -> Any:
        try:
            return adapter.validate_python(response.json())
        except ValueError as exc:
            # ValidationError is a ValueError too; both mean the body is unusable.
            raise DecodeError(
                f"Could not decode {what}: {exc}",
                status_code=response.status_code,
                body=_body_text(response),
            ) from exc

    def authenticate(self) -> None:
        """Obtain a bearer token with the OAuth password grant."""

        payload = {
            "grant_type": "password",
            "client_id": self.session.client_id,
            "client_secret": self.session.client_secret,
            "username": self.session.username,
            "password": self.session.password,
            "scope": "api user",
        }
        try:
            response = self._send("POST", "/token", authenticated=False, json=payload)
        except APIError as exc:
            raise AuthenticationError(f"Could not reach the token endpoint: {exc}") from exc

        if not response.is_success:
            body = _body_text(response)
            raise AuthenticationError(
                f"Login failed: {body}", status_code=response.status_code, body=body
            )
        try:
            token = TokenPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthenticationError(
                f"Could not decode token response: {exc}",
                status_code=response.status_code,
                body=_body_text(response),
            ) from exc

        self.session.token = token.access_token
        logger.info("Authenticated as %s", self.session.username)

    def list_tickets(self) -> list[Ticket]:
        """Return the most recently modified tickets, newest first."""

        response = self._request(
            "GET",
            "/Assistance/Ticket",
            accept=(200, 206),
            params={"limit": str(TICKET_PAGE_SIZE), "sort": TICKET_SORT},
        )
        payloads = self._decode(response, _TICKET_LIST, "ticket list")
        return [payload.to_domain() for payload in payloads]

    def get_ticket_actors(self, ticket_id: int) -> list[Actor]:
        response = self._request(
            "GET", f"/Assistance/Ticket/{ticket_id}/TeamMember", accept=(200, 206)
        )
        payloads = self._decode(response, _ACTOR_LIST, f"actors of ticket {ticket_id}")
        return [payload.to_domain() for payload in payloads]

    def get_ticket_followups(self, ticket_id: int) -> list[Followup]:
        """Return the followups of a ticket, unwrapped from their timeline envelopes."""

        response = self._request(
            "GET",
            f"/Assistance/Ticket/{ticket_id}/Timeline/Followup",
            accept=(200, 206),
            params={"expand_dropdowns": "true"},
        )
        entries = self._decode(response, _TIMELINE, f"followups of ticket {ticket_id}")
        return [entry.item.to_domain() for entry in entries]

    def create_followup(self, ticket_id: int, text: str) -> None:
        payload = {
            "content": _paragraph(text),
            "requesttypes_id": HELPDESK_REQUEST_TYPE,
            "items_id": ticket_id,
            "itemtype": "Ticket",
        }
        self._request(
            "POST",
            f"/Assistance/Ticket/{ticket_id}/Timeline/Followup",
            accept=(200, 201),
            json=payload,
        )
        logger.info("Posted followup on ticket %s", ticket_id)

    def fetch_authenticated_user_id(self) -> int:
        """Look up the logged-in user and remember its id on the session."""

        response = self._request("GET", "/Administration/User/Me", accept=(200,))
        user = self._decode(response, _CURRENT_USER, "current user")
        self.session.user_id = user.id
        return user.id

    def assign_to_authenticated_user(self, ticket_id: int, entity_id: int) -> None:
        """Assign a ticket to the logged-in user and mark it as being processed."""

        user_id = self.session.user_id
        if user_id is None:
            raise PreconditionError("Authenticated user id is unknown; fetch it before assigning")

        payload = {
            "input": {
                "status": int(TicketStatus.ASSIGNED),
                "users_id_assign": user_id,
            }
        }
        self._request(
            "PATCH",
            f"/Assistance/Ticket/{ticket_id}",
            accept=(200, 204),
            headers={ENTITY_HEADER: str(entity_id)},
            json=payload,
        )
        logger.info("Assigned ticket %s to user %s", ticket_id, user_id)


def _list_of(model: type[PayloadT]) -> TypeAdapter[list[PayloadT]]:
    return TypeAdapter(list[model])  # type: ignore[valid-type]


_TICKET_LIST = _list_of(TicketPayload)
_ACTOR_LIST = _list_of(ActorPayload)
_TIMELINE = _list_of(TimelineEntryPayload)
_CURRENT_USER = TypeAdapter(CurrentUserPayload)
