from __future__ import annotations

from typing import Callable

import httpx
import pytest

from factories import BASE_URL
from helpdesk_tui.api.client import HelpdeskClient, Session


@pytest.fixture
def session() -> Session:
    return Session(
        base_url=BASE_URL,
        client_id="client-id",
        client_secret="client-secret",
        username="tech",
        password="s3cret",
    )


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(session: Session, requests_seen: list[httpx.Request]):
    """Build a client whose HTTP traffic is answered by ``handler``."""

    created: list[HelpdeskClient] = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response], *, token: str | None = "tok"
    ) -> HelpdeskClient:
        def recording(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return handler(request)

        session.token = token
        client = HelpdeskClient(session, transport=httpx.MockTransport(recording))
        created.append(client)
        return client

    yield factory
    for client in created:
        client.close()
