from __future__ import annotations

import pytest
from textual.widgets import ListView, Static

from factories import build_actor, build_followup, build_ticket
from helpdesk_tui.api.client import AuthenticationError
from helpdesk_tui.desk.controller import Phase
from helpdesk_tui.ui.app import HelpdeskApp


class FakeClient:
    """Stands in for HelpdeskClient with canned answers."""

    def __init__(self, *, login_error: Exception | None = None) -> None:
        self.login_error = login_error
        self.tickets = [build_ticket(id=42), build_ticket(id=43, title="Mouse broken")]
        self.replies: list[tuple[int, str]] = []
        self.assigned: list[tuple[int, int]] = []

    def authenticate(self) -> None:
        if self.login_error is not None:
            raise self.login_error

    def list_tickets(self):
        return list(self.tickets)

    def fetch_authenticated_user_id(self) -> int:
        return 77

    def get_ticket_actors(self, ticket_id: int):
        return [build_actor(1, "Bob", "requester")]

    def get_ticket_followups(self, ticket_id: int):
        return [build_followup(1), build_followup(2)]

    def create_followup(self, ticket_id: int, text: str) -> None:
        self.replies.append((ticket_id, text))

    def assign_to_authenticated_user(self, ticket_id: int, entity_id: int) -> None:
        self.assigned.append((ticket_id, entity_id))


async def settle(pilot) -> None:
    for _ in range(5):
        await pilot.app.workers.wait_for_complete()
        await pilot.pause()


@pytest.mark.asyncio
async def test_app_lists_tickets_after_login():
    app = HelpdeskApp(FakeClient())

    async with app.run_test() as pilot:
        await settle(pilot)

        assert app.controller.phase is Phase.LISTING
        assert app.controller.state.user_id == 77
        assert len(app.query_one("#tickets", ListView)) == 2


@pytest.mark.asyncio
async def test_app_shows_fatal_login_error():
    app = HelpdeskApp(FakeClient(login_error=AuthenticationError("Login failed", status_code=401)))

    async with app.run_test() as pilot:
        await settle(pilot)

        assert app.controller.phase is Phase.FAILED
        assert app.query_one("#error", Static).display is True
        assert app.query_one("#tickets", ListView).display is False


@pytest.mark.asyncio
async def test_app_opens_ticket_and_sends_reply():
    client = FakeClient()
    app = HelpdeskApp(client)

    async with app.run_test() as pilot:
        await settle(pilot)
        await pilot.press("enter")
        await settle(pilot)

        selected = app.controller.state.selected
        assert selected is not None
        assert selected.id == 42
        assert [followup.id for followup in selected.followups] == [2, 1]

        await pilot.press("r")
        await pilot.pause()
        assert app.controller.phase is Phase.COMPOSING

        await pilot.press("h", "i")
        await pilot.pause()
        await pilot.press("ctrl+s")
        await settle(pilot)

        assert client.replies == [(42, "hi")]
        assert app.controller.phase is Phase.VIEWING


@pytest.mark.asyncio
async def test_app_assigns_and_returns_to_list():
    client = FakeClient()
    app = HelpdeskApp(client)

    async with app.run_test() as pilot:
        await settle(pilot)
        await pilot.press("enter")
        await settle(pilot)
        await pilot.press("a")
        await settle(pilot)

        assert client.assigned == [(42, 7)]
        assert app.controller.state.selected.status_id == 2

        await pilot.press("escape")
        await pilot.pause()

        assert app.controller.phase is Phase.LISTING


@pytest.mark.asyncio
async def test_app_keeps_list_position_after_assigning():
    client = FakeClient()
    app = HelpdeskApp(client)

    async with app.run_test() as pilot:
        await settle(pilot)
        await pilot.press("down")
        await pilot.press("enter")
        await settle(pilot)

        assert app.controller.state.selected.id == 43

        await pilot.press("a")
        await settle(pilot)
        await pilot.press("escape")
        await settle(pilot)

        tickets = app.query_one("#tickets", ListView)
        assert client.assigned == [(43, 7)]
        assert tickets.index == 1
        assert tickets.highlighted_child.ticket.status_id == 2
