from __future__ import annotations

import pytest

from factories import build_actor, build_followup, build_ticket
from helpdesk_tui.api.client import APIError, AuthenticationError, PreconditionError
from helpdesk_tui.desk.commands import (
    AssignTicket,
    Authenticate,
    FetchActors,
    FetchFollowups,
    IdentifyUser,
    LoadTickets,
    PostFollowup,
)
from helpdesk_tui.desk.controller import DeskController, DeskState, Phase
from helpdesk_tui.desk.messages import (
    ActorsLoaded,
    AssignRequested,
    Authenticated,
    BackPressed,
    CommandFailed,
    FollowupCreated,
    FollowupsLoaded,
    RefreshRequested,
    ReplyEdited,
    ReplyRequested,
    ReplySubmitted,
    TicketAssigned,
    TicketSelected,
    TicketsLoaded,
    UserIdentified,
)


def _listing_controller(*tickets) -> DeskController:
    controller = DeskController()
    controller.dispatch(TicketsLoaded(list(tickets) or [build_ticket()]))
    return controller


def _viewing_controller(ticket=None) -> DeskController:
    ticket = ticket or build_ticket()
    controller = _listing_controller(ticket)
    controller.dispatch(TicketSelected(ticket))
    controller.dispatch(FollowupsLoaded(ticket.id, []))
    return controller


def test_start_authenticates_and_shows_connecting():
    controller = DeskController()

    assert controller.start() == [Authenticate()]
    assert controller.phase is Phase.CONNECTING
    assert controller.state.loading is True


def test_authenticated_loads_tickets_and_user_together():
    controller = DeskController()

    commands = controller.dispatch(Authenticated())

    assert commands == [LoadTickets(), IdentifyUser()]


def test_login_failure_is_fatal():
    controller = DeskController()
    error = AuthenticationError("Login failed", status_code=401)

    assert controller.dispatch(CommandFailed(error, fatal=True)) == []

    assert controller.phase is Phase.FAILED
    assert controller.state.error is error
    assert controller.state.loading is False


def test_failed_session_ignores_late_results_and_keys():
    controller = DeskController()
    error = AuthenticationError("Login failed", status_code=401)
    controller.dispatch(CommandFailed(error, fatal=True))

    assert controller.dispatch(TicketsLoaded([build_ticket()])) == []
    assert controller.dispatch(CommandFailed(APIError("later"), fatal=True)) == []

    assert controller.state.tickets is None
    assert controller.state.error is error


def test_empty_ticket_list_is_listed_not_loading():
    controller = DeskController()

    controller.dispatch(TicketsLoaded([]))

    assert controller.state.tickets == []
    assert controller.state.tickets is not None
    assert controller.state.loading is False
    assert controller.phase is Phase.LISTING


def test_user_identified_is_stored():
    controller = _listing_controller()

    controller.dispatch(UserIdentified(77))

    assert controller.state.user_id == 77


def test_non_fatal_failure_while_connecting_keeps_loading():
    controller = DeskController()

    controller.dispatch(CommandFailed(APIError("no profile", status_code=404)))

    assert controller.phase is Phase.CONNECTING
    assert controller.state.error is not None


def test_select_ticket_fetches_details_on_fresh_copy():
    ticket = build_ticket(actors=[build_actor(1, "Stale", "requester")], followups=[build_followup(1)])
    controller = _listing_controller(ticket)

    commands = controller.dispatch(TicketSelected(ticket))

    assert commands == [FetchActors(42), FetchFollowups(42)]
    assert controller.phase is Phase.VIEWING
    assert controller.state.selected.actors is None
    assert controller.state.selected.followups is None
    assert ticket.actors is not None
    assert controller.state.refreshing is True


def test_select_is_ignored_while_loading():
    controller = DeskController()

    assert controller.dispatch(TicketSelected(build_ticket())) == []
    assert controller.state.selected is None


def test_escape_returns_to_list():
    controller = _viewing_controller()

    assert controller.dispatch(BackPressed()) == []

    assert controller.state.selected is None
    assert controller.phase is Phase.LISTING


def test_results_for_previous_selection_are_discarded():
    first = build_ticket(id=1)
    second = build_ticket(id=2)
    controller = _listing_controller(first, second)
    controller.dispatch(TicketSelected(first))
    controller.dispatch(BackPressed())
    controller.dispatch(TicketSelected(second))

    controller.dispatch(ActorsLoaded(1, [build_actor(9, "Wrong", "requester")]))
    controller.dispatch(FollowupsLoaded(1, [build_followup(5)]))

    selected = controller.state.selected
    assert selected.id == 2
    assert selected.actors is None
    assert selected.followups is None

    controller.dispatch(ActorsLoaded(2, [build_actor(3, "Right", "requester")]))
    assert controller.state.selected.requesters() == "Right"


def test_followups_sorted_newest_first():
    controller = _viewing_controller()

    controller.dispatch(FollowupsLoaded(42, [build_followup(3), build_followup(1), build_followup(2)]))

    assert [followup.id for followup in controller.state.selected.followups] == [3, 2, 1]


def test_empty_detail_results_are_lists():
    controller = _viewing_controller()

    controller.dispatch(ActorsLoaded(42, []))
    controller.dispatch(FollowupsLoaded(42, []))

    assert controller.state.selected.actors == []
    assert controller.state.selected.followups == []


def test_reply_requires_selection():
    controller = _listing_controller()

    controller.dispatch(ReplyRequested())

    assert controller.state.composing is False


def test_reply_flow_posts_followup():
    controller = _viewing_controller()
    controller.dispatch(ReplyRequested())
    assert controller.phase is Phase.COMPOSING

    controller.dispatch(ReplyEdited("Rebooted the printer"))
    commands = controller.dispatch(ReplySubmitted())

    assert commands == [PostFollowup(42, "Rebooted the printer")]
    assert controller.state.composing is False
    assert controller.state.reply_buffer == ""
    assert controller.phase is Phase.VIEWING


@pytest.mark.parametrize("text", ["", "   \n  "])
def test_empty_reply_submit_is_a_no_op(text):
    controller = _viewing_controller()
    controller.dispatch(ReplyRequested())
    controller.dispatch(ReplyEdited(text))

    assert controller.dispatch(ReplySubmitted()) == []

    assert controller.phase is Phase.COMPOSING
    assert controller.state.reply_buffer == text


def test_escape_while_composing_discards_reply():
    controller = _viewing_controller()
    controller.dispatch(ReplyRequested())
    controller.dispatch(ReplyEdited("draft"))

    controller.dispatch(BackPressed())

    assert controller.phase is Phase.VIEWING
    assert controller.state.reply_buffer == ""
    assert controller.state.selected is not None


def test_composing_blocks_navigation():
    controller = _viewing_controller()
    controller.dispatch(UserIdentified(77))
    controller.dispatch(ReplyRequested())

    assert controller.dispatch(RefreshRequested()) == []
    assert controller.dispatch(AssignRequested()) == []
    assert controller.dispatch(TicketSelected(build_ticket(id=5))) == []

    assert controller.state.selected.id == 42
    assert controller.state.refreshing is False


def test_edits_outside_compose_mode_are_ignored():
    controller = _viewing_controller()

    controller.dispatch(ReplyEdited("stray"))

    assert controller.state.reply_buffer == ""


def test_followup_created_refreshes_history():
    controller = _viewing_controller()

    assert controller.dispatch(FollowupCreated(42)) == [FetchFollowups(42)]
    assert controller.state.refreshing is True
    assert controller.dispatch(FollowupCreated(7)) == []


def test_refresh_is_guarded_against_duplicates():
    controller = _viewing_controller()

    assert controller.dispatch(RefreshRequested()) == [FetchFollowups(42)]
    assert controller.state.refreshing is True
    assert controller.dispatch(RefreshRequested()) == []

    controller.dispatch(FollowupsLoaded(42, [build_followup(1)]))

    assert controller.state.refreshing is False
    assert controller.dispatch(RefreshRequested()) == [FetchFollowups(42)]


def test_refresh_requires_selection():
    controller = _listing_controller()

    assert controller.dispatch(RefreshRequested()) == []


def test_assign_before_user_known_sets_transient_error():
    controller = _viewing_controller()

    assert controller.dispatch(AssignRequested()) == []

    assert isinstance(controller.state.error, PreconditionError)
    assert controller.state.error_fatal is False
    assert controller.phase is Phase.VIEWING
    assert controller.state.assigning is False


def test_transient_error_cleared_by_navigation():
    controller = _viewing_controller()
    controller.dispatch(AssignRequested())

    controller.dispatch(BackPressed())

    assert controller.state.error is None


def test_assign_flow_updates_status_and_reloads_actors():
    ticket = build_ticket(status_id=1)
    controller = _viewing_controller(ticket)
    controller.dispatch(UserIdentified(77))

    commands = controller.dispatch(AssignRequested())

    assert commands == [AssignTicket(42, 7)]
    assert controller.state.assigning is True

    commands = controller.dispatch(TicketAssigned(42))

    assert commands == [FetchActors(42)]
    assert controller.state.assigning is False
    assert controller.state.selected.status_id == 2
    assert controller.state.tickets[0].status_id == 2


def test_assign_failure_is_shown_without_ending_session():
    controller = _viewing_controller()
    controller.dispatch(UserIdentified(77))
    controller.dispatch(AssignRequested())
    error = APIError("forbidden", status_code=403)

    controller.dispatch(CommandFailed(error, command=AssignTicket(42, 7)))

    assert controller.state.error is error
    assert controller.state.assigning is False
    assert controller.phase is Phase.VIEWING


def test_reply_failure_keeps_session_usable():
    controller = _viewing_controller()
    controller.dispatch(ReplyRequested())
    controller.dispatch(ReplyEdited("hello"))
    controller.dispatch(ReplySubmitted())

    controller.dispatch(CommandFailed(APIError("bad", status_code=400), command=PostFollowup(42, "hello")))

    assert controller.phase is Phase.VIEWING
    assert controller.dispatch(RefreshRequested()) == [FetchFollowups(42)]


def test_only_latest_error_is_kept():
    controller = _viewing_controller()
    first = APIError("first", status_code=500)
    second = APIError("second", status_code=502)

    controller.dispatch(CommandFailed(first))
    controller.dispatch(CommandFailed(second))

    assert controller.state.error is second


def test_assign_stays_guarded_while_initial_history_arrives():
    ticket = build_ticket()
    controller = _listing_controller(ticket)
    controller.dispatch(TicketSelected(ticket))
    controller.dispatch(UserIdentified(77))

    assert controller.dispatch(AssignRequested()) == [AssignTicket(42, 7)]
    controller.dispatch(FollowupsLoaded(42, [build_followup(1)]))

    assert controller.dispatch(AssignRequested()) == []
    assert controller.state.assigning is True


def test_refresh_blocked_until_initial_history_arrives():
    ticket = build_ticket()
    controller = _listing_controller(ticket)
    controller.dispatch(TicketSelected(ticket))

    assert controller.dispatch(RefreshRequested()) == []

    controller.dispatch(FollowupsLoaded(42, []))

    assert controller.dispatch(RefreshRequested()) == [FetchFollowups(42)]
    assert controller.dispatch(RefreshRequested()) == []


def test_reply_failure_does_not_release_refresh_in_flight():
    controller = _viewing_controller()
    controller.dispatch(RefreshRequested())

    controller.dispatch(CommandFailed(APIError("bad", status_code=400), command=PostFollowup(42, "hi")))

    assert controller.state.refreshing is True
    assert controller.dispatch(RefreshRequested()) == []


def test_assign_guard_survives_navigation():
    controller = _viewing_controller()
    controller.dispatch(UserIdentified(77))
    controller.dispatch(AssignRequested())

    controller.dispatch(BackPressed())
    controller.dispatch(TicketSelected(controller.state.tickets[0]))

    assert controller.dispatch(AssignRequested()) == []

    controller.dispatch(TicketAssigned(42))

    assert controller.state.assigning is False


def test_unknown_message_type_is_rejected():
    controller = DeskController()

    with pytest.raises(TypeError):
        controller.dispatch(object())  # type: ignore[arg-type]


def test_controller_accepts_existing_state():
    state = DeskState(loading=False, tickets=[])

    controller = DeskController(state)

    assert controller.state is state
    assert controller.phase is Phase.LISTING
