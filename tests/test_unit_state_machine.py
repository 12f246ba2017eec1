"""
Transition tables for reservation status and spare hand-over.
"""
import pytest

from fleet.exceptions import InvalidTransitionError
from fleet.services import state_machine as sm
from fleet.utils.constants import ReservationStatus as S, ReservationType, SpareVehicleStatus as Sp

LEGAL = {
    (S.PENDING, S.CONFIRMED),
    (S.CONFIRMED, S.PICKED_UP),
    (S.PICKED_UP, S.RETURNED),
    (S.RETURNED, S.COMPLETED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.CANCELLED),
}


def test_every_edge_matches_the_table():
    for cur in S:
        for new in S:
            if (cur, new) in LEGAL:
                assert sm.transition(cur, new) == new
            else:
                with pytest.raises(InvalidTransitionError):
                    sm.transition(cur, new)


def test_pending_to_picked_up_fails():
    with pytest.raises(InvalidTransitionError) as exc:
        sm.transition("pending", "picked_up")
    assert exc.value.current == "pending"
    assert exc.value.requested == "picked_up"


def test_terminal_states():
    assert sm.is_terminal("completed")
    assert sm.is_terminal("cancelled")
    assert not sm.is_terminal("returned")


def test_unknown_status_is_a_transition_error():
    with pytest.raises(InvalidTransitionError):
        sm.transition("pending", "teleported")
    assert not sm.can_transition("pending", "teleported")


def test_maintenance_blocks_close_without_pickup():
    assert sm.transition("confirmed", "completed", ReservationType.MAINTENANCE_BLOCK) == S.COMPLETED
    with pytest.raises(InvalidTransitionError):
        sm.transition("confirmed", "picked_up", "maintenance_block")
    with pytest.raises(InvalidTransitionError):
        sm.transition("confirmed", "completed", "standard")


def test_spare_status_is_linear():
    assert sm.next_spare_status("assigned") == Sp.READY
    assert sm.next_spare_status("ready", "picked_up") == Sp.PICKED_UP
    assert sm.next_spare_status(Sp.PICKED_UP) == Sp.RETURNED


def test_spare_status_rejects_skip_backward_and_past_end():
    with pytest.raises(InvalidTransitionError):
        sm.next_spare_status("assigned", "picked_up")
    with pytest.raises(InvalidTransitionError):
        sm.next_spare_status("ready", "assigned")
    with pytest.raises(InvalidTransitionError):
        sm.next_spare_status("returned")
