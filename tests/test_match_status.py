import pytest

from app.models.match import MatchStatus
from app.services.match_status import check_status_transition, is_terminal


@pytest.mark.parametrize("target", [MatchStatus.ACCEPTED, MatchStatus.REJECTED])
def test_pending_can_be_resolved(target):
    assert check_status_transition(MatchStatus.PENDING, target) is None


def test_pending_to_pending_is_rejected():
    assert check_status_transition(MatchStatus.PENDING, MatchStatus.PENDING) is not None


@pytest.mark.parametrize("current", [MatchStatus.ACCEPTED, MatchStatus.REJECTED])
@pytest.mark.parametrize("target", list(MatchStatus))
def test_terminal_statuses_never_transition(current, target):
    assert is_terminal(current)
    message = check_status_transition(current, target)
    assert message is not None
    assert "only allowed: none" in message


def test_pending_is_not_terminal():
    assert not is_terminal(MatchStatus.PENDING)
