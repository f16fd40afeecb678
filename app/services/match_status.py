# Match status state machine: allowed transitions only.
# pending -> accepted, rejected
# accepted -> (none)
# rejected -> (none)

from typing import Optional

from app.models.match import MatchStatus

# Allowed target statuses from each current status.
ALLOWED_TRANSITIONS: dict[MatchStatus, set[MatchStatus]] = {
    MatchStatus.PENDING: {MatchStatus.ACCEPTED, MatchStatus.REJECTED},
    MatchStatus.ACCEPTED: set(),
    MatchStatus.REJECTED: set(),
}

TERMINAL_STATUSES: frozenset[MatchStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def is_terminal(status: MatchStatus) -> bool:
    return status in TERMINAL_STATUSES


def check_status_transition(current: MatchStatus, target: MatchStatus) -> Optional[str]:
    """current → target 이 허용되면 None, 아니면 409 응답 본문에 그대로 쓸 사유 문자열."""
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if target not in allowed:
        allowed_str = ", ".join(sorted(s.value for s in allowed)) if allowed else "none"
        return (
            f"Transition from {current.value} to {target.value} is not allowed. "
            f"From {current.value} only allowed: {allowed_str}."
        )
    return None
