"""
Application status state machine.

Statuses are ranked in pipeline order. A move is legal when the current
status is not terminal and the target ranks strictly higher, or the
target is REJECTED. SELECTED and APPOINTED sit below HIRED so they can
still advance to it.
"""

from typing import Final

from hiring_pipeline.core.errors import InvalidTransitionError
from hiring_pipeline.utils.constants import TERMINAL_STATUSES, ApplicationStatus

STATUS_ORDER: Final[tuple[ApplicationStatus, ...]] = (
    ApplicationStatus.APPLIED,
    ApplicationStatus.VIEWED,
    ApplicationStatus.SCREENED,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW_SCHEDULED,
    ApplicationStatus.INTERVIEWED,
    ApplicationStatus.SELECTED,
    ApplicationStatus.APPOINTED,
    ApplicationStatus.HIRED,
)

STATUS_RANK: Final[dict[ApplicationStatus, int]] = {
    status: rank for rank, status in enumerate(STATUS_ORDER)
}


def is_terminal(status: ApplicationStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    """
    Whether ``current -> target`` is a legal state-changing move.

    Staying in the same status is not a transition; callers treat it as
    a no-op before asking.
    """
    if current == target or is_terminal(current):
        return False
    if target == ApplicationStatus.REJECTED:
        return True
    return STATUS_RANK[target] > STATUS_RANK[current]


def validate_transition(current: ApplicationStatus, target: ApplicationStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is legal."""
    if can_transition(current, target):
        return
    if is_terminal(current):
        raise InvalidTransitionError(
            f"Application is {current.value}; terminal applications cannot change status"
        )
    if current == target:
        raise InvalidTransitionError(f"Application is already {current.value}")
    raise InvalidTransitionError(
        f"Cannot move backwards from {current.value} to {target.value}"
    )


def allowed_targets(current: ApplicationStatus) -> list[ApplicationStatus]:
    """Every status reachable from ``current`` in one move, in pipeline order."""
    targets = [s for s in STATUS_ORDER if can_transition(current, s)]
    if can_transition(current, ApplicationStatus.REJECTED):
        targets.append(ApplicationStatus.REJECTED)
    return targets
