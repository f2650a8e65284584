"""Intervention status machine.

Pure: it only validates and writes ``Intervention.statut``. Committing and any
phase-record side effect belong to the caller.
"""

from __future__ import annotations

from reselec.models.intervention import Intervention, InterventionStatus
from reselec.utils.errors import InvalidTransitionError


S = InterventionStatus

# Canonical table. CANCELLED and FAILED can be reopened.
TRANSITIONS: dict[InterventionStatus, tuple[InterventionStatus, ...]] = {
    S.PLANNED: (S.AWAITING_PARTS, S.IN_PROGRESS, S.CANCELLED),
    S.AWAITING_PARTS: (S.IN_PROGRESS, S.PLANNED, S.CANCELLED),
    S.IN_PROGRESS: (S.PAUSED, S.COMPLETED, S.FAILED, S.AWAITING_PARTS),
    S.PAUSED: (S.IN_PROGRESS, S.CANCELLED),
    S.COMPLETED: (),
    S.CANCELLED: (S.PLANNED,),
    S.FAILED: (S.PLANNED, S.IN_PROGRESS),
}

INITIAL_STATUS = S.PLANNED
TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def parse_status(value: str | InterventionStatus) -> InterventionStatus:
    """Wire string (``EN_COURS``) or enum member to enum member. Raises ValueError."""
    if isinstance(value, InterventionStatus):
        return value
    return InterventionStatus(str(value).strip().upper())


def allowed_transitions(status: InterventionStatus) -> tuple[InterventionStatus, ...]:
    return TRANSITIONS.get(parse_status(status), ())


def can_transition(current: InterventionStatus, target: InterventionStatus) -> bool:
    return parse_status(target) in allowed_transitions(current)


def request_transition(intervention: Intervention, target: InterventionStatus) -> Intervention:
    current = parse_status(intervention.statut or INITIAL_STATUS)
    target = parse_status(target)

    allowed = allowed_transitions(current)
    if target not in allowed:
        raise InvalidTransitionError(current, target, allowed)

    intervention.statut = target
    return intervention


def try_transition(
    intervention: Intervention,
    expected_from: InterventionStatus,
    target: InterventionStatus,
) -> bool:
    """Automatic transition, only applied while the intervention sits in ``expected_from``.

    Returns True when the status changed. Goes through ``request_transition`` so the
    table still applies.
    """
    if parse_status(intervention.statut or INITIAL_STATUS) != expected_from:
        return False
    request_transition(intervention, target)
    return True
