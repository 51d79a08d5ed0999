# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim state machine.

Claims advance one stage at a time along the process order. The INVALID
branch is open only while the claim is still being received or validated.
CLOSED and INVALID are terminal.

A transition is checked in a fixed order so that callers always see the
most fundamental reason first: a locked claim, then an illegal edge, then
a missing invalidation reason, then the report-deadline lock, then the
destination gate, and finally the beneficiary share total.
"""

from collections.abc import Iterable
from datetime import datetime

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Result
from ..models.alert import Alert
from ..models.audit import ActorContext
from ..models.claim import Claim
from ..models.enums import AuditAction, ClaimState
from .deadlines import expiry_lock
from .errors import (
    GateNotSatisfied,
    IllegalTransition,
    LifecycleError,
    ValidationFailed,
)
from .gates import gate_details, unmet_conditions
from .mutation import FULL_SHARE, PROCESS_ORDER, ClaimMutation, commit, locked_error

logger = get_logger(__name__)

_INVALIDATABLE = (ClaimState.RECEIVED, ClaimState.VALIDATING)


@beartype
def successor(state: ClaimState) -> ClaimState | None:
    """Next stage in process order, if any."""
    if state not in PROCESS_ORDER or state == ClaimState.CLOSED:
        return None
    return PROCESS_ORDER[PROCESS_ORDER.index(state) + 1]


@beartype
def allowed_targets(state: ClaimState) -> tuple[ClaimState, ...]:
    """States reachable from ``state`` in one step."""
    if state.is_terminal:
        return ()
    targets = [successor(state)]
    if state in _INVALIDATABLE:
        targets.append(ClaimState.INVALID)
    return tuple(target for target in targets if target is not None)


@beartype
def is_allowed(current: ClaimState, target: ClaimState) -> bool:
    """Check whether ``current -> target`` is an edge of the state machine."""
    return target in allowed_targets(current)


def _action_for(target: ClaimState) -> AuditAction:
    if target == ClaimState.CLOSED:
        return AuditAction.CLAIM_CLOSED
    if target == ClaimState.INVALID:
        return AuditAction.MARKED_INVALID
    return AuditAction.STATE_CHANGED


def _check(
    claim: Claim,
    target: ClaimState,
    reason: str | None,
    now: datetime,
    settings: Settings,
) -> LifecycleError | None:
    locked = locked_error(claim)
    if locked is not None:
        return locked

    if not is_allowed(claim.state, target):
        return IllegalTransition(claim.state, target)

    if target == ClaimState.INVALID:
        if not reason or not reason.strip():
            return ValidationFailed("reason", "an invalidation reason is required")
        return None

    expired = expiry_lock(claim, now, settings)
    if expired is not None:
        return expired

    unmet = unmet_conditions(claim, target)
    if unmet:
        return GateNotSatisfied(target, unmet, gate_details(claim, target))

    if target == ClaimState.PAYMENT and claim.total_share != FULL_SHARE:
        return ValidationFailed(
            "percentage_share",
            f"beneficiary shares sum to {claim.total_share}, expected 100",
        )
    return None


@beartype
def attempt_transition(
    claim: Claim,
    target_state: ClaimState,
    actor: ActorContext,
    *,
    now: datetime,
    reason: str | None = None,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Validate and apply a state transition.

    Args:
        claim: Current claim snapshot
        target_state: Requested state
        actor: Who requests the change
        now: Decision instant
        reason: Invalidation reason, mandatory for INVALID
        previous_alerts: Alerts currently stored for the claim
        settings: Deadline configuration, defaults to the cached settings

    Returns:
        Result containing the new snapshot with its audit event and alert
        upserts, or the first rule the request violates
    """
    settings = settings or get_settings()
    error = _check(claim, target_state, reason, now, settings)
    if error is not None:
        logger.info(
            "Rejected %s -> %s for %s: %s",
            claim.state.value,
            target_state.value,
            claim.case_code,
            error.message,
        )
        return Err(error)

    changes: dict = {"state": target_state}
    detail = f"{claim.state.value} -> {target_state.value}"
    if target_state.is_terminal and claim.closed_at is None:
        changes["closed_at"] = now
    if target_state == ClaimState.INVALID:
        changes["invalidation_reason"] = reason.strip()
        detail = f"{detail}: {reason.strip()}"

    result = commit(
        claim,
        _action_for(target_state),
        actor,
        detail,
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        **changes,
    )
    if result.is_ok():
        logger.info(
            "Claim %s moved %s by %s",
            claim.case_code,
            detail,
            actor.actor,
        )
    return result


@beartype
def invalidate(
    claim: Claim,
    reason: str,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Mark a claim INVALID with the reason it cannot proceed."""
    return attempt_transition(
        claim,
        ClaimState.INVALID,
        actor,
        now=now,
        reason=reason,
        previous_alerts=previous_alerts,
        settings=settings,
    )
