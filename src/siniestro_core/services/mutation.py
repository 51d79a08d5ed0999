"""Shared commit path for every accepted claim mutation.

A mutation builds the next snapshot, appends its audit event, bumps the
version and refreshes the deadline alerts. Snapshots that would leave the
claim ahead of its own stage gates are refused.
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any, Final

from beartype import beartype
from pydantic import Field, ValidationError

from ..core.config import Settings
from ..core.result_types import Err, Ok, Result
from ..models.alert import Alert
from ..models.audit import ActorContext, AuditEvent
from ..models.base import BaseModelConfig
from ..models.claim import Claim
from ..models.enums import AuditAction, ClaimState
from .alerts import refresh_alerts
from .audit import next_event
from .errors import ClaimLocked, ValidationFailed
from .gates import GATED_STAGES, unmet_conditions

PROCESS_ORDER: Final[tuple[ClaimState, ...]] = (
    ClaimState.RECEIVED,
    ClaimState.VALIDATING,
    ClaimState.BENEFICIARIES,
    ClaimState.LIQUIDATION,
    ClaimState.PAYMENT,
    ClaimState.CLOSED,
)

FULL_SHARE: Final = Decimal("100")


@beartype
class ClaimMutation(BaseModelConfig):
    """Outcome of an accepted operation."""

    claim: Claim = Field(..., description="New claim snapshot")
    event: AuditEvent = Field(..., description="Audit event appended by the change")
    alerts: tuple[Alert, ...] = Field(
        default=(), description="Alert upserts for the caller to persist"
    )


@beartype
def locked_error(claim: Claim) -> ClaimLocked | None:
    """``ClaimLocked`` for terminal claims."""
    if claim.is_terminal:
        return ClaimLocked(claim.state)
    return None


@beartype
def consistency_error(claim: Claim) -> ValidationFailed | None:
    """Reject a snapshot whose state is ahead of its satisfied gates."""
    if claim.is_terminal:
        return None
    position = PROCESS_ORDER.index(claim.state)
    for stage in GATED_STAGES:
        if PROCESS_ORDER.index(stage) > position:
            break
        unmet = unmet_conditions(claim, stage)
        if unmet:
            return ValidationFailed(
                "state",
                f"claim in {claim.state.value} would no longer satisfy the "
                f"{stage.value} gate ({', '.join(u.value for u in unmet)})",
            )
    if position >= PROCESS_ORDER.index(ClaimState.PAYMENT) and (
        claim.total_share != FULL_SHARE
    ):
        return ValidationFailed(
            "state",
            f"claim in {claim.state.value} requires shares summing to 100",
        )
    return None


@beartype
def validation_failed(exc: ValidationError) -> ValidationFailed:
    """First pydantic error as a ``ValidationFailed`` value."""
    error = exc.errors()[0]
    location = [str(part) for part in error.get("loc", ())]
    return ValidationFailed(location[-1] if location else "claim", error["msg"])


@beartype
def commit(
    claim: Claim,
    action: AuditAction,
    actor: ActorContext,
    detail: str,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
    **changes: Any,
) -> Result[ClaimMutation, ValidationFailed]:
    """Apply ``changes`` to ``claim`` as one audited mutation."""
    event = next_event(claim, action, actor.actor, detail, now)
    try:
        updated = claim.evolve(
            **changes,
            version=claim.version + 1,
            audit_trail=(*claim.audit_trail, event),
        )
    except ValidationError as exc:
        return Err(validation_failed(exc))

    inconsistent = consistency_error(updated)
    if inconsistent is not None:
        return Err(inconsistent)

    alerts = refresh_alerts(updated, now, previous_alerts, settings)
    return Ok(ClaimMutation(claim=updated, event=event, alerts=tuple(alerts)))
