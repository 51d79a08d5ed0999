"""Append-only audit trail.

Every accepted mutation produces exactly one ``AuditEvent``. Events are
never edited or removed; a claim's trail is ordered by ``sequence``.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Final
from uuid import UUID, uuid5

from beartype import beartype
from pydantic import Field

from ..core.result_types import Err, Ok, Result
from ..models.audit import AuditEvent
from ..models.base import BaseModelConfig
from ..models.claim import Claim
from ..models.enums import AuditAction
from .errors import ValidationFailed

EVENT_NAMESPACE: Final = UUID("b7e0d4a2-91c3-5f68-8e2b-4a6d13f0c9e7")


@beartype
def record_event(
    claim_id: UUID,
    action: AuditAction,
    actor: str,
    detail: str = "",
    *,
    timestamp: datetime,
    sequence: int,
) -> AuditEvent:
    """Build the audit event for one accepted mutation."""
    return AuditEvent(
        event_id=uuid5(EVENT_NAMESPACE, f"{claim_id}:{sequence}"),
        claim_id=claim_id,
        sequence=sequence,
        actor=actor,
        action=action,
        timestamp=timestamp,
        detail=detail,
    )


@beartype
def next_event(
    claim: Claim,
    action: AuditAction,
    actor: str,
    detail: str,
    timestamp: datetime,
) -> AuditEvent:
    """The event that follows the last one in ``claim``'s trail."""
    return record_event(
        claim.claim_id,
        action,
        actor,
        detail,
        timestamp=timestamp,
        sequence=len(claim.audit_trail),
    )


@beartype
def append_event(claim: Claim, event: AuditEvent) -> Result[Claim, ValidationFailed]:
    """Append ``event`` to the claim's trail.

    The event must belong to the claim and carry the next sequence number.
    """
    if event.claim_id != claim.claim_id:
        return Err(ValidationFailed("claim_id", "event belongs to another claim"))
    expected = len(claim.audit_trail)
    if event.sequence != expected:
        return Err(
            ValidationFailed(
                "sequence", f"expected sequence {expected}, got {event.sequence}"
            )
        )
    return Ok(claim.evolve(audit_trail=(*claim.audit_trail, event)))


@beartype
class AuditRecorder(BaseModelConfig):
    """Immutable ledger of audit events across claims."""

    events: tuple[AuditEvent, ...] = Field(default=())

    def append(self, event: AuditEvent) -> "AuditRecorder":
        """Return a ledger with ``event`` appended."""
        return AuditRecorder(events=(*self.events, event))

    def records_for(self, claim_id: UUID) -> tuple[AuditEvent, ...]:
        """Events of one claim, in append order."""
        return tuple(event for event in self.events if event.claim_id == claim_id)

    @classmethod
    def from_claims(cls, claims: Iterable[Claim]) -> "AuditRecorder":
        """Ledger holding the trails of ``claims``."""
        return cls(events=tuple(event for claim in claims for event in claim.audit_trail))
