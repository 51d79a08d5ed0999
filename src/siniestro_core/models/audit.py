"""Audit and actor value objects."""

from uuid import UUID

from beartype import beartype
from pydantic import AwareDatetime, Field

from .base import BaseModelConfig
from .enums import ActorRole, AuditAction


@beartype
class ActorContext(BaseModelConfig):
    """Who is performing an operation."""

    actor: str = Field(..., min_length=1, max_length=200)
    role: ActorRole = Field(default=ActorRole.GESTOR)

    @classmethod
    def system(cls) -> "ActorContext":
        """Actor used for scheduler-driven changes."""
        return cls(actor="system", role=ActorRole.SYSTEM)


@beartype
class AuditEvent(BaseModelConfig):
    """Immutable record of one accepted mutation on a claim."""

    event_id: UUID = Field(..., description="Deterministic event identifier")
    claim_id: UUID = Field(..., description="Claim the event belongs to")
    sequence: int = Field(..., ge=0, description="Position in the claim's trail")
    actor: str = Field(..., min_length=1, max_length=200)
    action: AuditAction = Field(...)
    timestamp: AwareDatetime = Field(...)
    detail: str = Field(default="", max_length=2000)
