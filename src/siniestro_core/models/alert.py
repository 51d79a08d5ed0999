"""Alert model.

Alerts are derived from claim and policy snapshots; they can be recomputed
at any time without loss. Callers upsert them by ``(ref_id, kind)``.
"""

from uuid import UUID

from beartype import beartype
from pydantic import AwareDatetime, Field, model_validator

from .base import BaseModelConfig
from .enums import AlertKind, AlertRefType, AlertResolver, AlertSeverity


@beartype
class Alert(BaseModelConfig):
    """Deadline or policy alert."""

    alert_id: UUID = Field(..., description="Deterministic id for (ref, kind, anchor)")
    ref_type: AlertRefType = Field(default=AlertRefType.CLAIM)
    ref_id: UUID = Field(..., description="Claim or policy the alert refers to")
    kind: AlertKind = Field(...)
    severity: AlertSeverity = Field(...)
    message: str = Field(..., min_length=1, max_length=500)
    due_at: AwareDatetime = Field(..., description="When the tracked deadline falls due")
    anchor_at: AwareDatetime = Field(
        ..., description="Anchor event the deadline was computed from"
    )
    resolved: bool = Field(default=False)
    resolved_at: AwareDatetime | None = Field(default=None)
    resolved_by: AlertResolver | None = Field(default=None)

    @model_validator(mode="after")
    @beartype
    def validate_resolution(self) -> "Alert":
        """Resolution timestamp and resolver are set exactly when resolved."""
        if self.resolved != (self.resolved_at is not None):
            raise ValueError("resolved_at must be set exactly when resolved")
        if self.resolved != (self.resolved_by is not None):
            raise ValueError("resolved_by must be set exactly when resolved")
        return self

    @property
    def key(self) -> tuple[UUID, AlertKind]:
        """Upsert key."""
        return (self.ref_id, self.kind)
