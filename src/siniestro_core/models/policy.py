"""Policy snapshot used for policy expiry and premium payment alerts."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig
from .enums import InstallmentStatus


@beartype
class PolicyInstallment(BaseModelConfig):
    """One premium installment of a policy term."""

    installment_id: UUID = Field(...)
    due_date: date = Field(...)
    amount: Decimal = Field(
        ..., ge=Decimal("0.01"), decimal_places=2, max_digits=12
    )
    status: InstallmentStatus = Field(default=InstallmentStatus.PENDING)


@beartype
class PolicySnapshot(BaseModelConfig):
    """Current term of a group life policy."""

    policy_id: UUID = Field(...)
    code: str = Field(..., min_length=1, max_length=50)
    term_start: date = Field(...)
    term_end: date = Field(...)
    installments: tuple[PolicyInstallment, ...] = Field(default=())

    @model_validator(mode="after")
    @beartype
    def validate_term(self) -> "PolicySnapshot":
        """A term must end after it starts."""
        if self.term_end <= self.term_start:
            raise ValueError("Policy term must end after it starts")
        return self

    @property
    def next_pending_installment(self) -> PolicyInstallment | None:
        """Earliest installment still unpaid."""
        pending = [
            i for i in self.installments if i.status == InstallmentStatus.PENDING
        ]
        return min(pending, key=lambda i: i.due_date, default=None)
