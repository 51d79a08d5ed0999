"""Typed rejection values returned inside ``Err`` by every lifecycle decision.

Errors never cross the core boundary as exceptions. Each carries an
``ErrorKind`` tag for programmatic dispatch and a human-readable message.
"""

from datetime import date
from enum import Enum

import attrs

from ..models.enums import ClaimState


class ErrorKind(str, Enum):
    """Discriminator for lifecycle errors."""

    CLAIM_LOCKED = "CLAIM_LOCKED"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    GATE_NOT_SATISFIED = "GATE_NOT_SATISFIED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DEADLINE_EXPIRED = "DEADLINE_EXPIRED"


class UnmetCondition(str, Enum):
    """Reasons a stage gate is closed."""

    DOCUMENTS_INCOMPLETE = "documents_incomplete"
    BENEFICIARIES_MISSING = "beneficiaries_missing"
    SIGNATURES_INCOMPLETE = "signatures_incomplete"
    LIQUIDATION_NOT_APPROVED = "liquidation_not_approved"
    PAYMENT_NOT_EXECUTED = "payment_not_executed"


@attrs.frozen
class ClaimLocked:
    """Mutation attempted on a CLOSED or INVALID claim."""

    state: ClaimState = attrs.field()
    kind: ErrorKind = attrs.field(default=ErrorKind.CLAIM_LOCKED, init=False)

    @property
    def message(self) -> str:
        return f"Claim is {self.state.value} and accepts no further changes"


@attrs.frozen
class IllegalTransition:
    """Target state is not a permitted edge from the current state."""

    current: ClaimState = attrs.field()
    target: ClaimState = attrs.field()
    kind: ErrorKind = attrs.field(default=ErrorKind.ILLEGAL_TRANSITION, init=False)

    @property
    def message(self) -> str:
        return (
            f"Cannot move a claim from {self.current.value} "
            f"to {self.target.value}"
        )


@attrs.frozen
class GateNotSatisfied:
    """Destination stage gate is closed."""

    target: ClaimState = attrs.field()
    unmet: tuple[UnmetCondition, ...] = attrs.field(converter=tuple)
    details: tuple[str, ...] = attrs.field(default=(), converter=tuple)
    kind: ErrorKind = attrs.field(default=ErrorKind.GATE_NOT_SATISFIED, init=False)

    @property
    def message(self) -> str:
        text = f"Cannot enter {self.target.value}: " + ", ".join(
            condition.value for condition in self.unmet
        )
        if self.details:
            text += f" ({'; '.join(self.details)})"
        return text


@attrs.frozen
class ValidationFailed:
    """Input or resulting snapshot violates a business rule."""

    field: str = attrs.field()
    reason: str = attrs.field()
    kind: ErrorKind = attrs.field(default=ErrorKind.VALIDATION_FAILED, init=False)

    @property
    def message(self) -> str:
        return f"{self.field}: {self.reason}"


@attrs.frozen
class DeadlineExpired:
    """The 60-day report deadline lapsed and the claim was not reopened."""

    due_on: date = attrs.field()
    days_overdue: int = attrs.field()
    kind: ErrorKind = attrs.field(default=ErrorKind.DEADLINE_EXPIRED, init=False)

    @property
    def message(self) -> str:
        return (
            f"Report deadline expired on {self.due_on.isoformat()} "
            f"({self.days_overdue} days overdue); insurer authorization "
            "is required to reopen"
        )


LifecycleError = (
    ClaimLocked | IllegalTransition | GateNotSatisfied | ValidationFailed | DeadlineExpired
)
