"""Claim domain models with strict validation and audit trail support.

This module defines the claim snapshot the lifecycle engine operates on,
together with the documents, beneficiaries, liquidation and payment it
owns. Snapshots are immutable; operations return new snapshots.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from beartype import beartype
from pydantic import AwareDatetime, Field, model_validator

from .audit import AuditEvent
from .base import BaseModelConfig
from .enums import (
    ClaimOrigin,
    ClaimState,
    ClaimType,
    DocumentStatus,
    LiquidationStatus,
    PaymentStatus,
    SignatureStatus,
)

CASE_CODE_PATTERN = r"^SIN-[0-9]{4}-[0-9]{6}$"


@beartype
class Document(BaseModelConfig):
    """One entry of the claim's document checklist."""

    document_type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Checklist document type code",
    )
    required: bool = Field(default=False, description="Mandatory for the claim type")
    status: DocumentStatus = Field(default=DocumentStatus.PENDING)
    rejection_reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    @beartype
    def validate_rejection_reason(self) -> "Document":
        """A rejected document must say why."""
        if self.status == DocumentStatus.REJECTED and not self.rejection_reason:
            raise ValueError("Rejected documents require a rejection reason")
        return self


@beartype
class Beneficiary(BaseModelConfig):
    """A person entitled to a share of the insured amount."""

    beneficiary_id: UUID = Field(...)
    full_name: str = Field(..., min_length=1, max_length=200)
    national_id: str = Field(..., min_length=1, max_length=20)
    relationship: str = Field(..., min_length=1, max_length=50)
    email: str | None = Field(default=None, max_length=254)
    bank_account: str | None = Field(default=None, max_length=100)
    percentage_share: Decimal = Field(
        ...,
        ge=Decimal("0"),
        le=Decimal("100"),
        decimal_places=2,
        max_digits=5,
        description="Share of the liquidated amount, in percent",
    )
    signature_status: SignatureStatus = Field(default=SignatureStatus.PENDING)
    signature_received_at: AwareDatetime | None = Field(default=None)

    @model_validator(mode="after")
    @beartype
    def validate_signature_timestamp(self) -> "Beneficiary":
        """Only a received signature carries a reception timestamp."""
        if (
            self.signature_status == SignatureStatus.PENDING
            and self.signature_received_at is not None
        ):
            raise ValueError("Pending signatures cannot have a reception timestamp")
        return self


@beartype
class Liquidation(BaseModelConfig):
    """The insurer's settlement of the claim."""

    status: LiquidationStatus = Field(default=LiquidationStatus.SENT)
    amount: Decimal = Field(
        default=Decimal("0.00"),
        ge=Decimal("0.00"),
        decimal_places=2,
        max_digits=12,
        description="Liquidated amount",
    )
    insurer_notes: str | None = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    @beartype
    def validate_approved_amount(self) -> "Liquidation":
        """An approved liquidation must settle a positive amount."""
        if self.status == LiquidationStatus.APPROVED and self.amount <= 0:
            raise ValueError("Approved liquidations require a positive amount")
        return self


@beartype
class Payment(BaseModelConfig):
    """Finance payment of the liquidated amount."""

    status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    accounting_reference: str | None = Field(default=None, max_length=100)
    finance_notes: str | None = Field(default=None, max_length=1000)


@beartype
class Claim(BaseModelConfig):
    """Complete claim snapshot with all facts the engine decides on."""

    claim_id: UUID = Field(..., description="Unique claim identifier")
    case_code: str = Field(
        ...,
        pattern=CASE_CODE_PATTERN,
        description="Human-facing case code",
    )
    claim_type: ClaimType = Field(...)
    origin: ClaimOrigin = Field(default=ClaimOrigin.MANUAL)
    state: ClaimState = Field(default=ClaimState.RECEIVED)

    # Anchor timestamps
    death_date: date | None = Field(default=None)
    report_date: AwareDatetime = Field(...)
    sent_to_insurer_at: AwareDatetime | None = Field(default=None)
    signatures_received_at: AwareDatetime | None = Field(default=None)
    liquidation_date: AwareDatetime | None = Field(default=None)
    payment_date: AwareDatetime | None = Field(default=None)
    closed_at: AwareDatetime | None = Field(default=None)
    sixty_day_deadline_met: bool = Field(default=False)

    invalidation_reason: str | None = Field(default=None, max_length=1000)

    # Reopening of an expired 60-day deadline
    reopened_at: AwareDatetime | None = Field(default=None)
    reopened_by: str | None = Field(default=None, max_length=200)
    reopen_authorization: str | None = Field(default=None, max_length=500)

    documents: tuple[Document, ...] = Field(default=())
    beneficiaries: tuple[Beneficiary, ...] = Field(default=())
    liquidation: Liquidation | None = Field(default=None)
    payment: Payment | None = Field(default=None)
    audit_trail: tuple[AuditEvent, ...] = Field(default=())

    version: int = Field(default=0, ge=0, description="Accepted mutation count")

    @model_validator(mode="after")
    @beartype
    def validate_collections(self) -> "Claim":
        """Document types and beneficiary ids are unique within a claim."""
        types = [doc.document_type for doc in self.documents]
        if len(types) != len(set(types)):
            raise ValueError("Document types must be unique within a claim")

        ids = [b.beneficiary_id for b in self.beneficiaries]
        if len(ids) != len(set(ids)):
            raise ValueError("Beneficiary ids must be unique within a claim")
        return self

    @model_validator(mode="after")
    @beartype
    def validate_audit_trail(self) -> "Claim":
        """Every event belongs to this claim, in contiguous sequence order."""
        for position, event in enumerate(self.audit_trail):
            if event.claim_id != self.claim_id:
                raise ValueError("Audit event belongs to a different claim")
            if event.sequence != position:
                raise ValueError(
                    f"Audit trail out of order at position {position} "
                    f"(sequence {event.sequence})"
                )
        return self

    @model_validator(mode="after")
    @beartype
    def validate_dates(self) -> "Claim":
        """Invalid claims carry a reason; a death cannot follow its report."""
        if self.state == ClaimState.INVALID and not self.invalidation_reason:
            raise ValueError("Invalid claims require an invalidation reason")

        if self.death_date and self.death_date > self.report_date.date():
            raise ValueError("Death date cannot be after the report date")
        return self

    @property
    def is_terminal(self) -> bool:
        """Check if the claim accepts no further mutation."""
        return self.state.is_terminal

    @property
    def total_share(self) -> Decimal:
        """Sum of beneficiary percentage shares."""
        return sum((b.percentage_share for b in self.beneficiaries), Decimal("0"))

    @beartype
    def document(self, document_type: str) -> Document | None:
        """Find a checklist document by type."""
        for doc in self.documents:
            if doc.document_type == document_type:
                return doc
        return None

    @beartype
    def beneficiary(self, beneficiary_id: UUID) -> Beneficiary | None:
        """Find a beneficiary by id."""
        for beneficiary in self.beneficiaries:
            if beneficiary.beneficiary_id == beneficiary_id:
                return beneficiary
        return None
