# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Typed claim operations.

Every operation receives an explicit snapshot, the acting user and the
decision instant, and returns ``Result[ClaimMutation, LifecycleError]``.
Terminal claims reject every operation with ``ClaimLocked``, and no
operation may leave the claim in a stage whose gates it no longer meets.
"""

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Final
from uuid import UUID, uuid5

from beartype import beartype
from pydantic import Field, ValidationError

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.alert import Alert
from ..models.audit import ActorContext
from ..models.base import BaseModelConfig
from ..models.claim import Beneficiary, Claim, Document, Liquidation, Payment
from ..models.enums import (
    ActorRole,
    AuditAction,
    ClaimOrigin,
    ClaimState,
    ClaimType,
    DocumentStatus,
    LiquidationStatus,
    PaymentStatus,
    SignatureStatus,
)
from .alerts import refresh_alerts
from .audit import record_event
from .deadlines import expiry_lock
from .documents import checklist_for, merge_checklist, missing_required_documents
from .errors import (
    GateNotSatisfied,
    LifecycleError,
    UnmetCondition,
    ValidationFailed,
)
from .mutation import FULL_SHARE, ClaimMutation, commit, locked_error, validation_failed

logger = get_logger(__name__)

CLAIM_NAMESPACE: Final = UUID("5a9e7c31-2d48-5b06-b1f3-c0e86d2a4f17")
BENEFICIARY_NAMESPACE: Final = UUID("d2c4a6e8-0b13-5f79-8a2c-6e4f1b3d5a97")


@beartype
class BeneficiaryInput(BaseModelConfig):
    """Beneficiary data as captured by the operator.

    Leave ``beneficiary_id`` empty to add a new beneficiary; set it to
    update an existing one.
    """

    beneficiary_id: UUID | None = Field(default=None)
    full_name: str = Field(..., min_length=1, max_length=200)
    national_id: str = Field(..., min_length=1, max_length=20)
    relationship: str = Field(..., min_length=1, max_length=50)
    email: str | None = Field(default=None, max_length=254)
    bank_account: str | None = Field(default=None, max_length=100)
    percentage_share: Decimal = Field(
        ..., ge=Decimal("0"), le=Decimal("100"), decimal_places=2, max_digits=5
    )


@beartype
def generate_case_code(year: int, sequence: int) -> str:
    """Format a case code as ``SIN-YYYY-NNNNNN``."""
    if not 1000 <= year <= 9999:
        raise ValueError(f"Year out of range: {year}")
    if not 1 <= sequence <= 999_999:
        raise ValueError(f"Sequence out of range: {sequence}")
    return f"SIN-{year:04d}-{sequence:06d}"


@beartype
def open_claim(
    case_code: str,
    claim_type: ClaimType,
    origin: ClaimOrigin,
    report_date: datetime,
    actor: ActorContext,
    *,
    now: datetime,
    death_date: date | None = None,
    claim_id: UUID | None = None,
    settings: Settings | None = None,
) -> Result[ClaimMutation, ValidationFailed]:
    """Register a new claim in RECEIVED with the checklist for its type."""
    claim_id = claim_id or uuid5(CLAIM_NAMESPACE, case_code)
    event = record_event(
        claim_id,
        AuditAction.CLAIM_CREATED,
        actor.actor,
        f"{origin.value} report, type {claim_type.value}",
        timestamp=now,
        sequence=0,
    )
    try:
        claim = Claim(
            claim_id=claim_id,
            case_code=case_code,
            claim_type=claim_type,
            origin=origin,
            death_date=death_date,
            report_date=report_date,
            documents=checklist_for(claim_type),
            audit_trail=(event,),
        )
    except ValidationError as exc:
        return Err(validation_failed(exc))

    logger.info("Opened claim %s (%s)", case_code, claim_type.value)
    alerts = refresh_alerts(claim, now, (), settings)
    return Ok(ClaimMutation(claim=claim, event=event, alerts=tuple(alerts)))


@beartype
def reclassify_claim(
    claim: Claim,
    claim_type: ClaimType,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Change the cause of death while the claim is still being validated."""
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if claim.state not in (ClaimState.RECEIVED, ClaimState.VALIDATING):
        return Err(
            ValidationFailed(
                "state", f"cannot reclassify a claim in {claim.state.value}"
            )
        )
    if claim.claim_type == claim_type:
        return Err(
            ValidationFailed("claim_type", f"claim is already {claim_type.value}")
        )

    return commit(
        claim,
        AuditAction.CLAIM_RECLASSIFIED,
        actor,
        f"{claim.claim_type.value} -> {claim_type.value}",
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        claim_type=claim_type,
        documents=merge_checklist(claim.documents, claim_type),
    )


_DOCUMENT_ACTIONS: Final = {
    DocumentStatus.RECEIVED: AuditAction.DOCUMENT_RECEIVED,
    DocumentStatus.REJECTED: AuditAction.DOCUMENT_REJECTED,
    DocumentStatus.PENDING: AuditAction.DOCUMENT_UPDATED,
}


@beartype
def record_document(
    claim: Claim,
    document_type: str,
    status: DocumentStatus,
    actor: ActorContext,
    *,
    now: datetime,
    rejection_reason: str | None = None,
    required: bool | None = None,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Record the review outcome of a checklist document.

    Unknown document types are appended to the checklist, optional unless
    ``required`` says otherwise.
    """
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if status == DocumentStatus.REJECTED and not (
        rejection_reason and rejection_reason.strip()
    ):
        return Err(
            ValidationFailed("rejection_reason", "rejected documents need a reason")
        )

    reason = rejection_reason if status == DocumentStatus.REJECTED else None
    try:
        existing = claim.document(document_type)
        if existing is None:
            updated = Document(
                document_type=document_type,
                required=bool(required),
                status=status,
                rejection_reason=reason,
            )
            documents = (*claim.documents, updated)
        else:
            updated = existing.evolve(
                status=status,
                rejection_reason=reason,
                required=existing.required if required is None else required,
            )
            documents = tuple(
                updated if doc.document_type == document_type else doc
                for doc in claim.documents
            )
    except ValidationError as exc:
        return Err(validation_failed(exc))

    detail = f"{updated.document_type}: {status.value}"
    if reason:
        detail = f"{detail} ({reason})"
    return commit(
        claim,
        _DOCUMENT_ACTIONS[status],
        actor,
        detail,
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        documents=documents,
    )


def _signatures_anchor(beneficiaries: tuple[Beneficiary, ...]) -> datetime | None:
    """Time of the last signature, once every beneficiary has signed."""
    if not beneficiaries:
        return None
    if any(b.signature_status != SignatureStatus.RECEIVED for b in beneficiaries):
        return None
    return max(b.signature_received_at for b in beneficiaries)


@beartype
def record_beneficiary(
    claim: Claim,
    data: BeneficiaryInput,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Add a beneficiary or update an existing one.

    Shares across all beneficiaries may never exceed 100. Adding a
    beneficiary reopens signature collection, clearing the signatures
    anchor.
    """
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)

    fields = data.model_dump(exclude={"beneficiary_id"})
    existing = (
        claim.beneficiary(data.beneficiary_id) if data.beneficiary_id else None
    )
    if data.beneficiary_id is not None and existing is None:
        return Err(
            ValidationFailed("beneficiary_id", f"unknown beneficiary {data.beneficiary_id}")
        )

    others = tuple(
        b
        for b in claim.beneficiaries
        if existing is None or b.beneficiary_id != existing.beneficiary_id
    )
    if any(b.national_id == data.national_id for b in others):
        return Err(
            ValidationFailed("national_id", f"{data.national_id} is already registered")
        )
    total = sum((b.percentage_share for b in others), Decimal("0")) + data.percentage_share
    if total > FULL_SHARE:
        return Err(
            ValidationFailed("percentage_share", f"shares would total {total}, above 100")
        )

    if existing is None:
        beneficiary = Beneficiary(
            beneficiary_id=uuid5(
                BENEFICIARY_NAMESPACE, f"{claim.claim_id}:{data.national_id}"
            ),
            **fields,
        )
        beneficiaries = (*claim.beneficiaries, beneficiary)
        action = AuditAction.BENEFICIARY_ADDED
    else:
        beneficiary = existing.evolve(**fields)
        beneficiaries = tuple(
            beneficiary if b.beneficiary_id == existing.beneficiary_id else b
            for b in claim.beneficiaries
        )
        action = AuditAction.BENEFICIARY_UPDATED

    return commit(
        claim,
        action,
        actor,
        f"{beneficiary.full_name} ({beneficiary.percentage_share}%)",
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        beneficiaries=beneficiaries,
        signatures_received_at=_signatures_anchor(beneficiaries),
    )


@beartype
def remove_beneficiary(
    claim: Claim,
    beneficiary_id: UUID,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Remove a beneficiary from the claim."""
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    existing = claim.beneficiary(beneficiary_id)
    if existing is None:
        return Err(
            ValidationFailed("beneficiary_id", f"unknown beneficiary {beneficiary_id}")
        )

    beneficiaries = tuple(
        b for b in claim.beneficiaries if b.beneficiary_id != beneficiary_id
    )
    return commit(
        claim,
        AuditAction.BENEFICIARY_REMOVED,
        actor,
        existing.full_name,
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        beneficiaries=beneficiaries,
        signatures_received_at=_signatures_anchor(beneficiaries),
    )


@beartype
def record_signature(
    claim: Claim,
    beneficiary_id: UUID,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Register a beneficiary's signed settlement.

    The last signature stamps ``signatures_received_at``, which starts the
    payment clock.
    """
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    existing = claim.beneficiary(beneficiary_id)
    if existing is None:
        return Err(
            ValidationFailed("beneficiary_id", f"unknown beneficiary {beneficiary_id}")
        )
    if existing.signature_status == SignatureStatus.RECEIVED:
        return Err(
            ValidationFailed(
                "signature_status", f"{existing.full_name} has already signed"
            )
        )

    signed = existing.evolve(
        signature_status=SignatureStatus.RECEIVED, signature_received_at=now
    )
    beneficiaries = tuple(
        signed if b.beneficiary_id == beneficiary_id else b
        for b in claim.beneficiaries
    )
    return commit(
        claim,
        AuditAction.SIGNATURE_RECEIVED,
        actor,
        signed.full_name,
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        beneficiaries=beneficiaries,
        signatures_received_at=_signatures_anchor(beneficiaries),
    )


@beartype
def mark_sent_to_insurer(
    claim: Claim,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Send the expedient to the insurer.

    Stamps ``sent_to_insurer_at``, which completes the report deadline and
    starts the insurer response clock. Sending again restarts that clock
    and resets the liquidation to SENT.
    """
    settings = settings or get_settings()
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if claim.state not in (ClaimState.BENEFICIARIES, ClaimState.LIQUIDATION):
        return Err(
            ValidationFailed(
                "state",
                f"the expedient cannot be sent from {claim.state.value}",
            )
        )
    missing = missing_required_documents(claim)
    if missing:
        return Err(
            GateNotSatisfied(
                claim.state,
                (UnmetCondition.DOCUMENTS_INCOMPLETE,),
                (f"missing documents: {', '.join(missing)}",),
            )
        )
    expired = expiry_lock(claim, now, settings)
    if expired is not None:
        return Err(expired)

    resend = claim.sent_to_insurer_at is not None
    logger.info(
        "%s expedient for %s to insurer", "Resending" if resend else "Sending", claim.case_code
    )
    return commit(
        claim,
        AuditAction.SENT_TO_INSURER,
        actor,
        "expedient resent" if resend else "expedient sent",
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        sent_to_insurer_at=now,
        sixty_day_deadline_met=True,
        liquidation=Liquidation(status=LiquidationStatus.SENT),
        liquidation_date=None,
    )


@beartype
def record_liquidation(
    claim: Claim,
    status: LiquidationStatus,
    actor: ActorContext,
    *,
    now: datetime,
    amount: Decimal = Decimal("0.00"),
    insurer_notes: str | None = None,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Record the insurer's answer to the expedient.

    OBSERVED sends the claim back for corrections; APPROVED settles a
    positive amount and stamps ``liquidation_date``.
    """
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if claim.sent_to_insurer_at is None:
        return Err(
            ValidationFailed("sent_to_insurer_at", "the expedient was not sent yet")
        )
    if status == LiquidationStatus.SENT:
        return Err(
            ValidationFailed("status", "SENT is set by sending the expedient")
        )
    if status == LiquidationStatus.APPROVED and amount <= 0:
        return Err(
            ValidationFailed("amount", "approved liquidations need a positive amount")
        )

    try:
        liquidation = Liquidation(
            status=status, amount=amount, insurer_notes=insurer_notes
        )
    except ValidationError as exc:
        return Err(validation_failed(exc))

    return commit(
        claim,
        AuditAction.LIQUIDATION_RECORDED,
        actor,
        f"{status.value} {liquidation.amount}",
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        liquidation=liquidation,
        liquidation_date=now if status == LiquidationStatus.APPROVED else None,
    )


@beartype
def record_payment(
    claim: Claim,
    status: PaymentStatus,
    actor: ActorContext,
    *,
    now: datetime,
    accounting_reference: str | None = None,
    finance_notes: str | None = None,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Record finance's payment of the approved liquidation."""
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if claim.state != ClaimState.PAYMENT:
        return Err(
            ValidationFailed(
                "state", f"payments are recorded in PAYMENT, not {claim.state.value}"
            )
        )
    if (
        claim.liquidation is None
        or claim.liquidation.status != LiquidationStatus.APPROVED
    ):
        return Err(
            GateNotSatisfied(
                ClaimState.PAYMENT, (UnmetCondition.LIQUIDATION_NOT_APPROVED,)
            )
        )
    if claim.payment is not None and claim.payment.status == PaymentStatus.EXECUTED:
        return Err(ValidationFailed("status", "payment was already executed"))

    try:
        payment = Payment(
            status=status,
            accounting_reference=accounting_reference,
            finance_notes=finance_notes,
        )
    except ValidationError as exc:
        return Err(validation_failed(exc))

    detail = status.value
    if accounting_reference:
        detail = f"{detail} ref {accounting_reference}"
    return commit(
        claim,
        AuditAction.PAYMENT_RECORDED,
        actor,
        detail,
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        payment=payment,
        payment_date=now if status == PaymentStatus.EXECUTED else None,
    )


@beartype
def reopen_expired(
    claim: Claim,
    authorization: str,
    actor: ActorContext,
    *,
    now: datetime,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> Result[ClaimMutation, LifecycleError]:
    """Lift the report-deadline lock with the insurer's express approval.

    Only a GESTOR may reopen, once per claim, and only while the report
    deadline is actually expired. The claim stays in the stage it was
    locked in; the expiry alert is resolved.
    """
    settings = settings or get_settings()
    locked = locked_error(claim)
    if locked is not None:
        return Err(locked)
    if actor.role != ActorRole.GESTOR:
        return Err(ValidationFailed("role", "only a GESTOR may reopen a claim"))
    if not authorization.strip():
        return Err(
            ValidationFailed("authorization", "insurer authorization is required")
        )
    if claim.reopened_at is not None:
        return Err(ValidationFailed("reopened_at", "claim was already reopened"))
    expired = expiry_lock(claim, now, settings)
    if expired is None:
        return Err(
            ValidationFailed("deadline", "the report deadline has not expired")
        )

    logger.warning(
        "Reopening %s after report deadline expired on %s (authorization %s)",
        claim.case_code,
        expired.due_on.isoformat(),
        authorization.strip(),
    )
    return commit(
        claim,
        AuditAction.DEADLINE_REOPENED,
        actor,
        f"authorization {authorization.strip()}",
        now=now,
        previous_alerts=previous_alerts,
        settings=settings,
        reopened_at=now,
        reopened_by=actor.actor,
        reopen_authorization=authorization.strip(),
    )
