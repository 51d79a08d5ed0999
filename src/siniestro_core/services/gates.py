"""Stage gates derived from a claim snapshot.

A gate is open when its tuple of unmet conditions is empty. Gates are
pure and recomputed on demand; nothing is cached on the claim.
"""

from typing import Final

from beartype import beartype

from ..models.claim import Claim
from ..models.enums import (
    ClaimState,
    LiquidationStatus,
    PaymentStatus,
    SignatureStatus,
)
from .documents import missing_required_documents
from .errors import UnmetCondition

GATED_STAGES: Final[tuple[ClaimState, ...]] = (
    ClaimState.BENEFICIARIES,
    ClaimState.LIQUIDATION,
    ClaimState.PAYMENT,
    ClaimState.CLOSED,
)


@beartype
def unmet_conditions(claim: Claim, stage: ClaimState) -> tuple[UnmetCondition, ...]:
    """Conditions blocking entry to ``stage``; empty for ungated stages."""
    unmet: list[UnmetCondition] = []

    if stage in (ClaimState.BENEFICIARIES, ClaimState.LIQUIDATION):
        if missing_required_documents(claim):
            unmet.append(UnmetCondition.DOCUMENTS_INCOMPLETE)

    if stage == ClaimState.LIQUIDATION:
        if not claim.beneficiaries:
            unmet.append(UnmetCondition.BENEFICIARIES_MISSING)
        elif _unsigned_beneficiaries(claim):
            unmet.append(UnmetCondition.SIGNATURES_INCOMPLETE)

    if stage == ClaimState.PAYMENT:
        if (
            claim.liquidation is None
            or claim.liquidation.status != LiquidationStatus.APPROVED
        ):
            unmet.append(UnmetCondition.LIQUIDATION_NOT_APPROVED)

    if stage == ClaimState.CLOSED:
        if claim.payment is None or claim.payment.status != PaymentStatus.EXECUTED:
            unmet.append(UnmetCondition.PAYMENT_NOT_EXECUTED)

    return tuple(unmet)


@beartype
def evaluate_gates(claim: Claim) -> dict[ClaimState, tuple[UnmetCondition, ...]]:
    """Unmet conditions for every gated stage."""
    return {stage: unmet_conditions(claim, stage) for stage in GATED_STAGES}


@beartype
def can_enter(claim: Claim, stage: ClaimState) -> bool:
    """Check whether the gate of ``stage`` is open."""
    return not unmet_conditions(claim, stage)


@beartype
def gate_details(claim: Claim, stage: ClaimState) -> tuple[str, ...]:
    """Actionable detail lines for a closed gate.

    Lists the missing document types and the beneficiaries that still
    have to sign.
    """
    details: list[str] = []
    unmet = unmet_conditions(claim, stage)

    if UnmetCondition.DOCUMENTS_INCOMPLETE in unmet:
        details.append(
            "missing documents: " + ", ".join(missing_required_documents(claim))
        )
    if UnmetCondition.SIGNATURES_INCOMPLETE in unmet:
        details.append(
            "unsigned beneficiaries: "
            + ", ".join(b.full_name for b in _unsigned_beneficiaries(claim))
        )
    if UnmetCondition.LIQUIDATION_NOT_APPROVED in unmet and claim.liquidation:
        details.append(f"liquidation is {claim.liquidation.status.value}")
    return tuple(details)


def _unsigned_beneficiaries(claim: Claim) -> list:
    return [
        b for b in claim.beneficiaries if b.signature_status != SignatureStatus.RECEIVED
    ]
