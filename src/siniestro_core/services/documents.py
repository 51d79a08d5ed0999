"""Required-document checklist per claim type."""

from typing import Final

from beartype import beartype

from ..models.claim import Claim, Document
from ..models.enums import ClaimType, DocumentStatus

# Base checklist: (document type, required)
BASE_DOCUMENTS: Final[tuple[tuple[str, bool], ...]] = (
    ("DECEASED_ID", True),
    ("DEATH_CERTIFICATE", True),
    ("EFFECTIVE_POSSESSION", True),
    ("BENEFICIARY_IDS", True),
    ("BANK_ACCOUNT", True),
    ("ENROLMENT_CERTIFICATE", False),
)

ACCIDENT_DOCUMENTS: Final[tuple[tuple[str, bool], ...]] = (
    ("BODY_REMOVAL_RECORD", True),
    ("POLICE_REPORT", True),
    ("AUTOPSY", True),
    ("BLOOD_ALCOHOL_TEST", True),
)


@beartype
def checklist_for(claim_type: ClaimType) -> tuple[Document, ...]:
    """Build the PENDING checklist for a claim type.

    UNKNOWN claims use the base set until reclassified.
    """
    entries = BASE_DOCUMENTS
    if claim_type == ClaimType.ACCIDENT:
        entries = BASE_DOCUMENTS + ACCIDENT_DOCUMENTS
    return tuple(
        Document(document_type=document_type, required=required)
        for document_type, required in entries
    )


@beartype
def required_document_types(claim: Claim) -> tuple[str, ...]:
    """Catalog requirements for the claim type plus any entry flagged required."""
    catalog = [doc.document_type for doc in checklist_for(claim.claim_type) if doc.required]
    extra = [
        doc.document_type
        for doc in claim.documents
        if doc.required and doc.document_type not in catalog
    ]
    return tuple(catalog + extra)


@beartype
def missing_required_documents(claim: Claim) -> tuple[str, ...]:
    """Required types that are absent, pending or rejected."""
    missing = []
    for document_type in required_document_types(claim):
        doc = claim.document(document_type)
        if doc is None or doc.status != DocumentStatus.RECEIVED:
            missing.append(document_type)
    return tuple(missing)


@beartype
def merge_checklist(
    documents: tuple[Document, ...], claim_type: ClaimType
) -> tuple[Document, ...]:
    """Add the checklist entries of ``claim_type`` that are not yet present.

    Existing entries keep their status. Catalog entries take the requirement
    flag of the new type; documents outside every catalog keep theirs.
    """
    required_now = {doc.document_type: doc.required for doc in checklist_for(claim_type)}
    cataloged = {document_type for document_type, _ in BASE_DOCUMENTS + ACCIDENT_DOCUMENTS}
    merged = []
    for doc in documents:
        if doc.document_type in cataloged:
            required = required_now.get(doc.document_type, False)
            if required != doc.required:
                doc = doc.evolve(required=required)
        merged.append(doc)
    present = {doc.document_type for doc in documents}
    merged.extend(
        doc for doc in checklist_for(claim_type) if doc.document_type not in present
    )
    return tuple(merged)
