"""Enumerations shared by the claim, alert and audit models."""

from enum import Enum


class ClaimState(str, Enum):
    """Claim processing stages, declared in process order."""

    RECEIVED = "RECEIVED"
    VALIDATING = "VALIDATING"
    BENEFICIARIES = "BENEFICIARIES"
    LIQUIDATION = "LIQUIDATION"
    PAYMENT = "PAYMENT"
    CLOSED = "CLOSED"
    INVALID = "INVALID"

    @property
    def is_terminal(self) -> bool:
        """CLOSED and INVALID accept no further mutation."""
        return self in (ClaimState.CLOSED, ClaimState.INVALID)


class ClaimType(str, Enum):
    """Cause of death as declared on the claim."""

    NATURAL = "NATURAL"
    ACCIDENT = "ACCIDENT"
    UNKNOWN = "UNKNOWN"


class ClaimOrigin(str, Enum):
    """Channel through which the claim entered the system."""

    PUBLIC_REPORT = "PUBLIC_REPORT"
    MANUAL = "MANUAL"


class DocumentStatus(str, Enum):
    """Review status of a checklist document."""

    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    REJECTED = "REJECTED"


class SignatureStatus(str, Enum):
    """Whether a beneficiary has returned the signed settlement."""

    PENDING = "PENDING"
    RECEIVED = "RECEIVED"


class LiquidationStatus(str, Enum):
    """Insurer liquidation status."""

    SENT = "SENT"
    OBSERVED = "OBSERVED"
    APPROVED = "APPROVED"


class PaymentStatus(str, Enum):
    """Finance payment status."""

    PENDING = "PENDING"
    EXECUTED = "EXECUTED"


class InstallmentStatus(str, Enum):
    """Policy premium installment status."""

    PENDING = "PENDING"
    PAID = "PAID"


class AlertKind(str, Enum):
    """Deadline or policy condition an alert tracks."""

    DEADLINE_60D = "DEADLINE_60D"
    DEADLINE_15BD = "DEADLINE_15BD"
    DEADLINE_72H = "DEADLINE_72H"
    POLICY_EXPIRY = "POLICY_EXPIRY"
    POLICY_PAYMENT = "POLICY_PAYMENT"


class AlertSeverity(str, Enum):
    """Alert severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AlertRefType(str, Enum):
    """Entity an alert refers to."""

    CLAIM = "CLAIM"
    POLICY = "POLICY"


class AlertResolver(str, Enum):
    """Who closed an alert."""

    USER = "USER"
    SYSTEM = "SYSTEM"


class ActorRole(str, Enum):
    """Roles that act on a claim."""

    GESTOR = "GESTOR"
    FINANCE = "FINANCE"
    INSURER = "INSURER"
    REPORTER = "REPORTER"
    SYSTEM = "SYSTEM"


class AuditAction(str, Enum):
    """Audit trail actions, one per accepted mutation kind."""

    CLAIM_CREATED = "CLAIM_CREATED"
    CLAIM_RECLASSIFIED = "CLAIM_RECLASSIFIED"
    STATE_CHANGED = "STATE_CHANGED"
    DOCUMENT_RECEIVED = "DOCUMENT_RECEIVED"
    DOCUMENT_REJECTED = "DOCUMENT_REJECTED"
    DOCUMENT_UPDATED = "DOCUMENT_UPDATED"
    BENEFICIARY_ADDED = "BENEFICIARY_ADDED"
    BENEFICIARY_UPDATED = "BENEFICIARY_UPDATED"
    BENEFICIARY_REMOVED = "BENEFICIARY_REMOVED"
    SIGNATURE_RECEIVED = "SIGNATURE_RECEIVED"
    SENT_TO_INSURER = "SENT_TO_INSURER"
    LIQUIDATION_RECORDED = "LIQUIDATION_RECORDED"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"
    CLAIM_CLOSED = "CLAIM_CLOSED"
    MARKED_INVALID = "MARKED_INVALID"
    DEADLINE_REOPENED = "DEADLINE_REOPENED"
