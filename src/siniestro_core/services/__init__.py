# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Lifecycle rules: state machine, gates, deadlines, alerts and audit."""

from .alerts import refresh_alerts, refresh_policy_alerts, resolve_alert
from .audit import AuditRecorder, append_event, record_event
from .business_days import add_business_days, business_days_between, is_business_day
from .claim_engine import ClaimLifecycleEngine
from .deadlines import DeadlineReport, DeadlineSet, DeadlineStatus, compute_deadlines
from .errors import (
    ClaimLocked,
    DeadlineExpired,
    ErrorKind,
    GateNotSatisfied,
    IllegalTransition,
    LifecycleError,
    UnmetCondition,
    ValidationFailed,
)
from .gates import can_enter, evaluate_gates, gate_details
from .mutation import ClaimMutation
from .operations import (
    BeneficiaryInput,
    generate_case_code,
    mark_sent_to_insurer,
    open_claim,
    reclassify_claim,
    record_beneficiary,
    record_document,
    record_liquidation,
    record_payment,
    record_signature,
    remove_beneficiary,
    reopen_expired,
)
from .state_machine import attempt_transition, invalidate

__all__ = [
    "AuditRecorder",
    "BeneficiaryInput",
    "ClaimLifecycleEngine",
    "ClaimLocked",
    "ClaimMutation",
    "DeadlineExpired",
    "DeadlineReport",
    "DeadlineSet",
    "DeadlineStatus",
    "ErrorKind",
    "GateNotSatisfied",
    "IllegalTransition",
    "LifecycleError",
    "UnmetCondition",
    "ValidationFailed",
    "add_business_days",
    "append_event",
    "attempt_transition",
    "business_days_between",
    "can_enter",
    "compute_deadlines",
    "evaluate_gates",
    "gate_details",
    "generate_case_code",
    "invalidate",
    "is_business_day",
    "mark_sent_to_insurer",
    "open_claim",
    "reclassify_claim",
    "record_beneficiary",
    "record_document",
    "record_event",
    "record_liquidation",
    "record_payment",
    "record_signature",
    "refresh_alerts",
    "refresh_policy_alerts",
    "remove_beneficiary",
    "reopen_expired",
    "resolve_alert",
]
