# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Immutable value objects the lifecycle engine reads and returns."""

from .alert import Alert
from .audit import ActorContext, AuditEvent
from .base import BaseModelConfig
from .claim import Beneficiary, Claim, Document, Liquidation, Payment
from .enums import (
    ActorRole,
    AlertKind,
    AlertRefType,
    AlertResolver,
    AlertSeverity,
    AuditAction,
    ClaimOrigin,
    ClaimState,
    ClaimType,
    DocumentStatus,
    InstallmentStatus,
    LiquidationStatus,
    PaymentStatus,
    SignatureStatus,
)
from .policy import PolicyInstallment, PolicySnapshot

__all__ = [
    "ActorContext",
    "ActorRole",
    "Alert",
    "AlertKind",
    "AlertRefType",
    "AlertResolver",
    "AlertSeverity",
    "AuditAction",
    "AuditEvent",
    "BaseModelConfig",
    "Beneficiary",
    "Claim",
    "ClaimOrigin",
    "ClaimState",
    "ClaimType",
    "Document",
    "DocumentStatus",
    "InstallmentStatus",
    "Liquidation",
    "LiquidationStatus",
    "Payment",
    "PaymentStatus",
    "PolicyInstallment",
    "PolicySnapshot",
    "SignatureStatus",
]
