"""Alert generation for claim deadlines and policy conditions.

Alerts are derived data. ``refresh_alerts`` compares what a snapshot
warrants right now against the alerts the caller already stores and
returns upsert instructions keyed by ``(ref_id, kind)``:

- a live alert is updated in place (same ``alert_id``), never duplicated;
- an alert the user dismissed stays dismissed until its anchor changes,
  because the id is derived from ``(ref, kind, anchor)``;
- a live alert whose condition vanished, or whose anchor moved, is
  returned resolved by SYSTEM.

Callers persist upserts by ``alert_id``; one refresh may return both the
resolved alert of an old anchor and the live alert of the new one.

Severity thresholds compare against the time still remaining before the
deadline: the 72-hour alert turns CRITICAL once fewer than 24 hours are
left, i.e. 48 hours after the last signature. It is raised only for
claims in PAYMENT.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone
from typing import Final, NamedTuple
from uuid import UUID, uuid5

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..models.alert import Alert
from ..models.base import AwareInstant
from ..models.claim import Claim
from ..models.enums import (
    AlertKind,
    AlertRefType,
    AlertResolver,
    AlertSeverity,
    ClaimState,
)
from ..models.policy import PolicySnapshot
from .deadlines import DeadlineStatus, compute_deadlines

logger = get_logger(__name__)

ALERT_NAMESPACE: Final = UUID("3f1c2a8e-6b0d-5e47-9a61-8d2f40c7b915")

CLAIM_ALERT_KINDS: Final[tuple[AlertKind, ...]] = (
    AlertKind.DEADLINE_60D,
    AlertKind.DEADLINE_15BD,
    AlertKind.DEADLINE_72H,
)
POLICY_ALERT_KINDS: Final[tuple[AlertKind, ...]] = (
    AlertKind.POLICY_EXPIRY,
    AlertKind.POLICY_PAYMENT,
)


class _Candidate(NamedTuple):
    severity: AlertSeverity
    message: str
    due_at: datetime
    anchor_at: datetime


@beartype
def alert_id_for(ref_id: UUID, kind: AlertKind, anchor_at: AwareInstant) -> UUID:
    """Deterministic alert id; a new anchor yields a new id."""
    anchor = anchor_at.astimezone(timezone.utc).isoformat()
    return uuid5(ALERT_NAMESPACE, f"{ref_id}:{kind.value}:{anchor}")


@beartype
def resolve_alert(
    alert: Alert, now: AwareInstant, resolver: AlertResolver = AlertResolver.USER
) -> Alert:
    """Dismiss an alert. Resolving twice keeps the first resolution."""
    if alert.resolved:
        return alert
    return alert.evolve(resolved=True, resolved_at=now, resolved_by=resolver)


def _claim_candidates(
    claim: Claim, now: datetime, settings: Settings
) -> dict[AlertKind, _Candidate | None]:
    candidates: dict[AlertKind, _Candidate | None] = dict.fromkeys(CLAIM_ALERT_KINDS)
    if claim.is_terminal:
        return candidates

    deadlines = compute_deadlines(claim, now, settings)

    report = deadlines.sixty_day
    if report.is_live and claim.reopened_at is None:
        days = report.remaining_days
        severity = None
        if days <= 0:
            severity = AlertSeverity.CRITICAL
            message = (
                f"Claim {claim.case_code}: report deadline expired "
                f"{-days} day(s) ago; insurer authorization required to continue"
            )
        elif days <= settings.report_warning_days:
            severity = (
                AlertSeverity.CRITICAL
                if days <= settings.report_critical_days
                else AlertSeverity.WARNING
            )
            message = (
                f"Claim {claim.case_code}: {days} day(s) left to send "
                "the expedient to the insurer"
            )
        if severity is not None:
            candidates[AlertKind.DEADLINE_60D] = _Candidate(
                severity, message, report.due_at, report.anchor_at
            )

    insurer = deadlines.fifteen_business_day
    if insurer.is_live:
        days = insurer.remaining_business_days
        if days <= 0:
            message = (
                f"Claim {claim.case_code}: insurer response overdue "
                f"by {-days} business day(s)"
            )
        else:
            message = (
                f"Claim {claim.case_code}: insurer has {days} business day(s) "
                "left to respond"
            )
        if days <= settings.insurer_warning_business_days:
            candidates[AlertKind.DEADLINE_15BD] = _Candidate(
                AlertSeverity.WARNING, message, insurer.due_at, insurer.anchor_at
            )

    payment = deadlines.seventy_two_hour
    if (
        claim.state == ClaimState.PAYMENT
        and payment.is_live
        and payment.remaining < timedelta(hours=settings.payment_critical_hours)
    ):
        if payment.status == DeadlineStatus.EXPIRED:
            message = f"Claim {claim.case_code}: payment deadline overdue"
        else:
            hours = int(payment.remaining.total_seconds() // 3600)
            message = (
                f"Claim {claim.case_code}: less than {hours + 1} hour(s) left "
                "to execute payment"
            )
        candidates[AlertKind.DEADLINE_72H] = _Candidate(
            AlertSeverity.CRITICAL, message, payment.due_at, payment.anchor_at
        )

    return candidates


def _day_start(day: date, settings: Settings) -> datetime:
    return datetime.combine(day, time.min, tzinfo=settings.tz)


def _policy_candidates(
    policy: PolicySnapshot, now: datetime, settings: Settings
) -> dict[AlertKind, _Candidate | None]:
    candidates: dict[AlertKind, _Candidate | None] = dict.fromkeys(POLICY_ALERT_KINDS)
    today = now.astimezone(settings.tz).date()

    days = (policy.term_end - today).days
    if 0 < days <= settings.policy_expiry_info_days:
        if days <= settings.policy_expiry_critical_days:
            severity = AlertSeverity.CRITICAL
        elif days <= settings.policy_expiry_warning_days:
            severity = AlertSeverity.WARNING
        else:
            severity = AlertSeverity.INFO
        term_end = _day_start(policy.term_end, settings)
        candidates[AlertKind.POLICY_EXPIRY] = _Candidate(
            severity,
            f"Policy {policy.code} expires in {days} day(s)",
            term_end,
            term_end,
        )

    installment = policy.next_pending_installment
    if installment is not None:
        days = (installment.due_date - today).days
        if days <= settings.policy_payment_warning_days:
            if days < 0:
                severity = AlertSeverity.CRITICAL
                message = (
                    f"Policy {policy.code}: premium installment overdue "
                    f"by {-days} day(s)"
                )
            else:
                severity = (
                    AlertSeverity.CRITICAL
                    if days <= settings.policy_payment_critical_days
                    else AlertSeverity.WARNING
                )
                message = f"Policy {policy.code}: premium installment due in {days} day(s)"
            due_at = _day_start(installment.due_date, settings)
            candidates[AlertKind.POLICY_PAYMENT] = _Candidate(
                severity, message, due_at, due_at
            )

    return candidates


def _reconcile(
    ref_type: AlertRefType,
    ref_id: UUID,
    candidates: dict[AlertKind, _Candidate | None],
    previous_alerts: Iterable[Alert],
    now: AwareInstant,
) -> list[Alert]:
    live: dict[AlertKind, list[Alert]] = {}
    resolved_ids: set[UUID] = set()
    for alert in previous_alerts:
        if alert.ref_id != ref_id or alert.kind not in candidates:
            continue
        if alert.resolved:
            resolved_ids.add(alert.alert_id)
        else:
            live.setdefault(alert.kind, []).append(alert)

    upserts: list[Alert] = []
    for kind, candidate in candidates.items():
        alert_id = (
            alert_id_for(ref_id, kind, candidate.anchor_at)
            if candidate is not None
            else None
        )
        current = None
        for alert in live.get(kind, []):
            if alert.alert_id == alert_id:
                current = alert
            else:
                # condition gone or anchor moved
                upserts.append(resolve_alert(alert, now, AlertResolver.SYSTEM))

        if candidate is None:
            continue

        if current is not None:
            upserts.append(
                current.evolve(
                    severity=candidate.severity,
                    message=candidate.message,
                    due_at=candidate.due_at,
                )
            )
            continue

        if alert_id in resolved_ids:
            # dismissed for this anchor
            continue

        upserts.append(
            Alert(
                alert_id=alert_id,
                ref_type=ref_type,
                ref_id=ref_id,
                kind=kind,
                severity=candidate.severity,
                message=candidate.message,
                due_at=candidate.due_at,
                anchor_at=candidate.anchor_at,
            )
        )

    return upserts


@beartype
def refresh_alerts(
    claim: Claim,
    now: AwareInstant,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> list[Alert]:
    """Upserts for the deadline alerts of ``claim`` at ``now``.

    ``previous_alerts`` are the alerts the caller currently stores for the
    claim, resolved ones included. At most one unresolved alert is
    returned per ``(claim_id, kind)``.
    """
    settings = settings or get_settings()
    upserts = _reconcile(
        AlertRefType.CLAIM,
        claim.claim_id,
        _claim_candidates(claim, now, settings),
        previous_alerts,
        now,
    )
    logger.debug(
        "Refreshed alerts for %s: %d upsert(s)", claim.case_code, len(upserts)
    )
    return upserts


@beartype
def refresh_policy_alerts(
    policy: PolicySnapshot,
    now: AwareInstant,
    previous_alerts: Iterable[Alert] = (),
    settings: Settings | None = None,
) -> list[Alert]:
    """Upserts for the expiry and premium payment alerts of ``policy``."""
    settings = settings or get_settings()
    return _reconcile(
        AlertRefType.POLICY,
        policy.policy_id,
        _policy_candidates(policy, now, settings),
        previous_alerts,
        now,
    )
