"""Unit tests for alert generation and refresh semantics."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid5

import pytest

from siniestro_core.core.config import Settings
from siniestro_core.models import (
    Alert,
    AlertKind,
    AlertRefType,
    AlertResolver,
    AlertSeverity,
    ClaimState,
    Liquidation,
    PolicyInstallment,
    PolicySnapshot,
)
from siniestro_core.services.alerts import (
    alert_id_for,
    refresh_alerts,
    refresh_policy_alerts,
    resolve_alert,
)
from tests.fixtures.claim_data import (
    NOW,
    SENT_AT,
    SIGNED_AT,
    TEST_NAMESPACE,
    UTC,
    make_claim,
)

ONE_DAY_LEFT = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
EXPIRED = datetime(2025, 3, 2, 8, 0, tzinfo=UTC)


def by_kind(alerts: list[Alert]) -> dict[AlertKind, Alert]:
    """Index upserts by kind, asserting there is one per kind."""
    index = {alert.kind: alert for alert in alerts}
    assert len(index) == len(alerts)
    return index


def sent_claim(**overrides: object):
    data = {
        "sent_to_insurer_at": SENT_AT,
        "sixty_day_deadline_met": True,
        "liquidation": Liquidation(),
    }
    data.update(overrides)
    return make_claim(ClaimState.LIQUIDATION, **data)


class TestReportDeadlineAlerts:
    """Test 60-day severity mapping."""

    @pytest.mark.parametrize(
        ("now", "severity"),
        [
            (datetime(2025, 2, 10, tzinfo=UTC), None),
            (datetime(2025, 2, 15, tzinfo=UTC), AlertSeverity.WARNING),
            (datetime(2025, 2, 25, tzinfo=UTC), AlertSeverity.CRITICAL),
            (ONE_DAY_LEFT, AlertSeverity.CRITICAL),
        ],
    )
    def test_severity_thresholds(
        self, settings: Settings, now: datetime, severity: AlertSeverity | None
    ) -> None:
        """Test >15 days is silent, <=15 WARNING, <=5 CRITICAL."""
        alerts = by_kind(refresh_alerts(make_claim(), now, (), settings))

        if severity is None:
            assert AlertKind.DEADLINE_60D not in alerts
        else:
            assert alerts[AlertKind.DEADLINE_60D].severity == severity

    def test_expired_variant(self, settings: Settings) -> None:
        """Test an expired deadline has its own message."""
        alert = by_kind(refresh_alerts(make_claim(), EXPIRED, (), settings))[
            AlertKind.DEADLINE_60D
        ]

        assert alert.severity == AlertSeverity.CRITICAL
        assert "expired" in alert.message
        assert alert.ref_type == AlertRefType.CLAIM
        assert alert.due_at == datetime(2025, 3, 2, tzinfo=UTC)

    def test_refresh_twice_yields_one_alert(self, settings: Settings) -> None:
        """Test re-running refresh updates rather than duplicates."""
        claim = make_claim()
        first = refresh_alerts(claim, ONE_DAY_LEFT, (), settings)
        second = refresh_alerts(claim, ONE_DAY_LEFT, first, settings)

        assert len(second) == 1
        assert second[0].alert_id == first[0].alert_id
        assert second == first

    def test_later_refresh_updates_in_place(self, settings: Settings) -> None:
        """Test severity and message change while the id stays."""
        claim = make_claim()
        warning = refresh_alerts(claim, datetime(2025, 2, 15, tzinfo=UTC), (), settings)
        critical = refresh_alerts(claim, EXPIRED, warning, settings)

        assert critical[0].alert_id == warning[0].alert_id
        assert critical[0].severity == AlertSeverity.CRITICAL
        assert critical[0].message != warning[0].message

    def test_completed_deadline_resolves_live_alert(self, settings: Settings) -> None:
        """Test sending the expedient resolves the report alert as SYSTEM."""
        live = refresh_alerts(make_claim(), ONE_DAY_LEFT, (), settings)
        claim = make_claim(
            ClaimState.BENEFICIARIES,
            sent_to_insurer_at=ONE_DAY_LEFT,
            sixty_day_deadline_met=True,
        )

        alert = by_kind(refresh_alerts(claim, ONE_DAY_LEFT, live, settings))[
            AlertKind.DEADLINE_60D
        ]
        assert alert.resolved
        assert alert.resolved_by == AlertResolver.SYSTEM
        assert alert.alert_id == live[0].alert_id

    def test_reopened_claim_resolves_expiry_alert(self, settings: Settings) -> None:
        """Test reopening clears the expiry alert."""
        live = refresh_alerts(make_claim(), EXPIRED, (), settings)
        reopened = make_claim(
            reopened_at=EXPIRED, reopened_by="gestor", reopen_authorization="ASEG-77"
        )

        (alert,) = refresh_alerts(reopened, EXPIRED, live, settings)
        assert alert.resolved
        assert alert.resolved_by == AlertResolver.SYSTEM

    def test_terminal_claim_resolves_everything(self, settings: Settings) -> None:
        """Test closing or invalidating a claim resolves its live alerts."""
        live = refresh_alerts(make_claim(), EXPIRED, (), settings)
        invalid = make_claim(ClaimState.INVALID)

        (alert,) = refresh_alerts(invalid, EXPIRED, live, settings)
        assert alert.resolved
        assert refresh_alerts(invalid, EXPIRED, (), settings) == []


class TestDismissal:
    """Test user dismissal and anchor changes."""

    def test_user_resolved_alert_not_recreated(self, settings: Settings) -> None:
        """Test a dismissed alert stays dismissed for the same anchor."""
        claim = make_claim()
        (alert,) = refresh_alerts(claim, ONE_DAY_LEFT, (), settings)
        dismissed = resolve_alert(alert, ONE_DAY_LEFT)

        assert dismissed.resolved_by == AlertResolver.USER
        assert refresh_alerts(claim, EXPIRED, [dismissed], settings) == []

    def test_new_anchor_recreates_alert(self, settings: Settings) -> None:
        """Test resending the expedient starts a fresh insurer alert."""
        now = datetime(2025, 2, 4, tzinfo=UTC)
        first = by_kind(refresh_alerts(sent_claim(), now, (), settings))
        dismissed = resolve_alert(first[AlertKind.DEADLINE_15BD], now)

        resent = sent_claim(sent_to_insurer_at=datetime(2025, 1, 21, 9, 0, tzinfo=UTC))
        later = datetime(2025, 2, 6, tzinfo=UTC)
        alerts = by_kind(refresh_alerts(resent, later, [dismissed], settings))

        fresh = alerts[AlertKind.DEADLINE_15BD]
        assert not fresh.resolved
        assert fresh.alert_id != dismissed.alert_id

    def test_new_anchor_resolves_live_alert(self, settings: Settings) -> None:
        """Test resending replaces a still-open insurer alert instead of adding one."""
        now = datetime(2025, 2, 4, tzinfo=UTC)
        stored = {
            alert.alert_id: alert
            for alert in refresh_alerts(sent_claim(), now, (), settings)
        }
        (old,) = stored.values()

        resent = sent_claim(sent_to_insurer_at=datetime(2025, 1, 21, 9, 0, tzinfo=UTC))
        later = datetime(2025, 2, 6, tzinfo=UTC)
        for alert in refresh_alerts(resent, later, stored.values(), settings):
            stored[alert.alert_id] = alert

        assert stored[old.alert_id].resolved
        assert stored[old.alert_id].resolved_by == AlertResolver.SYSTEM
        unresolved = [a for a in stored.values() if not a.resolved]
        assert [a.kind for a in unresolved] == [AlertKind.DEADLINE_15BD]
        assert unresolved[0].anchor_at == resent.sent_to_insurer_at

        again = refresh_alerts(resent, later, stored.values(), settings)
        assert [a.alert_id for a in again] == [unresolved[0].alert_id]

    def test_resolve_is_idempotent(self, settings: Settings) -> None:
        """Test resolving twice keeps the first resolution."""
        (alert,) = refresh_alerts(make_claim(), ONE_DAY_LEFT, (), settings)
        once = resolve_alert(alert, ONE_DAY_LEFT)

        assert resolve_alert(once, EXPIRED, AlertResolver.SYSTEM) == once

    def test_alert_ids_are_deterministic(self) -> None:
        """Test ids depend on reference, kind and anchor only."""
        ref = uuid5(TEST_NAMESPACE, "ref")
        assert alert_id_for(ref, AlertKind.DEADLINE_72H, SIGNED_AT) == alert_id_for(
            ref, AlertKind.DEADLINE_72H, SIGNED_AT.astimezone(UTC)
        )
        assert alert_id_for(ref, AlertKind.DEADLINE_72H, SIGNED_AT) != alert_id_for(
            ref, AlertKind.DEADLINE_15BD, SIGNED_AT
        )


class TestInsurerAndPaymentAlerts:
    """Test 15 business-day and 72-hour alerts."""

    def test_insurer_warning_window(self, settings: Settings) -> None:
        """Test WARNING from five business days left."""
        quiet = by_kind(
            refresh_alerts(sent_claim(), datetime(2025, 1, 31, tzinfo=UTC), (), settings)
        )
        warned = by_kind(
            refresh_alerts(sent_claim(), datetime(2025, 2, 3, tzinfo=UTC), (), settings)
        )

        assert AlertKind.DEADLINE_15BD not in quiet
        assert warned[AlertKind.DEADLINE_15BD].severity == AlertSeverity.WARNING
        assert "5 business day(s)" in warned[AlertKind.DEADLINE_15BD].message

    def test_insurer_overdue_stays_warning(self, settings: Settings) -> None:
        """Test an overdue insurer response is WARNING with an overdue message."""
        alert = by_kind(
            refresh_alerts(sent_claim(), datetime(2025, 2, 12, tzinfo=UTC), (), settings)
        )[AlertKind.DEADLINE_15BD]

        assert alert.severity == AlertSeverity.WARNING
        assert "overdue" in alert.message

    def test_payment_critical_inside_last_day(self, settings: Settings) -> None:
        """Test CRITICAL once less than 24 hours remain."""
        claim = make_claim(ClaimState.PAYMENT)
        late = SIGNED_AT + timedelta(hours=48, minutes=1)

        alert = by_kind(refresh_alerts(claim, late, (), settings))[AlertKind.DEADLINE_72H]
        assert alert.severity == AlertSeverity.CRITICAL
        assert alert.due_at == SIGNED_AT + timedelta(hours=72)

    def test_payment_silent_before_last_day(self, settings: Settings) -> None:
        """Test no alert while more than 24 hours remain."""
        claim = make_claim(ClaimState.PAYMENT)
        early = SIGNED_AT + timedelta(hours=47, minutes=59)

        assert refresh_alerts(claim, early, (), settings) == []

    def test_payment_overdue(self, settings: Settings) -> None:
        """Test an overdue payment stays CRITICAL."""
        claim = make_claim(ClaimState.PAYMENT)
        alert = by_kind(
            refresh_alerts(claim, SIGNED_AT + timedelta(hours=80), (), settings)
        )[AlertKind.DEADLINE_72H]

        assert alert.severity == AlertSeverity.CRITICAL
        assert "overdue" in alert.message

    def test_payment_alert_waits_for_payment_stage(self, settings: Settings) -> None:
        """Test signed claims awaiting the insurer raise no payment alert."""
        claim = sent_claim()
        alerts = by_kind(
            refresh_alerts(claim, datetime(2025, 1, 22, tzinfo=UTC), (), settings)
        )

        assert AlertKind.DEADLINE_72H not in alerts

    def test_payment_alert_resolved_when_stage_left(self, settings: Settings) -> None:
        """Test a live payment alert resolves once the claim closes."""
        late = SIGNED_AT + timedelta(hours=60)
        (live,) = refresh_alerts(make_claim(ClaimState.PAYMENT), late, (), settings)
        (resolved,) = refresh_alerts(make_claim(ClaimState.CLOSED), late, [live], settings)

        assert resolved.alert_id == live.alert_id
        assert resolved.resolved_by == AlertResolver.SYSTEM


class TestPolicyAlerts:
    """Test policy expiry and premium payment alerts."""

    def _policy(self, term_end: date, *installments: PolicyInstallment) -> PolicySnapshot:
        return PolicySnapshot(
            policy_id=uuid5(TEST_NAMESPACE, "policy"),
            code="POL-2025-01",
            term_start=date(2024, 3, 1),
            term_end=term_end,
            installments=installments,
        )

    def _installment(self, due: date) -> PolicyInstallment:
        return PolicyInstallment(
            installment_id=uuid5(TEST_NAMESPACE, due.isoformat()),
            due_date=due,
            amount=Decimal("250000.00"),
        )

    @pytest.mark.parametrize(
        ("days_left", "severity"),
        [
            (31, None),
            (30, AlertSeverity.INFO),
            (15, AlertSeverity.WARNING),
            (7, AlertSeverity.CRITICAL),
            (1, AlertSeverity.CRITICAL),
            (0, None),
        ],
    )
    def test_expiry_thresholds(
        self, settings: Settings, days_left: int, severity: AlertSeverity | None
    ) -> None:
        """Test 30/15/7 day expiry tiers and silence once the term ended."""
        policy = self._policy(NOW.date() + timedelta(days=days_left))
        alerts = by_kind(refresh_policy_alerts(policy, NOW, (), settings))

        if severity is None:
            assert AlertKind.POLICY_EXPIRY not in alerts
        else:
            assert alerts[AlertKind.POLICY_EXPIRY].severity == severity
            assert alerts[AlertKind.POLICY_EXPIRY].ref_type == AlertRefType.POLICY

    @pytest.mark.parametrize(
        ("days_left", "severity"),
        [
            (16, None),
            (15, AlertSeverity.WARNING),
            (5, AlertSeverity.CRITICAL),
            (-2, AlertSeverity.CRITICAL),
        ],
    )
    def test_payment_thresholds(
        self, settings: Settings, days_left: int, severity: AlertSeverity | None
    ) -> None:
        """Test premium installment tiers."""
        policy = self._policy(
            date(2025, 12, 31), self._installment(NOW.date() + timedelta(days=days_left))
        )
        alerts = by_kind(refresh_policy_alerts(policy, NOW, (), settings))

        if severity is None:
            assert AlertKind.POLICY_PAYMENT not in alerts
        else:
            assert alerts[AlertKind.POLICY_PAYMENT].severity == severity

    def test_paid_installment_resolves_alert(self, settings: Settings) -> None:
        """Test paying the installment resolves its live alert."""
        installment = self._installment(NOW.date() + timedelta(days=3))
        live = refresh_policy_alerts(
            self._policy(date(2025, 12, 31), installment), NOW, (), settings
        )
        paid = installment.evolve(status="PAID")

        (alert,) = refresh_policy_alerts(
            self._policy(date(2025, 12, 31), paid), NOW, live, settings
        )
        assert alert.resolved
        assert alert.resolved_by == AlertResolver.SYSTEM
