# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Storage-agnostic facade over the claim lifecycle rules.

The persistence layer hands the engine a snapshot and persists whatever
comes back: the new claim, its audit event and the alert upserts. The
scheduler uses ``sweep`` over all open claims; reads use
``refresh_alerts`` on a single claim. Both paths run the same functions.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..core.result_types import Result
from ..models.alert import Alert
from ..models.audit import ActorContext, AuditEvent
from ..models.claim import Claim
from ..models.enums import AuditAction, ClaimState
from ..models.policy import PolicySnapshot
from . import alerts as alert_rules
from .audit import record_event as build_event
from .deadlines import DeadlineSet
from .deadlines import compute_deadlines as deadline_report
from .errors import LifecycleError, UnmetCondition
from .gates import evaluate_gates as gate_report
from .mutation import ClaimMutation
from .state_machine import attempt_transition as transition


@beartype
class ClaimLifecycleEngine:
    """Decision engine for claim transitions, deadlines and alerts."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize engine with deadline configuration.

        Args:
            settings: Deadline durations and alert thresholds; the cached
                environment settings are used when omitted
        """
        self._settings = settings or get_settings()
        get_logger(level=self._settings.log_level)
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else datetime.now(timezone.utc)

    @staticmethod
    def _actor(actor: ActorContext | str) -> ActorContext:
        if isinstance(actor, str):
            return ActorContext(actor=actor)
        return actor

    def attempt_transition(
        self,
        claim: Claim,
        target_state: ClaimState,
        actor: ActorContext | str,
        reason: str | None = None,
        now: datetime | None = None,
        previous_alerts: Iterable[Alert] = (),
    ) -> Result[ClaimMutation, LifecycleError]:
        """Validate and apply a state transition."""
        return transition(
            claim,
            target_state,
            self._actor(actor),
            now=self._now(now),
            reason=reason,
            previous_alerts=previous_alerts,
            settings=self._settings,
        )

    def evaluate_gates(
        self, claim: Claim
    ) -> dict[ClaimState, tuple[UnmetCondition, ...]]:
        """Unmet conditions for every gated stage."""
        return gate_report(claim)

    def compute_deadlines(self, claim: Claim, now: datetime | None = None) -> DeadlineSet:
        """Remaining time on the three regulatory deadlines."""
        return deadline_report(claim, self._now(now), self._settings)

    def refresh_alerts(
        self,
        claim: Claim,
        now: datetime | None = None,
        previous_alerts: Iterable[Alert] = (),
    ) -> list[Alert]:
        """Alert upserts for one claim."""
        return alert_rules.refresh_alerts(
            claim, self._now(now), previous_alerts, self._settings
        )

    def refresh_policy_alerts(
        self,
        policy: PolicySnapshot,
        now: datetime | None = None,
        previous_alerts: Iterable[Alert] = (),
    ) -> list[Alert]:
        """Alert upserts for one policy."""
        return alert_rules.refresh_policy_alerts(
            policy, self._now(now), previous_alerts, self._settings
        )

    def record_event(
        self,
        claim_id: UUID,
        action: AuditAction,
        actor: str,
        detail: str = "",
        timestamp: datetime | None = None,
        sequence: int = 0,
    ) -> AuditEvent:
        """Build an audit event."""
        return build_event(
            claim_id,
            action,
            actor,
            detail,
            timestamp=self._now(timestamp),
            sequence=sequence,
        )

    def sweep(
        self,
        claims: Iterable[Claim],
        now: datetime | None = None,
        previous_alerts: Iterable[Alert] = (),
    ) -> list[Alert]:
        """Recompute alerts for a batch of claims.

        Terminal claims produce no new alerts; their live alerts come back
        resolved.

        Args:
            claims: Claim snapshots to check
            now: Sweep instant, shared by every claim in the batch
            previous_alerts: Alerts currently stored for those claims

        Returns:
            Alert upserts for the whole batch
        """
        now = self._now(now)
        by_claim: dict[UUID, list[Alert]] = {}
        for alert in previous_alerts:
            by_claim.setdefault(alert.ref_id, []).append(alert)

        upserts: list[Alert] = []
        swept = 0
        for claim in claims:
            stored = by_claim.get(claim.claim_id, [])
            if claim.is_terminal and not any(not a.resolved for a in stored):
                continue
            swept += 1
            upserts.extend(
                alert_rules.refresh_alerts(claim, now, stored, self._settings)
            )

        self._logger.info(
            "Alert sweep at %s: %d claim(s) checked, %d upsert(s)",
            now.isoformat(),
            swept,
            len(upserts),
        )
        return upserts
