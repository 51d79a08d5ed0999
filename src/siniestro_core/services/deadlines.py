"""Regulatory deadline calculator.

Three independent clocks run on a claim:

1. Report deadline: calendar days from the death date until the expedient
   is sent to the insurer. An expired, uncompleted report deadline locks
   forward progress until the claim is reopened.
2. Insurer response: business days from the moment the expedient is sent
   until the insurer observes or approves the liquidation. Alert only.
3. Payment: wall-clock hours from the last beneficiary signature until
   finance executes the payment. Alert only.

Calendar arithmetic happens in the configured business timezone so that
"today" means the same thing for every caller.
"""

from datetime import date, datetime, time, timedelta
from enum import Enum

from beartype import beartype
from pydantic import AwareDatetime, Field

from ..core.config import Settings, get_settings
from ..models.base import AwareInstant, BaseModelConfig
from ..models.claim import Claim
from ..models.enums import AlertKind, LiquidationStatus, PaymentStatus
from .business_days import add_business_days, business_days_between
from .errors import DeadlineExpired


class DeadlineStatus(str, Enum):
    """Where a deadline clock stands at a given instant."""

    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


@beartype
class DeadlineReport(BaseModelConfig):
    """Remaining time on one deadline."""

    kind: AlertKind = Field(...)
    status: DeadlineStatus = Field(...)
    anchor_at: AwareDatetime | None = Field(default=None)
    due_at: AwareDatetime | None = Field(default=None)
    remaining: timedelta | None = Field(default=None)
    remaining_days: int | None = Field(default=None)
    remaining_business_days: int | None = Field(default=None)

    @property
    def is_live(self) -> bool:
        """Running or expired, i.e. still worth alerting on."""
        return self.status in (DeadlineStatus.RUNNING, DeadlineStatus.EXPIRED)


@beartype
class DeadlineSet(BaseModelConfig):
    """The three deadline reports of a claim."""

    sixty_day: DeadlineReport = Field(...)
    fifteen_business_day: DeadlineReport = Field(...)
    seventy_two_hour: DeadlineReport = Field(...)

    @property
    def reports(self) -> tuple[DeadlineReport, ...]:
        return (self.sixty_day, self.fifteen_business_day, self.seventy_two_hour)


def _start_of_day(day: date, settings: Settings) -> datetime:
    return datetime.combine(day, time.min, tzinfo=settings.tz)


def _local_date(instant: datetime, settings: Settings) -> date:
    return instant.astimezone(settings.tz).date()


@beartype
def report_deadline_anchor(claim: Claim, settings: Settings | None = None) -> date:
    """Death date, or the report's calendar date when the death date is unknown."""
    settings = settings or get_settings()
    if claim.death_date is not None:
        return claim.death_date
    return _local_date(claim.report_date, settings)


@beartype
def compute_report_deadline(
    claim: Claim, now: AwareInstant, settings: Settings | None = None
) -> DeadlineReport:
    """60 calendar days from death to sending the expedient."""
    settings = settings or get_settings()
    anchor = report_deadline_anchor(claim, settings)
    due_on = anchor + timedelta(days=settings.report_deadline_days)
    due_at = _start_of_day(due_on, settings)
    remaining_days = (due_on - _local_date(now, settings)).days

    if claim.sent_to_insurer_at is not None or claim.sixty_day_deadline_met:
        status = DeadlineStatus.COMPLETED
    elif remaining_days <= 0:
        status = DeadlineStatus.EXPIRED
    else:
        status = DeadlineStatus.RUNNING

    return DeadlineReport(
        kind=AlertKind.DEADLINE_60D,
        status=status,
        anchor_at=_start_of_day(anchor, settings),
        due_at=due_at,
        remaining=due_at - now,
        remaining_days=remaining_days,
    )


@beartype
def compute_insurer_deadline(
    claim: Claim, now: AwareInstant, settings: Settings | None = None
) -> DeadlineReport:
    """15 business days from sending the expedient to the insurer's answer."""
    settings = settings or get_settings()
    if claim.sent_to_insurer_at is None:
        return DeadlineReport(
            kind=AlertKind.DEADLINE_15BD, status=DeadlineStatus.NOT_STARTED
        )

    anchor_day = _local_date(claim.sent_to_insurer_at, settings)
    due_on = add_business_days(anchor_day, settings.insurer_response_business_days)
    due_at = _start_of_day(due_on, settings)
    remaining_business_days = business_days_between(
        _local_date(now, settings), due_on
    )

    answered = claim.liquidation_date is not None or (
        claim.liquidation is not None
        and claim.liquidation.status
        in (LiquidationStatus.OBSERVED, LiquidationStatus.APPROVED)
    )
    if answered:
        status = DeadlineStatus.COMPLETED
    elif remaining_business_days <= 0:
        status = DeadlineStatus.EXPIRED
    else:
        status = DeadlineStatus.RUNNING

    return DeadlineReport(
        kind=AlertKind.DEADLINE_15BD,
        status=status,
        anchor_at=claim.sent_to_insurer_at,
        due_at=due_at,
        remaining=due_at - now,
        remaining_business_days=remaining_business_days,
    )


@beartype
def compute_payment_deadline(
    claim: Claim, now: AwareInstant, settings: Settings | None = None
) -> DeadlineReport:
    """72 wall-clock hours from the last signature to the executed payment."""
    settings = settings or get_settings()
    if claim.signatures_received_at is None:
        return DeadlineReport(
            kind=AlertKind.DEADLINE_72H, status=DeadlineStatus.NOT_STARTED
        )

    due_at = claim.signatures_received_at + timedelta(
        hours=settings.payment_deadline_hours
    )
    remaining = due_at - now

    paid = claim.payment_date is not None or (
        claim.payment is not None and claim.payment.status == PaymentStatus.EXECUTED
    )
    if paid:
        status = DeadlineStatus.COMPLETED
    elif remaining <= timedelta(0):
        status = DeadlineStatus.EXPIRED
    else:
        status = DeadlineStatus.RUNNING

    return DeadlineReport(
        kind=AlertKind.DEADLINE_72H,
        status=status,
        anchor_at=claim.signatures_received_at,
        due_at=due_at,
        remaining=remaining,
    )


@beartype
def compute_deadlines(
    claim: Claim, now: AwareInstant, settings: Settings | None = None
) -> DeadlineSet:
    """All three deadline reports for ``claim`` at ``now``."""
    settings = settings or get_settings()
    return DeadlineSet(
        sixty_day=compute_report_deadline(claim, now, settings),
        fifteen_business_day=compute_insurer_deadline(claim, now, settings),
        seventy_two_hour=compute_payment_deadline(claim, now, settings),
    )


@beartype
def expiry_lock(
    claim: Claim, now: AwareInstant, settings: Settings | None = None
) -> DeadlineExpired | None:
    """The blocking error for an expired report deadline, unless reopened."""
    if claim.reopened_at is not None:
        return None
    report = compute_report_deadline(claim, now, settings)
    if report.status != DeadlineStatus.EXPIRED:
        return None
    return DeadlineExpired(
        due_on=report.due_at.date(),
        days_overdue=-report.remaining_days,
    )
