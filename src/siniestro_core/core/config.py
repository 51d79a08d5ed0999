# SiniestroCore - Student Life Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Deadline and alert-threshold configuration using Pydantic Settings."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Regulatory deadlines and alert thresholds, immutable once loaded."""

    model_config = SettingsConfigDict(
        env_prefix="SINIESTRO_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # Regulatory deadlines
    report_deadline_days: int = Field(
        default=60,
        ge=1,
        le=365,
        description="Calendar days from death to report the expedient to the insurer",
    )
    insurer_response_business_days: int = Field(
        default=15,
        ge=1,
        le=90,
        description="Business days the insurer has to answer a sent expedient",
    )
    payment_deadline_hours: int = Field(
        default=72,
        ge=1,
        le=720,
        description="Wall-clock hours to execute payment once all signatures arrive",
    )

    # 60-day report thresholds
    report_warning_days: int = Field(
        default=15,
        ge=1,
        le=365,
        description="Remaining days at or below which a WARNING alert is raised",
    )
    report_critical_days: int = Field(
        default=5,
        ge=0,
        le=365,
        description="Remaining days at or below which the alert becomes CRITICAL",
    )

    # 15-business-day thresholds
    insurer_warning_business_days: int = Field(
        default=5,
        ge=0,
        le=90,
        description="Remaining business days at or below which a WARNING is raised",
    )

    # 72-hour thresholds
    payment_critical_hours: int = Field(
        default=24,
        ge=1,
        le=720,
        description="Remaining hours below which the payment alert is CRITICAL",
    )

    # Policy alerts
    policy_expiry_info_days: int = Field(default=30, ge=1, le=365)
    policy_expiry_warning_days: int = Field(default=15, ge=1, le=365)
    policy_expiry_critical_days: int = Field(default=7, ge=0, le=365)
    policy_payment_warning_days: int = Field(default=15, ge=1, le=365)
    policy_payment_critical_days: int = Field(default=5, ge=0, le=365)

    business_timezone: str = Field(
        default="UTC",
        min_length=1,
        description="IANA zone used to turn instants into calendar days",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level for the engine",
    )

    @field_validator(
        "report_critical_days",
        "policy_expiry_critical_days",
        "policy_payment_critical_days",
    )
    @classmethod
    def validate_critical_below_warning(
        cls: type["Settings"], v: int, info: ValidationInfo
    ) -> int:
        """Ensure each CRITICAL threshold sits inside its WARNING window."""
        warning_field = {
            "report_critical_days": "report_warning_days",
            "policy_expiry_critical_days": "policy_expiry_warning_days",
            "policy_payment_critical_days": "policy_payment_warning_days",
        }[info.field_name]
        warning = info.data.get(warning_field)
        if warning is not None and v > warning:
            raise ValueError(
                f"{info.field_name} ({v}) must be <= {warning_field} ({warning})"
            )
        return v

    @field_validator("policy_expiry_warning_days")
    @classmethod
    def validate_expiry_windows(
        cls: type["Settings"], v: int, info: ValidationInfo
    ) -> int:
        """Ensure the expiry WARNING window sits inside the INFO window."""
        info_days = info.data.get("policy_expiry_info_days")
        if info_days is not None and v > info_days:
            raise ValueError(
                f"policy_expiry_warning_days ({v}) must be <= "
                f"policy_expiry_info_days ({info_days})"
            )
        return v

    @field_validator("business_timezone")
    @classmethod
    def validate_business_timezone(cls: type["Settings"], v: str) -> str:
        """Reject unknown IANA zone names at load time."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown business timezone: {v}") from exc
        return v

    @property
    @beartype
    def tz(self) -> ZoneInfo:
        """Business timezone as a tzinfo."""
        return ZoneInfo(self.business_timezone)


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
