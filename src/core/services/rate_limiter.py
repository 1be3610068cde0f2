"""Minimum spacing between reminders on the same thread."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int | None = None
    elapsed_minutes: int | None = None


def check_rate_limit(
    last_reminded_at: datetime | None,
    limit_minutes: int,
    override: bool,
    now: datetime,
) -> RateLimitDecision:
    """
    Allow when overridden, never reminded, or at least ``limit_minutes``
    whole minutes have elapsed since the last reminder.
    """
    if override or last_reminded_at is None:
        return RateLimitDecision(allowed=True)

    elapsed = int((now - last_reminded_at).total_seconds() // 60)
    if elapsed >= limit_minutes:
        return RateLimitDecision(allowed=True, elapsed_minutes=elapsed)

    return RateLimitDecision(
        allowed=False,
        retry_after_seconds=max(1, (limit_minutes - elapsed) * 60),
        elapsed_minutes=elapsed,
    )
