"""Order-activity conditions for recurring rules."""

from datetime import date

from src.core.entities.rule import ConditionType


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from ``earlier`` to ``later``, never negative."""
    return max(0, (later - earlier).days)


def employee_qualifies(
    condition_type: ConditionType,
    condition_value: int | None,
    last_order_date_key: date | None,
    today_date_key: date,
) -> bool:
    """
    Decide whether an employee should be reminded.

    An employee without any order history always qualifies.
    """
    if last_order_date_key is None:
        return True

    if condition_type == ConditionType.NO_ORDER_TODAY:
        return last_order_date_key != today_date_key

    threshold = max(0, condition_value or 0)
    return days_between(last_order_date_key, today_date_key) >= threshold
