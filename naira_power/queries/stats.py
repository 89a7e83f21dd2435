"""
Usage Statistics

DESIGN DECISION: Statistics are computed DETERMINISTICALLY from stored logs.
The AI insight only ever sees the same logs; the figures a family is shown
never come from the model.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from naira_power.models.household import UsageStats, UtilityLog


CENT = Decimal("0.01")


def compute_usage_stats(logs: Iterable[UtilityLog]) -> UsageStats:
    """
    Totals and average recharge for a set of logs.

    The average is rounded to kobo (2 places) and is 0 for no logs.
    """
    logs = list(logs)
    if not logs:
        return UsageStats(
            log_count=0,
            total_spent=Decimal("0"),
            total_units=0.0,
            average_recharge=Decimal("0"),
        )

    total_spent = sum((log.amount for log in logs), Decimal("0"))
    total_units = sum(log.units for log in logs)
    average = (total_spent / len(logs)).quantize(CENT, rounding=ROUND_HALF_UP)

    return UsageStats(
        log_count=len(logs),
        total_spent=total_spent,
        total_units=total_units,
        average_recharge=average,
    )
