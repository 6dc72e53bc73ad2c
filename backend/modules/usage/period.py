"""
Billing period arithmetic.
"""

from datetime import datetime

from dateutil.relativedelta import relativedelta

from .models import BillingPeriod

MIN_CYCLE_DAY = 1
MAX_CYCLE_DAY = 28


def clamp_cycle_day(day: int) -> int:
    return min(max(day, MIN_CYCLE_DAY), MAX_CYCLE_DAY)


def billing_period(now: datetime, cycle_start_day: int = 1) -> BillingPeriod:
    """
    Return the billing period containing ``now``.

    Periods run from the cycle day of one month up to (not including) the
    cycle day of the next. The day is clamped to 1-28 so it exists in
    every month.
    """
    day = clamp_cycle_day(cycle_start_day)
    today = now.date()

    start = today.replace(day=day)
    if today.day < day:
        start = start - relativedelta(months=1)
    return BillingPeriod(start=start, end=start + relativedelta(months=1))
