"""Late fine policy."""

import math

DAILY_FINE_PER_MILLE = 1    # 0.1 % of principal per overdue day
FINE_CAP_PERCENT = 30       # never more than 30 % of principal


def fine_cap(amount):
    cap = amount * FINE_CAP_PERCENT / 100
    return int(cap) if float(cap).is_integer() else cap


def calculate_fine(amount, overdue_days: int):
    """Accrued fine for a loan `overdue_days` late, capped at 30 % of `amount`."""
    if overdue_days <= 0:
        return 0
    accrued = math.floor(amount * DAILY_FINE_PER_MILLE * overdue_days / 1000)
    return min(fine_cap(amount), accrued)
