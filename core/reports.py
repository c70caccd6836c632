"""Admin dashboard figures."""

from typing import Dict, List

from core.dates import parse_due_date, to_day
from core.models import LoanStatus

SERVICE_FEE_PERCENT = 15
BUDGET_ALARM_THRESHOLD = 2_000_000


def summarize_portfolio(loans: List[Dict], budget, today) -> Dict:
    today = to_day(today)

    settled = [l for l in loans if l["status"] == LoanStatus.SETTLED.value]
    pending = [
        l for l in loans
        if l["status"] in (LoanStatus.PENDING_APPROVAL.value, LoanStatus.PENDING_SETTLEMENT.value)
    ]
    overdue = [
        l for l in loans
        if l["status"] in (LoanStatus.OUTSTANDING.value, LoanStatus.PENDING_SETTLEMENT.value)
        and parse_due_date(l["date"], l["id"]) <= today
    ]

    fee_profit = sum(l["amount"] for l in settled) * SERVICE_FEE_PERCENT / 100
    total_fines = sum(l.get("fine") or 0 for l in settled)

    not_disbursed = (LoanStatus.REJECTED.value, LoanStatus.PENDING_APPROVAL.value)
    total_disbursed = sum(l["amount"] for l in loans if l["status"] not in not_disbursed)
    total_collected = sum(l["amount"] for l in settled)

    return {
        "settled_count": len(settled),
        "pending_count": len(pending),
        "overdue_count": len(overdue),
        "fee_profit": fee_profit,
        "total_fines": total_fines,
        "total_profit": fee_profit + total_fines,
        "total_disbursed": total_disbursed,
        "total_collected": total_collected,
        "active_debt": total_disbursed - total_collected,
        "budget": budget,
        "budget_alarm": budget <= BUDGET_ALARM_THRESHOLD,
    }
