"""Loan statuses and small helpers over user/loan documents."""

from enum import Enum
from typing import Dict, FrozenSet


class LoanStatus(str, Enum):
    PENDING_APPROVAL = "CHỜ DUYỆT"
    APPROVED = "ĐÃ DUYỆT"
    DISBURSING = "ĐANG GIẢI NGÂN"
    OUTSTANDING = "ĐANG NỢ"
    PENDING_SETTLEMENT = "CHỜ TẤT TOÁN"
    SETTLED = "ĐÃ TẤT TOÁN"
    REJECTED = "BỊ TỪ CHỐI"


# Loans still running against a due date: they accrue fines and drive demotion.
ACTIVE_STATUSES: FrozenSet[LoanStatus] = frozenset({
    LoanStatus.OUTSTANDING,
    LoanStatus.PENDING_SETTLEMENT,
    LoanStatus.DISBURSING,
})


def is_active(loan: Dict) -> bool:
    return loan.get("status") in ACTIVE_STATUSES


def is_admin(user: Dict) -> bool:
    return bool(user.get("isAdmin"))
