"""
Borrower and admin actions on loans and ranks.

These run outside the daily reconciliation: they are triggered by people,
one action at a time. Every function takes documents and returns new ones;
persisting the result is the caller's job.
"""

import logging
import random
import time
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from core.dates import format_due_date, next_due_date
from core.exceptions import (
    DuplicatePhoneError,
    InvalidTransitionError,
    LoanNotFoundError,
    LoanRequestError,
    RankUpgradeError,
)
from core.models import LoanStatus, is_admin
from core.ranks import MAX_RANK_PROGRESS, Rank, limit_for, rank_index

logger = logging.getLogger(__name__)

RANK_UPGRADE_FEE_PERCENT = 5

APPROVE, DISBURSE, SETTLE, REJECT = "APPROVE", "DISBURSE", "SETTLE", "REJECT"

# action -> statuses it may be applied to
ALLOWED_FROM = {
    APPROVE: {LoanStatus.PENDING_APPROVAL},
    DISBURSE: {LoanStatus.APPROVED},
    SETTLE: {LoanStatus.OUTSTANDING, LoanStatus.PENDING_SETTLEMENT},
    REJECT: {LoanStatus.PENDING_APPROVAL, LoanStatus.APPROVED, LoanStatus.PENDING_SETTLEMENT},
}

RANK_NAMES = {
    Rank.BRONZE: "Đồng",
    Rank.SILVER: "Bạc",
    Rank.GOLD: "Vàng",
    Rank.DIAMOND: "Kim cương",
}


def _timestamp(now: datetime) -> str:
    return now.strftime("%H:%M:%S %d/%m/%Y")


def _millis() -> int:
    return int(time.time() * 1000)


def make_notification(user_id: str, title: str, message: str, kind: str, now: datetime) -> Dict:
    return {
        "id": f"NOTIF-{int(now.timestamp() * 1000)}-{random.randint(0, 999)}",
        "userId": user_id,
        "title": title,
        "message": message,
        "time": now.strftime("%H:%M %d/%m/%Y"),
        "read": False,
        "type": kind,
    }


def register_user(users: List[Dict], phone: str, full_name: str, now: datetime, **profile) -> Dict:
    """New borrower at the bottom of the ladder."""
    if any(u.get("phone") == phone for u in users):
        raise DuplicatePhoneError(f"Phone {phone} is already registered")

    taken = {u["id"] for u in users}
    user_id = str(random.randint(1000, 9999))
    while user_id in taken:
        user_id = str(random.randint(1000, 9999))

    limit = limit_for(Rank.STANDARD)
    return {
        **profile,
        "id": user_id,
        "phone": phone,
        "fullName": full_name,
        "balance": limit,
        "totalLimit": limit,
        "rank": Rank.STANDARD.value,
        "rankProgress": 0,
        "isAdmin": False,
        "joinDate": _timestamp(now),
        "lastLoanSeq": 0,
        "updatedAt": _millis(),
    }


def apply_for_loan(user: Dict, amount, now: datetime, signature: Optional[str] = None) -> Tuple[Dict, Dict]:
    """Create a pending loan and reserve its amount against the user's balance."""
    if amount <= 0:
        raise LoanRequestError(f"Loan amount must be positive, got {amount}")
    if amount > user["balance"]:
        raise LoanRequestError(
            f"Requested {amount} exceeds available balance {user['balance']} for user {user['id']}"
        )

    seq = (user.get("lastLoanSeq") or 0) + 1
    loan = {
        "id": f"NDV-{user['id']}-{seq:02d}",
        "userId": user["id"],
        "userName": user.get("fullName", ""),
        "amount": amount,
        "date": format_due_date(next_due_date(now)),
        "createdAt": _timestamp(now),
        "status": LoanStatus.PENDING_APPROVAL.value,
        "fine": 0,
        "signature": signature,
        "updatedAt": _millis(),
    }
    updated_user = {
        **user,
        "balance": user["balance"] - amount,
        "lastLoanSeq": seq,
        "updatedAt": _millis(),
    }
    logger.info(f"Loan {loan['id']} requested by {user['id']} for {amount}, due {loan['date']}")
    return loan, updated_user


def request_settlement(loan: Dict, bill: str) -> Dict:
    if loan["status"] != LoanStatus.OUTSTANDING.value:
        raise InvalidTransitionError(f"Loan {loan['id']} in status {loan['status']} cannot be settled")
    return {
        **loan,
        "status": LoanStatus.PENDING_SETTLEMENT.value,
        "billImage": bill,
        "updatedAt": _millis(),
    }


def apply_loan_action(state: Dict, loan_id: str, action: str, now: datetime, reason: Optional[str] = None) -> Dict:
    """
        Apply an admin action to one loan.

        `state` holds "loans", "users" and "budget". Returns a new state with
        the same keys plus "notifications" generated by the action.
    """
    if action not in ALLOWED_FROM:
        raise InvalidTransitionError(f"Unknown loan action {action!r}")

    loan = next((l for l in state["loans"] if l["id"] == loan_id), None)
    if loan is None:
        raise LoanNotFoundError(f"Loan {loan_id} not found")

    status = LoanStatus(loan["status"])
    if status not in ALLOWED_FROM[action]:
        raise InvalidTransitionError(f"Cannot {action} loan {loan_id} in status {status.value}")

    budget = state["budget"]
    users = list(state["users"])
    notifications = []
    rejection_reason = reason or loan.get("rejectionReason")
    owner_idx = next((i for i, u in enumerate(users) if u["id"] == loan["userId"]), None)

    if action == APPROVE:
        new_status = LoanStatus.APPROVED

    elif action == DISBURSE:
        new_status = LoanStatus.OUTSTANDING
        budget -= loan["amount"]
        notifications.append(make_notification(
            loan["userId"], "Giải ngân thành công",
            f"Khoản vay ID {loan_id} đã được giải ngân vào tài khoản của bạn.", "LOAN", now,
        ))

    elif action == SETTLE:
        new_status = LoanStatus.SETTLED
        budget += loan["amount"]
        if owner_idx is not None:
            owner = users[owner_idx]
            users[owner_idx] = {
                **owner,
                "balance": min(owner["totalLimit"], owner["balance"] + loan["amount"]),
                "rankProgress": min(MAX_RANK_PROGRESS, owner["rankProgress"] + 1),
                "updatedAt": _millis(),
            }
        notifications.append(make_notification(
            loan["userId"], "Tất toán thành công",
            f"Khoản vay ID {loan_id} đã được tất toán hoàn tất.", "LOAN", now,
        ))

    else:
        if status is LoanStatus.PENDING_SETTLEMENT:
            # Settlement bill refused: the debt stays open for a new bill.
            new_status = LoanStatus.OUTSTANDING
        else:
            new_status = LoanStatus.REJECTED
            if owner_idx is not None:
                owner = users[owner_idx]
                users[owner_idx] = {
                    **owner,
                    "balance": min(owner["totalLimit"], owner["balance"] + loan["amount"]),
                    "updatedAt": _millis(),
                }
        notifications.append(make_notification(
            loan["userId"], "Yêu cầu bị từ chối",
            f"Yêu cầu cho khoản vay ID {loan_id} đã bị từ chối. "
            f"Lý do: {rejection_reason or 'Không xác định'}", "LOAN", now,
        ))

    updated_loan = {
        **loan,
        "status": new_status.value,
        "rejectionReason": rejection_reason,
        "updatedAt": _millis(),
    }
    loans = [updated_loan if l["id"] == loan_id else l for l in state["loans"]]

    logger.info(f"{action} loan {loan_id}: {status.value} -> {new_status.value}")
    return {"loans": loans, "users": users, "budget": budget, "notifications": notifications}


def request_rank_upgrade(user: Dict, target_rank, bill: str) -> Dict:
    target = Rank(target_rank)
    if rank_index(target) <= rank_index(user["rank"]):
        raise RankUpgradeError(f"User {user['id']} is already at or above {target.value}")
    return {**user, "pendingUpgradeRank": target.value, "rankUpgradeBill": bill, "updatedAt": _millis()}


def review_rank_upgrade(user: Dict, approve: bool, now: datetime) -> Tuple[Dict, int, Optional[Dict]]:
    """
        Approve or reject a pending rank upgrade.

        Returns (user, fee, notification). On approval the outstanding debt is
        carried over to the new limit and the fee is 5% of that limit. Approving
        a user with nothing pending only clears the request: no fee, no
        notification.
    """
    pending = user.get("pendingUpgradeRank")
    cleared = {**user, "pendingUpgradeRank": None, "rankUpgradeBill": None, "updatedAt": _millis()}

    if not approve:
        notification = make_notification(
            user["id"], "Từ chối nâng hạng",
            "Yêu cầu nâng hạng của bạn đã bị từ chối. Vui lòng kiểm tra lại hồ sơ.", "RANK", now,
        )
        return cleared, 0, notification

    if not pending:
        logger.warning(f"User {user['id']} has no pending rank upgrade to approve")
        return cleared, 0, None

    new_rank = Rank(pending)
    new_limit = limit_for(new_rank)
    fee = new_limit * RANK_UPGRADE_FEE_PERCENT // 100
    debt = user["totalLimit"] - user["balance"]

    upgraded = {
        **cleared,
        "rank": new_rank.value,
        "totalLimit": new_limit,
        "balance": new_limit - debt,
    }
    notification = make_notification(
        user["id"], "Nâng hạng thành công",
        f"Hạng của bạn đã được nâng lên {RANK_NAMES.get(new_rank, new_rank.value)}.", "RANK", now,
    )
    logger.info(f"User {user['id']} upgraded {user['rank']} -> {new_rank.value}, fee {fee}")
    return upgraded, fee, notification


def cleanup_candidates(users: List[Dict], loans: List[Dict]) -> List[Dict]:
    """Borrowers with at least one settled loan."""
    settled_owners = {l["userId"] for l in loans if l.get("status") == LoanStatus.SETTLED.value}
    return [u for u in users if not is_admin(u) and u["id"] in settled_owners]


def pending_admin_actions(loans: List[Dict], users: List[Dict]) -> int:
    waiting = {LoanStatus.PENDING_APPROVAL.value, LoanStatus.PENDING_SETTLEMENT.value}
    return (
        sum(1 for l in loans if l.get("status") in waiting)
        + sum(1 for u in users if u.get("pendingUpgradeRank"))
    )
