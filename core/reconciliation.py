import logging
from typing import Dict, List, Optional

from core.dates import overdue_days, parse_due_date, to_day
from core.demotion import demote
from core.fines import calculate_fine
from core.models import is_active, is_admin
from core.ranks import limit_for

logger = logging.getLogger(__name__)


def reconcile(today, loans: List[Dict], users: List[Dict]) -> Dict:
    """
        Accrue late fines and demote overdue borrowers for one snapshot.

        Pure: input documents are left untouched and changed entities come
        back as copies. "loans"/"users" are the full lists with changes
        merged in, "updated_loans"/"updated_users" hold only what changed,
        and "changes" maps each changed id to the fields that moved.
    """
    today = to_day(today)

    new_loans, updated_loans = [], []
    loan_changes: Dict[str, Dict] = {}
    max_overdue: Dict[str, int] = {}

    for loan in loans:
        candidate = loan
        if is_active(loan):
            due_date = parse_due_date(loan.get("date"), loan.get("id"))
            days = overdue_days(today, due_date)
            owner = loan.get("userId")
            max_overdue[owner] = max(max_overdue.get(owner, 0), days)

            updates = _fine_updates(loan, days)
            if updates:
                candidate = {**loan, **updates}
                loan_changes[loan["id"]] = updates
                updated_loans.append(candidate)

        new_loans.append(candidate)

    new_users, updated_users = [], []
    user_changes: Dict[str, Dict] = {}
    for user in users:
        candidate = user
        if not is_admin(user):
            updates = _demotion_updates(user, max_overdue.get(user["id"], 0))
            if updates:
                candidate = {**user, **updates}
                user_changes[user["id"]] = updates
                updated_users.append(candidate)

        new_users.append(candidate)

    logger.info(
        f"Reconciled {len(loans)} loans / {len(users)} users for {today.isoformat()}: "
        f"{len(updated_loans)} loans and {len(updated_users)} users changed"
    )

    return {
        "loans": new_loans,
        "users": new_users,
        "updated_loans": updated_loans,
        "updated_users": updated_users,
        "changes": {"loans": loan_changes, "users": user_changes},
    }


def _fine_updates(loan: Dict, days: int) -> Dict:
    if days <= 0:
        return {}

    fine = calculate_fine(loan["amount"], days)
    if loan.get("fine") == fine:
        return {}

    logger.debug(f"Loan {loan['id']}: {days} days overdue, fine {loan.get('fine')} -> {fine}")
    return {"fine": fine}


def _demotion_updates(user: Dict, max_days: int) -> Dict:
    charged = user.get("overdueDaysCharged", 0)
    new_days = max(0, max_days - charged)

    updates = {}
    if charged != max_days:
        updates["overdueDaysCharged"] = max_days

    if new_days > 0:
        rank, progress = demote(user["rank"], user["rankProgress"], new_days)
        if rank.value != user["rank"] or progress != user["rankProgress"]:
            new_limit = limit_for(rank)
            updates.update({
                "rank": rank.value,
                "rankProgress": progress,
                "totalLimit": new_limit,
                "balance": min(new_limit, user["balance"]),
            })

    if updates:
        logger.debug(f"User {user['id']}: {updates}")
    return updates


def resync_session_user(session_user: Optional[Dict], users: List[Dict]) -> Optional[Dict]:
    """Authoritative copy of a signed-in borrower after a reconciliation pass."""
    if session_user is None or is_admin(session_user):
        return session_user

    for user in users:
        if user["id"] == session_user["id"]:
            return user
    return session_user
