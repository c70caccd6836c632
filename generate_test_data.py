"""
Generate demo users and loans in MongoDB for the loan reconciliation DAG.

This script creates:
- Users: 6 borrowers across every rank, plus one admin
- Loans: 9 loans covering pending, settled, not-yet-due and overdue cases

Expected results of the first reconciliation run (relative to today):
- Fines accrued: 4 loans (1 capped at 30% of principal)
- Users demoted: 3 (diamond -> gold, gold -> silver, silver -> standard)
- Users absorbing days into progress only: 1
- Unchanged: everything else

Installation:
    pip install pymongo

Usage:
    python generate_test_data.py
"""

from datetime import date, timedelta
from pymongo import MongoClient
import os

from core.dates import format_due_date
from core.ranks import limit_for


MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("MONGO_DB_NAME", "ndv_money")

# Each entry has: (id, phone, full_name, rank, rank_progress, debt)
USERS = [
    ("1001", "0900000001", "NGUYEN VAN AN", "diamond", 10, 3_000_000),
    ("1002", "0900000002", "TRAN THI BINH", "gold", 7, 1_000_000),
    ("1003", "0900000003", "LE VAN CUONG", "gold", 2, 200_000),
    ("1004", "0900000004", "PHAM THI DUNG", "silver", 0, 4_000_000),
    ("1005", "0900000005", "HOANG VAN EM", "standard", 3, 1_000_000),
    ("1006", "0900000006", "VU THI GIANG", "bronze", 5, 0),
]

# Each entry has: (user_id, seq, amount, days_until_due, status)
LOANS = [
    ("1001", 1, 3_000_000, -1, "ĐANG NỢ"),          # diamond, 1 day late
    ("1002", 1, 1_000_000, -5, "CHỜ TẤT TOÁN"),     # absorbed into progress
    ("1003", 1, 200_000, -5, "ĐANG NỢ"),            # gold -> silver
    ("1004", 1, 1_000_000, -1000, "ĐANG NỢ"),       # fine capped
    ("1004", 2, 3_000_000, 12, "ĐANG GIẢI NGÂN"),   # not yet due
    ("1005", 1, 1_000_000, 3, "ĐANG NỢ"),           # not yet due
    ("1006", 1, 2_000_000, -40, "ĐÃ TẤT TOÁN"),     # settled, ignored
    ("1006", 2, 500_000, 20, "CHỜ DUYỆT"),          # pending, ignored
    ("1006", 3, 500_000, -3, "BỊ TỪ CHỐI"),         # rejected, ignored
]


def generate_users():
    users = []
    for user_id, phone, name, rank, progress, debt in USERS:
        limit = limit_for(rank)
        users.append({
            "id": user_id,
            "phone": phone,
            "fullName": name,
            "rank": rank,
            "rankProgress": progress,
            "totalLimit": limit,
            "balance": limit - debt,
            "isAdmin": False,
            "lastLoanSeq": max((seq for uid, seq, *_ in LOANS if uid == user_id), default=0),
        })

    users.append({
        "id": "AD01",
        "phone": "0000000000",
        "fullName": "QUẢN TRỊ VIÊN",
        "rank": "diamond",
        "rankProgress": 10,
        "totalLimit": 500_000_000,
        "balance": 500_000_000,
        "isAdmin": True,
        "lastLoanSeq": 0,
    })

    print(f"Generated {len(users)} users")
    return users


def generate_loans(today=None):
    today = today or date.today()
    names = {user_id: name for user_id, _, name, *_ in USERS}

    loans = []
    for user_id, seq, amount, days_until_due, status in LOANS:
        loans.append({
            "id": f"NDV-{user_id}-{seq:02d}",
            "userId": user_id,
            "userName": names[user_id],
            "amount": amount,
            "date": format_due_date(today + timedelta(days=days_until_due)),
            "status": status,
            "fine": 0,
        })

    print(f"Generated {len(loans)} loans")
    return loans


def seed_mongodb(users, loans):
    client = MongoClient(MONGO_URI)
    db = client[DB_NAME]

    db["users"].delete_many({})
    db["loans"].delete_many({})
    db["system_config"].delete_many({})

    db["users"].insert_many(users)
    db["loans"].insert_many(loans)
    db["system_config"].insert_one({"id": "config", "budget": 30_000_000, "rankProfit": 0})

    client.close()
    print(f"Seeded {DB_NAME} at {MONGO_URI}")


def main():
    print("=" * 70)
    print("Generating demo lending data")
    print("=" * 70)

    users = generate_users()
    loans = generate_loans()
    seed_mongodb(users, loans)

    print("=" * 70)
    print("Done. Trigger the loan_recon DAG to reconcile.")
    print("=" * 70)


if __name__ == "__main__":
    main()
