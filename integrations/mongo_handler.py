from datetime import datetime
from pymongo import MongoClient, UpdateOne
from typing import Dict, List
from contextlib import contextmanager
import uuid
import logging

from config.settings import settings

logger = logging.getLogger(__name__)

CONFIG_DOCUMENT_ID = "config"


@contextmanager
def get_mongo_connection(mongo_uri: str):
    client = None
    try:
        client = MongoClient(mongo_uri)
        yield client
    finally:
        if client:
            client.close()


def load_snapshot(
    mongo_uri: str,
    db_name: str,
    users_collection: str = settings.USERS_COLLECTION,
    loans_collection: str = settings.LOANS_COLLECTION,
    config_collection: str = settings.SYSTEM_CONFIG_COLLECTION,
) -> Dict:
    with get_mongo_connection(mongo_uri) as client:
        db = client[db_name]

        users = list(db[users_collection].find({}, {"_id": 0}))
        loans = list(db[loans_collection].find({}, {"_id": 0}))
        system = db[config_collection].find_one({"id": CONFIG_DOCUMENT_ID}, {"_id": 0}) or {}

        logger.info(f"Loaded {len(users)} users and {len(loans)} loans from {db_name}")

        return {
            "users": users,
            "loans": loans,
            "budget": system.get("budget", settings.DEFAULT_BUDGET),
            "rankProfit": system.get("rankProfit", 0),
        }


def _set_changed_fields(collection, changes: Dict[str, Dict]) -> int:
    # No upsert: a document deleted since the snapshot stays deleted.
    if not changes:
        return 0
    ops = [UpdateOne({"id": doc_id}, {"$set": fields}) for doc_id, fields in changes.items()]
    collection.bulk_write(ops, ordered=False)
    return len(ops)


def store_reconciliation_updates(
    mongo_uri: str,
    db_name: str,
    result: Dict,
    users_collection: str = settings.USERS_COLLECTION,
    loans_collection: str = settings.LOANS_COLLECTION,
    runs_collection: str = settings.RECON_RUNS_COLLECTION,
) -> Dict:
    with get_mongo_connection(mongo_uri) as client:
        db = client[db_name]

        users_written = _set_changed_fields(db[users_collection], result["changes"]["users"])
        loans_written = _set_changed_fields(db[loans_collection], result["changes"]["loans"])

        run_id = str(uuid.uuid4())
        now = datetime.now()
        db[runs_collection].insert_one({
            "reconciliation_run_id": run_id,
            "reconciliation_date": now,
            "created_at": now,
            "users_checked": len(result["users"]),
            "loans_checked": len(result["loans"]),
            "users_updated": users_written,
            "loans_updated": loans_written,
        })

        _log_summary(run_id, result, users_written, loans_written, db_name)

        return {"run_id": run_id, "users_written": users_written, "loans_written": loans_written}


def save_system_config(
    mongo_uri: str,
    db_name: str,
    config_collection: str = settings.SYSTEM_CONFIG_COLLECTION,
    **fields
) -> None:
    with get_mongo_connection(mongo_uri) as client:
        client[db_name][config_collection].update_one(
            {"id": CONFIG_DOCUMENT_ID},
            {"$set": fields},
            upsert=True,
        )
        logger.info(f"System config updated: {fields}")


def insert_notifications(
    mongo_uri: str,
    db_name: str,
    notifications: List[Dict],
    notifications_collection: str = settings.NOTIFICATIONS_COLLECTION,
) -> int:
    if not notifications:
        return 0
    with get_mongo_connection(mongo_uri) as client:
        client[db_name][notifications_collection].insert_many(notifications)
        return len(notifications)


def delete_user(
    mongo_uri: str,
    db_name: str,
    user_id: str,
    users_collection: str = settings.USERS_COLLECTION,
    loans_collection: str = settings.LOANS_COLLECTION,
    notifications_collection: str = settings.NOTIFICATIONS_COLLECTION,
) -> Dict:
    with get_mongo_connection(mongo_uri) as client:
        db = client[db_name]
        users = db[users_collection].delete_one({"id": user_id}).deleted_count
        loans = db[loans_collection].delete_many({"userId": user_id}).deleted_count
        notifications = db[notifications_collection].delete_many({"userId": user_id}).deleted_count

        logger.info(f"Deleted user {user_id}: {loans} loans, {notifications} notifications")
        return {"users": users, "loans": loans, "notifications": notifications}


def _log_summary(
    run_id: str,
    result: Dict[str, List],
    users_written: int,
    loans_written: int,
    db_name: str
) -> None:
    logger.info("=" * 70)
    logger.info("LOAN RECONCILIATION SUMMARY")
    logger.info("=" * 70)
    logger.info(f"Run ID:                      {run_id}")
    logger.info(f"Loans Checked:               {len(result['loans'])}")
    logger.info(f"  - Fines Updated:           {loans_written}")
    logger.info(f"Users Checked:               {len(result['users'])}")
    logger.info(f"  - Ranks/Progress Updated:  {users_written}")
    logger.info(f"Database:                    {db_name}")
    logger.info("=" * 70)
