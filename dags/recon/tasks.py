"""Task bodies of the loan_recon DAG."""

import logging
from datetime import datetime
from typing import Dict, Optional

from config.settings import settings
from core.reconciliation import reconcile
from integrations import mongo_handler

logger = logging.getLogger(__name__)


def load_snapshot() -> Dict:
    """Fetch users and loans from MongoDB."""
    return mongo_handler.load_snapshot(settings.MONGO_URI, settings.DB_NAME)


def reconcile_snapshot(snapshot: Dict, run_date: Optional[datetime] = None) -> Dict:
    """Run fine accrual and rank demotion for the run's calendar day."""
    today = (run_date or datetime.now()).date()
    logger.info(f"Reconciling snapshot as of {today.isoformat()}")
    return reconcile(today, snapshot["loans"], snapshot["users"])


def store_updates(result: Dict) -> Dict:
    """Persist changed users and loans."""
    return mongo_handler.store_reconciliation_updates(settings.MONGO_URI, settings.DB_NAME, result)
