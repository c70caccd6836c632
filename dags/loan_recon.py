"""Loan reconciliation DAG - daily fine accrual and rank demotion."""

from airflow import DAG
from airflow.sdk.definitions.decorators import task
from datetime import datetime, timedelta

from recon import tasks


@task
def load():
    """Load users and loans from MongoDB."""
    return tasks.load_snapshot()


@task
def reconcile(snapshot, logical_date=None):
    """Accrue fines and demote overdue borrowers."""
    return tasks.reconcile_snapshot(snapshot, logical_date)


@task
def store(result):
    """Write changed users and loans back to MongoDB."""
    return tasks.store_updates(result)


with DAG(
    dag_id="loan_recon",
    start_date=datetime(2024, 1, 1),
    schedule="@daily",
    catchup=False,
    default_args={
        "owner": "lending",
        "retries": 3,
        "retry_delay": timedelta(seconds=10),
    },
    tags=["lending", "reconciliation"],
) as dag:

    snapshot = load()
    result = reconcile(snapshot)
    stored = store(result)

    snapshot >> result >> stored
