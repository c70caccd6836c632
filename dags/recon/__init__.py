"""
Loan reconciliation package for the daily Airflow run.

This package provides the task bodies for:
- Loading the users/loans snapshot from MongoDB
- Accruing late fines and demoting overdue borrowers
- Writing back only the documents that changed
"""

__version__ = "1.0.0"
