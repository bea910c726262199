# /scheduled_tasks/__init__.py
"""
Scheduled tasks module for background jobs.
This module contains all scheduled tasks that run at specific intervals.
"""

from .ledger_refresh import refresh_records_job

__all__ = [
    'refresh_records_job',
]
