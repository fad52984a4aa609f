# homepage/services/__init__.py
"""
Service layer for the homepage service.

Notification agent and scheduled jobs.
"""

from .agent import NotificationAgent, REFUSAL_MESSAGE, OWNER_GREETING
from .scheduler import Job, JobContext, JobScheduler, parse_schedule
from .jobs import build_jobs, url_responsiveness_check

__all__ = [
    "NotificationAgent",
    "REFUSAL_MESSAGE",
    "OWNER_GREETING",
    "Job",
    "JobContext",
    "JobScheduler",
    "parse_schedule",
    "build_jobs",
    "url_responsiveness_check"
]
