"""
In-process job scheduler for the homepage service.

Jobs run on cron-style schedules inside the serving event loop. A failing
invocation is logged and isolated; other jobs and later runs are unaffected.
"""

import logging
import re
from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from typing import Awaitable, Callable, Sequence

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..domain.ports import ConfigError
from ..telemetry.logger import correlation_scope
from .agent import NotificationAgent


logger = logging.getLogger(__name__)

# Standard crontab shorthands
DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * sun",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_EVERY = re.compile(r"^@every\s+(\S+)$")
_DURATION = re.compile(r"^(?:\d+[dhms])+$")
_DURATION_PART = re.compile(r"(\d+)([dhms])")
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


@dataclass
class JobContext:
    """Collaborators handed to every job invocation."""

    agent: NotificationAgent
    http: httpx.AsyncClient


WorkFunc = Callable[[JobContext], Awaitable[None]]


@dataclass(frozen=True)
class Job:
    name: str
    schedule: str
    work: WorkFunc


def parse_duration(text: str) -> timedelta:
    """
    Parse durations such as "1d", "12h" or "1h30m".

    Raises:
        ValueError: If the text is not a positive duration
    """
    if not _DURATION.match(text):
        raise ValueError(f"Invalid duration: {text!r}")
    seconds = sum(int(n) * _UNIT_SECONDS[unit] for n, unit in _DURATION_PART.findall(text))
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {text!r}")
    return timedelta(seconds=seconds)


def parse_schedule(expression: str, tz: tzinfo = timezone.utc) -> BaseTrigger:
    """
    Build a trigger from a schedule expression.

    Supports 5-field crontab lines, the @daily style descriptors and
    "@every <duration>".

    Raises:
        ConfigError: If the expression cannot be parsed
    """
    expression = expression.strip()
    try:
        every = _EVERY.match(expression)
        if every:
            return IntervalTrigger(seconds=parse_duration(every.group(1)).total_seconds(), timezone=tz)
        crontab = DESCRIPTORS.get(expression, expression)
        return CronTrigger.from_crontab(crontab, timezone=tz)
    except ValueError as e:
        raise ConfigError(f"Invalid schedule {expression!r}: {e}") from e


class JobScheduler:
    """
    Registers a fixed list of jobs with an AsyncIOScheduler.
    """

    def __init__(self, jobs: Sequence[Job], context: JobContext, tz: tzinfo = timezone.utc):
        """
        Initialize the scheduler and register every job.

        Args:
            jobs: Jobs to run, fixed for the process lifetime
            context: Context passed to each invocation
            tz: Timezone for cron schedules

        Raises:
            ConfigError: If a schedule expression is invalid
        """
        self.jobs = tuple(jobs)
        self.context = context
        self._scheduler = AsyncIOScheduler(
            timezone=tz,
            # A late run still fires; missed runs collapse into one
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None}
        )

        for job in self.jobs:
            self._scheduler.add_job(
                self.run_job,
                trigger=parse_schedule(job.schedule, tz),
                args=[job],
                name=job.name
            )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def scheduled_jobs(self) -> list:
        return self._scheduler.get_jobs()

    def start(self) -> None:
        """Start triggering jobs; must be called from the running event loop."""
        self._scheduler.start()
        logger.info(
            "Started cron scheduler",
            extra={"component": "scheduler", "jobs": len(self.jobs)}
        )

    def shutdown(self) -> None:
        """Stop triggering new runs without waiting for in-flight ones."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Cron scheduler stopped", extra={"component": "scheduler"})

    async def run_job(self, job: Job) -> bool:
        """
        Run one invocation of job, logging and swallowing its failure.

        Returns:
            True if the work function completed, False if it raised
        """
        fields = {"component": "scheduler", "job_name": job.name, "schedule": job.schedule}

        with correlation_scope():
            logger.info("Starting job", extra=fields)

            try:
                await job.work(self.context)
            except Exception as e:
                logger.error(
                    f"Job failed: {e}",
                    extra={**fields, "error": str(e)},
                    exc_info=True
                )
                return False

            logger.info("Job completed successfully", extra=fields)
            return True
