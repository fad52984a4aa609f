"""
Scheduled job definitions.
"""

import logging
from typing import Awaitable, Callable, Tuple

import httpx

from ..config import JobsConfig
from ..domain.ports import JobError
from .scheduler import Job, JobContext, WorkFunc


logger = logging.getLogger(__name__)

OUT_OF_BUSINESS_MESSAGE = "{url} may be out of business! Daily ping returned status {code} ({status})."
UNREACHABLE_MESSAGE = "{url} could not be reached: {error}"

StatusCallback = Callable[[JobContext, int, str], Awaitable[None]]


def url_responsiveness_check(url: str, on_failure: StatusCallback) -> WorkFunc:
    """
    Build a work function that GETs url and reports failing statuses.

    A status >= 400 is passed to on_failure. A transport failure alerts the
    owner directly and then fails the invocation.
    """
    async def work(ctx: JobContext) -> None:
        try:
            response = await ctx.http.get(url)
        except httpx.RequestError as e:
            error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            await ctx.agent.notify_owner(UNREACHABLE_MESSAGE.format(url=url, error=error))
            raise JobError(f"Failed to GET {url}: {error}") from e

        logger.debug(
            f"GET {url} returned {response.status_code}",
            extra={"component": "jobs", "url": url, "status_code": response.status_code}
        )
        if response.status_code >= 400:
            await on_failure(ctx, response.status_code, response.reason_phrase)

    return work


def out_of_business_alert(url: str) -> StatusCallback:
    async def alert(ctx: JobContext, code: int, status: str) -> None:
        await ctx.agent.notify_owner(OUT_OF_BUSINESS_MESSAGE.format(url=url, code=code, status=status))

    return alert


def build_jobs(config: JobsConfig) -> Tuple[Job, ...]:
    """One responsiveness check per configured URL."""
    return tuple(
        Job(
            name=check.name,
            schedule=check.schedule,
            work=url_responsiveness_check(check.url, out_of_business_alert(check.url)),
        )
        for check in config.url_checks
    )
