"""
Main application module for the homepage service.
Composes content, chat directory, notification agent, scheduler and HTTP API.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from dotenv import load_dotenv

from .api.auth import WebhookSecretValidator
from .api.http_server import HomepageAPI
from .config import AppConfig, StoreConfig, load_config, missing_required_vars
from .content.service import ContentService
from .content.templates import TemplateSet
from .domain.ports import KeyValueStore, LoadError, StoreError
from .infra.chat_directory import ChatDirectory
from .infra.redis_store import RedisKeyValueStore
from .infra.sqlite_store import SQLiteKeyValueStore
from .infra.telegram_gateway import TelegramGateway
from .services.agent import NotificationAgent
from .services.jobs import build_jobs
from .services.scheduler import JobContext, JobScheduler
from .telemetry.logger import setup_logging


logger = logging.getLogger(__name__)


def create_store(config: StoreConfig) -> KeyValueStore:
    """Build the configured key-value store backend (not yet opened)."""
    if config.backend == "redis":
        return RedisKeyValueStore(config.redis_url)
    return SQLiteKeyValueStore(config.path)


class HomepageService:
    """
    Main service class that composes all dependencies and manages their lifecycle.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize service with configuration.

        Args:
            config: Application configuration
        """
        self.config = config

        # Dependencies (will be initialized in setup)
        self.content: Optional[ContentService] = None
        self.store: Optional[KeyValueStore] = None
        self.gateway: Optional[TelegramGateway] = None
        self.agent: Optional[NotificationAgent] = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self.scheduler: Optional[JobScheduler] = None
        self.api: Optional[HomepageAPI] = None

    async def setup(self) -> None:
        """
        Setup all service dependencies.

        Raises:
            LoadError: If bundled content or templates are unusable
            StoreError: If the store cannot be opened
        """
        try:
            logger.info("Setting up homepage service")

            templates = TemplateSet.build(self.config.content.templates_dir)
            self.content = ContentService.from_config(
                self.config.content,
                self.config.site,
                templates
            )

            self.store = create_store(self.config.store)
            await self.store.open()

            self.gateway = TelegramGateway(
                api_key=self.config.telegram.api_key,
                base_url=self.config.telegram.api_base_url,
                timeout=self.config.telegram.request_timeout
            )
            self.agent = NotificationAgent(
                directory=ChatDirectory(self.store),
                gateway=self.gateway,
                owner=self.config.telegram.owner
            )

            self.http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.jobs.check_timeout),
                follow_redirects=True
            )
            self.scheduler = JobScheduler(
                build_jobs(self.config.jobs),
                JobContext(agent=self.agent, http=self.http_client)
            )

            self.api = HomepageAPI(
                content=self.content,
                agent=self.agent,
                token_validator=WebhookSecretValidator(self.config.telegram.webhook_secret),
                static_dir=self.config.content.static_dir
            )

            logger.info(
                "Service setup completed successfully",
                extra={
                    "component": "app",
                    "posts": len(self.content.posts),
                    "templates": templates.ids,
                    "jobs": len(self.scheduler.jobs)
                }
            )

        except Exception as e:
            logger.error(f"Service setup failed: {e}", extra={"component": "app"})
            await self.cleanup()
            raise

    async def cleanup(self) -> None:
        """Cleanup service resources."""
        logger.info("Cleaning up service resources")

        if self.scheduler:
            self.scheduler.shutdown()
        if self.gateway:
            await self.gateway.close()
        if self.http_client:
            await self.http_client.aclose()
        if self.store:
            await self.store.close()

        logger.info("Service cleanup completed")

    async def run(self) -> None:
        """
        Start the scheduler and serve HTTP until a shutdown signal arrives.

        In-flight responses get server.shutdown_grace_seconds to finish; the
        scheduler stops triggering new runs but does not cancel running ones.
        """
        if not self.api or not self.scheduler:
            raise RuntimeError("Service not setup. Call setup() first.")

        server_config = uvicorn.Config(
            app=self.api.app,
            host=self.config.server.host,
            port=self.config.server.port,
            log_level=self.config.server.log_level,
            log_config=None,
            access_log=False,
            timeout_graceful_shutdown=self.config.server.shutdown_grace_seconds
        )
        server = uvicorn.Server(server_config)

        self.scheduler.start()
        logger.info(
            f"Starting homepage service on {self.config.server.host}:{self.config.server.port}",
            extra={"component": "app", "port": self.config.server.port}
        )

        try:
            await server.serve()
        finally:
            self.scheduler.shutdown()

    @asynccontextmanager
    async def lifespan(self):
        """
        Context manager for service lifecycle.

        Handles setup and cleanup automatically.
        """
        await self.setup()
        try:
            yield self
        finally:
            await self.cleanup()


async def main() -> int:
    """
    Main entry point for the application.

    Returns:
        Process exit status
    """
    load_dotenv()

    try:
        config = load_config()
    except ValueError as e:
        setup_logging(service_name="homepage", enable_json=False)
        logger.critical(f"Invalid configuration: {e}", extra={"component": "app"})
        return 1

    setup_logging(
        level=config.logging.level,
        service_name="homepage",
        enable_json=config.logging.json_format,
        enable_correlation=config.logging.enable_correlation
    )

    missing = missing_required_vars(config)
    if missing:
        for variable in missing:
            logger.critical(
                "Missing required environment variable",
                extra={"component": "app", "variable": variable}
            )
        return 1

    try:
        async with HomepageService(config).lifespan() as service:
            await service.run()
    except (LoadError, StoreError) as e:
        logger.critical(f"Top-level error: {e}", extra={"component": "app"})
        return 1

    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
