"""
HTTP server for the homepage service using FastAPI.
Serves the blog, the feed, static files and the Telegram webhook.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, PlainTextResponse, Response

from ..content.feed import RSS_CONTENT_TYPE
from ..content.service import ContentService
from ..domain.ports import (
    AuthenticationError,
    DeliveryError,
    ProcessingError,
    StoreError,
    TokenValidator,
)
from ..domain.schema import BLOG_PREFIX, CommonTemplateData
from ..services.agent import NotificationAgent
from ..telemetry.logger import correlation_scope
from .auth import AuthDependency


logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/telegram/webhook"
FEED_PATH = "/feed.xml"
HOME_PAGE = "index"
REQUEST_ID_HEADER = "X-Request-ID"


def common_template_data(request: Request) -> CommonTemplateData:
    """
    Build the layout values from the start time recorded by the timing middleware.
    """
    started = getattr(request.state, "initiated_at", None)
    if started is None:
        return CommonTemplateData()

    # Does not include the time spent rendering the template itself
    elapsed_ms = (time.perf_counter() - started) * 1000
    return CommonTemplateData(
        processing_time=f"{elapsed_ms:.2f}ms",
        current_year=datetime.now().year
    )


class HomepageAPI:
    """
    FastAPI application for the homepage service.
    """

    def __init__(
        self,
        content: ContentService,
        agent: NotificationAgent,
        token_validator: TokenValidator,
        static_dir: Union[str, Path],
        title: str = "Homepage",
        version: str = "1.0.0"
    ):
        """
        Initialize FastAPI application.

        Args:
            content: Rendered blog content
            agent: Notification agent handling webhook events
            token_validator: Webhook secret validator
            static_dir: Directory with static assets
            title: API title
            version: API version
        """
        self.content = content
        self.agent = agent
        self.token_validator = token_validator
        self.static_root = Path(static_dir).resolve()

        self.app = FastAPI(
            title=title,
            version=version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        self._setup_middleware()
        self.auth_dependency = AuthDependency(token_validator)
        self._setup_routes()
        self._setup_exception_handlers()

    def _setup_middleware(self) -> None:
        """Setup FastAPI middleware."""

        # Records when we first got the request
        @self.app.middleware("http")
        async def initiated_at(request: Request, call_next):
            request.state.initiated_at = time.perf_counter()

            with correlation_scope(request.headers.get(REQUEST_ID_HEADER)) as request_id:
                response = await call_next(request)

                elapsed_ms = (time.perf_counter() - request.state.initiated_at) * 1000
                logger.info(
                    f"Request completed: {response.status_code}",
                    extra={
                        "component": "http_server",
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "elapsed_ms": round(elapsed_ms, 2)
                    }
                )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response

    def _setup_routes(self) -> None:
        """Setup FastAPI routes."""

        @self.app.get("/health")
        async def health_check() -> PlainTextResponse:
            return PlainTextResponse("OK")

        @self.app.get(FEED_PATH)
        async def feed() -> Response:
            return Response(content=self.content.feed, media_type=RSS_CONTENT_TYPE)

        @self.app.post(WEBHOOK_PATH)
        async def telegram_webhook(
            request: Request,
            _: bool = Depends(self.auth_dependency)
        ) -> dict:
            try:
                payload = await request.json()
            except ValueError as e:
                raise ProcessingError(f"Request body is not valid JSON: {e}") from e

            reply = await self.agent.handle_inbound(payload)
            return {"ok": True, "replied": reply is not None}

        @self.app.get(BLOG_PREFIX)
        async def blog_index(request: Request) -> HTMLResponse:
            body = self.content.render_index(common_template_data(request))
            if body is None:
                raise HTTPException(status_code=404, detail="Not Found")
            return HTMLResponse(body)

        @self.app.get(BLOG_PREFIX + "/{slug:path}")
        async def blog_post(slug: str, request: Request) -> HTMLResponse:
            slug = slug.strip("/")
            common = common_template_data(request)
            if not slug:
                body = self.content.render_index(common)
            else:
                body = self.content.render_post(slug, common)
            if body is None:
                raise HTTPException(status_code=404, detail="Not Found")
            return HTMLResponse(body)

        @self.app.get("/{page_path:path}")
        async def page_or_static(page_path: str, request: Request) -> Response:
            page_id = page_path.strip("/") or HOME_PAGE
            body = self.content.render_page(page_id, common_template_data(request))
            if body is not None:
                return HTMLResponse(body)

            static_file = self._static_file(page_path)
            if static_file is None:
                raise HTTPException(status_code=404, detail="Not Found")
            return FileResponse(static_file)

    def _static_file(self, relative_path: str) -> Optional[Path]:
        """Resolve a static asset, refusing paths outside the static root."""
        candidate = (self.static_root / relative_path).resolve()
        if not candidate.is_relative_to(self.static_root) or not candidate.is_file():
            return None
        return candidate

    def _setup_exception_handlers(self) -> None:
        """Setup custom exception handlers."""

        @self.app.exception_handler(ProcessingError)
        async def processing_exception_handler(request: Request, exc: ProcessingError):
            logger.warning(
                f"Malformed request: {exc}",
                extra={"component": "http_server", "path": request.url.path}
            )
            return JSONResponse(status_code=400, content={"detail": "Bad request"})

        @self.app.exception_handler(AuthenticationError)
        async def auth_exception_handler(request: Request, exc: AuthenticationError):
            logger.warning(
                f"Authentication failed: {exc}",
                extra={
                    "component": "http_server",
                    "path": request.url.path,
                    "client_ip": request.client.host if request.client else "unknown"
                }
            )
            return JSONResponse(status_code=401, content={"detail": "Authentication failed"})

        @self.app.exception_handler(StoreError)
        async def store_exception_handler(request: Request, exc: StoreError):
            logger.error(
                f"Store failure: {exc}",
                extra={"component": "http_server", "path": request.url.path}
            )
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})

        @self.app.exception_handler(DeliveryError)
        async def delivery_exception_handler(request: Request, exc: DeliveryError):
            logger.error(
                f"Delivery failure: {exc}",
                extra={"component": "http_server", "path": request.url.path}
            )
            return JSONResponse(status_code=502, content={"detail": "Message delivery failed"})
