"""
Telegram Bot API implementation of the MessageGateway interface.
Sends one sendMessage request per message and never retries.
"""

import logging
from typing import Optional

import httpx

from ..domain.ports import MessageGateway, DeliveryError
from ..domain.schema import OutboundMessage


logger = logging.getLogger(__name__)


class TelegramGateway(MessageGateway):
    """
    Posts messages to the Bot API; any status >= 400 or transport failure is a DeliveryError.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Bot API key
            base_url: Bot API base URL
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client (mainly for tests)

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key:
            raise ValueError("Missing Telegram API key")

        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": "homepage/1.0"}
        )

    def _endpoint(self) -> str:
        # The Bot API endpoint embeds the key, never log it
        return f"{self.base_url}/bot{self._api_key}/sendMessage"

    async def send_message(self, message: OutboundMessage) -> None:
        try:
            response = await self.client.post(self._endpoint(), json=message.model_dump())
        except httpx.RequestError as e:
            logger.error(
                f"Telegram request failed: {type(e).__name__}",
                extra={"component": "telegram_gateway", "chat_id": message.chat_id}
            )
            raise DeliveryError(f"Failed to send telegram message: {type(e).__name__}") from e

        if response.status_code >= 400:
            logger.error(
                f"Telegram rejected message: {response.status_code}",
                extra={
                    "component": "telegram_gateway",
                    "chat_id": message.chat_id,
                    "status_code": response.status_code
                }
            )
            raise DeliveryError(
                f"Failed to send telegram message: {response.status_code} {response.reason_phrase}"
            )

        logger.debug(
            "Telegram message sent",
            extra={"component": "telegram_gateway", "chat_id": message.chat_id}
        )

    async def close(self) -> None:
        await self.client.aclose()
