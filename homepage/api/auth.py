"""
Authentication module for the Telegram webhook.
Validates the secret token Telegram echoes back on every webhook call.
"""

import hmac
import logging
from typing import Optional

from fastapi import Header

from ..domain.ports import TokenValidator, AuthenticationError


logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class WebhookSecretValidator(TokenValidator):
    """
    Compares the webhook secret header with the configured secret.
    With no secret configured every request is accepted.
    """

    def __init__(self, secret: Optional[str] = None):
        """
        Initialize token validator.

        Args:
            secret: Secret registered with setWebhook, or None to disable the check
        """
        self._secret = secret or None
        if self._secret and len(self._secret) < 16:
            logger.warning(
                "Webhook secret is shorter than 16 characters, consider using a longer one",
                extra={"component": "auth"}
            )

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    async def validate_token(self, token: Optional[str]) -> bool:
        """
        Validate the webhook secret.

        Args:
            token: Value of the secret header

        Returns:
            True if the token matches or no secret is configured
        """
        if not self.enabled:
            return True

        if not token:
            logger.debug("No webhook secret provided", extra={"component": "auth"})
            return False

        is_valid = self._constant_time_compare(token, self._secret)
        if not is_valid:
            logger.warning("Invalid webhook secret provided", extra={"component": "auth"})
        return is_valid

    @staticmethod
    def _constant_time_compare(a: str, b: str) -> bool:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


# Dependency for FastAPI
class AuthDependency:
    """
    FastAPI dependency for webhook secret validation.
    """

    def __init__(self, token_validator: TokenValidator):
        self.token_validator = token_validator

    async def __call__(
        self,
        x_telegram_bot_api_secret_token: Optional[str] = Header(None)
    ) -> bool:
        """
        Raises:
            AuthenticationError: If the secret is missing or wrong
        """
        is_valid = await self.token_validator.validate_token(x_telegram_bot_api_secret_token)

        if not is_valid:
            raise AuthenticationError("Invalid or missing webhook secret")

        return True
