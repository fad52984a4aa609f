"""
Ports (interfaces) for the homepage service.
High-level services depend on these abstractions, adapters in infra/ implement them.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .schema import OutboundMessage


class KeyValueStore(ABC):
    """
    Interface for the durable key-value store backing the chat directory.
    Can be implemented with SQLite, Redis, LevelDB, etc.
    """

    @abstractmethod
    async def open(self) -> None:
        """
        Open the store and prepare it for use.

        Raises:
            StoreError: If the store cannot be opened
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release store resources."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Namespaced string key

        Returns:
            Stored value, or None if the key is absent

        Raises:
            StoreError: If the read fails
        """
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one (last write wins).

        Args:
            key: Namespaced string key
            value: Value to store

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """
        Check that the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass


class MessageGateway(ABC):
    """
    Interface for the external messaging gateway.
    Abstracts away the concrete chat platform API.
    """

    @abstractmethod
    async def send_message(self, message: OutboundMessage) -> None:
        """
        Deliver a single text message. Called at most once per message, no retry.

        Args:
            message: Destination chat and text

        Raises:
            DeliveryError: If the gateway is unreachable or rejects the message
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release gateway resources."""
        pass


class TokenValidator(ABC):
    """Interface for validating webhook authentication tokens."""

    @abstractmethod
    async def validate_token(self, token: Optional[str]) -> bool:
        """
        Validate the provided token.

        Args:
            token: Token taken from the request, if any

        Returns:
            True if the token is accepted, False otherwise
        """
        pass


# Custom exceptions
class LoadError(Exception):
    """Raised when bundled content cannot be loaded; fatal at startup."""
    pass


class ConfigError(LoadError):
    """Raised when bundled content or configuration is inconsistent."""
    pass


class DocumentParseError(Exception):
    """Raised when a single post document is malformed; the document is skipped."""
    pass


class TemplateNotFoundError(Exception):
    """Raised when rendering a template identifier that is not registered."""
    pass


class StoreError(Exception):
    """Raised when the key-value store fails to read or write."""
    pass


class DeliveryError(Exception):
    """Raised when the messaging gateway is unreachable or rejects a message."""
    pass


class ProcessingError(Exception):
    """Raised when an inbound webhook event is malformed."""
    pass


class AuthenticationError(Exception):
    """Raised when webhook authentication fails."""
    pass


class JobError(Exception):
    """Raised by a scheduled job's work function when an invocation fails."""
    pass
