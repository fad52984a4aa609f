# homepage/infra/__init__.py
"""
Infrastructure layer for the homepage service.

Implementations of domain interfaces on SQLite, Redis and the Telegram Bot API.
"""

from .sqlite_store import SQLiteKeyValueStore
from .redis_store import RedisKeyValueStore
from .chat_directory import ChatDirectory
from .telegram_gateway import TelegramGateway

__all__ = [
    "SQLiteKeyValueStore",
    "RedisKeyValueStore",
    "ChatDirectory",
    "TelegramGateway"
]
