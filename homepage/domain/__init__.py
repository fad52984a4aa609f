# homepage/domain/__init__.py
"""
Domain layer for the homepage service.

Contains data models, interfaces and the exception taxonomy.
"""

from .schema import (
    Post,
    TelegramUpdate,
    OutboundMessage,
    CommonTemplateData,
    IndexData,
    DetailData,
    PageData,
    ViewData,
)
from .ports import KeyValueStore, MessageGateway, TokenValidator

__all__ = [
    "Post",
    "TelegramUpdate",
    "OutboundMessage",
    "CommonTemplateData",
    "IndexData",
    "DetailData",
    "PageData",
    "ViewData",
    "KeyValueStore",
    "MessageGateway",
    "TokenValidator",
]
