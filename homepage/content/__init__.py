# homepage/content/__init__.py
"""
Content layer for the homepage service.

Turns bundled markdown documents into rendered pages and a syndication feed.
"""

from .documents import load_posts, index_by_slug
from .templates import TemplateSet
from .service import ContentService
from .feed import build_rss, RSS_CONTENT_TYPE

__all__ = [
    "load_posts",
    "index_by_slug",
    "TemplateSet",
    "ContentService",
    "build_rss",
    "RSS_CONTENT_TYPE"
]
