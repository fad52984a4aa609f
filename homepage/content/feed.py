"""
RSS 2.0 syndication feed rendering.
"""

import html
from datetime import datetime, time, timezone
from email.utils import format_datetime
from typing import Sequence

from ..domain.schema import Post
from .sanitizer import excerpt


RSS_CONTENT_TYPE = "application/rss+xml"


def rfc822_date(value: datetime) -> str:
    return format_datetime(value, usegmt=True)


def build_rss(
    posts: Sequence[Post],
    site_title: str,
    site_url: str,
    site_description: str,
    description_chars: int = 100
) -> str:
    """
    Render posts as an RSS 2.0 document, one item per post in the given order.

    Args:
        posts: Posts, newest first
        site_title: Channel title
        site_url: Absolute site URL without trailing slash
        site_description: Channel description
        description_chars: Length of each item's plain-text description

    Returns:
        The feed XML
    """
    items = []
    for post in posts:
        link = f"{site_url}{post.permalink}"
        published = datetime.combine(post.publish_date, time.min, tzinfo=timezone.utc)
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(post.title)}</title>",
                    f"<link>{html.escape(link)}</link>",
                    f"<guid>{html.escape(link)}</guid>",
                    f"<pubDate>{rfc822_date(published)}</pubDate>",
                    f"<description>{html.escape(excerpt(post.body, description_chars))}</description>",
                    "</item>",
                ]
            )
        )

    if posts:
        last_build = datetime.combine(posts[0].publish_date, time.min, tzinfo=timezone.utc)
    else:
        last_build = datetime.now(timezone.utc)

    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(site_title)}</title>",
            f"<link>{html.escape(site_url)}/</link>",
            f"<description>{html.escape(site_description)}</description>",
            f"<lastBuildDate>{rfc822_date(last_build)}</lastBuildDate>",
            *items,
            "</channel>",
            "</rss>",
        ]
    )
