"""
Content service: index, detail and home pages plus the syndication feed.

Posts are loaded once at startup and never change afterwards, so the slug
index and the feed are computed once and kept for the process lifetime.
"""

import logging
from functools import cached_property
from typing import List, Optional, Sequence

from ..config import ContentConfig, SiteConfig
from ..domain.schema import CommonTemplateData, DetailData, IndexData, PageData, Post
from .documents import index_by_slug, load_posts
from .feed import build_rss
from .templates import TemplateSet


logger = logging.getLogger(__name__)

INDEX_TEMPLATE = "blog_index"
POST_TEMPLATE = "blog_post"


class ContentService:
    """
    Serves rendered blog content from an immutable post sequence.
    """

    def __init__(
        self,
        posts: Sequence[Post],
        templates: TemplateSet,
        site: SiteConfig,
        recent_posts: int = 3,
        feed_description_chars: int = 100
    ):
        """
        Initialize the content service.

        Args:
            posts: Posts sorted newest first
            templates: Compiled template set
            site: Site metadata for the feed
            recent_posts: Number of posts handed to ordinary pages
            feed_description_chars: Length of feed item descriptions

        Raises:
            ConfigError: If two posts share a publish date
        """
        self._posts = tuple(posts)
        self._index = index_by_slug(self._posts)
        self.templates = templates
        self.site = site
        self.recent_posts = recent_posts
        self.feed_description_chars = feed_description_chars

    @classmethod
    def from_config(
        cls,
        content: ContentConfig,
        site: SiteConfig,
        templates: TemplateSet
    ) -> "ContentService":
        """
        Load posts from the configured writing directory.

        Raises:
            LoadError: If the posts cannot be loaded or collide
        """
        return cls(
            posts=load_posts(content.writing_dir),
            templates=templates,
            site=site,
            recent_posts=content.recent_posts,
            feed_description_chars=content.feed_description_chars,
        )

    @property
    def posts(self) -> List[Post]:
        return list(self._posts)

    def recent(self, count: Optional[int] = None) -> List[Post]:
        """The count most recent posts (defaults to the configured number)."""
        if count is None:
            count = self.recent_posts
        return list(self._posts[:max(count, 0)])

    def get_post(self, slug: str) -> Optional[Post]:
        position = self._index.get(slug)
        if position is None:
            return None
        return self._posts[position]

    def render_index(self, common: CommonTemplateData) -> Optional[bytes]:
        """Render the post listing, or None when no index template exists."""
        if not self.templates.has(INDEX_TEMPLATE):
            logger.warning(
                "Missing blog index template",
                extra={"component": "content", "expected": INDEX_TEMPLATE}
            )
            return None
        return self.templates.render(INDEX_TEMPLATE, IndexData(common=common, posts=self.posts))

    def render_post(self, slug: str, common: CommonTemplateData) -> Optional[bytes]:
        """Render one post, or None when the slug or the post template is unknown."""
        if not self.templates.has(POST_TEMPLATE):
            logger.warning(
                "Missing blog post template",
                extra={"component": "content", "expected": POST_TEMPLATE}
            )
            return None
        post = self.get_post(slug)
        if post is None:
            return None
        return self.templates.render(POST_TEMPLATE, DetailData(common=common, post=post))

    def render_page(self, page_id: str, common: CommonTemplateData) -> Optional[bytes]:
        """
        Render a standalone page template with the most recent posts.

        Returns:
            The page, or None if no template is named page_id
        """
        if page_id in (INDEX_TEMPLATE, POST_TEMPLATE) or not self.templates.has(page_id):
            return None
        return self.templates.render(page_id, PageData(common=common, recent_posts=self.recent()))

    @cached_property
    def feed(self) -> str:
        return build_rss(
            self._posts,
            site_title=self.site.title,
            site_url=self.site.url,
            site_description=self.site.description,
            description_chars=self.feed_description_chars,
        )
