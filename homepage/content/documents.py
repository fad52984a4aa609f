"""
Document store: loads dated markdown documents into Post records.

Each post lives in a file named YYYY-MM-DD.md whose first line is the title
marker "# <title>". Stray files are skipped with a warning, malformed posts
are skipped with a warning, and only an unreadable tree aborts the load.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

import markdown

from ..domain.ports import ConfigError, DocumentParseError, LoadError
from ..domain.schema import Post
from .sanitizer import sanitize_html


logger = logging.getLogger(__name__)

POST_SUFFIX = ".md"
DATE_FORMAT = "%Y-%m-%d"
TITLE_MARKER = "# "

_DATE_NAME = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


def load_posts(root: Union[str, Path]) -> List[Post]:
    """
    Load every post below root, newest first.

    Args:
        root: Directory tree holding the post documents

    Returns:
        Posts sorted by publish date, descending

    Raises:
        LoadError: If the tree itself cannot be read
    """
    root = Path(root)
    if not root.is_dir():
        raise LoadError(f"Writing directory not found: {root}")

    try:
        paths = sorted(p for p in root.rglob(f"*{POST_SUFFIX}") if p.is_file())
    except OSError as e:
        raise LoadError(f"Failed to walk writing directory {root}: {e}") from e

    posts: List[Post] = []
    for path in paths:
        try:
            publish_date = parse_post_date(path.name)
        except ValueError as e:
            logger.warning(
                "Improperly formatted writing entry, requires yyyy-mm-dd.md, skipping",
                extra={"component": "documents", "path": str(path), "error": str(e)}
            )
            continue

        try:
            post = parse_post(path, publish_date)
        except DocumentParseError as e:
            logger.warning(
                "Failed to parse blog post, skipping",
                extra={"component": "documents", "path": str(path), "error": str(e)}
            )
            continue

        posts.append(post)

    posts.sort(key=lambda p: p.publish_date, reverse=True)

    logger.info(
        f"Loaded {len(posts)} blog posts",
        extra={"component": "documents", "root": str(root), "posts": len(posts)}
    )
    return posts


def parse_post_date(file_name: str) -> date:
    """
    Parse the publish date from a document file name.

    Raises:
        ValueError: If the name is not YYYY-MM-DD.md
    """
    if not file_name.endswith(POST_SUFFIX):
        raise ValueError(f"missing {POST_SUFFIX} suffix: {file_name}")
    stem = file_name[:-len(POST_SUFFIX)]
    if not _DATE_NAME.match(stem):
        raise ValueError(f"not a {DATE_FORMAT} date: {stem}")
    return datetime.strptime(stem, DATE_FORMAT).date()


def parse_post(path: Path, publish_date: date) -> Post:
    """
    Read and render a single post document.

    Args:
        path: Document path
        publish_date: Date taken from the file name

    Returns:
        Parsed post with a sanitized HTML body

    Raises:
        DocumentParseError: If the document cannot be read or is malformed
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentParseError(f"Failed to read {path}: {e}") from e

    title, body = split_title(contents)
    return Post(title=title, publish_date=publish_date, body=render_body(body))


def split_title(contents: str) -> Tuple[str, str]:
    """
    Split a document into its title and trimmed markdown body.

    Raises:
        DocumentParseError: If the title marker or its line break is missing
    """
    if not contents.startswith(TITLE_MARKER):
        raise DocumentParseError("blog posts should start with a '# ', i.e. a title")

    title, sep, remaining = contents[len(TITLE_MARKER):].partition("\n")
    if not sep:
        raise DocumentParseError("titles should end with a newline character")

    return title.rstrip("\r"), remaining.strip("\r\n\t ")


def render_body(body: str) -> str:
    """Markdown to sanitized HTML."""
    html = markdown.markdown(body, extensions=MARKDOWN_EXTENSIONS, output_format="html")
    return sanitize_html(html)


def index_by_slug(posts: Sequence[Post]) -> Dict[str, int]:
    """
    Map each post slug to its position, rejecting shared publish dates.

    Args:
        posts: Loaded posts

    Returns:
        Slug to index mapping

    Raises:
        ConfigError: If two posts share a publish date
    """
    index: Dict[str, int] = {}
    for i, post in enumerate(posts):
        if post.slug in index:
            raise ConfigError(
                f"Overlapping blog post {post.slug}{POST_SUFFIX}, publish dates must be unique"
            )
        index[post.slug] = i
    return index
