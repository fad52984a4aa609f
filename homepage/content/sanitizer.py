"""
HTML allow-list sanitizer and plain-text helpers for rendered post bodies.
"""

from typing import Dict, FrozenSet
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Comment


ALLOWED_TAGS: FrozenSet[str] = frozenset({
    "a", "abbr", "b", "blockquote", "br", "code", "del", "div", "em",
    "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
    "img", "li", "ol", "p", "pre", "span", "strong", "sub", "sup", "table",
    "tbody", "td", "th", "thead", "tr", "ul",
})

ALLOWED_ATTRIBUTES: Dict[str, FrozenSet[str]] = {
    "a": frozenset({"href", "title"}),
    "abbr": frozenset({"title"}),
    "code": frozenset({"class"}),
    "img": frozenset({"src", "alt", "title"}),
    "td": frozenset({"align"}),
    "th": frozenset({"align"}),
}

URL_ATTRIBUTES = frozenset({"href", "src"})
ALLOWED_SCHEMES = frozenset({"", "http", "https", "mailto"})

# Removed together with everything inside them
DROPPED_TAGS = frozenset({"script", "style", "iframe", "object", "embed", "noscript", "template"})


def sanitize_html(markup: str) -> str:
    """
    Strip every tag and attribute outside the allow-list.

    Disallowed tags are unwrapped (their text is kept) except for DROPPED_TAGS,
    which are removed with their content. Links and images keep only
    http(s), mailto and relative URLs.

    Args:
        markup: HTML produced by the markdown transform

    Returns:
        Sanitized HTML
    """
    soup = BeautifulSoup(markup, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name in DROPPED_TAGS:
            tag.decompose()
            continue
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        allowed = ALLOWED_ATTRIBUTES.get(tag.name, frozenset())
        attrs = {}
        for name, value in tag.attrs.items():
            if name not in allowed:
                continue
            if name in URL_ATTRIBUTES and not _is_safe_url(value):
                continue
            attrs[name] = value
        tag.attrs = attrs

    return str(soup)


def _is_safe_url(value) -> bool:
    if not isinstance(value, str):
        return False
    # Browsers ignore embedded whitespace and control characters in schemes
    cleaned = "".join(ch for ch in value if ch > " ")
    return urlparse(cleaned).scheme.lower() in ALLOWED_SCHEMES


def strip_tags(markup: str) -> str:
    """Return the text of an HTML fragment with whitespace collapsed."""
    text = BeautifulSoup(markup, "html.parser").get_text(" ")
    return " ".join(text.split())


def excerpt(markup: str, limit: int) -> str:
    """
    Plain-text excerpt of an HTML fragment.

    Args:
        markup: HTML fragment
        limit: Maximum number of characters taken from the text

    Returns:
        The text, truncated to limit characters with "..." appended when cut
    """
    text = strip_tags(markup)
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."
