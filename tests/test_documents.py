from datetime import date

import pytest

from homepage.content.documents import (
    index_by_slug,
    load_posts,
    parse_post_date,
    render_body,
    split_title,
)
from homepage.domain.ports import ConfigError, DocumentParseError, LoadError
from tests.conftest import write_tree


def test_load_posts_newest_first(writing_dir):
    """Posts come back sorted by publish date, descending."""
    posts = load_posts(writing_dir)

    assert [p.slug for p in posts] == ["2024-06-01", "2024-01-01"]
    assert posts[0].title == "Summer"
    assert posts[0].publish_date == date(2024, 6, 1)
    assert "<strong>warm</strong>" in posts[0].body
    assert posts[1].body == "<p>World</p>"


def test_load_posts_walks_subdirectories(tmp_path):
    root = write_tree(tmp_path / "writing", {
        "2023/2023-03-04.md": "# Old\n\nbody",
        "2024-01-01.md": "# New\n\nbody",
    })

    posts = load_posts(root)

    assert [p.title for p in posts] == ["New", "Old"]


def test_load_posts_skips_badly_named_files(tmp_path, caplog):
    """Files that are not yyyy-mm-dd.md are skipped with a warning."""
    root = write_tree(tmp_path / "writing", {
        "notes.md": "# Notes\n\nbody",
        "2024-13-45.md": "# Bad date\n\nbody",
        "2024-02-02.md": "# Good\n\nbody",
        "2024-02-03.txt": "# Not markdown\n\nbody",
    })

    posts = load_posts(root)

    assert [p.title for p in posts] == ["Good"]
    assert "requires yyyy-mm-dd.md" in caplog.text


def test_load_posts_skips_malformed_documents(tmp_path, caplog):
    root = write_tree(tmp_path / "writing", {
        "2024-01-01.md": "No title here\n\nbody",
        "2024-01-02.md": "# Title without newline",
        "2024-01-03.md": "# Fine\n\nbody",
    })

    posts = load_posts(root)

    assert [p.slug for p in posts] == ["2024-01-03"]
    assert caplog.text.count("Failed to parse blog post, skipping") == 2


def test_load_posts_missing_directory(tmp_path):
    with pytest.raises(LoadError):
        load_posts(tmp_path / "nope")


def test_empty_directory_yields_no_posts(tmp_path):
    (tmp_path / "writing").mkdir()
    assert load_posts(tmp_path / "writing") == []


def test_parse_post_date():
    assert parse_post_date("2024-06-01.md") == date(2024, 6, 1)

    for name in ("2024-6-1.md", "2024-06-01.markdown", "post.md", "2024-02-30.md"):
        with pytest.raises(ValueError):
            parse_post_date(name)


def test_split_title_trims_body():
    title, body = split_title("# My title\r\n\n\n  Body text\n\n")

    assert title == "My title"
    assert body == "Body text"


def test_split_title_requires_marker_and_newline():
    with pytest.raises(DocumentParseError, match="start with a '# '"):
        split_title("#No space\nbody")
    with pytest.raises(DocumentParseError, match="end with a newline"):
        split_title("# Only a title")


def test_split_title_allows_empty_body():
    assert split_title("# Title\n") == ("Title", "")


def test_render_body_sanitizes_raw_html():
    html = render_body("Hello <script>alert(1)</script>\n\n[link](javascript:steal)")

    assert "<script>" not in html
    assert "alert(1)</" not in html
    assert "javascript:" not in html
    assert "Hello" in html


def test_duplicate_dates_rejected(tmp_path):
    """The same date in two subdirectories is a configuration error."""
    root = write_tree(tmp_path / "writing", {
        "a/2024-01-01.md": "# One\n\nbody",
        "b/2024-01-01.md": "# Two\n\nbody",
    })

    posts = load_posts(root)

    with pytest.raises(ConfigError, match="Overlapping blog post 2024-01-01.md"):
        index_by_slug(posts)
