"""
Shared fixtures: an on-disk site tree, in-memory store and a recording gateway.
"""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from homepage.config import SiteConfig
from homepage.content.documents import load_posts
from homepage.content.service import ContentService
from homepage.content.templates import TemplateSet
from homepage.domain.ports import DeliveryError, KeyValueStore, MessageGateway, StoreError
from homepage.domain.schema import OutboundMessage
from homepage.infra.chat_directory import ChatDirectory
from homepage.services.agent import NotificationAgent


BASE_TEMPLATE = """<html><head><title>{% block title %}{% endblock %}</title></head>
<body>{% block content %}{% endblock %}<footer>{{ common.current_year }}</footer></body></html>
"""

PAGE_TEMPLATES = {
    "index.html": (
        '{% extends "base.html" %}{% block content %}'
        '{% for post in recent_posts %}<a href="{{ post.permalink }}">{{ post.title }}</a>{% endfor %}'
        '{% endblock %}'
    ),
    "about.html": '{% extends "base.html" %}{% block content %}About me{% endblock %}',
    "blog_index.html": (
        '{% extends "base.html" %}{% block content %}'
        '{% for post in posts %}<li>{{ post.slug }} {{ post.title }}</li>{% endfor %}'
        '{% endblock %}'
    ),
    "blog_post.html": (
        '{% extends "base.html" %}{% block title %}{{ post.title }}{% endblock %}'
        '{% block content %}{{ post.body | safe }}{% endblock %}'
    ),
}

POSTS = {
    "2024-01-01.md": "# Hello\n\nWorld",
    "2024-06-01.md": "# Summer\n\nIt is **warm** outside.",
}


class MemoryStore(KeyValueStore):
    """Dict-backed store; set fail to make every call raise StoreError."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.fail = False

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get(self, key: str) -> Optional[str]:
        if self.fail:
            raise StoreError("store unavailable")
        return self.data.get(key)

    async def put(self, key: str, value: str) -> None:
        if self.fail:
            raise StoreError("store unavailable")
        self.data[key] = value

    async def ping(self) -> bool:
        return not self.fail


class RecordingGateway(MessageGateway):
    """Keeps every sent message; set fail to reject deliveries."""

    def __init__(self):
        self.sent: List[OutboundMessage] = []
        self.fail = False

    async def send_message(self, message: OutboundMessage) -> None:
        if self.fail:
            raise DeliveryError("Failed to send telegram message: 403 Forbidden")
        self.sent.append(message)

    async def close(self) -> None:
        pass


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, contents in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    return root


@pytest.fixture
def writing_dir(tmp_path):
    return write_tree(tmp_path / "writing", POSTS)


@pytest.fixture
def templates_dir(tmp_path):
    return write_tree(tmp_path / "templates", {"base.html": BASE_TEMPLATE, **PAGE_TEMPLATES})


@pytest.fixture
def static_dir(tmp_path):
    (tmp_path / "secret.txt").write_text("do not serve", encoding="utf-8")
    return write_tree(tmp_path / "static", {"style.css": "body { margin: 0; }"})


@pytest.fixture
def site():
    return SiteConfig(title="Writing", url="https://example.com/", description="Blog posts")


@pytest.fixture
def content(writing_dir, templates_dir, site):
    return ContentService(
        posts=load_posts(writing_dir),
        templates=TemplateSet.build(templates_dir),
        site=site,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def agent(store, gateway):
    return NotificationAgent(directory=ChatDirectory(store), gateway=gateway, owner="MorganGallant")


def make_update(username: Optional[str], chat_id: int = 42, update_id: int = 1) -> dict:
    """Webhook payload for a plain text message."""
    sender = {"id": 7, "is_bot": False, "first_name": "Test"}
    if username is not None:
        sender["username"] = username
    return {
        "update_id": update_id,
        "message": {
            "message_id": 10,
            "date": 1700000000,
            "text": "hi",
            "chat": {"id": chat_id, "type": "private"},
            "from": sender,
        },
    }
