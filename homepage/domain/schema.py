"""
Domain schemas for the homepage service.
Defines blog posts, inbound Telegram updates and the per-view template data.
"""

from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ConfigDict


BLOG_PREFIX = "/blog"


class Post(BaseModel):
    """A single blog post parsed from a dated markdown document."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Post title without the leading marker")
    publish_date: date = Field(..., description="Publish date, unique across posts")
    body: str = Field(..., description="Sanitized HTML body")

    @property
    def slug(self) -> str:
        return self.publish_date.isoformat()

    @property
    def permalink(self) -> str:
        return f"{BLOG_PREFIX}/{self.slug}"


class TelegramUser(BaseModel):
    """Sender of an inbound message."""
    model_config = ConfigDict(extra='ignore')

    id: int = Field(..., description="Sender user ID")
    first_name: str = Field(default="", description="Sender first name")
    username: Optional[str] = Field(None, description="Username without @")


class TelegramChat(BaseModel):
    """Chat the inbound message was posted in."""
    model_config = ConfigDict(extra='ignore')

    id: int = Field(..., description="Chat ID, used as the reply destination")
    title: Optional[str] = Field(None, description="Chat title (groups only)")


class TelegramMessage(BaseModel):
    """Message carried by an inbound update."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    message_id: int
    text: Optional[str] = None
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(None, alias="from")


class TelegramUpdate(BaseModel):
    """
    Webhook payload delivered by the Telegram Bot API.
    Only plain messages are modelled; other update kinds carry no message.
    """
    model_config = ConfigDict(extra='ignore')

    update_id: int
    message: Optional[TelegramMessage] = None

    @property
    def sender_username(self) -> Optional[str]:
        if self.message is None or self.message.from_user is None:
            return None
        return self.message.from_user.username


class OutboundMessage(BaseModel):
    """Message dispatched to the gateway; never persisted."""
    model_config = ConfigDict(frozen=True)

    chat_id: int
    text: str


class CommonTemplateData(BaseModel):
    """Values every page layout can show."""

    processing_time: str = ""
    current_year: int = 0


class IndexData(BaseModel):
    kind: Literal["index"] = "index"
    common: CommonTemplateData
    posts: List[Post]


class DetailData(BaseModel):
    kind: Literal["detail"] = "detail"
    common: CommonTemplateData
    post: Post


class PageData(BaseModel):
    kind: Literal["page"] = "page"
    common: CommonTemplateData
    recent_posts: List[Post]


ViewData = Annotated[Union[IndexData, DetailData, PageData], Field(discriminator="kind")]
