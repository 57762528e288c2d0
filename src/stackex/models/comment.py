"""Comment model returned by the /comments routes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from stackex.codec.values import URL, Convertible
from stackex.models.user import User


@dataclass
class Comment(Convertible):
    """A comment on a question or answer."""
    comment_id: int | None = None
    post_id: int | None = None  # The question or answer commented on
    body: str | None = None
    body_markdown: str | None = None
    link: URL | None = None
    owner: User | None = None
    reply_to_user: User | None = None
    score: int | None = None
    edited: bool | None = None
    creation_date: datetime | None = None
