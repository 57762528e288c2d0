"""Question model returned by the /questions routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from stackex.codec.values import JSON_KEY, URL, Convertible
from stackex.models.user import User


@dataclass
class Question(Convertible):
    """A question post.

    The API names the identifier ``question_id``; it is exposed as
    ``post_id`` so questions, answers and comments share the attribute.
    """
    post_id: int | None = field(default=None, metadata={JSON_KEY: "question_id"})
    title: str | None = None
    body: str | None = None
    body_markdown: str | None = None
    link: URL | None = None
    owner: User | None = None
    tags: list[str] = field(default_factory=list)
    score: int | None = None
    up_vote_count: int | None = None
    down_vote_count: int | None = None
    view_count: int | None = None
    answer_count: int | None = None
    comment_count: int | None = None
    favorite_count: int | None = None
    is_answered: bool | None = None
    accepted_answer_id: int | None = None
    bounty_amount: int | None = None
    closed_reason: str | None = None
    creation_date: datetime | None = None
    last_activity_date: datetime | None = None
    last_edit_date: datetime | None = None
    closed_date: datetime | None = None
    bounty_closes_date: datetime | None = None

    @property
    def is_closed(self) -> bool:
        return self.closed_date is not None
