"""User models returned by the /users routes and embedded as post owners."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from stackex.codec.values import URL, Convertible


class UserType(Enum):
    """Account kind of a user."""
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    MODERATOR = "moderator"
    DOES_NOT_EXIST = "does_not_exist"


class UserInfoType(Enum):
    """How much of the user object the server returned."""
    FULL_USER = "full_user"
    SHALLOW_USER = "shallow_user"
    NETWORK_USER = "network_user"
    UNDEFINED = "undefined"


@dataclass
class BadgeCount(Convertible):
    """Badge totals of a user."""
    bronze: int | None = None
    silver: int | None = None
    gold: int | None = None

    @property
    def total(self) -> int:
        return (self.bronze or 0) + (self.silver or 0) + (self.gold or 0)


@dataclass
class User(Convertible):
    """A user on one site.

    Shallow users (post owners, comment authors) only carry a subset of
    the fields; every field is therefore optional.
    """
    user_id: int | None = None
    account_id: int | None = None
    display_name: str | None = None
    user_type: UserType | None = None
    reputation: int | None = None
    badge_counts: BadgeCount | None = None
    accept_rate: int | None = None
    about_me: str | None = None
    age: int | None = None
    location: str | None = None
    link: URL | None = None
    profile_image: URL | None = None
    website_url: URL | None = None
    is_employee: bool | None = None
    creation_date: datetime | None = None
    last_access_date: datetime | None = None
    last_modified_date: datetime | None = None
    timed_penalty_date: datetime | None = None  # Set while the user is suspended
    answer_count: int | None = None
    question_count: int | None = None
    view_count: int | None = None
    up_vote_count: int | None = None
    down_vote_count: int | None = None
    reputation_change_day: int | None = None
    reputation_change_week: int | None = None
    reputation_change_month: int | None = None
    reputation_change_quarter: int | None = None
    reputation_change_year: int | None = None

    @property
    def info_type(self) -> UserInfoType:
        """Classify the user by which fields the server sent."""
        if self.user_id is None and self.account_id is None and self.display_name is None:
            return UserInfoType.UNDEFINED
        if self.user_id is None:
            return UserInfoType.NETWORK_USER
        if self.creation_date is None:
            return UserInfoType.SHALLOW_USER
        return UserInfoType.FULL_USER
