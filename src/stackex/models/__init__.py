"""Models module - decode targets for API envelope items.

This module provides:
- User, BadgeCount and the UserType / UserInfoType enums
- Question
- Comment
- Site and the SiteType / SiteState enums
"""

from stackex.models.comment import Comment
from stackex.models.question import Question
from stackex.models.site import Site, SiteState, SiteType
from stackex.models.user import BadgeCount, User, UserInfoType, UserType

__all__ = [
    "BadgeCount",
    "Comment",
    "Question",
    "Site",
    "SiteState",
    "SiteType",
    "User",
    "UserInfoType",
    "UserType",
]
