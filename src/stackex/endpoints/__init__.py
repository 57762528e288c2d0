"""Endpoints module - convenience calls built on APIClient.perform_api_request.

Each route is offered as a synchronous call returning the envelope and an
``_async`` call that completes through a callback.
"""

from stackex.endpoints.base import build_route, require_ids
from stackex.endpoints.questions import QuestionsMixin
from stackex.endpoints.sites import SitesMixin
from stackex.endpoints.users import UsersMixin

__all__ = [
    "QuestionsMixin",
    "SitesMixin",
    "UsersMixin",
    "build_route",
    "require_ids",
]
