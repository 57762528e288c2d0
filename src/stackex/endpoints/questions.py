"""/questions/{ids} and /questions/{ids}/comments."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

from stackex.codec.envelope import APIResponse
from stackex.core.config import BackoffBehavior
from stackex.endpoints.base import SupportsAPIRequest, build_route, require_ids
from stackex.models import Comment, Question

if TYPE_CHECKING:
    from stackex.api.dispatch import Completion


class QuestionsMixin:
    """Question and question-comment calls."""

    # ==================== /questions/{ids} ====================

    def fetch_questions(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Question]:
        """
        Fetch questions by ID.

        Args:
            ids: Question IDs (at most 100 per call)
            parameters: Extra query parameters; they win over client defaults
            backoff_behavior: What to do if the route is backed off

        Raises:
            ValueError: If ``ids`` is empty
        """
        route = build_route("questions", require_ids(ids))
        return self.perform_api_request(route, Question, parameters, backoff_behavior)

    def fetch_questions_async(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        callback: Completion[APIResponse[Question]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        """Async form of ``fetch_questions``; an empty ``ids`` fails through ``callback``."""
        try:
            route = build_route("questions", require_ids(ids))
        except ValueError as e:
            return self.fail_async("questions", e, callback)
        return self.perform_api_request_async(route, Question, parameters, backoff_behavior, callback=callback)

    def fetch_question(
        self,
        question_id: int,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Question]:
        return self.fetch_questions([question_id], parameters, backoff_behavior)

    def fetch_question_async(
        self,
        question_id: int,
        callback: Completion[APIResponse[Question]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        return self.fetch_questions_async([question_id], callback, parameters, backoff_behavior)

    # ==================== /questions/{ids}/comments ====================

    def fetch_comments_on_questions(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Comment]:
        """
        Fetch the comments on the given questions.

        Raises:
            ValueError: If ``ids`` is empty
        """
        route = build_route("questions", require_ids(ids), "comments")
        return self.perform_api_request(route, Comment, parameters, backoff_behavior)

    def fetch_comments_on_questions_async(
        self: SupportsAPIRequest,
        ids: Iterable[int],
        callback: Completion[APIResponse[Comment]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        try:
            route = build_route("questions", require_ids(ids), "comments")
        except ValueError as e:
            return self.fail_async("questions/comments", e, callback)
        return self.perform_api_request_async(route, Comment, parameters, backoff_behavior, callback=callback)

    def fetch_comments_on_question(
        self,
        question_id: int,
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> APIResponse[Comment]:
        return self.fetch_comments_on_questions([question_id], parameters, backoff_behavior)

    def fetch_comments_on_question_async(
        self,
        question_id: int,
        callback: Completion[APIResponse[Comment]],
        parameters: Mapping[str, Any] | None = None,
        backoff_behavior: BackoffBehavior = BackoffBehavior.WAIT,
    ) -> Future:
        return self.fetch_comments_on_questions_async([question_id], callback, parameters, backoff_behavior)
