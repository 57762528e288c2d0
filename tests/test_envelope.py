"""
Tests for the response envelope decoder
"""

import json

import pandas as pd
import pytest

from stackex.codec.envelope import APIResponse, decode_envelope, parse_body
from stackex.core.exceptions import APIError, DecodeError
from stackex.models import Question, User


def _body(payload):
    return json.dumps(payload).encode("utf-8")


class TestParseBody:
    """Test raw body parsing"""

    def test_empty_body(self):
        """Test an empty body is a DecodeError"""
        with pytest.raises(DecodeError, match="Empty response body"):
            parse_body(b"")

    def test_invalid_json(self):
        """Test non-JSON text is a DecodeError"""
        with pytest.raises(DecodeError) as exc_info:
            parse_body(b"<html>Service Unavailable</html>", route="questions/1")
        assert exc_info.value.route == "questions/1"
        assert exc_info.value.original_error is not None

    def test_non_object_body(self):
        """Test a top-level array is a DecodeError"""
        with pytest.raises(DecodeError, match="not a JSON object"):
            parse_body(b"[1, 2]")

    def test_accepts_text(self):
        """Test str bodies are accepted"""
        assert parse_body('{"a": 1}') == {"a": 1}


class TestSuccessEnvelope:
    """Test decoding of success envelopes"""

    def test_empty_items_with_quota(self):
        """Test an empty page decodes with quota and no failure"""
        response = decode_envelope(_body({"items": [], "quota_remaining": 123, "quota_max": 456}))
        assert response.items == []
        assert response.quota_remaining == 123
        assert response.quota_max == 456
        assert response.has_more is False
        assert not response.is_error

    def test_typed_items(self):
        """Test items decode into the requested model"""
        response = decode_envelope(
            _body({"items": [{"question_id": 1}, {"question_id": 2}], "quota_remaining": 1, "quota_max": 2}),
            Question,
        )
        assert [q.post_id for q in response.items] == [1, 2]

    def test_untyped_items_stay_mappings(self):
        """Test items are raw mappings without a target type"""
        response = decode_envelope(_body({"items": [{"a": 1}], "quota_remaining": 1, "quota_max": 2}))
        assert response.items == [{"a": 1}]

    def test_unknown_item_fields_ignored(self):
        """Test extra fields on items never fail decoding"""
        response = decode_envelope(
            _body({"items": [{"user_id": 5, "brand_new_field": [1]}], "quota_remaining": 1, "quota_max": 2}), User
        )
        assert response.items[0].user_id == 5

    def test_has_more_and_backoff(self):
        """Test optional metadata fields"""
        response = decode_envelope(
            _body({"items": [], "has_more": True, "backoff": 10, "quota_remaining": 1, "quota_max": 2})
        )
        assert response.has_more is True
        assert response.backoff == 10

    def test_paging_fields(self):
        """Test total/page/page_size/type decode when the filter includes them"""
        response = decode_envelope(
            _body(
                {
                    "items": [],
                    "quota_remaining": 1,
                    "quota_max": 2,
                    "page": 3,
                    "page_size": 30,
                    "total": 1000,
                    "type": "question",
                }
            )
        )
        assert (response.page, response.page_size, response.total, response.type) == (3, 30, 1000, "question")

    def test_bare_backoff_notice(self):
        """Test a body with only a backoff decodes to an empty envelope"""
        response = decode_envelope(_body({"backoff": 1}))
        assert response.items == []
        assert response.backoff == 1
        assert not response.has_quota

    def test_empty_object(self):
        """Test {} decodes to an empty envelope without quota"""
        response = decode_envelope(b"{}")
        assert response.items == []
        assert response.quota_remaining is None

    def test_decoding_twice_is_identical(self):
        """Test decoding is deterministic"""
        raw = _body({"items": [{"question_id": 9}], "quota_remaining": 5, "quota_max": 10})
        assert decode_envelope(raw, Question) == decode_envelope(raw, Question)


class TestMalformedEnvelope:
    """Test malformed envelopes raise DecodeError"""

    def test_missing_quota_remaining(self):
        """Test items without quota_remaining"""
        with pytest.raises(DecodeError) as exc_info:
            decode_envelope(_body({"items": [], "quota_max": 456}), route="questions/1")
        assert exc_info.value.field == "quota_remaining"
        assert exc_info.value.route == "questions/1"

    def test_missing_both_quota_fields(self):
        """Test items without any quota fields"""
        with pytest.raises(DecodeError, match="Missing quota"):
            decode_envelope(_body({"items": []}))

    def test_lone_quota_field_without_items(self):
        """Test a single quota field is malformed even without items"""
        with pytest.raises(DecodeError):
            decode_envelope(_body({"quota_max": 456}))

    def test_non_integer_quota(self):
        """Test a string quota is malformed"""
        with pytest.raises(DecodeError) as exc_info:
            decode_envelope(_body({"items": [], "quota_remaining": "123", "quota_max": 456}))
        assert exc_info.value.field == "quota_remaining"

    def test_boolean_quota(self):
        """Test booleans are not integers here"""
        with pytest.raises(DecodeError):
            decode_envelope(_body({"items": [], "quota_remaining": True, "quota_max": 456}))

    def test_items_not_a_list(self):
        """Test items must be an array"""
        with pytest.raises(DecodeError, match="JSON array"):
            decode_envelope(_body({"items": {"a": 1}, "quota_remaining": 1, "quota_max": 2}))

    def test_has_more_not_bool(self):
        """Test has_more must be a boolean"""
        with pytest.raises(DecodeError) as exc_info:
            decode_envelope(_body({"items": [], "has_more": "yes", "quota_remaining": 1, "quota_max": 2}))
        assert exc_info.value.field == "has_more"

    def test_bad_item_field_reports_route(self):
        """Test item-level failures carry the route"""
        with pytest.raises(DecodeError) as exc_info:
            decode_envelope(
                _body({"items": [{"question_id": 1, "creation_date": "today"}], "quota_remaining": 1, "quota_max": 2}),
                Question,
                route="questions/1",
            )
        assert exc_info.value.route == "questions/1"
        assert exc_info.value.field == "creation_date"


class TestErrorEnvelope:
    """Test the error-signal track"""

    def test_error_envelope_decodes(self):
        """Test an error body decodes to an envelope flagged as an error"""
        response = decode_envelope(
            _body(
                {
                    "error_id": 502,
                    "error_name": "throttle_violation",
                    "error_message": "too many requests from this IP",
                    "backoff": 30,
                    "quota_remaining": 0,
                    "quota_max": 300,
                }
            )
        )
        assert response.is_error
        assert response.backoff == 30
        assert response.quota_remaining == 0
        assert response.items == []

    def test_error_envelope_without_quota(self):
        """Test quota fields are optional on error envelopes"""
        response = decode_envelope(_body({"error_id": 400, "error_name": "bad_parameter"}))
        assert response.is_error
        assert not response.has_quota

    def test_to_error(self):
        """Test the envelope builds the matching APIError"""
        response = decode_envelope(
            _body({"error_id": 404, "error_name": "no_method", "error_message": "no such method", "backoff": 5})
        )
        error = response.to_error(route="nope", status_code=404)
        assert isinstance(error, APIError)
        assert error.error_id == 404
        assert error.error_name == "no_method"
        assert error.status_code == 404
        assert error.backoff == 5
        assert "no such method" in str(error)
        assert "nope" in str(error)


class TestToDataFrame:
    """Test the DataFrame view of items"""

    def test_items_become_rows(self):
        """Test encoded items become one row each"""
        response = decode_envelope(
            _body(
                {
                    "items": [
                        {"question_id": 1, "title": "A", "creation_date": 60},
                        {"question_id": 2, "title": "B", "owner": {"user_id": 7}},
                    ],
                    "quota_remaining": 1,
                    "quota_max": 2,
                }
            ),
            Question,
        )
        df = response.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 2
        assert list(df["question_id"]) == [1, 2]
        assert "owner.user_id" in df.columns
        assert df.loc[0, "creation_date"] == 60

    def test_empty_items(self):
        """Test no items gives an empty DataFrame"""
        assert APIResponse().to_dataframe().empty
