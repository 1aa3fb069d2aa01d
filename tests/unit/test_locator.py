# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for parsing, request location and document splitting."""

import json

import pytest

from ortb_inspector.engines.request_locator import (
    RequestParseError,
    is_bid_request,
    locate_request,
    parse_request_text,
    split_documents,
)


class TestParseRequestText:
    """Tests for parse_request_text."""

    def test_parses_valid_json(self):
        """Test that valid JSON is returned as Python values."""
        assert parse_request_text('{"id": "1", "imp": []}') == {"id": "1", "imp": []}

    @pytest.mark.parametrize("text", ["", "not json", "{malformed", '{"id": "1",}'])
    def test_invalid_json_raises(self, text):
        """Test that malformed text raises with the decoder diagnostic."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_text(text)

        assert str(exc_info.value).startswith("Invalid JSON:")

    @pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", '{"bidfloor": NaN}'])
    def test_non_standard_constants_are_rejected(self, text):
        """Test that NaN and Infinity are not accepted as JSON."""
        with pytest.raises(RequestParseError, match="non-standard constant"):
            parse_request_text(text)

    def test_parse_error_is_value_error(self):
        """Test that callers can catch parse failures as ValueError."""
        with pytest.raises(ValueError):
            parse_request_text("{")

    def test_deep_nesting_is_a_parse_error(self):
        """Test that pathological nesting is reported, not raised as RecursionError."""
        text = "[" * 100_000 + "]" * 100_000

        with pytest.raises(RequestParseError):
            parse_request_text(text)


class TestLocateRequest:
    """Tests for locate_request."""

    def test_root_object_is_returned(self):
        """Test that a bare request is its own root."""
        request = {"id": "r1", "imp": []}
        assert locate_request(request) is request

    def test_envelope_is_unwrapped(self):
        """Test that requests wrapped in an envelope are found."""
        request = {"id": "r1", "imp": [{"id": "1"}]}
        assert locate_request({"request": request}) is request
        assert locate_request({"data": [{"meta": 1}, request]}) is request

    def test_identity_requires_string_id_and_imp_array(self):
        """Test that objects with the wrong id or imp types are skipped."""
        assert not is_bid_request({"id": 5, "imp": []})
        assert not is_bid_request({"id": "r1", "imp": {}})
        assert not is_bid_request({"id": "r1"})

        request = {"id": "r2", "imp": []}
        payload = {"first": {"id": 5, "imp": []}, "second": request}
        assert locate_request(payload) is request

    def test_pre_order_prefers_outer_object(self):
        """Test that an ancestor matching the identity wins over its descendants."""
        inner = {"id": "inner", "imp": []}
        outer = {"id": "outer", "imp": [inner]}

        assert locate_request({"wrapper": outer}) is outer

    def test_first_sibling_wins(self):
        """Test that siblings are searched in document order."""
        payload = json.loads('[{"x": {"id": "a", "imp": []}}, {"id": "b", "imp": []}]')
        assert locate_request(payload)["id"] == "a"

    @pytest.mark.parametrize("value", [None, 42, "text", [], {}, {"foo": {"bar": [1, 2]}}])
    def test_returns_none_without_request(self, value):
        """Test that values without a request yield None."""
        assert locate_request(value) is None


class TestSplitDocuments:
    """Tests for split_documents."""

    def test_json_array_yields_one_document_per_element(self):
        """Test that a JSON array is split element by element."""
        text = '[{"id": "a", "imp": []}, {"id": "b", "imp": []}]'
        documents = split_documents(text)

        assert [json.loads(d)["id"] for d in documents] == ["a", "b"]

    def test_concatenated_objects(self):
        """Test that back-to-back objects are split on brace depth."""
        documents = split_documents('{"id": "a", "imp": []}{"id": "b", "imp": []}')
        assert documents == ['{"id": "a", "imp": []}', '{"id": "b", "imp": []}']

    def test_line_and_comma_separated_objects(self):
        """Test that separators between documents are dropped."""
        text = '{"id": "a", "imp": []},\n\n{"id": "b", "imp": [{"id": "1"}]}\n'
        documents = split_documents(text)

        assert len(documents) == 2
        assert json.loads(documents[1])["imp"] == [{"id": "1"}]

    def test_braces_inside_strings_are_ignored(self):
        """Test that braces and escaped quotes within strings do not split."""
        text = r'{"id": "a\"}{", "imp": []} {"id": "b", "imp": []}'
        documents = split_documents(text)

        assert len(documents) == 2
        assert json.loads(documents[0])["id"] == 'a"}{'

    def test_empty_text(self):
        """Test that blank input yields no documents."""
        assert split_documents("") == []
        assert split_documents("   \n") == []

    def test_trailing_fragment_is_kept(self):
        """Test that an unterminated tail is returned so it is reported as a parse error."""
        documents = split_documents('{"id": "a", "imp": []} {"id": "b"')
        assert documents == ['{"id": "a", "imp": []}', '{"id": "b"']
