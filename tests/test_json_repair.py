"""Tests for extracting and repairing JSON from model text."""

import json

import pytest

from contracts import ResponseParseFailure
from parsing import extract_json, parse_model_json, repair_json


class TestExtractJson:
    """Test extract_json."""

    def test_prefers_fenced_block(self):
        text = 'Here is the review:\n```json\n{"a": 1}\n```\nLet me know {"b": 2}'
        assert extract_json(text) == '{"a": 1}'

    def test_fence_without_language(self):
        assert extract_json('```\n{"a": [1, 2]}\n```') == '{"a": [1, 2]}'

    def test_object_inside_prose(self):
        text = 'Sure! {"reviewed_items": []} Hope this helps.'
        assert extract_json(text) == '{"reviewed_items": []}'

    def test_strips_bom_and_zero_width(self):
        assert extract_json("\ufeff{\"a\": 1}\u200b") == '{"a": 1}'

    def test_no_object_returns_raw(self):
        assert extract_json("  no json here ") == "no json here"

    def test_truncated_object_keeps_tail(self):
        """Text after the last brace is kept when the object is cut off."""
        text = '{"a": [{"x": 1}, {"y": 2'
        assert extract_json(text) == text


class TestRepairJson:
    """Test repair_json."""

    def test_valid_json_unchanged(self):
        valid = '{"items": [{"name": "Slab", "qty": 10}], "summary": {"notes": "ok"}}'
        assert repair_json(valid) == valid

    def test_idempotent(self):
        truncated = '{"missing_items": [{"name": "A"}, {"name": "B", "desc'
        once = repair_json(truncated)
        assert repair_json(once) == once

    def test_mid_array_truncation_keeps_complete_elements(self):
        truncated = '{"missing_items": [{"name": "A", "category": "x"}, {"name": "B", "cat'
        data = json.loads(repair_json(truncated))
        assert data == {"missing_items": [{"name": "A", "category": "x"}]}

    def test_truncated_after_comma(self):
        data = json.loads(repair_json('{"items": [{"a": 1}, '))
        assert data == {"items": [{"a": 1}]}

    def test_unterminated_string_element_dropped(self):
        data = json.loads(repair_json('{"notes": ["first", "sec'))
        assert data == {"notes": ["first"]}

    def test_dangling_key_removed(self):
        data = json.loads(repair_json('{"summary": {"notes": "ok", "critical_issues":'))
        assert data == {"summary": {"notes": "ok"}}

    def test_closers_innermost_first(self):
        data = json.loads(repair_json('{"a": [{"b": [1, 2'))
        assert data == {"a": [{"b": [1, 2]}]}

    def test_trailing_commas_removed(self):
        data = json.loads(repair_json('{"a": [1, 2,], "b": {"c": 1,},}'))
        assert data == {"a": [1, 2], "b": {"c": 1}}

    def test_comma_inside_string_kept(self):
        data = json.loads(repair_json('{"a": "x,]", "b": [1,]}'))
        assert data == {"a": "x,]", "b": [1]}

    def test_escaped_quote_inside_string(self):
        data = json.loads(repair_json('{"a": "say \\"hi\\"", "b": [1'))
        assert data == {"a": 'say "hi"', "b": [1]}

    def test_always_returns_string(self):
        assert isinstance(repair_json(""), str)
        assert isinstance(repair_json("not json at all"), str)


class TestParseModelJson:
    """Test parse_model_json."""

    def test_plain(self):
        assert parse_model_json('{"a": 1}') == {"a": 1}

    def test_fenced_truncated(self):
        text = '```json\n{"validated_items": [{"item_index": 1}, {"item_index": 2, "item_na\n```'
        assert parse_model_json(text) == {"validated_items": [{"item_index": 1}]}

    def test_unfenced_truncated(self):
        text = 'Result: {"missing_items": [{"name": "Fans"}, {"name": "Lights", "loc'
        assert parse_model_json(text) == {"missing_items": [{"name": "Fans"}]}

    def test_empty_raises(self):
        with pytest.raises(ResponseParseFailure):
            parse_model_json("   ")

    def test_garbage_raises_with_raw_text(self):
        with pytest.raises(ResponseParseFailure) as exc_info:
            parse_model_json("I could not review these items.")
        assert exc_info.value.raw_text == "I could not review these items."
