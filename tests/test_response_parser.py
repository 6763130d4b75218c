"""
Tests for correction response parsing.
"""

import json

import pytest

from content_fix.services.correction import Content, ResponseParser, parse_correction_response
from content_fix.services.correction.response_parser import clean_response_text, strip_code_fence


@pytest.fixture
def original():
    return Content(title="Old title", meta_description="Old meta", body="<p>Old body</p>")


class TestParseCorrectionResponse:
    """Tests for parse_correction_response."""

    def test_plain_json(self, original):
        raw = json.dumps({"title": "New", "meta_description": "New meta", "content": "<p>New</p>"})
        assert parse_correction_response(raw, original) == Content("New", "New meta", "<p>New</p>")

    def test_json_fence(self, original):
        raw = 'Here you go:\n```json\n{"title": "Fenced"}\n```\nDone.'
        result = parse_correction_response(raw, original)
        assert result.title == "Fenced"

    def test_generic_fence(self, original):
        raw = '```\n{"title": "Fenced"}\n```'
        assert parse_correction_response(raw, original).title == "Fenced"

    def test_prose_around_object(self, original):
        raw = 'Sure! The corrected content is {"title": "From prose"} - hope it helps.'
        assert parse_correction_response(raw, original).title == "From prose"

    def test_partial_response_keeps_other_fields(self, original):
        """Fields the backend omits stay byte-identical to the original."""
        result = parse_correction_response('{"title": "Only title"}', original)

        assert result.title == "Only title"
        assert result.meta_description == original.meta_description
        assert result.body == original.body

    def test_null_fields_ignored(self, original):
        result = parse_correction_response('{"title": null, "content": "<p>New</p>"}', original)
        assert result.title == original.title
        assert result.body == "<p>New</p>"

    def test_unknown_keys_ignored(self, original):
        result = parse_correction_response('{"title": "T", "explanation": "shortened"}', original)
        assert result == Content("T", original.meta_description, original.body)

    def test_empty_object_returns_original(self, original):
        assert parse_correction_response("{}", original) == original

    def test_mapping_input(self, original):
        assert parse_correction_response({"content": "<p>dict</p>"}, original).body == "<p>dict</p>"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "I could not correct this content.",
            "[1, 2, 3]",
            '"just a string"',
            "{not json at all}",
            '{"title": 42}',
            '{"title": ["a", "b"]}',
        ],
    )
    def test_unusable_responses(self, original, raw):
        assert parse_correction_response(raw, original) is None

    def test_non_string_input(self, original):
        assert parse_correction_response(None, original) is None
        assert parse_correction_response(42, original) is None

    def test_control_characters_stripped(self, original):
        raw = '\x00{"title": "Clean"}\x07'
        assert parse_correction_response(raw, original).title == "Clean"

    def test_original_not_mutated(self, original):
        snapshot = original.canonical_json()
        parse_correction_response('{"title": "New"}', original)
        assert original.canonical_json() == snapshot

    def test_parser_wrapper(self, original):
        assert ResponseParser().parse('{"title": "Wrapped"}', original).title == "Wrapped"


class TestCleaning:
    def test_prefers_json_fence(self):
        text = "```python\nprint(1)\n```\n```json\n{}\n```"
        assert strip_code_fence(text).strip() == "{}"

    def test_no_fence(self):
        assert strip_code_fence('{"a": 1}') == '{"a": 1}'

    def test_raw_newlines_inside_values(self, original):
        """Multi-line HTML bodies sent without escaping still parse."""
        raw = '{"title": "New", "content": "<p>line one</p>\n<p>line two</p>"}'
        result = parse_correction_response(raw, original)

        assert result.title == "New"
        assert result.body == "<p>line one</p><p>line two</p>"

    def test_strips_newlines_and_tabs(self):
        assert clean_response_text("{\n\t}\r\n") == "{}"
