"""Unit tests for decoding the narrative insight payload."""

import json

import pytest

from market_digest.services.insight_parser import (
    extract_content,
    parse_raw_insights,
    strip_code_fence,
)


def insight(title="Fed holds", description="Rates unchanged [1].", link=None):
    item = {"title": title, "description": description}
    if link is not None:
        item["link"] = link
    return item


class TestExtractContent:
    def test_reads_first_choice_message(self, make_envelope):
        """Test content is read from choices[0].message.content."""
        envelope = make_envelope('{"insights": []}')
        assert extract_content(envelope) == '{"insights": []}'

    @pytest.mark.parametrize(
        "envelope",
        [
            {},
            {"choices": []},
            {"choices": "nope"},
            {"choices": [None]},
            {"choices": [{"message": None}]},
            {"choices": [{"message": {"content": 7}}]},
        ],
    )
    def test_missing_content_is_none(self, envelope):
        """Test malformed choices yield None."""
        assert extract_content(envelope) is None


class TestStripCodeFence:
    def test_json_fence(self):
        """Test ```json fences are removed."""
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        """Test bare ``` fences are removed."""
        assert strip_code_fence('```\n[1, 2]\n```') == "[1, 2]"

    def test_unfenced_text_unchanged(self):
        """Test plain JSON passes through trimmed."""
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestParseRawInsights:
    def test_keyed_object(self):
        """Test the requested {"insights": [...]} shape."""
        content = json.dumps({"insights": [insight(link="https://reuters.com/x/y")]})

        result = parse_raw_insights(content)

        assert len(result) == 1
        assert result[0].title == "Fed holds"
        assert result[0].link == "https://reuters.com/x/y"

    def test_fenced_payload(self):
        """Test fenced JSON is decoded."""
        content = "```json\n" + json.dumps({"insights": [insight(), insight("Oil")]}) + "\n```"

        result = parse_raw_insights(content)

        assert [item.title for item in result] == ["Fed holds", "Oil"]

    def test_top_level_array(self):
        """Test a bare array is accepted."""
        result = parse_raw_insights(json.dumps([insight()]))
        assert len(result) == 1

    def test_first_list_field_used(self):
        """Test the array may sit under another key."""
        content = json.dumps({"date": "today", "items": [insight()], "other": [insight("x")]})

        result = parse_raw_insights(content)

        assert [item.title for item in result] == ["Fed holds"]

    @pytest.mark.parametrize("content", [None, "", "   ", "not json at all", "{\"insights\": [", 42])
    def test_undecodable_content_is_empty(self, content):
        """Test undecodable content yields an empty list."""
        assert parse_raw_insights(content) == []

    def test_object_without_array_is_empty(self):
        """Test an object with no list field yields nothing."""
        assert parse_raw_insights(json.dumps({"title": "lonely"})) == []

    def test_invalid_elements_skipped(self):
        """Test non-objects and incomplete objects are dropped, order kept."""
        content = json.dumps({
            "insights": [
                "just a string",
                insight("First"),
                {"title": "No description"},
                insight("", "Blank title"),
                insight("Second", "Also fine"),
            ]
        })

        result = parse_raw_insights(content)

        assert [item.title for item in result] == ["First", "Second"]

    def test_non_string_link_becomes_none(self):
        """Test a non-string link is tolerated as missing."""
        content = json.dumps({"insights": [{"title": "T", "description": "D", "link": 12}]})

        result = parse_raw_insights(content)

        assert result[0].link is None

    def test_extra_fields_ignored(self):
        """Test unexpected fields do not fail decoding."""
        content = json.dumps({"insights": [dict(insight(), sentiment="bullish")]})
        assert len(parse_raw_insights(content)) == 1
