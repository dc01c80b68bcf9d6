from __future__ import annotations

import pytest

from notevault.capture.parser import (
    UNTITLED,
    extract_key_points,
    extract_summary,
    extract_tags,
    extract_title,
    parse_response,
)

RESPONSE = """# Test Title

## Summary
This is a test summary of the content.

## Key Points
- First key point
- Second key point
- Third key point

## Tags
`#testing` `#pytest` `#python`
"""


def test_title_from_hash_heading():
    assert extract_title(["# My Title", "body"]) == "My Title"


def test_title_from_title_label():
    assert extract_title(["Title: My Test Title", "other content"]) == "My Test Title"


def test_title_is_stripped():
    assert extract_title(["Title:   Spaced Title   ", "other content"]) == "Spaced Title"


def test_title_defaults_when_missing():
    assert extract_title(["no title here"]) == UNTITLED == "Untitled Note"


def test_summary_after_label_until_key_points():
    lines = ["Title: Test", "Summary:", "This is the summary.", "It spans multiple lines.", "Key Points:", "point"]
    assert extract_summary(lines) == "This is the summary.\nIt spans multiple lines."


def test_summary_after_heading_skips_blank_lines():
    lines = ["# Title", "## Summary", "", "This is the summary.", "", "## Key Points"]
    assert extract_summary(lines) == "This is the summary."


def test_summary_stops_at_any_heading():
    assert extract_summary(["Summary:", "Summary text", "## Next Section", "should not include"]) == "Summary text"


def test_summary_missing():
    assert extract_summary(["Title: Test", "No summary here"]) == ""


@pytest.mark.parametrize("bullet", ["-", "*", "•"])
def test_key_points_bullet_styles(bullet):
    lines = ["Key Points:", f"{bullet} First point", f"{bullet} Second point", "Tags:"]
    assert extract_key_points(lines) == ["First point", "Second point"]


def test_key_points_skip_prose_and_stop_at_tags():
    lines = ["## Key Points", "Some intro", "- First point", "Tags:", "- Should not be included"]
    assert extract_key_points(lines) == ["First point"]


def test_key_points_stop_at_suggested_tags():
    assert extract_key_points(["Key Points:", "- a", "Suggested Tags:", "- b"]) == ["a"]


def test_key_points_missing():
    assert extract_key_points(["Title: Test", "No key points"]) == []


def test_same_line_backtick_tags_keep_their_hash():
    assert extract_tags(["Tags: `#tag1` `#tag2` `#tag3`"]) == ["#tag1", "#tag2", "#tag3"]


def test_same_line_plain_hash_tags_are_stripped():
    assert extract_tags(["Tags: #tag1 #tag2"]) == ["tag1", "tag2"]


def test_same_line_comma_and_space_separated():
    assert extract_tags(["Tags: tag1, tag2, tag3"]) == ["tag1", "tag2", "tag3"]
    assert extract_tags(["Tags: tag1 tag2 tag3"]) == ["tag1", "tag2", "tag3"]
    assert extract_tags(["Tags: `tag1` `tag2`"]) == ["tag1", "tag2"]


def test_same_line_ignores_following_lines():
    assert extract_tags(["Tags: a", "`#b` `#c`", "- d"]) == ["a"]


def test_backtick_tags_on_next_line_are_stripped():
    assert extract_tags(["Tags:", "`#tag1` `#tag2`"]) == ["tag1", "tag2"]


def test_bullet_tags_accumulate():
    assert extract_tags(["Tags:", "", "- #tag1", "* `tag2`", "• tag3"]) == ["tag1", "tag2", "tag3"]


def test_inline_backtick_line_replaces_collected_bullets():
    lines = ["## Tags", "- #early", "`#x` `#y`", "- #late"]
    assert extract_tags(lines) == ["x", "y"]


def test_tag_scan_stops_at_next_section():
    assert extract_tags(["Tags:", "- a", "Notes: whatever", "- b"]) == ["a"]
    assert extract_tags(["## Tags", "- a", "## Related", "- b"]) == ["a"]


def test_suggested_tags_heading():
    assert extract_tags(["## Suggested Tags", "`#tag1` `#tag2`"]) == ["tag1", "tag2"]


def test_tags_header_without_content():
    assert extract_tags(["Tags:", "", "plain words"]) == []


def test_tags_missing():
    assert extract_tags(["Title: Test", "No tags here"]) == []


def test_parse_response_end_to_end():
    parsed = parse_response(RESPONSE, ["original-tag"])

    assert parsed.title == "Test Title"
    assert parsed.summary == "This is a test summary of the content."
    assert parsed.key_points == ["First key point", "Second key point", "Third key point"]
    assert parsed.tags == ["testing", "pytest", "python", "original-tag"]


def test_parse_response_does_not_dedupe_capture_tags():
    assert parse_response("Tags: a b", ["a"]).tags == ["a", "b", "a"]


@pytest.mark.parametrize("text", ["", None, "\n\n", "just prose\nwith no structure"])
def test_parse_response_degrades_to_defaults(text):
    parsed = parse_response(text)
    assert parsed.title == "Untitled Note"
    assert parsed.summary == ""
    assert parsed.key_points == []
    assert parsed.tags == []


def test_non_breaking_space_is_not_whitespace():
    nbsp = "\u00a0"

    assert extract_key_points(["Key Points:", f"-{nbsp}not a bullet", f"- kept{nbsp}"]) == [f"kept{nbsp}"]
    assert extract_tags([f"Tags: a{nbsp}b, c"]) == [f"a{nbsp}b", "c"]
    assert extract_tags(["Tags:", f"`#x`{nbsp}`#y` `#z`"]) == [f"x{nbsp}#y", "z"]
    assert extract_title([f"# {nbsp}Title"]) == f"{nbsp}Title"
