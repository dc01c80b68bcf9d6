from __future__ import annotations

from datetime import datetime, timezone

from notevault.capture.templates import (
    DEFAULT_TEMPLATES,
    STANDARD,
    default_template,
    format_key_points,
    format_tags,
    render,
    render_markdown,
    render_prompt,
)

CREATED = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def _md(template: str, **overrides) -> str:
    kw = dict(
        title="Test Title",
        summary="Test summary",
        key_points=["Point 1", "Point 2"],
        tags=["tag1", "tag2"],
        created_at=CREATED,
        content_type="conversation",
        context=None,
    )
    kw.update(overrides)
    return render_markdown(template, **kw)


def test_render_replaces_every_occurrence_and_leaves_unbound():
    out = render("{{a}}-{{a}} {{b}} {{unknown}}", {"a": "x", "b": "y"})
    assert out == "x-x y {{unknown}}"


def test_render_does_not_escape_values():
    assert render("<{{v}}>", {"v": "<b>&</b>"}) == "<<b>&</b>>"


def test_render_substitutes_into_earlier_values():
    # A bound value that contains a later placeholder is rewritten by that later pass.
    out = render("{{content}} / {{title}}", {"content": "quote {{title}}", "title": "T"})
    assert out == "quote T / T"


def test_render_prompt():
    out = render_prompt(
        "Content: {{content}}, Context: {{context}}, Type: {{content_type}}",
        content="Test content",
        context="Test context",
        content_type="conversation",
    )
    assert out == "Content: Test content, Context: Test context, Type: conversation"


def test_render_prompt_without_context():
    out = render_prompt("Context: {{context}}, end", content="c", context=None, content_type="note")
    assert out == "Context: , end"


def test_key_points_and_tags_formatting():
    assert format_key_points(["First point", "Second point"]) == "- First point\n- Second point"
    assert format_key_points([]) == ""
    assert format_tags(["tag1", "tag2"]) == "  - tag1\n  - tag2"


def test_render_markdown_fields():
    assert _md("{{key_points}}") == "- Point 1\n- Point 2"
    assert _md("{{key_points}}", key_points=[]) == ""
    assert _md("Tags:\n{{tags}}") == "Tags:\n  - tag1\n  - tag2"
    assert _md("Created: {{created_at}}") == "Created: 2026-03-14 09:26"
    assert _md("Type: {{content_type}}") == "Type: conversation"


def test_context_section():
    assert _md("{{context_section}}", context="Important context") == "## Context\n\nImportant context"
    assert _md("{{context_section}}", context=None) == ""


def test_related_notes_section_is_always_empty():
    assert _md("a{{related_notes_section}}b") == "ab"


def test_standard_template_renders_front_matter():
    out = _md(STANDARD.markdown_template, context="From a call")

    assert out.startswith("---\ncreated: 2026-03-14 09:26\ntags:   - tag1\n  - tag2\ntype: conversation\n---\n")
    assert "# Test Title" in out
    assert "## Context\n\nFrom a call" in out
    assert "## Summary\n\nTest summary" in out
    assert "## Key Points\n\n- Point 1\n- Point 2" in out
    assert "{{" not in out


def test_defaults():
    assert set(DEFAULT_TEMPLATES) == {"standard", "conversation"}
    assert default_template() is STANDARD
    assert "{{content}}" in STANDARD.prompt_template
    assert "{{context}}" in STANDARD.prompt_template
    assert "Conversation: {{content}}" in default_template("conversation").prompt_template
