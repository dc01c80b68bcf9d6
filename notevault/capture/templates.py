from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

CREATED_AT_FORMAT = "%Y-%m-%d %H:%M"

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert assistant that processes and structures text content for knowledge management.\n"
    "Your task is to analyze the provided content and extract key information in a clear, structured format.  \n"
    "Your output should be formatted as markdown and include important links (URLs).\n"
    "\n"
    "Be concise, accurate, and focus on extracting the most valuable information from the content."
)


@dataclass(frozen=True)
class TemplateSpec:
    """Prompt/markdown pattern pair, either a user's Template row or a built-in."""

    name: str
    prompt_template: str
    markdown_template: str | None = None


STANDARD = TemplateSpec(
    name="standard",
    prompt_template=(
        "Analyze the following content and provide:\n"
        "1. A concise title\n"
        "2. A clear summary (2-3 paragraphs)\n"
        "3. Key points (bullet list)\n"
        "4. Suggested tags\n"
        "\n"
        "Content: {{content}}\n"
        "Context: {{context}}"
    ),
    markdown_template=(
        "---\n"
        "created: {{created_at}}\n"
        "tags: {{tags}}\n"
        "type: {{content_type}}\n"
        "---\n"
        "\n"
        "# {{title}}\n"
        "\n"
        "{{context_section}}\n"
        "\n"
        "## Summary\n"
        "\n"
        "{{summary}}\n"
        "\n"
        "## Key Points\n"
        "\n"
        "{{key_points}}\n"
        "\n"
        "{{related_notes_section}}"
    ),
)

CONVERSATION = TemplateSpec(
    name="conversation",
    prompt_template=(
        "Summarize this conversation and extract the main takeaways.\n"
        "\n"
        "Conversation: {{content}}"
    ),
    markdown_template=(
        "# Conversation: {{context}}\n"
        "\n"
        "{{summary}}\n"
        "\n"
        "## Main Takeaways\n"
        "\n"
        "{{key_points}}"
    ),
)

DEFAULT_TEMPLATES: dict[str, TemplateSpec] = {t.name: t for t in (STANDARD, CONVERSATION)}


def default_template(name: str = "standard") -> TemplateSpec:
    return DEFAULT_TEMPLATES[name]


def render(template: str, bindings: Mapping[str, str]) -> str:
    """Replace each ``{{name}}`` with its bound value, one binding at a time.

    Plain substring replacement: values are not escaped and unbound
    placeholders stay in the output. A value that itself contains a later
    placeholder (say a capture body quoting ``{{title}}``) gets substituted by
    that later pass.
    """

    out = template
    for name, value in bindings.items():
        out = out.replace("{{" + name + "}}", value)
    return out


def format_key_points(points: Iterable[str]) -> str:
    return "\n".join(f"- {p}" for p in points)


def format_tags(tags: Iterable[str]) -> str:
    return "\n".join(f"  - {t}" for t in tags)


def render_prompt(prompt_template: str, *, content: str, context: str | None, content_type: str) -> str:
    return render(
        prompt_template,
        {
            "content": content,
            "context": context or "",
            "content_type": content_type,
        },
    )


def render_markdown(
    markdown_template: str,
    *,
    title: str,
    summary: str,
    key_points: list[str],
    tags: list[str],
    created_at: datetime,
    content_type: str,
    context: str | None,
) -> str:
    md = render(
        markdown_template,
        {
            "title": title,
            "summary": summary,
            "key_points": format_key_points(key_points),
            "tags": format_tags(tags),
            "created_at": created_at.strftime(CREATED_AT_FORMAT),
            "content_type": content_type,
        },
    )
    # Optional sections collapse to nothing when there is nothing to show.
    return render(
        md,
        {
            "context_section": f"## Context\n\n{context}" if context is not None else "",
            "related_notes_section": "",
        },
    )
