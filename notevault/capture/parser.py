from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

log = logging.getLogger("notevault.parser")

UNTITLED = "Untitled Note"

_TITLE = re.compile(r"^(Title:|#)")
_TITLE_MARKER = re.compile(r"^(Title:|#)\s*", re.ASCII)

_SUMMARY_HEADER = re.compile(r"^(Summary:|##\s*Summary)", re.ASCII)
_SUMMARY_STOP = re.compile(r"^(##|Key Points:|Tags:)")

_POINTS_HEADER = re.compile(r"^(Key Points:|##\s*Key Points)", re.ASCII)
_POINTS_STOP = re.compile(r"^(##|Tags:|Suggested Tags:)")

_TAGS_HEADER = re.compile(r"^(Tags:|##\s*(Suggested )?Tags)", re.ASCII)
_TAGS_SAME_LINE = re.compile(r"^Tags:\s*\S", re.ASCII)
_TAGS_PREFIX = re.compile(r"^Tags:\s*", re.ASCII)
_TAGS_STOP = re.compile(r"^(##|[A-Z][a-z]+:)")

_BULLET = re.compile(r"^[-*•]\s+", re.ASCII)
_BULLET_CHAR = re.compile(r"^[-*•]")
_LEADING_HASH = re.compile(r"^#")
_TAG_SEPARATORS = re.compile(r"[,\s]+", re.ASCII)
_WHITESPACE = re.compile(r"\s+", re.ASCII)
# ASCII whitespace and NUL only; a bare str.strip() would also remove NBSP.
_BLANK = " \t\n\v\f\r\0"


@dataclass(frozen=True)
class ParsedResponse:
    title: str
    summary: str
    key_points: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def split_lines(text: str | None) -> list[str]:
    return (text or "").split("\n")


def _find(lines: list[str], pattern: re.Pattern[str], start: int = 0) -> int | None:
    for i in range(start, len(lines)):
        if pattern.match(lines[i]):
            return i
    return None


def extract_title(lines: list[str]) -> str:
    i = _find(lines, _TITLE)
    if i is None:
        return UNTITLED
    return _TITLE_MARKER.sub("", lines[i]).strip(_BLANK)


def extract_summary(lines: list[str]) -> str:
    start = _find(lines, _SUMMARY_HEADER)
    if start is None:
        return ""

    out: list[str] = []
    for i in range(start + 1, len(lines)):
        line = lines[i]
        if _SUMMARY_STOP.match(line):
            break
        if line.strip(_BLANK):
            out.append(line)
    return "\n".join(out)


def extract_key_points(lines: list[str]) -> list[str]:
    start = _find(lines, _POINTS_HEADER)
    if start is None:
        return []

    points: list[str] = []
    for i in range(start + 1, len(lines)):
        line = lines[i]
        if _POINTS_STOP.match(line):
            break
        # Prose between bullets is ignored.
        if _BULLET.match(line):
            points.append(_BULLET.sub("", line).strip(_BLANK))
    return points


def extract_tags(lines: list[str]) -> list[str]:
    """Pull suggested tags out of the tags section.

    Accepted shapes, in order of precedence:

    1. "Tags: a, b c": content on the header line; nothing below is read.
       A leading "#" is dropped before backticks are removed, so a
       backtick-wrapped "#a" keeps its hash on this path.
    2. Bullet lines ("- #a") under the header, accumulated.
    3. A non-bullet line containing backticks under the header. Its tokens
       replace whatever bullets were collected and end the scan.
    """

    start = _find(lines, _TAGS_HEADER)
    if start is None:
        return []

    header = lines[start]
    if _TAGS_SAME_LINE.match(header):
        raw = _TAGS_PREFIX.sub("", header)
        tokens = (_LEADING_HASH.sub("", t).replace("`", "") for t in _TAG_SEPARATORS.split(raw))
        return [t for t in tokens if t]

    tags: list[str] = []
    for i in range(start + 1, len(lines)):
        line = lines[i]
        if _TAGS_STOP.match(line):
            break
        if not line.strip(_BLANK):
            continue

        if _BULLET.match(line):
            tag = _LEADING_HASH.sub("", _BULLET.sub("", line).strip(_BLANK).replace("`", ""))
            if tag:
                tags.append(tag)
            continue

        if "`" in line and not _BULLET_CHAR.match(line):
            tokens = (_LEADING_HASH.sub("", t.replace("`", "")).strip(_BLANK) for t in _WHITESPACE.split(line))
            inline = [t for t in tokens if t]
            log.debug("Tag extraction: inline backtick tags %r", inline)
            return inline

    return tags


def parse_response(text: str | None, capture_tags: list[str] | None = None) -> ParsedResponse:
    """Recover structure from free-form generator output. Never raises."""

    lines = split_lines(text)
    return ParsedResponse(
        title=extract_title(lines),
        summary=extract_summary(lines),
        key_points=extract_key_points(lines),
        tags=extract_tags(lines) + list(capture_tags or []),
    )
