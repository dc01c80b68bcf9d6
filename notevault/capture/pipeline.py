from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol

from notevault.capture.locks import CaptureLock, NullCaptureLock
from notevault.capture.parser import ParsedResponse, parse_response
from notevault.capture.status import CaptureStatus, can_restart, is_successful, restart, transition
from notevault.capture.store import DEFAULT_FOLDER, CaptureSnapshot, CaptureStore
from notevault.capture.templates import (
    DEFAULT_SYSTEM_PROMPT,
    STANDARD,
    TemplateSpec,
    default_template,
    render_markdown,
    render_prompt,
)
from notevault.capture.vault import VaultWriter
from notevault.util.time import now_utc

log = logging.getLogger("notevault.pipeline")

GENERATION_MAX_TOKENS = 2000
MARKDOWN_PREVIEW_CHARS = 500


class Generator(Protocol):
    def generate(self, *, prompt: str, max_tokens: int = ..., system: str = ...) -> str: ...


class Writer(Protocol):
    def write(self, *, content: str, title: str, folder: str | None = None) -> str: ...


@dataclass(frozen=True)
class PipelineResult:
    capture_id: str
    title: str
    summary: str
    key_points: list[str] = field(default_factory=list)
    content: str = ""
    file_path: str | None = None
    # True when the capture was already published and nothing was re-run.
    idempotent: bool = False


def effective_template(capture: CaptureSnapshot) -> TemplateSpec:
    return capture.template or default_template("standard")


class CapturePipeline:
    """One capture in, one note in the vault out.

    load -> processing -> prompt -> generate -> parse -> markdown -> vault -> published.
    Any exception after the capture is loaded marks it failed (with the error
    text) and is re-raised unchanged; retrying is the job runner's decision and
    a retry runs everything again from the start.
    """

    def __init__(
        self,
        *,
        store: CaptureStore,
        generator: Generator,
        lock: CaptureLock | None = None,
        writer_factory: Callable[[str | Path], Writer] = VaultWriter,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.generator = generator
        self.lock = lock or NullCaptureLock()
        self.writer_factory = writer_factory
        self.clock = clock

    def process(self, capture_id: str) -> PipelineResult:
        with self.lock.hold(capture_id):
            capture = self.store.get(capture_id)

            if is_successful(capture.status):
                log.info("Capture %s already published; nothing to do", capture_id)
                return _stored_result(capture)

            status = capture.status
            try:
                if can_restart(status):
                    log.info("Capture %s restarting from %s", capture_id, status.value)
                    status = restart(status)
                    self.store.update(capture_id, status=status, error_message=None)

                status = transition(status, CaptureStatus.PROCESSING)
                self.store.update(capture_id, status=status)

                result = self._run(capture)

                self.store.update(
                    capture_id,
                    status=transition(status, CaptureStatus.PUBLISHED),
                    generated_title=result.title,
                    generated_summary=result.summary,
                    generated_key_points="\n".join(result.key_points),
                    generated_content=result.content,
                    obsidian_file_path=result.file_path,
                    published_at=self.clock(),
                )
            except Exception as e:
                self._mark_failed(capture_id, e)
                raise

        log.info("Capture %s published to %s", capture_id, result.file_path)
        return result

    def _run(self, capture: CaptureSnapshot) -> PipelineResult:
        template = effective_template(capture)

        prompt = render_prompt(
            template.prompt_template,
            content=capture.content,
            context=capture.context,
            content_type=capture.content_type,
        )
        response = self.generator.generate(prompt=prompt, max_tokens=GENERATION_MAX_TOKENS, system=DEFAULT_SYSTEM_PROMPT)

        parsed = parse_response(response, capture.tags)
        log.info("Parsed content - Key Points: %r", parsed.key_points)
        log.info("Parsed content - Tags: %r", parsed.tags)

        markdown = self._render(template, capture, parsed)
        log.info("Generated markdown length: %s", len(markdown))
        log.debug("Generated markdown preview:\n%s", markdown[:MARKDOWN_PREVIEW_CHARS])

        file_path = self.writer_factory(capture.vault_path).write(
            content=markdown,
            title=parsed.title,
            folder=capture.obsidian_folder or DEFAULT_FOLDER,
        )

        return PipelineResult(
            capture_id=capture.id,
            title=parsed.title,
            summary=parsed.summary,
            key_points=parsed.key_points,
            content=markdown,
            file_path=file_path,
        )

    def _render(self, template: TemplateSpec, capture: CaptureSnapshot, parsed: ParsedResponse) -> str:
        # User templates may omit the markdown half.
        pattern = template.markdown_template
        if pattern is None:
            pattern = STANDARD.markdown_template or ""

        return render_markdown(
            pattern,
            title=parsed.title,
            summary=parsed.summary,
            key_points=parsed.key_points,
            tags=parsed.tags,
            created_at=capture.created_at,
            content_type=capture.content_type,
            context=capture.context,
        )

    def _mark_failed(self, capture_id: str, exc: Exception) -> None:
        log.error("Capture %s failed: %s", capture_id, exc)
        try:
            self.store.update(capture_id, status=CaptureStatus.FAILED, error_message=str(exc))
        except Exception:
            log.exception("Capture %s: could not record failure", capture_id)


def _stored_result(capture: CaptureSnapshot) -> PipelineResult:
    points = capture.generated_key_points
    return PipelineResult(
        capture_id=capture.id,
        title=capture.generated_title or "",
        summary=capture.generated_summary or "",
        key_points=points.split("\n") if points else [],
        content=capture.generated_content or "",
        file_path=capture.obsidian_file_path,
        idempotent=True,
    )
