from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Protocol

from sqlalchemy.orm import Session

from notevault.capture.errors import CaptureNotFound
from notevault.capture.status import CaptureStatus, coerce
from notevault.capture.templates import TemplateSpec
from notevault.models.tables import Capture
from notevault.util.time import now_utc

DEFAULT_FOLDER = "Captures"

UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "generated_title",
        "generated_summary",
        "generated_key_points",
        "generated_content",
        "obsidian_file_path",
        "error_message",
        "published_at",
    }
)


@dataclass(frozen=True)
class CaptureSnapshot:
    """Read-only view of a capture plus what the pipeline needs from its owner."""

    id: str
    content: str
    content_type: str
    status: CaptureStatus
    vault_path: str
    created_at: datetime
    context: str | None = None
    tags: list[str] = field(default_factory=list)
    obsidian_folder: str | None = DEFAULT_FOLDER
    template: TemplateSpec | None = None
    skip_processing: bool = False
    generated_title: str | None = None
    generated_summary: str | None = None
    generated_key_points: str | None = None
    generated_content: str | None = None
    obsidian_file_path: str | None = None
    error_message: str | None = None
    published_at: datetime | None = None


class CaptureStore(Protocol):
    def get(self, capture_id: str) -> CaptureSnapshot: ...

    def update(self, capture_id: str, **fields: Any) -> None: ...


def snapshot_of(c: Capture) -> CaptureSnapshot:
    template = None
    if c.template is not None:
        template = TemplateSpec(
            name=c.template.name,
            prompt_template=c.template.prompt_template,
            markdown_template=c.template.markdown_template,
        )

    return CaptureSnapshot(
        id=c.id,
        content=c.content,
        content_type=c.content_type,
        status=coerce(c.status),
        vault_path=c.user.obsidian_vault_path,
        created_at=c.created_at,
        context=c.context,
        tags=list(c.tags or []),
        obsidian_folder=c.obsidian_folder,
        template=template,
        skip_processing=bool(c.skip_processing),
        generated_title=c.generated_title,
        generated_summary=c.generated_summary,
        generated_key_points=c.generated_key_points,
        generated_content=c.generated_content,
        obsidian_file_path=c.obsidian_file_path,
        error_message=c.error_message,
        published_at=c.published_at,
    )


class SqlCaptureStore:
    """Capture store over SQLAlchemy; every call runs in its own session."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, capture_id: str) -> CaptureSnapshot:
        with self.session_factory() as db:
            c: Capture | None = db.query(Capture).filter(Capture.id == capture_id).one_or_none()
            if not c:
                raise CaptureNotFound(capture_id)
            return snapshot_of(c)

    def update(self, capture_id: str, **fields: Any) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Not updatable on captures: {sorted(unknown)}")

        with self.session_factory() as db:
            c: Capture | None = db.query(Capture).filter(Capture.id == capture_id).one_or_none()
            if not c:
                raise CaptureNotFound(capture_id)
            for name, value in fields.items():
                if name == "status":
                    value = coerce(value).value
                setattr(c, name, value)
            c.updated_at = now_utc()
            db.commit()
