from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.orm import Session

from notevault.capture.errors import CaptureBusy, CaptureNotFound
from notevault.capture.locks import CaptureLock, NullCaptureLock, RedisCaptureLock
from notevault.capture.pipeline import CapturePipeline, Generator
from notevault.capture.store import SqlCaptureStore
from notevault.core.celery_app import celery
from notevault.core.config import settings
from notevault.core.db import SessionLocal
from notevault.integrations.anthropic import AnthropicGenerator
from notevault.models.tables import Capture

log = logging.getLogger("notevault.tasks")


@dataclass(frozen=True)
class RetryPolicy:
    """At-least-once delivery with exponential backoff, capped at max_attempts."""

    max_attempts: int = 3
    base_delay_s: float = 5.0

    def should_retry(self, exc: Exception, *, attempt: int) -> bool:
        if isinstance(exc, CaptureNotFound):
            return False
        return attempt < self.max_attempts

    def countdown(self, failed_attempt: int) -> float:
        return self.base_delay_s * 2 ** (failed_attempt - 1)


class Scheduler(Protocol):
    def schedule(self, capture_id: str, attempt: int) -> None: ...


class CeleryScheduler:
    def __init__(self, policy: RetryPolicy):
        self.policy = policy

    def schedule(self, capture_id: str, attempt: int) -> None:
        delay = self.policy.countdown(attempt - 1)
        log.info("Capture %s: scheduling attempt %s in %.1fs", capture_id, attempt, delay)
        # Eager mode runs inline so tests do not depend on Celery import order.
        if settings.CELERY_TASK_ALWAYS_EAGER:
            process_capture(capture_id, attempt=attempt)
        else:
            process_capture.apply_async(args=[capture_id], kwargs={"attempt": attempt}, countdown=delay)


def retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=settings.CAPTURE_MAX_ATTEMPTS, base_delay_s=settings.CAPTURE_RETRY_BASE_DELAY_S)


def build_generator() -> Generator:
    return AnthropicGenerator.from_settings()


def build_lock() -> CaptureLock:
    if settings.CAPTURE_LOCK_ENABLED:
        return RedisCaptureLock.from_url(settings.REDIS_URL, timeout_s=settings.CAPTURE_LOCK_TIMEOUT_S)
    return NullCaptureLock()


def build_pipeline() -> CapturePipeline:
    return CapturePipeline(store=SqlCaptureStore(SessionLocal), generator=build_generator(), lock=build_lock())


@celery.task(name="notevault.tasks.capture_tasks.process_capture")
def process_capture(capture_id: str, attempt: int = 1) -> dict:
    """Run the capture pipeline once and decide whether to try again.

    - not found: reported, never retried.
    - busy (another worker holds the capture): rescheduled, capture untouched.
    - any other failure: the pipeline already marked the capture failed; a new
      attempt is scheduled until the policy gives up.
    """

    try:
        result = build_pipeline().process(capture_id)
    except CaptureNotFound:
        log.warning("Capture %s not found; dropping job", capture_id)
        return {"ok": False, "reason": "not_found", "capture_id": capture_id}
    except Exception as e:
        return _handle_failure(capture_id, attempt=attempt, exc=e)

    return {
        "ok": True,
        "status": "published",
        "capture_id": capture_id,
        "attempt": attempt,
        "title": result.title,
        "file_path": result.file_path,
        "idempotent": result.idempotent,
    }


def _handle_failure(capture_id: str, *, attempt: int, exc: Exception, scheduler: Scheduler | None = None) -> dict:
    policy = retry_policy()
    reason = "busy" if isinstance(exc, CaptureBusy) else "failed"

    if policy.should_retry(exc, attempt=attempt):
        log.warning("Capture %s attempt %s/%s %s: %s", capture_id, attempt, policy.max_attempts, reason, exc)
        (scheduler or CeleryScheduler(policy)).schedule(capture_id, attempt + 1)
        return {"ok": False, "reason": "retry_scheduled", "capture_id": capture_id, "attempt": attempt, "error": str(exc)}

    log.error("Capture %s giving up after %s attempt(s): %s", capture_id, attempt, exc)
    return {"ok": False, "reason": reason, "capture_id": capture_id, "attempt": attempt, "error": str(exc)}


def enqueue_capture(db: Session, *, capture_id: str) -> dict:
    """Hand a capture to the worker unless it opted out of processing."""

    c: Capture | None = db.query(Capture).filter(Capture.id == capture_id).one_or_none()
    if not c:
        return {"ok": False, "reason": "not_found", "capture_id": capture_id}

    if c.skip_processing:
        return {"ok": True, "status": "skipped", "capture_id": capture_id}

    if settings.CELERY_TASK_ALWAYS_EAGER:
        return process_capture(capture_id)

    res = process_capture.delay(capture_id)
    return {"ok": True, "status": "queued", "capture_id": capture_id, "task_id": res.id}
