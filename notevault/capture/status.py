from __future__ import annotations

from enum import Enum

from notevault.capture.errors import InvalidTransition


class CaptureStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUMMARIZING = "summarizing"
    ENRICHING = "enriching"
    FORMATTING = "formatting"
    PUBLISHED = "published"
    FAILED = "failed"


INITIAL = CaptureStatus.PENDING
TERMINAL = frozenset({CaptureStatus.PUBLISHED, CaptureStatus.FAILED})
ACTIVE = frozenset(
    {
        CaptureStatus.PROCESSING,
        CaptureStatus.SUMMARIZING,
        CaptureStatus.ENRICHING,
        CaptureStatus.FORMATTING,
    }
)

# Forward edges only; "-> failed" from any non-terminal state is added below.
_FORWARD: dict[CaptureStatus, frozenset[CaptureStatus]] = {
    CaptureStatus.PENDING: frozenset({CaptureStatus.PROCESSING}),
    CaptureStatus.PROCESSING: frozenset(
        {
            CaptureStatus.SUMMARIZING,
            CaptureStatus.ENRICHING,
            CaptureStatus.FORMATTING,
            CaptureStatus.PUBLISHED,
        }
    ),
    CaptureStatus.SUMMARIZING: frozenset(
        {CaptureStatus.ENRICHING, CaptureStatus.FORMATTING, CaptureStatus.PUBLISHED}
    ),
    CaptureStatus.ENRICHING: frozenset({CaptureStatus.FORMATTING, CaptureStatus.PUBLISHED}),
    CaptureStatus.FORMATTING: frozenset({CaptureStatus.PUBLISHED}),
    CaptureStatus.PUBLISHED: frozenset(),
    CaptureStatus.FAILED: frozenset(),
}

TRANSITIONS: dict[CaptureStatus, frozenset[CaptureStatus]] = {
    s: (nxt if s in TERMINAL else nxt | {CaptureStatus.FAILED}) for s, nxt in _FORWARD.items()
}


def coerce(value: CaptureStatus | str) -> CaptureStatus:
    """Map a stored status string onto the enum (ValueError for unknown names)."""

    if isinstance(value, CaptureStatus):
        return value
    return CaptureStatus(value)


def can_transition(current: CaptureStatus | str, target: CaptureStatus | str) -> bool:
    return coerce(target) in TRANSITIONS[coerce(current)]


def transition(current: CaptureStatus | str, target: CaptureStatus | str) -> CaptureStatus:
    cur, tgt = coerce(current), coerce(target)
    if tgt not in TRANSITIONS[cur]:
        raise InvalidTransition(cur.value, tgt.value)
    return tgt


def is_terminal(status: CaptureStatus | str) -> bool:
    return coerce(status) in TERMINAL


def is_successful(status: CaptureStatus | str) -> bool:
    return coerce(status) is CaptureStatus.PUBLISHED


def is_active(status: CaptureStatus | str) -> bool:
    """True while a pipeline run is between "processing" and a terminal state."""

    return coerce(status) in ACTIVE


def can_restart(status: CaptureStatus | str) -> bool:
    """Whether a fresh attempt may take this capture back to pending.

    Restart is how a retried invocation re-enters: a failed capture, or one
    left mid-run by a crashed attempt. It is not an edge of the transition
    graph, and a published capture is never restarted.
    """

    s = coerce(status)
    return s is CaptureStatus.FAILED or s in ACTIVE


def restart(status: CaptureStatus | str) -> CaptureStatus:
    s = coerce(status)
    if not can_restart(s):
        raise InvalidTransition(s.value, CaptureStatus.PENDING.value)
    return INITIAL
