from __future__ import annotations


class CaptureError(Exception):
    pass


class CaptureNotFound(CaptureError):
    def __init__(self, capture_id: str):
        super().__init__(f"Capture not found: {capture_id}")
        self.capture_id = capture_id


class GenerationError(CaptureError):
    """The generation capability failed (transport, quota, model)."""


class VaultWriteError(CaptureError):
    """Creating a vault directory or writing a note failed."""


class InvalidTransition(CaptureError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Illegal status transition: {current} -> {target}")
        self.current = current
        self.target = target


class CaptureBusy(CaptureError):
    """Another invocation is already processing this capture."""

    def __init__(self, capture_id: str):
        super().__init__(f"Capture is already being processed: {capture_id}")
        self.capture_id = capture_id
