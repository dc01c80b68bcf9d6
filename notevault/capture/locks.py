from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol

from redis import Redis
from redis.exceptions import LockError

from notevault.capture.errors import CaptureBusy

log = logging.getLogger("notevault.locks")


class CaptureLock(Protocol):
    """At most one active pipeline run per capture id.

    ``hold`` raises CaptureBusy when another holder has the capture.
    """

    def hold(self, capture_id: str): ...


class NullCaptureLock:
    """No exclusion; same-capture serialization is left to the dispatcher."""

    @contextmanager
    def hold(self, capture_id: str) -> Iterator[None]:
        yield


class RedisCaptureLock:
    """Cross-worker exclusion backed by a Redis lock with expiry.

    The expiry bounds how long a crashed worker can keep a capture locked.
    """

    def __init__(self, client: Redis, *, timeout_s: int = 600, prefix: str = "notevault:capture-lock:"):
        self.client = client
        self.timeout_s = timeout_s
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, timeout_s: int = 600) -> "RedisCaptureLock":
        return cls(Redis.from_url(url, socket_connect_timeout=2, socket_timeout=5), timeout_s=timeout_s)

    @contextmanager
    def hold(self, capture_id: str) -> Iterator[None]:
        lock = self.client.lock(self.prefix + capture_id, timeout=self.timeout_s, blocking=False)
        if not lock.acquire(blocking=False):
            raise CaptureBusy(capture_id)
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                # Expired while we were still working; another worker may own it now.
                log.warning("Capture lock for %s expired before release", capture_id)
