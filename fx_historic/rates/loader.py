"""Load lifecycle tracking and the gate that holds readers until data arrives."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

from fx_historic.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_LOAD_TIMEOUT = 30.0


class LoadStatus(str, Enum):
    """Lifecycle of the rate data as seen by readers."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LoadState:
    """Snapshot of the coordinator's bookkeeping."""

    status: LoadStatus = LoadStatus.PENDING
    last_message: str = "Loading exchange rates has not completed yet"
    attempts: int = 0
    ever_succeeded: bool = False


class LoadCoordinator:
    """Tracks load attempts and releases waiters on the first successful load.

    Readiness is sticky: once a load has succeeded, later failures only update
    the diagnostic message.
    """

    def __init__(self, *, default_timeout: float = DEFAULT_LOAD_TIMEOUT) -> None:
        self.default_timeout = default_timeout
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._state = LoadState()
        self._in_progress = False

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def begin_load(self) -> None:
        with self._lock:
            self._in_progress = True
            status = self._state.status
            if status is LoadStatus.FAILED and not self._state.ever_succeeded:
                status = LoadStatus.PENDING
            self._state = LoadState(
                status=status,
                last_message=self._state.last_message,
                attempts=self._state.attempts + 1,
                ever_succeeded=self._state.ever_succeeded,
            )

    def complete_load(self, success: bool, message: str) -> LoadState:
        """Record the outcome of the current attempt and wake waiters on success."""

        with self._lock:
            self._in_progress = False
            ever_succeeded = self._state.ever_succeeded or success
            self._state = LoadState(
                status=LoadStatus.READY if ever_succeeded else LoadStatus.FAILED,
                last_message=message,
                attempts=max(self._state.attempts, 1),
                ever_succeeded=ever_succeeded,
            )
            state = self._state
        if success and not self._ready.is_set():
            LOGGER.debug("First successful load; releasing waiting readers")
            self._ready.set()
        return state

    def await_ready(self, timeout: float | None = None) -> bool:
        """Block until the first successful load or ``timeout`` seconds elapse.

        Returns ``False`` on timeout. ``None`` waits for ``default_timeout``.
        """

        if self._ready.is_set():
            return True
        wait_for = self.default_timeout if timeout is None else timeout
        if wait_for <= 0:
            return False
        return self._ready.wait(wait_for)


__all__ = ["DEFAULT_LOAD_TIMEOUT", "LoadCoordinator", "LoadState", "LoadStatus"]
