"""
Operation context — cooperative cancellation and deadlines.

Every service call takes an ``OperationContext`` as its first argument.
The context is checked at entry and at each yield point; once it is
cancelled or past its deadline, no new work is started:

    ctx = OperationContext(timeout=300)
    service.install(ctx, pkg)        # raises DeadlineExceededError late

    ctx.cancel("user pressed ^C")    # from another thread

Design notes:
    - A plain class around ``threading.Event``.  Safe to cancel from any
      thread; reads are lock-free.
    - Children derived with ``child()`` observe their parent's
      cancellation and can only shorten the deadline, never extend it.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from deskforge.core.errors import CancelledError, DeadlineExceededError


class OperationContext:
    """Cancellation signal plus optional monotonic deadline.

    Args:
        timeout: Seconds from now until the deadline (None = no deadline).
        parent: Context whose cancellation this one inherits.
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: Optional["OperationContext"] = None,
    ):
        self._event = threading.Event()
        self._reason = ""
        self._parent = parent

        deadline = time.monotonic() + timeout if timeout is not None else None
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

    @property
    def deadline(self) -> float | None:
        """Absolute ``time.monotonic()`` deadline, if any."""
        return self._deadline

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return self._reason
        if self._parent is not None:
            return self._parent.reason
        return ""

    @property
    def cancelled(self) -> bool:
        """Whether cancel() was called here or on an ancestor."""
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def cancel(self, reason: str = "") -> None:
        """Signal cancellation. Idempotent; the first reason is kept."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the context is cancelled or expired.

        Raises:
            CancelledError: cancel() was called (here or on a parent).
            DeadlineExceededError: the deadline has passed.
        """
        if self.cancelled:
            raise CancelledError(self.reason)
        if self.expired:
            raise DeadlineExceededError()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled, expired, or ``timeout`` elapses.

        Returns:
            True if the context is done when the wait ends.
        """
        limit = self.remaining()
        if timeout is not None:
            limit = timeout if limit is None else min(limit, timeout)
        if self._parent is None:
            self._event.wait(limit)
        else:
            # Poll so a parent's cancellation is observed.
            end = None if limit is None else time.monotonic() + limit
            while not self.done:
                step = 0.05 if end is None else min(0.05, end - time.monotonic())
                if step <= 0:
                    break
                self._event.wait(step)
        return self.done

    def child(self, timeout: float | None = None) -> "OperationContext":
        """Derive a context cancelled together with this one."""
        return OperationContext(timeout=timeout, parent=self)

    def __repr__(self) -> str:
        return (
            f"<OperationContext cancelled={self.cancelled} "
            f"remaining={self.remaining()!r}>"
        )


def background() -> OperationContext:
    """A fresh context with no deadline that nobody cancels."""
    return OperationContext()
