"""
Core Module - Execution Context.

============================================================
RESPONSIBILITY
============================================================
Carries cancellation, an optional deadline and request-scoped
values through lifecycle calls.

- Contexts form a tree; derived contexts see their parents' values
- Cancelling a context cancels every context derived from it
- Values are looked up, never owned

============================================================
USAGE
============================================================
    ctx = ExecutionContext.background()
    ctx = ctx.with_value("request_id", "abc")
    child, cancel = ctx.with_timeout(5.0)
    ...
    cancel()

============================================================
"""

import threading
import time
from typing import Any, Callable, List, Optional, Tuple


REASON_CANCELLED = "cancelled"
REASON_DEADLINE_EXCEEDED = "deadline exceeded"

_NO_KEY = object()


class ExecutionContext:
    """
    Immutable-by-convention context node.

    Each node holds at most one key/value pair and a reference to its
    parent. Cancellable nodes own a threading.Event; plain value nodes
    share the event of their nearest cancellable ancestor.
    """

    def __init__(
        self,
        parent: Optional["ExecutionContext"] = None,
        key: Any = _NO_KEY,
        value: Any = None,
        cancellable: bool = False,
        deadline: Optional[float] = None,
    ):
        self._parent = parent
        self._key = key
        self._value = value
        self._lock = threading.Lock()
        self._children: List["ExecutionContext"] = []
        self._reason: Optional[str] = None

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if cancellable or parent is None:
            self._done: threading.Event = threading.Event()
            self._owner: "ExecutionContext" = self
            if parent is not None:
                parent._owner._attach(self)
        else:
            self._done = parent._done
            self._owner = parent._owner

    # --------------------------------------------------------
    # Construction
    # --------------------------------------------------------

    @classmethod
    def background(cls) -> "ExecutionContext":
        """Root context: never cancelled, no deadline, no values."""
        return cls()

    def with_value(self, key: Any, value: Any) -> "ExecutionContext":
        """Derive a context carrying key -> value."""
        return ExecutionContext(parent=self, key=key, value=value)

    def with_cancel(self) -> Tuple["ExecutionContext", Callable[[], None]]:
        """Derive a cancellable context and its cancel function."""
        child = ExecutionContext(parent=self, cancellable=True)
        return child, lambda: child._cancel(REASON_CANCELLED)

    def with_timeout(self, seconds: float) -> Tuple["ExecutionContext", Callable[[], None]]:
        """Derive a context that cancels itself after `seconds`."""
        child = ExecutionContext(
            parent=self,
            cancellable=True,
            deadline=time.monotonic() + seconds,
        )
        remaining = max(0.0, child.deadline - time.monotonic())
        timer = threading.Timer(remaining, child._cancel, args=(REASON_DEADLINE_EXCEEDED,))
        timer.daemon = True
        timer.start()

        def cancel() -> None:
            timer.cancel()
            child._cancel(REASON_CANCELLED)

        return child, cancel

    # --------------------------------------------------------
    # Values
    # --------------------------------------------------------

    def value(self, key: Any) -> Any:
        """Return the nearest value bound to key, or None."""
        ctx: Optional[ExecutionContext] = self
        while ctx is not None:
            if ctx._key is not _NO_KEY and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return None

    # --------------------------------------------------------
    # Cancellation
    # --------------------------------------------------------

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic deadline, if any."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._done.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._owner._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout; return True if cancelled."""
        return self._done.wait(timeout)

    def _attach(self, child: "ExecutionContext") -> None:
        with self._lock:
            cancelled = self._done.is_set()
            if not cancelled:
                self._children.append(child)
        if cancelled:
            child._cancel(self._reason or REASON_CANCELLED)

    def _detach(self, child: "ExecutionContext") -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _cancel(self, reason: str) -> None:
        with self._lock:
            if self._done.is_set():
                return
            self._reason = reason
            self._done.set()
            children, self._children = self._children, []
        for child in children:
            child._cancel(reason)
        if self._parent is not None:
            self._parent._owner._detach(self)

    def __repr__(self) -> str:
        return (
            f"ExecutionContext(cancelled={self.cancelled}, "
            f"deadline={self._deadline}, reason={self.reason})"
        )


__all__ = [
    "ExecutionContext",
    "REASON_CANCELLED",
    "REASON_DEADLINE_EXCEEDED",
]
