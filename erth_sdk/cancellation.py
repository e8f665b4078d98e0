"""
ERTH SDK - Cancellation

A token threaded through every blocking step of a pipeline: network calls
get their timeout clipped to the remaining budget, and sleeps wake up as
soon as the token is cancelled.
"""

import threading
import time
import weakref
from typing import Optional

from .errors import OperationCancelledError


class CancelToken:
    """
    Cancellation flag plus optional wall-clock deadline.
    
    Example:
        handle = coordinator.submit(calls, timeout=120)
        ...
        handle.cancel()   # from any thread
        
        token = CancelToken(timeout=30)
        coordinator.execute(calls, cancel=token)
    
    A child token (see `child`) ends no later than its parent and is
    cancelled together with it.
    """
    
    def __init__(self, timeout: Optional[float] = None, parent: Optional["CancelToken"] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._children: "weakref.WeakSet[CancelToken]" = weakref.WeakSet()
        self._lock = threading.Lock()
        self.reason: Optional[str] = None
        
        if parent is not None:
            if parent._deadline is not None:
                if self._deadline is None or parent._deadline < self._deadline:
                    self._deadline = parent._deadline
            parent._adopt(self)
    
    def _adopt(self, child: "CancelToken") -> None:
        with self._lock:
            self._children.add(child)
        if self._event.is_set():
            child.cancel(self.reason or "cancelled")
    
    def child(self, timeout: Optional[float] = None) -> "CancelToken":
        """Token bounded by both `timeout` and this token's deadline."""
        return CancelToken(timeout=timeout, parent=self)
    
    def cancel(self, reason: str = "cancelled") -> None:
        self.reason = reason
        self._event.set()
        with self._lock:
            children = list(self._children)
        for child in children:
            child.cancel(reason)
    
    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.reason = self.reason or "deadline exceeded"
            return True
        return False
    
    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())
    
    def clip(self, timeout: float) -> float:
        """Clip a per-request timeout to the remaining budget."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return max(0.001, min(timeout, remaining))
    
    def check(self, step: str = "") -> None:
        """Raise OperationCancelledError if cancelled or past the deadline."""
        if self.cancelled:
            where = f" during {step}" if step else ""
            raise OperationCancelledError(
                f"Operation {self.reason}{where}",
                {"step": step, "reason": self.reason}
            )
    
    def sleep(self, seconds: float) -> bool:
        """
        Block for up to `seconds`.
        
        Returns:
            False if the token was cancelled (or the deadline hit) meanwhile.
        """
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._event.wait(max(0.0, seconds))
        return not self.cancelled
