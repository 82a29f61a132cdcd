"""Cancellation and deadlines for resource operations."""

import threading
import time

from glprovider.core.exceptions import OperationCancelledError


class OperationContext:
    """Cancellation handle shared by every remote call of one operation.

    A context is cancelled either explicitly via :meth:`cancel` or implicitly
    once its deadline passes. Clients call :meth:`check` before each request,
    so a multi-call sequence (update then read) stops at the next call.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize operation context.

        Args:
            timeout: Seconds until the deadline, or None for no deadline
        """
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        """Cancel the operation."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """Whether the context was cancelled or has expired."""
        if self._cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the operation must not continue.

        Raises:
            OperationCancelledError: If cancelled or past the deadline
        """
        if self._cancelled.is_set():
            raise OperationCancelledError("Operation was cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelledError("Operation deadline exceeded")
