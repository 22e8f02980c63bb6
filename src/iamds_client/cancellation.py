"""
Cooperative, per-call cancellation.

A ``CancellationToken`` can be cancelled from any thread. Sync calls
poll it; async calls register a callback that cancels the in-flight task.
"""

import threading
from typing import Callable, List


class CancellationToken:
    """
    Signal that a single call should stop.

    Example:
        ```python
        token = CancellationToken()
        task = asyncio.create_task(api.tenants.list_tenants_async(cancellation_token=token))
        token.cancel()  # task raises RequestCancelledError
        ```
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Fire the token. Callbacks run once, on the cancelling thread."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Run ``callback`` when the token fires (immediately if it already has).

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def __repr__(self) -> str:
        return f"<CancellationToken cancelled={self.is_cancelled}>"
