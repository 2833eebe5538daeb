"""
Observable - synchronous observer list.
"""

from typing import Callable, Dict

from ..utils.logging import get_core_logger


logger = get_core_logger()


class Observable:
    """Callbacks invoked in registration order on ``notify``."""

    def __init__(self, name: str = "observable"):
        self.name = name
        self._observers: Dict[int, Callable] = {}
        self._next_handle = 0

    def add(self, callback: Callable) -> int:
        if not callable(callback):
            raise TypeError(f"Observer for '{self.name}' must be callable")
        handle = self._next_handle
        self._next_handle += 1
        self._observers[handle] = callback
        return handle

    def remove(self, handle: int) -> bool:
        return self._observers.pop(handle, None) is not None

    def clear(self):
        self._observers.clear()

    def notify(self, *args, **kwargs):
        # Copy so observers may unsubscribe while being notified
        for handle, callback in list(self._observers.items()):
            try:
                callback(*args, **kwargs)
            except Exception:
                logger.exception(f"Observer {handle} of '{self.name}' failed")
                raise

    def __len__(self) -> int:
        return len(self._observers)
