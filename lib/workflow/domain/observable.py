"""
Single-value observable used to publish controller state to the UI thread.
"""
import logging
import threading
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObservableValue(Generic[T]):
    """
    Thread-safe holder for one value plus change subscribers.

    Writers are the owning controller; consumers read ``value`` or subscribe.
    Subscribers are called with the new value on the writer's thread, only
    when the value actually changes.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._lock = threading.Lock()
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, new_value: T) -> None:
        with self._lock:
            if _same(self._value, new_value):
                return
            self._value = new_value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(new_value)
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def subscribe(self, callback: Callable[[T], None], emit_current: bool = False) -> Callable[[], None]:
        """
        Register a change callback.

        Returns:
            A callable that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
            current = self._value
        if emit_current:
            callback(current)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe


def _same(old, new) -> bool:
    # Arrays and other buffers compare by identity; plain values by equality
    if old is new:
        return True
    if type(old).__module__ == "numpy" or type(new).__module__ == "numpy":
        return False
    try:
        return bool(old == new)
    except (TypeError, ValueError):
        return False
