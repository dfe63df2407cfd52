from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """
    Minimal signal/slot primitive for schedule events.
    Subscribers are called synchronously, in connection order.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._lock: RLock = RLock()

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def emit(self, payload: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        stale: list[Callable[[T], None]] = []
        for callback in subscribers:
            try:
                callback(payload)
            except ReferenceError:
                # weakly bound subscriber whose owner is gone
                stale.append(callback)
        if stale:
            with self._lock:
                for callback in stale:
                    if callback in self._subscribers:
                        self._subscribers.remove(callback)
