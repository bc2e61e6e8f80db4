"""Named dynamic variables whose changes are broadcast to subscribers."""

from __future__ import annotations

import queue
import threading
import weakref
from collections import deque

__all__ = [
    "InvalidKeyError",
    "IronVar",
    "VariableManager",
    "key_is_valid",
    "variable_manager",
]

CHANNEL_CAPACITY = 32


class InvalidKeyError(ValueError):
    """Raised when a variable key contains disallowed characters."""


class _Receiver:
    """One subscriber's buffer of broadcast values.

    Holds at most `capacity` values; when full, the oldest is dropped.
    """

    def __init__(self, capacity: int = CHANNEL_CAPACITY) -> None:
        self._buffer: deque[str | None] = deque(maxlen=capacity)
        self._cond = threading.Condition()

    def _push(self, value: str | None) -> None:
        with self._cond:
            self._buffer.append(value)
            self._cond.notify_all()

    def recv(self, timeout: float | None = None) -> str | None:
        """Wait for the next value; raise TimeoutError if none arrives in time."""
        with self._cond:
            if not self._cond.wait_for(lambda: self._buffer, timeout):
                raise TimeoutError("no value received")
            return self._buffer.popleft()

    def try_recv(self) -> str | None:
        """Return the next value without waiting; raise queue.Empty if there is none."""
        with self._cond:
            if not self._buffer:
                raise queue.Empty
            return self._buffer.popleft()

    def drain(self) -> list[str | None]:
        """Return and remove every pending value."""
        with self._cond:
            values = list(self._buffer)
            self._buffer.clear()
            return values

    def __len__(self) -> int:
        with self._cond:
            return len(self._buffer)


class IronVar:
    """A single variable whose every change is sent to its subscribers."""

    def __init__(self, value: str | None = None) -> None:
        self._value = value
        self._receivers: weakref.WeakSet[_Receiver] = weakref.WeakSet()
        self._lock = threading.Lock()

    def _broadcast(self, value: str | None) -> None:
        for receiver in list(self._receivers):
            receiver._push(value)

    def get(self) -> str | None:
        """Return the current value."""
        return self._value

    def set(self, value: str | None) -> None:
        """Set the value and broadcast it to all subscribers."""
        with self._lock:
            self._value = value
            self._broadcast(value)

    def subscribe(self) -> _Receiver:
        """Subscribe to changes; the current value is broadcast straight away."""
        with self._lock:
            receiver = _Receiver()
            self._receivers.add(receiver)
            self._broadcast(self._value)
            return receiver


def key_is_valid(key: str) -> bool:
    """A key is non-empty and made of alphanumerics, `_` and `-`."""
    return bool(key) and all(char.isalnum() or char in "_-" for char in key)


class VariableManager:
    """Holds every variable by name."""

    def __init__(self) -> None:
        self._variables: dict[str, IronVar] = {}
        self._lock = threading.RLock()

    def set(self, key: str, value: str) -> None:
        """Set a variable, creating it if needed; raise InvalidKeyError on a bad key."""
        if not key_is_valid(key):
            raise InvalidKeyError("Invalid key")
        with self._lock:
            var = self._variables.get(key)
            if var is None:
                self._variables[key] = IronVar(value)
            else:
                var.set(value)

    def get(self, key: str) -> str | None:
        """Return the current value of a variable, or None."""
        with self._lock:
            var = self._variables.get(key)
            return var.get() if var is not None else None

    def subscribe(self, key: str) -> _Receiver:
        """Subscribe to a variable, creating it unset if it does not exist."""
        with self._lock:
            var = self._variables.get(key)
            if var is None:
                var = self._variables[key] = IronVar(None)
            return var.subscribe()


_manager = VariableManager()


def variable_manager() -> VariableManager:
    """Return the process-wide variable manager."""
    return _manager