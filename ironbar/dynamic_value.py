"""Templated strings and booleans whose values come from scripts or variables.

A dynamic string is made of static text, scripts written as ``{{command}}``
and variables written as ``#name``. A literal hash is written ``##``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from itertools import takewhile

from ironbar.ironvar import VariableManager

__all__ = [
    "StaticSegment",
    "ScriptSegment",
    "VariableSegment",
    "Segment",
    "DynamicString",
    "parse_input",
    "parse_dynamic_bool",
    "is_truthy",
]

_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class StaticSegment:
    """Literal text."""

    value: str


@dataclass(frozen=True)
class ScriptSegment:
    """A script whose output fills this part of the string."""

    cmd: str


@dataclass(frozen=True)
class VariableSegment:
    """A variable whose value fills this part of the string."""

    name: str


Segment = StaticSegment | ScriptSegment | VariableSegment


def _parse_script(text: str, start: int) -> tuple[ScriptSegment, int]:
    end = text.find("}}", start + 2)
    if end == -1:
        raise ValueError(f"Unterminated script in dynamic string: {text[start:]!r}")
    return ScriptSegment(text[start + 2 : end]), end - start + 2


def _parse_variable(text: str, start: int) -> tuple[VariableSegment, int]:
    name = "".join(takewhile(lambda char: not char.isspace(), text[start + 1 :]))
    return VariableSegment(name), len(name) + 1


def _parse_static(text: str, start: int) -> tuple[StaticSegment, int]:
    end = start
    while end + 1 < len(text) and text[end : end + 2] != "{{" and text[end] != "#":
        end += 1

    # a segment at the end of the input also takes the final character
    if len(text) - start == end - start + 1:
        end = len(text)

    return StaticSegment(text[start:end]), end - start


def parse_input(text: str) -> list[Segment]:
    """Split a template into static, script and variable segments."""
    if "{{" not in text and "#" not in text:
        return [StaticSegment(text)]

    tokens: list[Segment] = []
    pos = 0
    while pos < len(text):
        pair = text[pos : pos + 2] if len(text) - pos > 1 else ""

        token: Segment
        if pair == "{{":
            token, skip = _parse_script(text, pos)
        elif pair == "##":
            token, skip = StaticSegment("#"), 2
        elif pair.startswith("#"):
            token, skip = _parse_variable(text, pos)
        else:
            token, skip = _parse_static(text, pos)

        if skip == 0:
            raise RuntimeError("dynamic string parser made no progress")

        tokens.append(token)
        pos += skip

    return tokens


class DynamicString:
    """A parsed template together with the current text of each segment."""

    def __init__(self, text: str) -> None:
        self.segments: list[Segment] = parse_input(text)
        # dynamic segments start blank so that segment order is kept
        self._parts = [
            segment.value if isinstance(segment, StaticSegment) else ""
            for segment in self.segments
        ]
        self._lock = threading.Lock()

    @property
    def value(self) -> str:
        """The string as currently compiled."""
        with self._lock:
            return "".join(self._parts)

    def update(self, index: int, value: str) -> str:
        """Replace the text of one segment and return the compiled string."""
        with self._lock:
            self._parts[index] = value
            return "".join(self._parts)

    def bind_variables(
        self, manager: VariableManager, callback: Callable[[str], object]
    ) -> Callable[[], None]:
        """Follow every variable segment, calling `callback` with each new string.

        The callback is called once straight away with the initial string.
        Returns a function that stops following the variables.
        """
        stop = threading.Event()
        receivers = [
            (index, manager.subscribe(segment.name))
            for index, segment in enumerate(self.segments)
            if isinstance(segment, VariableSegment)
        ]

        callback(self.value)

        def follow(index: int, receiver) -> None:
            while not stop.is_set():
                try:
                    value = receiver.recv(timeout=_POLL_INTERVAL)
                except TimeoutError:
                    continue
                if value is not None:
                    callback(self.update(index, value))

        for index, receiver in receivers:
            threading.Thread(target=follow, args=(index, receiver), daemon=True).start()

        return stop.set


def parse_dynamic_bool(value: str | ScriptSegment | VariableSegment) -> Segment:
    """Decide whether a boolean source is a variable (``#name``) or a script."""
    if isinstance(value, (ScriptSegment, VariableSegment)):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Invalid dynamic boolean: {value!r}")
    if value.startswith("#"):
        return VariableSegment(value[1:])
    return ScriptSegment(value)


def is_truthy(string: str | None) -> bool:
    """A variable value is true unless unset, empty, ``0`` or ``false``."""
    if string is None:
        return False
    return not (string == "" or string == "0" or string == "false")