"""Clock module: formats the current date and time for the bar and its popup."""

from __future__ import annotations

import locale
import os
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ironbar.config import CommonConfig, ConfigError, parse_common_config

__all__ = [
    "ClockModule",
    "DEFAULT_FORMAT",
    "DEFAULT_POPUP_FORMAT",
    "UPDATE_INTERVAL",
    "parse_clock_module",
    "strip_tail",
    "default_locale",
]

DEFAULT_FORMAT = "%d/%m/%Y %H:%M"
DEFAULT_POPUP_FORMAT = "%H:%M:%S"
FALLBACK_LOCALE = "POSIX"

# Seconds between clock updates.
UPDATE_INTERVAL = 0.5

_locale_lock = threading.Lock()


def strip_tail(string: str) -> str:
    """Drop everything from the first `.`, such as a codeset suffix."""
    head, sep, _ = string.partition(".")
    return head if sep else string


def default_locale() -> str:
    """The time locale from `LC_TIME`, then `LANG`, else `POSIX`."""
    for name in ("LC_TIME", "LANG"):
        value = os.environ.get(name)
        if value is not None:
            return strip_tail(value)
    return FALLBACK_LOCALE


def _set_time_locale(name: str) -> None:
    for candidate in (name, f"{name}.UTF-8", f"{name}.utf8"):
        try:
            locale.setlocale(locale.LC_TIME, candidate)
            return
        except locale.Error:
            continue
    # unknown locales fall back to POSIX formatting
    locale.setlocale(locale.LC_TIME, "C")


@contextmanager
def _time_locale(name: str) -> Iterator[None]:
    with _locale_lock:
        previous = locale.setlocale(locale.LC_TIME)
        try:
            _set_time_locale(name)
            yield
        finally:
            locale.setlocale(locale.LC_TIME, previous)


@dataclass
class ClockModule:
    """Shows the date and time, with a more detailed clock in its popup."""

    format: str = DEFAULT_FORMAT
    format_popup: str = DEFAULT_POPUP_FORMAT
    locale: str = field(default_factory=default_locale)
    common: CommonConfig | None = field(default_factory=CommonConfig)

    def _format(self, date: datetime, fmt: str) -> str:
        with _time_locale(self.locale):
            return date.strftime(fmt)

    def format_date(self, date: datetime) -> str:
        """Text shown on the bar for `date`."""
        return self._format(date, self.format)

    def format_popup_date(self, date: datetime) -> str:
        """Text shown in the popup clock for `date`."""
        return self._format(date, self.format_popup)


def _string(data: Mapping[str, Any], key: str, default: str) -> str:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for {key}: expected a string")
    return value


def parse_clock_module(data: Any) -> ClockModule:
    """Build a clock module from its config map."""
    if not isinstance(data, Mapping):
        raise ConfigError("invalid type for clock: expected a map")
    return ClockModule(
        format=_string(data, "format", DEFAULT_FORMAT),
        format_popup=_string(data, "format_popup", DEFAULT_POPUP_FORMAT),
        locale=_string(data, "locale", default_locale()),
        common=parse_common_config(data),
    )