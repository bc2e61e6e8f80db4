"""Locating and reading `.desktop` files for application ids."""

from __future__ import annotations

import logging
import os
import re
import threading
from collections.abc import Iterator, Sequence
from pathlib import Path

__all__ = [
    "find_application_dirs",
    "find_desktop_files",
    "find_desktop_file",
    "find_desktop_file_by_filename",
    "find_desktop_file_by_filedata",
    "parse_desktop_file",
    "get_desktop_icon_name",
]

log = logging.getLogger(__name__)

DesktopFile = dict[str, list[str]]

# Keys kept when a desktop file is parsed.
LOOK_OUT_KEYS = frozenset({"Name", "StartupWMClass", "Exec", "Icon"})

_MAX_DEPTH = 5
_ID_SEPARATORS = re.compile(r"[ :@._]")

_cache: dict[Path, DesktopFile] = {}
_cache_lock = threading.Lock()


def _ascii_lower(text: str) -> str:
    return "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in text)


def _eq_ignore_ascii_case(a: str, b: str) -> bool:
    return _ascii_lower(a) == _ascii_lower(b)


def _data_local_dir() -> Path | None:
    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home and os.path.isabs(xdg_data_home):
        return Path(xdg_data_home)
    home = os.environ.get("HOME") or os.path.expanduser("~")
    if not home or home == "~":
        return None
    return Path(home) / ".local" / "share"


def find_application_dirs() -> list[Path]:
    """Return the existing directories that may hold `.desktop` files."""
    dirs = [
        Path("/usr/share/applications"),
        Path("/var/lib/flatpak/exports/share/applications"),
    ]

    xdg_dirs = os.environ.get("XDG_DATA_DIRS")
    if xdg_dirs is not None:
        dirs.extend(Path(entry) / "applications" for entry in xdg_dirs.split(os.pathsep))

    user_dir = _data_local_dir()
    if user_dir is not None:
        dirs.append(user_dir / "applications")

    return [directory for directory in dirs if directory.exists()]


def _walk(directory: Path, depth: int = 1) -> Iterator[Path]:
    """Yield entries below `directory` depth first, down to the maximum depth."""
    try:
        entries = list(os.scandir(directory))
    except OSError:
        return
    for entry in entries:
        path = Path(entry.path)
        yield path
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            continue
        if is_dir and depth < _MAX_DEPTH:
            yield from _walk(path, depth + 1)


def find_desktop_files() -> list[Path]:
    """Return every `.desktop` file in the application directories."""
    return [
        path
        for directory in find_application_dirs()
        for path in _walk(directory)
        if path.suffix == ".desktop" and path.is_file()
    ]


def find_desktop_file(app_id: str) -> Path | None:
    """Locate the `.desktop` file for an app id, if there is one."""
    files = find_desktop_files()
    return find_desktop_file_by_filename(app_id, files) or find_desktop_file_by_filedata(
        app_id, files
    )


def find_desktop_file_by_filename(app_id: str, files: Sequence[Path]) -> Path | None:
    """Match an app id against file names, exactly first, then by id parts."""
    with_names = [(Path(file), Path(file).stem.lower()) for file in files]

    for file, name in with_names:
        if _eq_ignore_ascii_case(name, app_id):
            return file

    # flatpak style ids such as `com.company.app`
    parts = _ID_SEPARATORS.split(app_id)
    for file, name in with_names:
        if any(_eq_ignore_ascii_case(name, part) for part in parts):
            return file

    return None


def find_desktop_file_by_filedata(app_id: str, files: Sequence[Path]) -> Path | None:
    """Match an app id against the contents of the desktop files."""
    app_id = app_id.lower()

    parsed: list[tuple[Path, DesktopFile]] = []
    for file in files:
        file = Path(file)
        desktop_file = parse_desktop_file(file)
        if desktop_file is None:
            continue
        with _cache_lock:
            _cache[file] = {key: list(values) for key, values in desktop_file.items()}
        parsed.append((file, desktop_file))

    for file, desktop_file in parsed:
        if any(_eq_ignore_ascii_case(name, app_id) for name in desktop_file.get("Name", ())):
            return file

    for file, desktop_file in parsed:
        if any(app_id in name.lower() for name in desktop_file.get("Name", ())):
            return file

    for file, desktop_file in parsed:
        if any(
            app_id in value.lower() for values in desktop_file.values() for value in values
        ):
            return file

    return None


def parse_desktop_file(path: Path | str) -> DesktopFile | None:
    """Read the interesting keys of a desktop file; None if it cannot be read."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        log.warning("Couldn't Open File: %s", path)
        return None

    desktop_file: DesktopFile = {}
    for line in text.split("\n"):
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key in LOOK_OUT_KEYS:
            desktop_file.setdefault(key, []).append(value.strip())

    return desktop_file


def get_desktop_icon_name(app_id: str) -> str | None:
    """Return the icon name from the app's desktop file, if one is found."""
    path = find_desktop_file(app_id)
    if path is None:
        return None

    with _cache_lock:
        desktop_file = _cache.get(path)

    if desktop_file is None:
        desktop_file = parse_desktop_file(path)
        if desktop_file is None:
            return None
        with _cache_lock:
            desktop_file = _cache.setdefault(path, desktop_file)

    icons = desktop_file.get("Icon", [])
    return icons[0] if icons else None