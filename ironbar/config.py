"""Bar configuration: parsing, defaults and the small enums that go with it."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar, Union

from ironbar.dynamic_value import ScriptSegment, VariableSegment, parse_dynamic_bool

__all__ = [
    "ConfigError",
    "Orientation",
    "RevealerTransitionType",
    "BarPosition",
    "TransitionType",
    "EllipsizeMode",
    "TruncateMode",
    "MarginConfig",
    "CommonConfig",
    "Config",
    "MonitorConfig",
    "MODULE_TYPES",
    "DEFAULT_BAR_HEIGHT",
    "DEFAULT_POPUP_GAP",
    "parse_truncate_mode",
    "parse_common_config",
    "parse_config",
    "parse_monitor_config",
    "default_config",
    "bar_configs_for_monitor",
    "try_get_orientation",
]

DEFAULT_BAR_HEIGHT = 42
DEFAULT_POPUP_GAP = 5

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1

MODULE_TYPES = frozenset(
    {
        "clipboard",
        "clock",
        "custom",
        "focused",
        "label",
        "launcher",
        "music",
        "script",
        "sys_info",
        "tray",
        "upower",
        "workspaces",
    }
)

_MISSING: Any = object()

E = TypeVar("E", bound=Enum)
T = TypeVar("T")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or of the wrong shape."""


class Orientation(Enum):
    """Direction in which a bar or widget lays out its children."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class RevealerTransitionType(Enum):
    """Animation used when showing or hiding a module."""

    NONE = "none"
    CROSSFADE = "crossfade"
    SLIDE_RIGHT = "slide_right"
    SLIDE_LEFT = "slide_left"
    SLIDE_UP = "slide_up"
    SLIDE_DOWN = "slide_down"


class BarPosition(Enum):
    """Screen edge the bar is attached to."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    def orientation(self) -> Orientation:
        """Orientation the bar and its widgets use at this position."""
        if self in (BarPosition.TOP, BarPosition.BOTTOM):
            return Orientation.HORIZONTAL
        return Orientation.VERTICAL

    def angle(self) -> float:
        """Angle in degrees at which label text is drawn at this position."""
        if self is BarPosition.LEFT:
            return 90.0
        if self is BarPosition.RIGHT:
            return 270.0
        return 0.0


class TransitionType(Enum):
    """Configured show/hide transition of a module."""

    NONE = "none"
    CROSSFADE = "crossfade"
    SLIDE_START = "slide_start"
    SLIDE_END = "slide_end"

    def to_revealer_transition_type(self, orientation: Orientation) -> RevealerTransitionType:
        """Map to the concrete animation for the bar's orientation."""
        horizontal = orientation is Orientation.HORIZONTAL
        if self is TransitionType.SLIDE_START:
            return RevealerTransitionType.SLIDE_LEFT if horizontal else RevealerTransitionType.SLIDE_UP
        if self is TransitionType.SLIDE_END:
            return (
                RevealerTransitionType.SLIDE_RIGHT if horizontal else RevealerTransitionType.SLIDE_DOWN
            )
        if self is TransitionType.CROSSFADE:
            return RevealerTransitionType.CROSSFADE
        return RevealerTransitionType.NONE


class EllipsizeMode(Enum):
    """Where text is cut when it is too long."""

    START = "start"
    MIDDLE = "middle"
    END = "end"


@dataclass(frozen=True)
class TruncateMode:
    """How a label is truncated; lengths are in characters."""

    mode: EllipsizeMode
    length: int | None = None
    max_length: int | None = None


@dataclass(frozen=True)
class MarginConfig:
    """Space between the bar and the screen edges."""

    bottom: int = 0
    left: int = 0
    right: int = 0
    top: int = 0


ScriptInput = Union[str, Mapping[str, Any]]


@dataclass
class CommonConfig:
    """Options accepted by every module."""

    class_: str | None = None
    name: str | None = None
    show_if: ScriptSegment | VariableSegment | None = None
    transition_type: TransitionType | None = None
    transition_duration: int | None = None
    on_click_left: ScriptInput | None = None
    on_click_right: ScriptInput | None = None
    on_click_middle: ScriptInput | None = None
    on_scroll_up: ScriptInput | None = None
    on_scroll_down: ScriptInput | None = None
    on_mouse_enter: ScriptInput | None = None
    on_mouse_exit: ScriptInput | None = None
    tooltip: str | None = None


@dataclass
class Config:
    """Configuration of one bar, optionally with per-monitor overrides."""

    position: BarPosition = BarPosition.BOTTOM
    anchor_to_edges: bool = True
    height: int = DEFAULT_BAR_HEIGHT
    margin: MarginConfig = field(default_factory=MarginConfig)
    popup_gap: int = DEFAULT_POPUP_GAP
    name: str | None = None
    start_hidden: bool | None = None
    autohide: int | None = None
    icon_theme: str | None = None
    ironvar_defaults: dict[str, str] | None = None
    start: list[dict[str, Any]] | None = None
    center: list[dict[str, Any]] | None = None
    end: list[dict[str, Any]] | None = None
    monitors: dict[str, MonitorConfig] | None = None


MonitorConfig = Union[Config, list[Config]]


# -- value readers ---------------------------------------------------------


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigError(f"invalid type for {what}: expected a map, found {type(data).__name__}")
    return data


def _enum(cls: type[E], value: Any, what: str) -> E:
    if isinstance(value, cls):
        return value
    for member in cls:
        if member.value == value:
            return member
    expected = ", ".join(f"`{member.value}`" for member in cls)
    raise ConfigError(f"unknown variant `{value}` for {what}, expected one of {expected}")


def _int(value: Any, what: str, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"invalid type for {what}: expected an integer")
    if not minimum <= value <= maximum:
        raise ConfigError(f"invalid value for {what}: {value} is out of range")
    return value


def _i32(value: Any, what: str) -> int:
    return _int(value, what, _I32_MIN, _I32_MAX)


def _bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"invalid type for {what}: expected a boolean")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for {what}: expected a string")
    return value


def _required(data: Mapping[str, Any], key: str, parse: Callable[[Any, str], T], default: T) -> T:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return default
    return parse(value, key)


def _optional(data: Mapping[str, Any], key: str, parse: Callable[[Any, str], T]) -> T | None:
    value = data.get(key)
    if value is None:
        return None
    return parse(value, key)


def _script_input(value: Any, what: str) -> ScriptInput:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    raise ConfigError(f"invalid type for {what}: expected a string or a map")


def _show_if(value: Any, what: str) -> ScriptSegment | VariableSegment:
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for {what}: expected a string")
    return parse_dynamic_bool(value)


# -- parsers ---------------------------------------------------------------


def parse_truncate_mode(value: Any) -> TruncateMode:
    """Parse either a bare ellipsize mode or a map with `mode` and lengths."""
    if isinstance(value, TruncateMode):
        return value
    if isinstance(value, str):
        return TruncateMode(_enum(EllipsizeMode, value, "truncate"))
    if isinstance(value, Mapping):
        if "mode" not in value:
            raise ConfigError("missing field `mode` in truncate")
        return TruncateMode(
            mode=_enum(EllipsizeMode, value["mode"], "truncate.mode"),
            length=_optional(value, "length", _i32),
            max_length=_optional(value, "max_length", _i32),
        )
    raise ConfigError("data did not match any variant of truncate")


def parse_common_config(data: Any) -> CommonConfig:
    """Read the common module options out of a module's map; other keys are ignored."""
    data = _mapping(data, "module")
    return CommonConfig(
        class_=_optional(data, "class", _str),
        name=_optional(data, "name", _str),
        show_if=_optional(data, "show_if", _show_if),
        transition_type=_optional(
            data, "transition_type", lambda v, w: _enum(TransitionType, v, w)
        ),
        transition_duration=_optional(
            data, "transition_duration", lambda v, w: _int(v, w, 0, _U32_MAX)
        ),
        on_click_left=_optional(data, "on_click_left", _script_input),
        on_click_right=_optional(data, "on_click_right", _script_input),
        on_click_middle=_optional(data, "on_click_middle", _script_input),
        on_scroll_up=_optional(data, "on_scroll_up", _script_input),
        on_scroll_down=_optional(data, "on_scroll_down", _script_input),
        on_mouse_enter=_optional(data, "on_mouse_enter", _script_input),
        on_mouse_exit=_optional(data, "on_mouse_exit", _script_input),
        tooltip=_optional(data, "tooltip", _str),
    )


def _margin(value: Any, what: str) -> MarginConfig:
    data = _mapping(value, what)
    return MarginConfig(
        bottom=_required(data, "bottom", _i32, 0),
        left=_required(data, "left", _i32, 0),
        right=_required(data, "right", _i32, 0),
        top=_required(data, "top", _i32, 0),
    )


def _module(value: Any, what: str) -> dict[str, Any]:
    data = _mapping(value, what)
    if "type" not in data:
        raise ConfigError(f"missing field `type` in {what}")
    module_type = data["type"]
    if module_type not in MODULE_TYPES:
        expected = ", ".join(f"`{name}`" for name in sorted(MODULE_TYPES))
        raise ConfigError(f"unknown variant `{module_type}`, expected one of {expected}")
    return dict(data)


def _modules(value: Any, what: str) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise ConfigError(f"invalid type for {what}: expected a sequence")
    return [_module(item, what) for item in value]


def _ironvars(value: Any, what: str) -> dict[str, str]:
    data = _mapping(value, what)
    return {_str(key, what): _str(item, what) for key, item in data.items()}


def _monitors(value: Any, what: str) -> dict[str, MonitorConfig]:
    data = _mapping(value, what)
    return {_str(key, what): parse_monitor_config(item) for key, item in data.items()}


def parse_config(data: Any) -> Config:
    """Build a bar configuration from a decoded config map."""
    data = _mapping(data, "config")
    return Config(
        position=_required(
            data, "position", lambda v, w: _enum(BarPosition, v, w), BarPosition.BOTTOM
        ),
        anchor_to_edges=_required(data, "anchor_to_edges", _bool, True),
        height=_required(data, "height", _i32, DEFAULT_BAR_HEIGHT),
        margin=_required(data, "margin", _margin, MarginConfig()),
        popup_gap=_required(data, "popup_gap", _i32, DEFAULT_POPUP_GAP),
        name=_optional(data, "name", _str),
        start_hidden=_optional(data, "start_hidden", _bool),
        autohide=_optional(data, "autohide", lambda v, w: _int(v, w, 0, _U64_MAX)),
        icon_theme=_optional(data, "icon_theme", _str),
        ironvar_defaults=_optional(data, "ironvar_defaults", _ironvars),
        start=_optional(data, "start", _modules),
        center=_optional(data, "center", _modules),
        end=_optional(data, "end", _modules),
        monitors=_optional(data, "monitors", _monitors),
    )


def parse_monitor_config(data: Any) -> MonitorConfig:
    """Parse a monitor entry as a single bar, or failing that as a list of bars."""
    try:
        return parse_config(data)
    except ConfigError as outer:
        single_error = outer

    try:
        if not isinstance(data, list):
            raise ConfigError("invalid type: expected a sequence")
        return [parse_config(item) for item in data]
    except ConfigError as inner:
        raise ConfigError(
            "An invalid config was found. The following errors were encountered:\n"
            f"  1: single-bar (b): {single_error}\n"
            f"  2: multi-bar (c): {inner}\n"
            "Note: Both the single-bar (type b / error 1) and multi-bar (type c / error 2)"
            " config variants were tried. You can likely ignore whichever of these"
            " is not relevant to you."
        ) from inner


def default_config() -> Config:
    """The configuration used when no config file can be loaded."""
    return Config(
        start=[{"type": "label", "label": "ℹ️ Using default config"}],
        center=[{"type": "focused"}],
        end=[{"type": "clock"}],
    )


def bar_configs_for_monitor(config: Config, monitor_name: str) -> list[Config]:
    """The bar configurations to create on the named monitor."""
    monitor = (config.monitors or {}).get(monitor_name)
    if isinstance(monitor, Config):
        return [monitor]
    if isinstance(monitor, list):
        return list(monitor)

    show_default_bar = (
        config.start is not None or config.center is not None or config.end is not None
    )
    return [config] if show_default_bar else []


def try_get_orientation(orientation: str) -> Orientation:
    """Parse `horizontal`, `vertical`, `h` or `v`, ignoring case."""
    lowered = orientation.lower()
    if lowered in ("horizontal", "h"):
        return Orientation.HORIZONTAL
    if lowered in ("vertical", "v"):
        return Orientation.VERTICAL
    raise ConfigError("Invalid orientation string in config")