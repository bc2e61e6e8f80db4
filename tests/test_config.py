import pytest

from ironbar.config import (
    DEFAULT_BAR_HEIGHT,
    DEFAULT_POPUP_GAP,
    BarPosition,
    CommonConfig,
    Config,
    ConfigError,
    EllipsizeMode,
    MarginConfig,
    Orientation,
    RevealerTransitionType,
    TransitionType,
    TruncateMode,
    bar_configs_for_monitor,
    default_config,
    parse_common_config,
    parse_config,
    parse_monitor_config,
    parse_truncate_mode,
    try_get_orientation,
)
from ironbar.dynamic_value import ScriptSegment, VariableSegment


def test_empty_config_uses_defaults():
    config = parse_config({})
    assert config.height == 42
    assert config.popup_gap == 5
    assert config.position is BarPosition.BOTTOM
    assert config.anchor_to_edges is True
    assert config.margin == MarginConfig()
    assert config.start is None and config.center is None and config.end is None


def test_default_config_modules():
    config = default_config()
    assert config.start == [{"type": "label", "label": "ℹ️ Using default config"}]
    assert config.center == [{"type": "focused"}]
    assert config.end == [{"type": "clock"}]
    assert config.height == DEFAULT_BAR_HEIGHT
    assert config.popup_gap == DEFAULT_POPUP_GAP
    assert config.monitors is None


def test_parse_config_values():
    data = {
        "position": "top",
        "anchor_to_edges": False,
        "height": 30,
        "margin": {"top": 3, "left": 7},
        "name": "main",
        "autohide": 500,
        "ironvar_defaults": {"volume": "50"},
        "start": [{"type": "clock", "format": "%H"}],
    }
    config = parse_config(data)
    assert config.position is BarPosition.TOP
    assert config.anchor_to_edges is False
    assert config.height == 30
    assert config.margin == MarginConfig(top=3, left=7)
    assert config.name == "main"
    assert config.autohide == 500
    assert config.ironvar_defaults == {"volume": "50"}
    assert config.start == [{"type": "clock", "format": "%H"}]


@pytest.mark.parametrize(
    "data",
    [
        {"height": "tall"},
        {"height": True},
        {"anchor_to_edges": 1},
        {"position": "middle"},
        {"autohide": -1},
        {"start": [{"format": "%H"}]},
        {"start": [{"type": "not_a_module"}]},
        {"ironvar_defaults": {"volume": 50}},
        "not a map",
    ],
)
def test_parse_config_rejects_invalid(data):
    with pytest.raises(ConfigError):
        parse_config(data)


@pytest.mark.parametrize(
    "position, orientation, angle",
    [
        (BarPosition.TOP, Orientation.HORIZONTAL, 0.0),
        (BarPosition.BOTTOM, Orientation.HORIZONTAL, 0.0),
        (BarPosition.LEFT, Orientation.VERTICAL, 90.0),
        (BarPosition.RIGHT, Orientation.VERTICAL, 270.0),
    ],
)
def test_bar_position(position, orientation, angle):
    assert position.orientation() is orientation
    assert position.angle() == angle


@pytest.mark.parametrize(
    "transition, orientation, expected",
    [
        (TransitionType.SLIDE_START, Orientation.HORIZONTAL, RevealerTransitionType.SLIDE_LEFT),
        (TransitionType.SLIDE_START, Orientation.VERTICAL, RevealerTransitionType.SLIDE_UP),
        (TransitionType.SLIDE_END, Orientation.HORIZONTAL, RevealerTransitionType.SLIDE_RIGHT),
        (TransitionType.SLIDE_END, Orientation.VERTICAL, RevealerTransitionType.SLIDE_DOWN),
        (TransitionType.CROSSFADE, Orientation.HORIZONTAL, RevealerTransitionType.CROSSFADE),
        (TransitionType.CROSSFADE, Orientation.VERTICAL, RevealerTransitionType.CROSSFADE),
        (TransitionType.NONE, Orientation.HORIZONTAL, RevealerTransitionType.NONE),
        (TransitionType.NONE, Orientation.VERTICAL, RevealerTransitionType.NONE),
    ],
)
def test_transition_mapping(transition, orientation, expected):
    assert transition.to_revealer_transition_type(orientation) is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("horizontal", Orientation.HORIZONTAL),
        ("H", Orientation.HORIZONTAL),
        ("Vertical", Orientation.VERTICAL),
        ("v", Orientation.VERTICAL),
    ],
)
def test_try_get_orientation(text, expected):
    assert try_get_orientation(text) is expected


def test_try_get_orientation_invalid():
    with pytest.raises(ConfigError, match="Invalid orientation string in config"):
        try_get_orientation("diagonal")


def test_truncate_auto():
    assert parse_truncate_mode("end") == TruncateMode(EllipsizeMode.END)


def test_truncate_length():
    mode = parse_truncate_mode({"mode": "middle", "length": 10, "max_length": 20})
    assert mode == TruncateMode(EllipsizeMode.MIDDLE, length=10, max_length=20)


@pytest.mark.parametrize("value", [{"length": 10}, "sideways", 3, {"mode": "start", "length": "x"}])
def test_truncate_invalid(value):
    with pytest.raises(ConfigError):
        parse_truncate_mode(value)


def test_common_config_reads_known_keys():
    common = parse_common_config(
        {
            "type": "label",
            "label": "ignored",
            "class": "mine",
            "show_if": "#visible",
            "transition_type": "slide_start",
            "transition_duration": 250,
            "on_click_left": "echo left",
            "tooltip": "hello",
        }
    )
    assert common.class_ == "mine"
    assert common.show_if == VariableSegment("visible")
    assert common.transition_type is TransitionType.SLIDE_START
    assert common.transition_duration == 250
    assert common.on_click_left == "echo left"
    assert common.tooltip == "hello"
    assert common.on_click_right is None


def test_common_config_script_show_if():
    common = parse_common_config({"show_if": "test -f file"})
    assert common.show_if == ScriptSegment("test -f file")


def test_common_config_empty():
    assert parse_common_config({}) == CommonConfig()


def test_common_config_invalid_transition():
    with pytest.raises(ConfigError):
        parse_common_config({"transition_type": "spin"})


def test_monitor_config_single():
    result = parse_monitor_config({"height": 20})
    assert isinstance(result, Config)
    assert result.height == 20


def test_monitor_config_multiple():
    result = parse_monitor_config([{"position": "top"}, {"position": "bottom"}])
    assert [bar.position for bar in result] == [BarPosition.TOP, BarPosition.BOTTOM]


def test_monitor_config_invalid_reports_both():
    with pytest.raises(ConfigError) as info:
        parse_monitor_config([{"height": "tall"}])
    message = str(info.value)
    assert "single-bar (b)" in message
    assert "multi-bar (c)" in message


def test_nested_monitors():
    config = parse_config({"monitors": {"DP-1": {"height": 20}, "DP-2": [{}, {}]}})
    assert bar_configs_for_monitor(config, "DP-1")[0].height == 20
    assert len(bar_configs_for_monitor(config, "DP-2")) == 2


def test_bar_configs_default_bar_shown_with_modules():
    config = parse_config({"end": [{"type": "clock"}]})
    assert bar_configs_for_monitor(config, "eDP-1") == [config]


def test_bar_configs_none_without_modules():
    config = parse_config({})
    assert bar_configs_for_monitor(config, "eDP-1") == []


def test_bar_configs_unknown_monitor_falls_back_to_default():
    config = parse_config({"start": [], "monitors": {"DP-1": {"height": 20}}})
    assert bar_configs_for_monitor(config, "HDMI-1") == [config]