import queue

import pytest

from ironbar.dynamic_value import (
    DynamicString,
    ScriptSegment,
    StaticSegment,
    VariableSegment,
    is_truthy,
    parse_dynamic_bool,
    parse_input,
)
from ironbar.ironvar import VariableManager


def test_static():
    assert parse_input("hello world") == [StaticSegment("hello world")]


def test_static_odd_char_count():
    assert parse_input("hello") == [StaticSegment("hello")]


def test_script():
    assert parse_input("{{echo hello}}") == [ScriptSegment("echo hello")]


def test_variable():
    assert parse_input("#variable") == [VariableSegment("variable")]


def test_static_script():
    assert parse_input("hello {{echo world}}") == [
        StaticSegment("hello "),
        ScriptSegment("echo world"),
    ]


def test_static_variable():
    assert parse_input("hello #subject") == [
        StaticSegment("hello "),
        VariableSegment("subject"),
    ]


def test_static_script_static():
    assert parse_input("hello {{echo world}} foo") == [
        StaticSegment("hello "),
        ScriptSegment("echo world"),
        StaticSegment(" foo"),
    ]


def test_static_variable_static():
    assert parse_input("hello #subject foo") == [
        StaticSegment("hello "),
        VariableSegment("subject"),
        StaticSegment(" foo"),
    ]


def test_static_script_variable():
    assert parse_input("hello {{echo world}} #foo") == [
        StaticSegment("hello "),
        ScriptSegment("echo world"),
        StaticSegment(" "),
        VariableSegment("foo"),
    ]


def test_escape_hash():
    assert parse_input("number ###num") == [
        StaticSegment("number "),
        StaticSegment("#"),
        VariableSegment("num"),
    ]


def test_script_with_hash():
    assert parse_input("{{echo #hello}}") == [ScriptSegment("echo #hello")]


def test_trailing_hash_is_static():
    assert parse_input("ab#") == [StaticSegment("ab#")]


def test_unterminated_script_raises():
    with pytest.raises(ValueError):
        parse_input("hello {{echo")


def test_dynamic_string_initial_value_blanks_dynamic_parts():
    ds = DynamicString("a {{echo b}} c")
    assert ds.value == "a  c"


def test_dynamic_string_update():
    ds = DynamicString("hello {{echo world}} foo")
    assert ds.update(1, "world") == "hello world foo"
    assert ds.value == "hello world foo"


def test_bind_variables_follows_changes():
    manager = VariableManager()
    manager.set("name", "world")
    ds = DynamicString("hello #name")
    results = queue.Queue()

    stop = ds.bind_variables(manager, results.put)
    try:
        assert results.get(timeout=2) == "hello "
        assert results.get(timeout=2) == "hello world"
        manager.set("name", "there")
        assert results.get(timeout=2) == "hello there"
    finally:
        stop()


def test_bind_variables_ignores_unset_variable():
    manager = VariableManager()
    ds = DynamicString("x #missing y")
    results = queue.Queue()

    stop = ds.bind_variables(manager, results.put)
    try:
        assert results.get(timeout=2) == "x  y"
        with pytest.raises(queue.Empty):
            results.get(timeout=0.3)
    finally:
        stop()


def test_parse_dynamic_bool_variable():
    assert parse_dynamic_bool("#visible") == VariableSegment("visible")


def test_parse_dynamic_bool_script():
    assert parse_dynamic_bool("test -f /tmp/x") == ScriptSegment("test -f /tmp/x")


def test_parse_dynamic_bool_rejects_other_types():
    with pytest.raises(TypeError):
        parse_dynamic_bool(42)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", False), ("0", False), ("false", False), (None, False), ("1", True), ("yes", True)],
)
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected