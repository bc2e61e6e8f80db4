import queue

import pytest

from ironbar.ironvar import (
    InvalidKeyError,
    IronVar,
    VariableManager,
    key_is_valid,
    variable_manager,
)


def test_set_then_get():
    manager = VariableManager()
    manager.set("volume", "50")
    assert manager.get("volume") == "50"
    manager.set("volume", "75")
    assert manager.get("volume") == "75"


def test_get_unknown_is_none():
    assert VariableManager().get("missing") is None


@pytest.mark.parametrize("key", ["", "has space", "a.b", "x#y", "slash/key"])
def test_invalid_keys_rejected(key):
    manager = VariableManager()
    assert not key_is_valid(key)
    with pytest.raises(InvalidKeyError):
        manager.set(key, "value")
    assert manager.get(key) is None


@pytest.mark.parametrize("key", ["abc", "my_var-1", "ÄÖü", "123"])
def test_valid_keys(key):
    manager = VariableManager()
    assert key_is_valid(key)
    manager.set(key, "v")
    assert manager.get(key) == "v"


def test_invalid_key_error_is_value_error():
    with pytest.raises(ValueError):
        VariableManager().set("bad key", "v")


def test_subscribe_new_variable_sends_none():
    manager = VariableManager()
    rx = manager.subscribe("fresh")
    assert rx.recv(timeout=1) is None
    assert manager.get("fresh") is None


def test_subscribe_existing_sends_current_then_updates():
    manager = VariableManager()
    manager.set("name", "first")
    rx = manager.subscribe("name")
    assert rx.recv(timeout=1) == "first"
    manager.set("name", "second")
    assert rx.recv(timeout=1) == "second"


def test_subscribe_before_set_receives_set_value():
    manager = VariableManager()
    rx = manager.subscribe("late")
    manager.set("late", "now")
    assert rx.drain() == [None, "now"]


def test_multiple_subscribers_all_receive():
    manager = VariableManager()
    rx1 = manager.subscribe("shared")
    rx2 = manager.subscribe("shared")
    manager.set("shared", "x")
    assert rx2.drain() == [None, "x"]
    # the first subscriber also saw the value re-sent when the second subscribed
    assert rx1.drain() == [None, None, "x"]


def test_receiver_capacity_drops_oldest():
    manager = VariableManager()
    rx = manager.subscribe("busy")
    values = [str(n) for n in range(40)]
    for value in values:
        manager.set("busy", value)
    pending = rx.drain()
    assert len(pending) == 32
    assert pending == values[-32:]


def test_try_recv_and_timeout_on_empty():
    rx = VariableManager().subscribe("quiet")
    assert rx.try_recv() is None
    with pytest.raises(queue.Empty):
        rx.try_recv()
    with pytest.raises(TimeoutError):
        rx.recv(timeout=0.01)


def test_ironvar_direct():
    var = IronVar("start")
    assert var.get() == "start"
    rx = var.subscribe()
    var.set("next")
    var.set(None)
    assert var.get() is None
    assert rx.drain() == ["start", "next", None]


def test_variable_manager_singleton():
    assert variable_manager() is variable_manager()
    variable_manager().set("singleton_key", "here")
    assert variable_manager().get("singleton_key") == "here"