# ironbar

The non-graphical core of a customisable status bar for Wayland desktops:
configuration, dynamic values, shared variables, desktop-file lookup, clock
formatting and the IPC protocol. It uses only the standard library.

## Modules

- `ironbar.config`: parses a decoded config mapping (from JSON, YAML, TOML,
  and so on) into a `Config` with `parse_config`. Invalid input raises
  `ConfigError`. Also has `BarPosition`, `Orientation`, `TransitionType`,
  `RevealerTransitionType`, `EllipsizeMode`, `TruncateMode`, `MarginConfig`,
  `CommonConfig`, and the helpers `parse_truncate_mode`,
  `parse_common_config`, `parse_monitor_config`, `default_config`,
  `bar_configs_for_monitor` and `try_get_orientation`.
- `ironbar.ironvar`: named string variables held by a `VariableManager`.
  Setting a variable broadcasts the new value to every subscriber. Subscribing
  sends the current value at once. Keys must be non-empty and made only of
  alphanumerics, `_` and `-`. Any other key raises `InvalidKeyError`.
  `variable_manager()` returns the process-wide manager.
- `ironbar.dynamic_value`: splits templates into `StaticSegment`,
  `ScriptSegment` (`{{command}}`) and `VariableSegment` (`#name`) with
  `parse_input`. `##` is a literal `#`. `DynamicString` holds the current
  text of each segment, and `bind_variables` follows its variables through a
  `VariableManager`. `parse_dynamic_bool` and `is_truthy` handle boolean
  sources.
- `ironbar.desktop_file`: finds the `.desktop` file for an application id
  (`find_desktop_file`) and reads its icon name (`get_desktop_icon_name`).
  It searches `/usr/share/applications`, the flatpak export directory,
  `$XDG_DATA_DIRS/*/applications` and the user's local data directory.
- `ironbar.clock`: `ClockModule` formats dates with strftime patterns in a
  chosen locale. The default format is `%d/%m/%Y %H:%M` on the bar and
  `%H:%M:%S` in the popup. The locale comes from `LC_TIME`, then `LANG`,
  else `POSIX`. `parse_clock_module` builds one from a config map.
- `ironbar.ipc`: the JSON command and response protocol over a Unix socket,
  with a client (`Ipc.send`) and a server (`Ipc.serve`).
- `ironbar.errors`: the `ExitCode` values and shared error messages.

## Examples

### Configuration

```python
from ironbar.config import BarPosition, parse_config, bar_configs_for_monitor

config = parse_config({
    "position": "top",
    "height": 32,
    "monitors": {
        "DP-1": [{"position": "top"}, {"position": "bottom"}],
    },
})

config.position is BarPosition.TOP        # True
config.position.angle()                   # 0.0
len(bar_configs_for_monitor(config, "DP-1"))   # 2
```

By default, position is `bottom`, height is 42 and popup gap is 5. Bars are
anchored to the edges. A monitor entry may be a single bar or a list of
bars. When neither form fits, the error reports both attempts.

### Ironvars

```python
from ironbar.ironvar import VariableManager, InvalidKeyError

manager = VariableManager()
receiver = manager.subscribe("volume")
manager.set("volume", "50")
manager.get("volume")            # "50"
receiver.drain()                 # [None, "50"]

try:
    manager.set("bad key!", "x")
except InvalidKeyError:
    ...
```

### Dynamic strings

```python
from ironbar.dynamic_value import parse_input, is_truthy

parse_input("number ###num")
# [StaticSegment("number "), StaticSegment("#"), VariableSegment("num")]

is_truthy("false")               # False
is_truthy("yes")                 # True
```

### IPC

Commands are frozen data classes: `Ping`, `Inspect`, `Reload`, `Set`, `Get`,
`LoadCss`, `SetVisible`, `GetVisible`, `TogglePopup`, `OpenPopup` and
`ClosePopup`. Replies are `OkResponse`, `OkValueResponse` or `ErrResponse`.
`command_to_dict` and `command_from_dict` give the JSON form, tagged by a
snake-case `"type"` field. `response_to_dict` and `response_from_dict` do the
same for replies. Malformed messages raise `IpcError`.

```python
import asyncio
from ironbar.ipc import Ipc, Get, Set, handle_variable_command
from ironbar.ironvar import VariableManager

async def main():
    manager = VariableManager()
    ipc = Ipc("/tmp/example-ipc.sock")
    server = await ipc.serve(lambda cmd: handle_variable_command(cmd, manager))
    await ipc.send(Set("volume", "50"))   # OkResponse()
    print(await ipc.send(Get("volume")))  # OkValueResponse(value='50')
    server.close()
    Ipc.shutdown(ipc.path)

asyncio.run(main())
```

The handler may be a plain function or a coroutine. If it returns `None` or
raises, the client gets an `ErrResponse` with no message. Without a path,
`Ipc` uses `default_socket_path()`. This is `$XDG_RUNTIME_DIR/ironbar-ipc.sock`,
or `/tmp/ironbar-ipc.sock` when that variable is unset.

## What this package does not do

It draws no bar, window or popup, and has no command-line program. Script
segments are parsed but never run. Of the IPC commands, only `Set` and `Get`
have a ready-made answer (`handle_variable_command`). Any other command needs
a handler that you supply.