"""Commands, responses and the Unix socket server and client that carry them."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from contextlib import suppress
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Union

from ironbar.ironvar import InvalidKeyError, VariableManager

__all__ = [
    "IpcError",
    "Ping",
    "Inspect",
    "Reload",
    "Set",
    "Get",
    "LoadCss",
    "SetVisible",
    "GetVisible",
    "TogglePopup",
    "OpenPopup",
    "ClosePopup",
    "Command",
    "OkResponse",
    "OkValueResponse",
    "ErrResponse",
    "Response",
    "Ipc",
    "SOCKET_NAME",
    "default_socket_path",
    "command_to_dict",
    "command_from_dict",
    "response_to_dict",
    "response_from_dict",
    "error_response",
    "handle_variable_command",
]

log = logging.getLogger(__name__)

SOCKET_NAME = "ironbar-ipc.sock"
_READ_SIZE = 1024
_MAX_SOCKET_PATH = 100


class IpcError(Exception):
    """Raised when a message cannot be sent, received or understood."""


# -- commands --------------------------------------------------------------


@dataclass(frozen=True)
class Ping:
    """Answered with `ok`."""


@dataclass(frozen=True)
class Inspect:
    """Open the GTK inspector."""


@dataclass(frozen=True)
class Reload:
    """Reload the config."""


@dataclass(frozen=True)
class Set:
    """Set a variable, creating it if it does not exist."""

    key: str
    value: str


@dataclass(frozen=True)
class Get:
    """Get the current value of a variable."""

    key: str


@dataclass(frozen=True)
class LoadCss:
    """Load an additional stylesheet."""

    path: Path


@dataclass(frozen=True)
class SetVisible:
    """Set the visibility of the named bar."""

    bar_name: str
    visible: bool


@dataclass(frozen=True)
class GetVisible:
    """Get the visibility of the named bar."""

    bar_name: str


@dataclass(frozen=True)
class TogglePopup:
    """Toggle a widget's popup open or closed."""

    bar_name: str
    name: str


@dataclass(frozen=True)
class OpenPopup:
    """Open a widget's popup."""

    bar_name: str
    name: str


@dataclass(frozen=True)
class ClosePopup:
    """Close the bar's open popup."""

    bar_name: str


Command = Union[
    Ping, Inspect, Reload, Set, Get, LoadCss, SetVisible, GetVisible, TogglePopup, OpenPopup,
    ClosePopup,
]

_COMMAND_CLASSES: dict[str, type] = {
    "ping": Ping,
    "inspect": Inspect,
    "reload": Reload,
    "set": Set,
    "get": Get,
    "load_css": LoadCss,
    "set_visible": SetVisible,
    "get_visible": GetVisible,
    "toggle_popup": TogglePopup,
    "open_popup": OpenPopup,
    "close_popup": ClosePopup,
}
_COMMAND_TAGS = {cls: tag for tag, cls in _COMMAND_CLASSES.items()}


# -- responses -------------------------------------------------------------


@dataclass(frozen=True)
class OkResponse:
    """The command succeeded."""


@dataclass(frozen=True)
class OkValueResponse:
    """The command succeeded and returned a value."""

    value: str


@dataclass(frozen=True)
class ErrResponse:
    """The command failed."""

    message: str | None = None


Response = Union[OkResponse, OkValueResponse, ErrResponse]


def error_response(message: str) -> ErrResponse:
    """An error response carrying `message`."""
    return ErrResponse(message=message)


# -- serialisation ---------------------------------------------------------


def _field_value(name: str, value: Any) -> Any:
    if name == "visible":
        if not isinstance(value, bool):
            raise IpcError(f"invalid type for `{name}`: expected a boolean")
        return value
    if not isinstance(value, str):
        raise IpcError(f"invalid type for `{name}`: expected a string")
    return Path(value) if name == "path" else value


def command_to_dict(command: Command) -> dict[str, Any]:
    """The JSON-ready form of a command, tagged by `type`."""
    tag = _COMMAND_TAGS.get(type(command))
    if tag is None:
        raise TypeError(f"not a command: {command!r}")
    data: dict[str, Any] = {"type": tag}
    for item in fields(command):
        value = getattr(command, item.name)
        data[item.name] = str(value) if isinstance(value, Path) else value
    return data


def command_from_dict(data: Any) -> Command:
    """Build a command from its JSON form."""
    if not isinstance(data, Mapping):
        raise IpcError("invalid command: expected a map")
    tag = data.get("type")
    cls = _COMMAND_CLASSES.get(tag) if isinstance(tag, str) else None
    if cls is None:
        raise IpcError(f"unknown command type: {tag!r}")
    kwargs = {}
    for item in fields(cls):
        if item.name not in data:
            raise IpcError(f"missing field `{item.name}`")
        kwargs[item.name] = _field_value(item.name, data[item.name])
    return cls(**kwargs)


def response_to_dict(response: Response) -> dict[str, Any]:
    """The JSON-ready form of a response, tagged by `type`."""
    if isinstance(response, OkResponse):
        return {"type": "ok"}
    if isinstance(response, OkValueResponse):
        return {"type": "ok_value", "value": response.value}
    if isinstance(response, ErrResponse):
        return {"type": "err", "message": response.message}
    raise TypeError(f"not a response: {response!r}")


def response_from_dict(data: Any) -> Response:
    """Build a response from its JSON form."""
    if not isinstance(data, Mapping):
        raise IpcError("invalid response: expected a map")
    tag = data.get("type")
    if tag == "ok":
        return OkResponse()
    if tag == "ok_value":
        if "value" not in data:
            raise IpcError("missing field `value`")
        return OkValueResponse(_field_value("value", data["value"]))
    if tag == "err":
        message = data.get("message")
        if message is not None and not isinstance(message, str):
            raise IpcError("invalid type for `message`: expected a string")
        return ErrResponse(message)
    raise IpcError(f"unknown response type: {tag!r}")


def handle_variable_command(command: Command, manager: VariableManager) -> Response | None:
    """Answer `Set` and `Get` against `manager`; None for any other command."""
    if isinstance(command, Set):
        try:
            manager.set(command.key, command.value)
        except InvalidKeyError as err:
            return error_response(str(err))
        return OkResponse()
    if isinstance(command, Get):
        value = manager.get(command.key)
        if value is None:
            return error_response("Variable not found")
        return OkValueResponse(value)
    return None


# -- transport -------------------------------------------------------------


Handler = Callable[[Command], Union[Response, None, Awaitable[Union[Response, None]]]]


def default_socket_path() -> Path:
    """The socket in `XDG_RUNTIME_DIR`, or in `/tmp` when that is unset."""
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    return Path(runtime_dir if runtime_dir is not None else "/tmp") / SOCKET_NAME


class Ipc:
    """Both ends of the IPC socket: a client that sends and a server that answers."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else default_socket_path()
        if len(str(self.path)) > _MAX_SOCKET_PATH:
            log.warning(
                "The IPC socket file's absolute path exceeds 100 bytes,"
                " the socket may fail to create."
            )

    async def send(self, command: Command) -> Response:
        """Send a command to the server and return its response."""
        try:
            reader, writer = await asyncio.open_unix_connection(str(self.path))
        except OSError as err:
            raise IpcError(
                "Failed to connect to Ironbar IPC server (is Ironbar running?)"
            ) from err

        try:
            writer.write(json.dumps(command_to_dict(command)).encode())
            await writer.drain()
            data = await reader.read(_READ_SIZE)
        finally:
            writer.close()
            with suppress(OSError):
                await writer.wait_closed()

        try:
            payload = json.loads(data)
        except ValueError as err:
            raise IpcError("Invalid response from IPC server") from err
        return response_from_dict(payload)

    async def serve(self, handler: Handler) -> asyncio.AbstractServer:
        """Start listening on the socket; connections are handled one at a time."""
        if self.path.exists():
            log.warning("Socket already exists. Did Ironbar exit abruptly?")
            log.warning("Attempting IPC shutdown to allow binding to address")
            self.shutdown(self.path)

        lock = asyncio.Lock()

        async def on_connection(
            reader: asyncio.StreamReader, writer: asyncio.StreamWriter
        ) -> None:
            async with lock:
                try:
                    await self.handle_connection(reader, writer, handler)
                except (IpcError, OSError) as err:
                    log.error("%s", err)
                finally:
                    writer.close()
                    with suppress(OSError):
                        await writer.wait_closed()

        log.info("Starting IPC on %s", self.path)
        try:
            return await asyncio.start_unix_server(on_connection, path=str(self.path))
        except OSError as err:
            raise IpcError("Unable to start IPC server") from err

    async def handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        handler: Handler,
    ) -> None:
        """Read one command, answer it with `handler` and write the response."""
        data = await reader.read(_READ_SIZE)
        try:
            payload = json.loads(data)
        except ValueError as err:
            raise IpcError("Invalid command received") from err
        command = command_from_dict(payload)

        log.debug("Received command: %r", command)

        try:
            response = handler(command)
            if inspect.isawaitable(response):
                response = await response
        except Exception:
            log.exception("IPC command failed")
            response = None
        if response is None:
            response = ErrResponse()

        writer.write(json.dumps(response_to_dict(response)).encode())
        await writer.drain()
        if writer.can_write_eof():
            writer.write_eof()

    @staticmethod
    def shutdown(path: Path | str) -> None:
        """Remove the socket file, ignoring errors."""
        with suppress(OSError):
            os.remove(path)