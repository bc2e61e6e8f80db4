"""Exit codes and shared error messages."""

from enum import IntEnum

__all__ = [
    "ExitCode",
    "ERR_OUTPUTS",
    "ERR_MUTEX_LOCK",
    "ERR_READ_LOCK",
    "ERR_WRITE_LOCK",
    "ERR_CHANNEL_SEND",
    "ERR_CHANNEL_RECV",
    "ERR_WAYLAND_DATA",
]


class ExitCode(IntEnum):
    """Process exit codes used when the bar cannot start."""

    GTK_DISPLAY = 1
    CREATE_BARS = 2


ERR_OUTPUTS = (
    "GTK and Wayland are reporting a different set of outputs"
    " - this is a severe bug and should never happen"
)
ERR_MUTEX_LOCK = "Failed to get lock on Mutex"
ERR_READ_LOCK = "Failed to get read lock"
ERR_WRITE_LOCK = "Failed to get write lock"
ERR_CHANNEL_SEND = "Failed to send message to channel"
ERR_CHANNEL_RECV = "Failed to receive message from channel"

ERR_WAYLAND_DATA = "Failed to get data for Wayland object"