import logging
import platform
import threading
from typing import Optional, Type

from systemclipboard.base import NativeClipboard
from systemclipboard.config import ClipboardConfig

logger = logging.getLogger(__name__)

_PLATFORM_BACKENDS = {
    "Windows": "windows",
    "Linux": "linux",
    "Darwin": "macos",
}

_system_clipboard: Optional[NativeClipboard] = None
_lock = threading.Lock()


def get_clipboard_class(backend: str = "auto") -> Type[NativeClipboard]:
    if backend == "auto":
        system = platform.system()
        backend = _PLATFORM_BACKENDS.get(system, "")
        if not backend:
            raise NotImplementedError(f"Platform '{system}' is not supported")

    if backend == "windows":
        from systemclipboard.windows import WindowsClipboard
        return WindowsClipboard
    elif backend == "linux":
        from systemclipboard.linux import LinuxClipboard
        return LinuxClipboard
    elif backend == "macos":
        from systemclipboard.macos import MacOSClipboard
        return MacOSClipboard
    elif backend == "memory":
        from systemclipboard.memory import InMemoryClipboard
        return InMemoryClipboard
    else:
        raise ValueError(f"Unsupported clipboard backend: {backend!r}")


def create_clipboard(config: Optional[ClipboardConfig] = None) -> NativeClipboard:
    config = config or ClipboardConfig()
    clipboard_class = get_clipboard_class(config.backend)

    clipboard = clipboard_class(name=config.name, poll_interval=config.poll_interval)
    if hasattr(clipboard, "command_timeout"):
        clipboard.command_timeout = config.command_timeout

    logger.debug(f"Using {clipboard!r} for the system clipboard")
    return clipboard


def get_system_clipboard() -> NativeClipboard:
    """Return the process-wide clipboard handle, creating it on first use."""
    global _system_clipboard
    with _lock:
        if _system_clipboard is None:
            _system_clipboard = create_clipboard()
        return _system_clipboard
