from systemclipboard.base import NativeClipboard
from systemclipboard.config import ClipboardConfig
from systemclipboard.errors import (
    ClipboardError,
    ClipboardUnavailableError,
    DataRetrievalError,
    UnsupportedFlavorError,
)
from systemclipboard.events import FlavorEvent
from systemclipboard.facade import SystemClipboard
from systemclipboard.factory import create_clipboard, get_clipboard_class, get_system_clipboard
from systemclipboard.flavors import DataFlavor
from systemclipboard.memory import InMemoryClipboard
from systemclipboard.transferable import (
    EMPTY,
    FilesSelection,
    ImageSelection,
    NativeTransferable,
    StringSelection,
    Transferable,
)

__all__ = [
    'ClipboardConfig',
    'ClipboardError',
    'ClipboardUnavailableError',
    'DataFlavor',
    'DataRetrievalError',
    'EMPTY',
    'FilesSelection',
    'FlavorEvent',
    'ImageSelection',
    'InMemoryClipboard',
    'NativeClipboard',
    'NativeTransferable',
    'StringSelection',
    'SystemClipboard',
    'Transferable',
    'UnsupportedFlavorError',
    'create_clipboard',
    'get_clipboard_class',
    'get_system_clipboard',
]
