import logging
import os
from pathlib import Path
from typing import Any, Optional, Tuple

from PIL import Image

from systemclipboard.base import NativeClipboard
from systemclipboard.errors import (
    ClipboardUnavailableError,
    DataRetrievalError,
    UnsupportedFlavorError,
)
from systemclipboard.events import FlavorListener
from systemclipboard.factory import get_system_clipboard
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import (
    EMPTY,
    FilesSelection,
    ImageSelection,
    StringSelection,
    Transferable,
)

logger = logging.getLogger(__name__)


class SystemClipboard:
    """Copy to, read from, and watch a clipboard.

    Every method is a thin layer over a ``NativeClipboard``. Without an
    explicit handle the process-wide system clipboard is used, obtained the
    first time it is needed.

    Passing ``None`` to any ``copy`` method clears the clipboard. Read
    methods (``as_*`` and ``get_clipboard``) return ``None`` when the content
    is not available in the requested shape; only an unreachable clipboard
    (``ClipboardUnavailableError``) or a ``None`` flavor raise.
    """

    def __init__(self, clipboard: Optional[NativeClipboard] = None) -> None:
        self._clipboard = clipboard

    @property
    def clipboard(self) -> NativeClipboard:
        if self._clipboard is None:
            self._clipboard = get_system_clipboard()
        return self._clipboard

    # -- mutation ---------------------------------------------------------

    def clear(self) -> None:
        """Empty the clipboard. Never raises if the clipboard is busy."""
        try:
            self.set_contents(EMPTY, None)
        except ClipboardUnavailableError as e:
            logger.debug(f"Clipboard clear skipped: {e}")

    def empty(self) -> None:
        self.clear()

    def is_empty(self) -> bool:
        return len(self.get_available_data_flavors()) == 0

    def copy(self, content: Any) -> None:
        """Copy text, an image, a path or an iterable of paths."""
        if content is None:
            self.clear()
        elif isinstance(content, str):
            self.copy_text(content)
        elif isinstance(content, (bytes, bytearray)):
            raise TypeError(
                "Cannot copy raw bytes; decode them to str or load them as an image first")
        elif isinstance(content, Image.Image):
            self.copy_image(content)
        elif isinstance(content, os.PathLike):
            self.copy_files(content)
        else:
            self.copy_files(list(content))

    def copy_text(self, text: Optional[str]) -> None:
        if text is None:
            self.clear()
        else:
            self.set_contents(StringSelection(str(text)), None)

    def copy_files(self, *files: Any) -> None:
        """Copy files, given separately or as one iterable.

        ``copy_files(None)`` clears the clipboard. To change the files on the
        clipboard, copy ``as_files()`` into a list, edit it and copy it back.
        """
        if len(files) == 1 and files[0] is None:
            self.clear()
        else:
            self.set_contents(FilesSelection(*files), None)

    def copy_image(self, image: Optional[Image.Image]) -> None:
        if image is None:
            self.clear()
        else:
            self.set_contents(ImageSelection(image), None)

    # -- inspection -------------------------------------------------------

    def as_text(self) -> Optional[str]:
        """The string on the clipboard, else its files one per line, else None."""
        text = self.as_string()
        if text is not None:
            return text
        return self.as_filenames()

    def is_text(self) -> bool:
        return (self.is_data_flavor_available(DataFlavor.STRING)
                or self.is_data_flavor_available(DataFlavor.FILE_LIST))

    def as_string(self) -> Optional[str]:
        return self.get_clipboard(DataFlavor.STRING)

    def is_string(self) -> bool:
        return self.is_data_flavor_available(DataFlavor.STRING)

    def as_files(self) -> Optional[Tuple[Path, ...]]:
        files = self.get_clipboard(DataFlavor.FILE_LIST)
        if files is None:
            return None
        return tuple(files)

    def is_files(self) -> bool:
        return self.is_data_flavor_available(DataFlavor.FILE_LIST)

    def as_filenames(self, delimiter: str = os.linesep) -> Optional[str]:
        """Join the clipboard's files with ``delimiter``.

        Returns ``""`` for an empty file list and ``None`` when there is no
        file list at all.
        """
        files = self.as_files()
        if files is None:
            return None
        return delimiter.join(str(f) for f in files)

    def as_image(self) -> Optional[Image.Image]:
        return self.get_clipboard(DataFlavor.IMAGE)

    def is_image(self) -> bool:
        return self.is_data_flavor_available(DataFlavor.IMAGE)

    def get_clipboard(self, flavor: DataFlavor) -> Any:
        """Return the clipboard's data in ``flavor``, or None.

        Unsupported flavors and failed reads both give None.
        """
        if flavor is None:
            raise ValueError("flavor must not be None")

        contents = self.get_contents(None)
        if contents is None:
            return None
        try:
            if contents.is_data_flavor_supported(flavor):
                return contents.get_transfer_data(flavor)
        except UnsupportedFlavorError as e:
            logger.debug(f"Clipboard flavor vanished: {e}")
        except DataRetrievalError as e:
            logger.debug(f"Clipboard read failed: {e}")
        return None

    # -- pass-through -----------------------------------------------------

    def add_flavor_listener(self, listener: Optional[FlavorListener]) -> None:
        self.clipboard.add_flavor_listener(listener)

    def remove_flavor_listener(self, listener: Optional[FlavorListener]) -> None:
        self.clipboard.remove_flavor_listener(listener)

    def get_flavor_listeners(self) -> Tuple[FlavorListener, ...]:
        return self.clipboard.get_flavor_listeners()

    def get_available_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return self.clipboard.get_available_data_flavors()

    def is_data_flavor_available(self, flavor: DataFlavor) -> bool:
        return self.clipboard.is_data_flavor_available(flavor)

    def get_contents(self, requestor: Any = None) -> Transferable:
        return self.clipboard.get_contents(requestor)

    def set_contents(self, contents: Transferable, owner: Any = None) -> None:
        self.clipboard.set_contents(contents, owner)

    def get_data(self, flavor: DataFlavor) -> Any:
        return self.clipboard.get_data(flavor)

    def get_name(self) -> str:
        return self.clipboard.get_name()
