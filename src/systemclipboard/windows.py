import io
import logging
import os
import struct
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence, Tuple

import win32clipboard as wc
import win32con
from PIL import Image, ImageGrab

from systemclipboard.base import NativeClipboard
from systemclipboard.errors import ClipboardUnavailableError, DataRetrievalError
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import NativeTransferable, Transferable

logger = logging.getLogger(__name__)

# DROPFILES header: pFiles, pt.x, pt.y, fNC, fWide
_DROPFILES = struct.Struct("<IiiII")

_FORMATS = (
    (win32con.CF_UNICODETEXT, DataFlavor.STRING),
    (win32con.CF_HDROP, DataFlavor.FILE_LIST),
    (win32con.CF_DIB, DataFlavor.IMAGE),
    (win32con.CF_BITMAP, DataFlavor.IMAGE),
)


class WindowsClipboard(NativeClipboard):
    watch_external_changes = True

    def __init__(self, name: str = "System", poll_interval: float = 0.5) -> None:
        super().__init__(name, poll_interval)

    @contextmanager
    def _opened(self) -> Iterator[None]:
        opened = False
        last_error = None
        for _ in range(3):
            try:
                wc.OpenClipboard()
                opened = True
                break
            except Exception as exc:
                last_error = exc
                time.sleep(0.05)

        if not opened:
            raise ClipboardUnavailableError(
                f"Cannot open system clipboard: {last_error}")

        try:
            yield
        finally:
            try:
                wc.CloseClipboard()
            except Exception as exc:
                logger.debug(f"CloseClipboard failed: {exc}")

    def _available_flavors(self) -> Tuple[DataFlavor, ...]:
        with self._opened():
            flavors = [flavor for fmt, flavor in _FORMATS
                       if wc.IsClipboardFormatAvailable(fmt)]
        return tuple(dict.fromkeys(flavors))

    def _read_contents(self) -> Transferable:
        return NativeTransferable(self._available_flavors(), self._read_flavor)

    def _read_flavor(self, flavor: DataFlavor) -> Any:
        if flavor is DataFlavor.IMAGE:
            image = ImageGrab.grabclipboard()
            if not isinstance(image, Image.Image):
                raise DataRetrievalError("Clipboard does not hold a bitmap")
            return image

        with self._opened():
            try:
                if flavor is DataFlavor.STRING:
                    return wc.GetClipboardData(win32con.CF_UNICODETEXT)
                files = wc.GetClipboardData(win32con.CF_HDROP)
            except Exception as exc:
                raise DataRetrievalError(
                    f"Could not read {flavor.human_name} from clipboard: {exc}") from exc

        if isinstance(files, str):
            files = [files]
        return tuple(Path(os.path.normpath(path)) for path in files or ())

    def _write_contents(self, contents: Transferable) -> None:
        flavors = contents.get_transfer_data_flavors()
        data = [(flavor, contents.get_transfer_data(flavor)) for flavor in flavors]

        with self._opened():
            try:
                wc.EmptyClipboard()
                for flavor, value in data:
                    if flavor is DataFlavor.STRING:
                        wc.SetClipboardData(win32con.CF_UNICODETEXT, str(value))
                    elif flavor is DataFlavor.FILE_LIST:
                        wc.SetClipboardData(win32con.CF_HDROP, _to_hdrop(value))
                    elif flavor is DataFlavor.IMAGE:
                        wc.SetClipboardData(win32con.CF_DIB, _to_dib(value))
            except Exception as exc:
                raise ClipboardUnavailableError(
                    f"Clipboard write failed: {exc}") from exc


def _to_hdrop(files: Sequence[Any]) -> bytes:
    paths: List[str] = [str(Path(f).absolute()) for f in files]
    names = "\0".join(paths) + "\0\0"
    return _DROPFILES.pack(_DROPFILES.size, 0, 0, 0, 1) + names.encode("utf-16-le")


def _to_dib(image: Image.Image) -> bytes:
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGB")
    elif image.mode == "RGBA":
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[3])
        image = background

    output = io.BytesIO()
    image.save(output, "BMP")
    # CF_DIB is the bitmap without its 14 byte file header
    return output.getvalue()[14:]
