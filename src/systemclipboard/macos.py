import io
import logging
from pathlib import Path
from typing import Any, List, Tuple

from PIL import Image

try:
    from AppKit import (
        NSFilenamesPboardType,
        NSPasteboard,
        NSPasteboardTypeFileURL,
        NSPasteboardTypePNG,
        NSPasteboardTypeString,
        NSPasteboardTypeTIFF,
    )
    from Foundation import NSURL, NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from systemclipboard.base import NativeClipboard
from systemclipboard.errors import ClipboardUnavailableError, DataRetrievalError
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import NativeTransferable, Transferable

logger = logging.getLogger(__name__)


class MacOSClipboard(NativeClipboard):
    """The general pasteboard, through PyObjC."""

    watch_external_changes = True

    def __init__(self, name: str = "System", poll_interval: float = 0.5) -> None:
        super().__init__(name, poll_interval)

    def _pasteboard(self):
        if not HAS_APPKIT:
            raise ClipboardUnavailableError(
                "AppKit is not available. Install pyobjc-framework-Cocoa.")
        return NSPasteboard.generalPasteboard()

    def _available_flavors(self) -> Tuple[DataFlavor, ...]:
        types = self._pasteboard().types() or []
        flavors = []
        if NSPasteboardTypeString in types:
            flavors.append(DataFlavor.STRING)
        if NSPasteboardTypeFileURL in types or NSFilenamesPboardType in types:
            flavors.append(DataFlavor.FILE_LIST)
        if NSPasteboardTypePNG in types or NSPasteboardTypeTIFF in types:
            flavors.append(DataFlavor.IMAGE)
        return tuple(flavors)

    def _read_contents(self) -> Transferable:
        return NativeTransferable(self._available_flavors(), self._read_flavor)

    def _read_flavor(self, flavor: DataFlavor) -> Any:
        pasteboard = self._pasteboard()

        if flavor is DataFlavor.STRING:
            return pasteboard.stringForType_(NSPasteboardTypeString)

        if flavor is DataFlavor.FILE_LIST:
            file_urls = pasteboard.readObjectsForClasses_options_([NSURL], None) or []
            paths = tuple(Path(url.path()) for url in file_urls if url.isFileURL())
            if paths:
                return paths
            filenames = pasteboard.propertyListForType_(NSFilenamesPboardType)
            if filenames is None:
                raise DataRetrievalError("Pasteboard returned no file URLs")
            return tuple(Path(str(name)) for name in filenames)

        for pb_type in (NSPasteboardTypePNG, NSPasteboardTypeTIFF):
            data = pasteboard.dataForType_(pb_type)
            if data:
                image = Image.open(io.BytesIO(bytes(data)))
                image.load()
                return image
        raise DataRetrievalError("Pasteboard returned no image data")

    def _write_contents(self, contents: Transferable) -> None:
        pasteboard = self._pasteboard()
        pasteboard.clearContents()

        for flavor in contents.get_transfer_data_flavors():
            value = contents.get_transfer_data(flavor)
            if flavor is DataFlavor.STRING:
                ok = pasteboard.setString_forType_(str(value), NSPasteboardTypeString)
            elif flavor is DataFlavor.FILE_LIST:
                file_urls: List[Any] = [
                    NSURL.fileURLWithPath_(str(Path(f).absolute())) for f in value]
                if file_urls:
                    ok = pasteboard.writeObjects_(file_urls)
                else:
                    # no URL objects to write, so declare the list itself
                    ok = pasteboard.setPropertyList_forType_([], NSFilenamesPboardType)
            else:
                output = io.BytesIO()
                value.save(output, format="PNG")
                payload = output.getvalue()
                ns_data = NSData.dataWithBytes_length_(payload, len(payload))
                ok = pasteboard.setData_forType_(ns_data, NSPasteboardTypePNG)

            if not ok:
                raise ClipboardUnavailableError(
                    f"Pasteboard rejected {flavor.human_name}")
