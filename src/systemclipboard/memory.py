from typing import Tuple

from systemclipboard.base import NativeClipboard
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import EMPTY, Transferable


class InMemoryClipboard(NativeClipboard):
    """Process-local clipboard that keeps the installed transferable as is."""

    def __init__(self, name: str = "Local", poll_interval: float = 0.5) -> None:
        super().__init__(name, poll_interval)
        self._stored: Transferable = EMPTY

    def _read_contents(self) -> Transferable:
        return self._stored

    def _write_contents(self, contents: Transferable) -> None:
        self._stored = contents

    def _available_flavors(self) -> Tuple[DataFlavor, ...]:
        return self._stored.get_transfer_data_flavors()
