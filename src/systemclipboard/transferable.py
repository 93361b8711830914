import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable, Tuple

from PIL import Image

from systemclipboard.errors import DataRetrievalError, UnsupportedFlavorError
from systemclipboard.flavors import DataFlavor


class Transferable(ABC):
    """Content that can be placed on, or read from, a clipboard.

    A transferable advertises a fixed set of flavors for its whole lifetime
    and produces the typed value for any one of them on request.
    """

    @abstractmethod
    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        pass

    def is_data_flavor_supported(self, flavor: DataFlavor) -> bool:
        return flavor in self.get_transfer_data_flavors()

    @abstractmethod
    def get_transfer_data(self, flavor: DataFlavor) -> Any:
        pass


class _EmptySelection(Transferable):

    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return ()

    def is_data_flavor_supported(self, flavor: DataFlavor) -> bool:
        return False

    def get_transfer_data(self, flavor: DataFlavor) -> Any:
        raise UnsupportedFlavorError(flavor)

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY: Transferable = _EmptySelection()


class StringSelection(Transferable):

    def __init__(self, text: str):
        self._text = str(text)

    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return (DataFlavor.STRING,)

    def get_transfer_data(self, flavor: DataFlavor) -> str:
        if flavor is DataFlavor.STRING:
            return self._text
        raise UnsupportedFlavorError(flavor)


class FilesSelection(Transferable):
    """A list of files.

    Accepts either separate paths (``FilesSelection(a, b)``) or a single
    iterable of paths (``FilesSelection([a, b])``). The paths are copied into
    a tuple, so order and duplicates are kept and later changes to the caller's
    list have no effect.
    """

    def __init__(self, *files: Any):
        if len(files) == 1 and _is_path_collection(files[0]):
            files = tuple(files[0])
        self._files: Tuple[Path, ...] = tuple(Path(f) for f in files)

    @property
    def files(self) -> Tuple[Path, ...]:
        return self._files

    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return (DataFlavor.FILE_LIST,)

    def get_transfer_data(self, flavor: DataFlavor) -> Tuple[Path, ...]:
        if flavor is DataFlavor.FILE_LIST:
            return self._files
        raise UnsupportedFlavorError(flavor)


class ImageSelection(Transferable):

    def __init__(self, image: Image.Image):
        self._image = image

    @property
    def image(self) -> Image.Image:
        return self._image

    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return (DataFlavor.IMAGE,)

    def get_transfer_data(self, flavor: DataFlavor) -> Image.Image:
        if flavor is DataFlavor.IMAGE:
            return self._image
        raise UnsupportedFlavorError(flavor)


class NativeTransferable(Transferable):
    """Snapshot of content owned by the platform clipboard.

    The advertised flavors are fixed when the snapshot is taken; values are
    read through ``reader`` only when asked for. Transport failures surface
    as ``DataRetrievalError``.
    """

    def __init__(
        self,
        flavors: Iterable[DataFlavor],
        reader: Callable[[DataFlavor], Any],
    ):
        self._flavors = tuple(dict.fromkeys(flavors))
        self._reader = reader

    def get_transfer_data_flavors(self) -> Tuple[DataFlavor, ...]:
        return self._flavors

    def get_transfer_data(self, flavor: DataFlavor) -> Any:
        if flavor not in self._flavors:
            raise UnsupportedFlavorError(flavor)
        try:
            value = self._reader(flavor)
        except DataRetrievalError:
            raise
        except (OSError, ValueError) as exc:
            raise DataRetrievalError(
                f"Could not read {flavor.human_name} from clipboard: {exc}") from exc
        if value is None:
            raise DataRetrievalError(
                f"Clipboard returned no data for {flavor.human_name}")
        return value


def _is_path_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes, os.PathLike)):
        return False
    try:
        iter(value)
    except TypeError:
        return False
    return True
