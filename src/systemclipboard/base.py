import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, FrozenSet, List, Optional, Tuple

from systemclipboard.errors import ClipboardUnavailableError, UnsupportedFlavorError
from systemclipboard.events import EventDispatcher, FlavorEvent, FlavorListener, FlavorWatcher
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import Transferable

logger = logging.getLogger(__name__)


class NativeClipboard(ABC):
    """A clipboard that transferables can be placed on.

    Subclasses talk to the actual storage through ``_read_contents``,
    ``_write_contents`` and ``_available_flavors``. This class handles the
    owner bookkeeping and flavor-change notification shared by every platform.

    Listener and owner callbacks are delivered asynchronously on a single
    dispatch thread. Subclasses whose contents can be changed by other
    processes set ``watch_external_changes`` so that a poller runs while any
    listener is registered.
    """

    watch_external_changes = False

    def __init__(self, name: str, poll_interval: float = 0.5) -> None:
        self._name = name
        self._lock = threading.RLock()
        self._listeners: List[FlavorListener] = []
        self._owner: Optional[Any] = None
        self._contents: Optional[Transferable] = None
        self._known_flavors: Optional[FrozenSet[DataFlavor]] = None
        self._dispatcher = EventDispatcher(name=f"clipboard-events-{name}")
        self._watcher: Optional[FlavorWatcher] = None
        self._poll_interval = poll_interval

    @property
    def name(self) -> str:
        return self._name

    def get_name(self) -> str:
        return self._name

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @abstractmethod
    def _read_contents(self) -> Transferable:
        pass

    @abstractmethod
    def _write_contents(self, contents: Transferable) -> None:
        pass

    @abstractmethod
    def _available_flavors(self) -> Tuple[DataFlavor, ...]:
        pass

    def get_contents(self, requestor: Any = None) -> Transferable:
        with self._lock:
            return self._read_contents()

    def set_contents(self, contents: Transferable, owner: Any = None) -> None:
        if contents is None:
            raise ValueError("contents must not be None")

        with self._lock:
            self._write_contents(contents)
            old_owner, old_contents = self._owner, self._contents
            self._owner, self._contents = owner, contents

        if old_owner is not None and old_owner is not owner:
            self._dispatcher.submit(
                old_owner.lost_ownership, self, old_contents)
        self.check_flavors()

    def get_available_data_flavors(self) -> Tuple[DataFlavor, ...]:
        with self._lock:
            return tuple(self._available_flavors())

    def is_data_flavor_available(self, flavor: DataFlavor) -> bool:
        if flavor is None:
            raise ValueError("flavor must not be None")
        return flavor in self.get_available_data_flavors()

    def get_data(self, flavor: DataFlavor) -> Any:
        if flavor is None:
            raise ValueError("flavor must not be None")
        contents = self.get_contents()
        if contents is None or not contents.is_data_flavor_supported(flavor):
            raise UnsupportedFlavorError(flavor)
        return contents.get_transfer_data(flavor)

    def add_flavor_listener(self, listener: Optional[FlavorListener]) -> None:
        if listener is None:
            return

        with self._lock:
            if self._known_flavors is None:
                self._known_flavors = self._current_flavors()
            self._listeners.append(listener)

            if self.watch_external_changes and self._watcher is None:
                self._watcher = FlavorWatcher(self, self._poll_interval)
                self._watcher.start()

    def remove_flavor_listener(self, listener: Optional[FlavorListener]) -> None:
        if listener is None:
            return

        watcher = None
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return

            if not self._listeners:
                self._known_flavors = None
                watcher, self._watcher = self._watcher, None

        if watcher is not None:
            watcher.stop()

    def get_flavor_listeners(self) -> Tuple[FlavorListener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def check_flavors(self) -> None:
        """Notify listeners if the set of available flavors has changed."""
        with self._lock:
            if not self._listeners:
                return
            current = self._current_flavors()
            if current is None or current == self._known_flavors:
                return
            self._known_flavors = current
            listeners = list(self._listeners)

        event = FlavorEvent(source=self)
        for listener in listeners:
            self._dispatcher.submit(listener, event)

    def _current_flavors(self) -> Optional[FrozenSet[DataFlavor]]:
        try:
            return frozenset(self._available_flavors())
        except ClipboardUnavailableError as e:
            logger.debug(f"Could not read flavors from {self._name} clipboard: {e}")
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
