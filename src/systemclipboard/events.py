import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from systemclipboard.base import NativeClipboard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlavorEvent:
    source: "NativeClipboard"


FlavorListener = Callable[[FlavorEvent], None]


class EventDispatcher:
    """Runs callbacks one at a time, in order, on a daemon thread."""

    def __init__(self, name: str = "clipboard-events") -> None:
        self._name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def submit(self, callback: Callable[..., Any], *args: Any) -> None:
        self._ensure_thread()
        self._queue.put((callback, args))

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until every submitted callback has run."""
        done = threading.Event()
        self.submit(done.set)
        return done.wait(timeout)

    def _ensure_thread(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while True:
            callback, args = self._queue.get()
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in clipboard callback {callback!r}: {e}")
            finally:
                self._queue.task_done()


class FlavorWatcher:
    """Polls a clipboard so flavor changes made by other processes reach listeners."""

    def __init__(self, clipboard: "NativeClipboard", poll_interval: float = 0.5) -> None:
        self._clipboard = clipboard
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self.poll_interval = poll_interval

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                return

            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, name="clipboard-watcher", daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            self._is_running = False
            self._stop_event.set()
            thread = self._poll_thread
            self._poll_thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def _poll_loop(self) -> None:
        while not self._stop_event.wait(self.poll_interval):
            try:
                self._clipboard.check_flavors()
            except Exception as e:
                logger.debug(f"Clipboard poll failed: {e}")

    def __enter__(self) -> "FlavorWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
