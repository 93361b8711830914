import importlib
import struct
import sys
import types
from pathlib import Path

import pytest

from systemclipboard import ClipboardUnavailableError, DataFlavor, SystemClipboard

CF_BITMAP = 2
CF_DIB = 8
CF_UNICODETEXT = 13
CF_HDROP = 15


class FakeWin32Clipboard:
    """Mimics the parts of ``win32clipboard`` the Windows handle uses."""

    def __init__(self):
        self.data = {}
        self.is_open = False
        self.busy = 0
        self.open_attempts = 0
        self.empty_error = None

    def OpenClipboard(self, hwnd=None):
        self.open_attempts += 1
        if self.busy:
            self.busy -= 1
            raise RuntimeError("OpenClipboard: Access is denied.")
        self.is_open = True

    def CloseClipboard(self):
        self.is_open = False

    def EmptyClipboard(self):
        assert self.is_open
        if self.empty_error:
            raise self.empty_error
        self.data.clear()

    def IsClipboardFormatAvailable(self, fmt):
        return fmt in self.data

    def SetClipboardData(self, fmt, value):
        assert self.is_open
        self.data[fmt] = value

    def GetClipboardData(self, fmt):
        assert self.is_open
        value = self.data[fmt]
        if fmt == CF_HDROP and isinstance(value, bytes):
            header_size = struct.unpack("<I", value[:4])[0]
            names = value[header_size:].decode("utf-16-le")
            return tuple(name for name in names.split("\0") if name)
        return value


@pytest.fixture
def win32(monkeypatch):
    fake = FakeWin32Clipboard()
    wc = types.ModuleType("win32clipboard")
    for attr in ("OpenClipboard", "CloseClipboard", "EmptyClipboard",
                 "IsClipboardFormatAvailable", "SetClipboardData", "GetClipboardData"):
        setattr(wc, attr, getattr(fake, attr))
    wc.CF_UNICODETEXT = CF_UNICODETEXT

    win32con = types.ModuleType("win32con")
    win32con.CF_BITMAP = CF_BITMAP
    win32con.CF_DIB = CF_DIB
    win32con.CF_UNICODETEXT = CF_UNICODETEXT
    win32con.CF_HDROP = CF_HDROP

    monkeypatch.setitem(sys.modules, "win32clipboard", wc)
    monkeypatch.setitem(sys.modules, "win32con", win32con)
    monkeypatch.delitem(sys.modules, "systemclipboard.windows", raising=False)
    module = importlib.import_module("systemclipboard.windows")
    monkeypatch.setattr(module.time, "sleep", lambda seconds: None)
    fake.module = module
    return fake


@pytest.fixture
def native(win32):
    return win32.module.WindowsClipboard()


def test_text_round_trip(board, win32):
    board.copy_text("from windows")

    assert win32.data == {CF_UNICODETEXT: "from windows"}
    assert not win32.is_open
    assert board.as_string() == "from windows"
    assert board.get_available_data_flavors() == (DataFlavor.STRING,)


def test_files_written_as_hdrop(board, win32, tmp_path):
    first, second = tmp_path / "a.txt", tmp_path / "b.txt"
    board.copy_files(first, second, first)

    header = struct.unpack("<IiiII", win32.data[CF_HDROP][:20])
    assert header == (20, 0, 0, 0, 1)
    assert board.as_files() == (first, second, first)
    assert board.as_text() == board.as_filenames()


def test_image_written_as_dib(board, win32, image, monkeypatch):
    board.copy_image(image.convert("RGBA"))

    dib = win32.data[CF_DIB]
    assert struct.unpack("<I", dib[:4])[0] == 40
    assert board.is_image()

    monkeypatch.setattr(win32.module.ImageGrab, "grabclipboard", lambda: image)
    assert board.as_image() is image


def test_image_read_failure_is_none(board, win32, monkeypatch):
    win32.data[CF_BITMAP] = 1
    monkeypatch.setattr(win32.module.ImageGrab, "grabclipboard", lambda: None)

    assert board.is_image()
    assert board.as_image() is None


def test_clear_empties_clipboard(board, win32):
    board.copy_text("x")
    board.clear()

    assert win32.data == {}
    assert board.is_empty()


def test_busy_clipboard(board, win32):
    win32.busy = 3

    with pytest.raises(ClipboardUnavailableError):
        board.get_available_data_flavors()
    assert win32.open_attempts == 3


def test_busy_clipboard_recovers_within_retries(board, win32):
    board.copy_text("x")
    win32.busy = 2

    assert board.as_string() == "x"


def test_clear_on_busy_clipboard_does_not_raise(board, win32):
    board.copy_text("kept")
    win32.busy = 3
    board.clear()

    assert board.as_string() == "kept"


def test_failed_empty_is_unavailable(board, win32):
    board.copy_text("kept")
    win32.empty_error = RuntimeError("EmptyClipboard: Access is denied.")

    board.clear()
    with pytest.raises(ClipboardUnavailableError):
        board.copy_text("new")
    assert not win32.is_open
    assert board.as_string() == "kept"
