import io
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote, urlparse

from PIL import Image

from systemclipboard.base import NativeClipboard
from systemclipboard.errors import ClipboardUnavailableError, DataRetrievalError
from systemclipboard.flavors import DataFlavor
from systemclipboard.transferable import NativeTransferable, Transferable

logger = logging.getLogger(__name__)


class LinuxClipboard(NativeClipboard):
    """Clipboard backed by ``wl-clipboard`` on Wayland or ``xclip`` on X11."""

    watch_external_changes = True

    _FILE_TARGETS = ("text/uri-list", "x-special/gnome-copied-files")
    _IMAGE_TARGETS = (
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/pjpeg",
        "image/bmp",
        "image/x-ms-bmp",
        "image/webp",
        "image/tiff",
    )
    _TEXT_TARGETS = (
        "text/plain;charset=utf-8",
        "utf8_string",
        "text/plain",
        "text/plain;charset=utf8",
        "string",
        "text",
    )
    _EMPTY_TARGET = "application/x-systemclipboard-empty"

    def __init__(
        self,
        name: str = "System",
        poll_interval: float = 0.5,
        command_timeout: float = 1.5,
    ) -> None:
        super().__init__(name, poll_interval)
        self.command_timeout = command_timeout

    # -- tool selection -------------------------------------------------

    def _uses_wayland(self) -> bool:
        return bool(os.environ.get("WAYLAND_DISPLAY")) and bool(shutil.which("wl-paste"))

    def _list_command(self) -> List[str]:
        if self._uses_wayland():
            return ["wl-paste", "--list-types"]
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"]
        raise ClipboardUnavailableError(
            "No clipboard tool found. Install wl-clipboard or xclip.")

    def _paste_command(self, target: str) -> List[str]:
        if self._uses_wayland():
            command = ["wl-paste", "--type", target]
            if target.lower().startswith("text/"):
                command.append("--no-newline")
            return command
        return ["xclip", "-selection", "clipboard", "-t", target, "-o"]

    def _copy_command(self, target: str) -> List[str]:
        if self._uses_wayland():
            if shutil.which("wl-copy") is None:
                raise ClipboardUnavailableError("wl-copy is not installed")
            return ["wl-copy", "--type", target]
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard", "-t", target]
        raise ClipboardUnavailableError(
            "No clipboard tool found. Install wl-clipboard or xclip.")

    # -- NativeClipboard --------------------------------------------------

    def _available_flavors(self) -> Tuple[DataFlavor, ...]:
        return self._flavors_for(self._list_targets())

    def _read_contents(self) -> Transferable:
        targets = self._list_targets()

        def reader(flavor: DataFlavor) -> Any:
            return self._read_flavor(flavor, targets)

        return NativeTransferable(self._flavors_for(targets), reader)

    def _write_contents(self, contents: Transferable) -> None:
        flavors = contents.get_transfer_data_flavors()
        if not flavors:
            self._clear()
            return

        flavor = flavors[0]
        value = contents.get_transfer_data(flavor)
        if flavor is DataFlavor.FILE_LIST:
            self._run_write(self._copy_command("text/uri-list"), _to_uri_list(value))
        elif flavor is DataFlavor.IMAGE:
            output = io.BytesIO()
            value.save(output, format="PNG")
            self._run_write(self._copy_command("image/png"), output.getvalue())
        else:
            self._run_write(self._copy_command(self._text_target()), str(value).encode("utf-8"))

    def _text_target(self) -> str:
        # wl-copy guesses the type from the content unless one is given
        return DataFlavor.STRING.mime_type if self._uses_wayland() else "UTF8_STRING"

    def _clear(self) -> None:
        if self._uses_wayland():
            self._run_write(["wl-copy", "--clear"], None)
        elif shutil.which("xsel"):
            self._run_write(["xsel", "--clipboard", "--clear"], None)
        else:
            # xclip cannot drop the selection, so offer a target that maps to no flavor
            self._run_write(self._copy_command(self._EMPTY_TARGET), b"")

    # -- reading ----------------------------------------------------------

    def _list_targets(self) -> List[str]:
        return self._parse_type_list(self._run_read(self._list_command()))

    def _flavors_for(self, targets: Sequence[str]) -> Tuple[DataFlavor, ...]:
        lowered = {target.lower() for target in targets}
        flavors = []
        if lowered.intersection(self._TEXT_TARGETS):
            flavors.append(DataFlavor.STRING)
        if lowered.intersection(self._FILE_TARGETS):
            flavors.append(DataFlavor.FILE_LIST)
        if lowered.intersection(self._IMAGE_TARGETS):
            flavors.append(DataFlavor.IMAGE)
        return tuple(flavors)

    def _read_flavor(self, flavor: DataFlavor, targets: Sequence[str]) -> Any:
        candidates = {
            DataFlavor.STRING: self._TEXT_TARGETS,
            DataFlavor.FILE_LIST: self._FILE_TARGETS,
            DataFlavor.IMAGE: self._IMAGE_TARGETS,
        }[flavor]
        by_lower: Dict[str, str] = {target.lower(): target for target in targets}

        for candidate in candidates:
            target = by_lower.get(candidate)
            if target is None:
                continue
            data = self._run_read(self._paste_command(target))
            if data is None:
                continue

            if flavor is DataFlavor.STRING:
                return data.decode("utf-8", errors="replace")
            if flavor is DataFlavor.FILE_LIST:
                return tuple(self._parse_paths(data))
            image = Image.open(io.BytesIO(data))
            image.load()
            return image

        raise DataRetrievalError(
            f"Clipboard offered {flavor.human_name} but no target could be read")

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _parse_paths(self, data: bytes) -> List[Path]:
        text = data.decode("utf-8", errors="ignore")
        lines = [line.strip() for line in text.replace(
            "\r", "\n").split("\n") if line.strip()]
        if lines and lines[0].lower() in {"copy", "cut"}:
            lines = lines[1:]

        paths: List[Path] = []
        for entry in lines:
            if entry.startswith("#"):
                continue
            parsed = urlparse(entry)
            if parsed.scheme == "file":
                candidate = Path(unquote(parsed.path))
            else:
                candidate = Path(unquote(entry))

            paths.append(candidate)

        return paths

    # -- subprocess -------------------------------------------------------

    def _run_read(self, command: List[str]) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.command_timeout,
            )
            return result.stdout
        except subprocess.CalledProcessError as exc:
            # non-zero exit means nothing is offered for this target
            logger.debug(f"{command[0]} exited with {exc.returncode}")
            return None
        except (subprocess.TimeoutExpired, FileNotFoundError) as exc:
            raise ClipboardUnavailableError(
                f"Clipboard read failed: {exc}") from exc

    def _run_write(self, command: List[str], data: Optional[bytes]) -> None:
        # the copy tools fork to serve the selection, so their output must not be piped
        try:
            subprocess.run(
                command,
                input=data,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
                timeout=self.command_timeout,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as exc:
            raise ClipboardUnavailableError(
                f"Clipboard write failed: {exc}") from exc


def _to_uri_list(files: Sequence[Any]) -> bytes:
    uris = [Path(f).absolute().as_uri() for f in files]
    return "\r\n".join(uris).encode("utf-8")
