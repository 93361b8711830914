from __future__ import annotations

from dataclasses import dataclass

BACKENDS = {"auto", "linux", "windows", "macos", "memory"}


@dataclass(frozen=True)
class ClipboardConfig:
    """Options for building a clipboard handle with ``create_clipboard``."""

    backend: str = "auto"
    poll_interval: float = 0.5
    command_timeout: float = 1.5
    name: str = "System"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unsupported clipboard backend: {self.backend!r}")
        for field_name in ("poll_interval", "command_timeout"):
            value = getattr(self, field_name)
            if value <= 0:
                raise ValueError(f"{field_name} must be positive, got {value!r}")
