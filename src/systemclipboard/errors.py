from typing import Any


class ClipboardError(Exception):
    pass


class UnsupportedFlavorError(ClipboardError, LookupError):
    """The requested flavor is not offered by the clipboard content."""

    def __init__(self, flavor: Any):
        name = getattr(flavor, "human_name", None) or repr(flavor)
        super().__init__(f"Unsupported flavor: {name}")
        self.flavor = flavor


class ClipboardUnavailableError(ClipboardError, RuntimeError):
    """The native clipboard cannot be accessed right now."""


class DataRetrievalError(ClipboardError, OSError):
    """An advertised flavor could not be materialized by the transport."""
