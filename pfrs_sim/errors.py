from __future__ import annotations

from typing import Optional


class WorldLoadError(ValueError):
    """A world document could not be loaded."""


class StructuralParseError(WorldLoadError):
    """The document is not JSON or lacks the expected top-level layout."""


class SchemaError(WorldLoadError):
    """A record is missing a field or carries an invalid value."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        where = "config" if index is None else f"objects[{index}]"
        super().__init__(f"{where}: {message}")
        self.index = index


class EditingStateError(RuntimeError):
    """The world was edited while the simulation was not in EDITING state."""
