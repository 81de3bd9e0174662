"""
Registry load errors.

Every load failure names the offending path and a reason. None of them are
retried: they come from content defects, not transient conditions.
"""

from pathlib import Path
from typing import Optional, Union


class LoadError(Exception):
    """Base class for failures that abort a registry load."""

    def __init__(self, path: Union[str, Path, None], reason: str):
        self.path = Path(path) if path is not None else None
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"


class MalformedHeaderError(LoadError):
    """The metadata header is missing, unparseable, or lacks required fields."""


class DuplicateNameError(LoadError):
    """Two documents of the same kind declare the same name."""

    def __init__(self, kind: str, name: str, path: Path, first_path: Optional[Path] = None):
        self.kind = kind
        self.name = name
        self.first_path = first_path
        reason = f"duplicate {kind} name '{name}'"
        if first_path is not None:
            reason += f" (already defined in {first_path})"
        super().__init__(path, reason)


class LayoutError(LoadError):
    """The plugin root contains a directory that is not a recognized kind."""


class RegistryIOError(LoadError):
    """The tree or one of its files could not be read."""
