from __future__ import annotations

"""
Domain Error Taxonomy.

Environment-level failures (no Steam installation, unreadable library
registry) are raised as exceptions. Failures local to a single manifest are
carried as ManifestError values so that one broken file never hides the rest
of the library.
"""

from dataclasses import dataclass
from pathlib import Path


class SteamShelfError(Exception):
    """Base class for every error raised by this package."""


class SteamNotFoundError(SteamShelfError):
    """No Steam installation could be located."""


class RegistryError(SteamShelfError):
    """The library-folder registry exists but cannot be interpreted."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class KeyValuesParseError(SteamShelfError):
    """
    Structural grammar violation in a key-value document.

    Attributes:
        position: Zero-based character offset where the problem was detected.
        line: One-based line number of the position.
        column: One-based column number of the position.
        reason: Short human-readable description.
    """

    def __init__(self, reason: str, position: int, text: str = "") -> None:
        self.reason = reason
        self.position = position
        self.line = text.count("\n", 0, position) + 1
        self.column = position - (text.rfind("\n", 0, position) + 1) + 1
        super().__init__(f"{reason} (line {self.line}, column {self.column})")


@dataclass(frozen=True)
class ManifestError:
    """
    A single app manifest that could not be turned into a Game.

    Attributes:
        path: Absolute path of the offending manifest file.
        reason: Descriptive error message.
    """
    path: Path
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"
