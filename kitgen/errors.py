"""
Exception types for the Deluge kit generator.

Every failure the generator can report derives from KitGenError so callers
(the CLI, the per-file batch loop) can catch one type and report it.
"""

from pathlib import Path
from typing import Optional, Any


class KitGenError(Exception):
    """
    Base exception for all kit generation errors.

    Args:
        message: Human readable description
        details: Optional extra context (underlying error, offending value)
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(KitGenError):
    """Invalid or unreadable configuration."""
    pass


class CardError(KitGenError):
    """
    Card access errors.

    Examples:
        - Card root directory does not exist
        - Standard folder (KITS, SAMPLES) missing
        - Path is not inside the card
        - No free patch slot left
    """
    pass


class SourceNotAFileError(KitGenError):
    """The source sample path does not refer to a regular file."""

    def __init__(self, path: Path):
        super().__init__(f"'{path}' is not a file")
        self.path = path


class DirectoryOutOfCardError(KitGenError):
    """The destination sample directory lies outside the card."""

    def __init__(self, directory: Path, card_root_directory: Path):
        super().__init__(
            f"The directory '{directory}' is outside the card '{card_root_directory}'"
        )
        self.directory = directory
        self.card_root_directory = card_root_directory


class MetadataReadError(KitGenError):
    """The WAV file or its cue metadata could not be read."""
    pass


class KitBuildError(KitGenError):
    """The kit could not be built (e.g. no rows)."""
    pass


class KitWriteError(KitGenError):
    """The kit patch file could not be written."""
    pass


class SampleCopyError(KitGenError):
    """Copying a sample into the card failed."""
    pass


class SampleAlreadyExistsError(KitGenError):
    """The sample already exists and replacing it was not requested."""

    def __init__(self, path: Path):
        super().__init__(
            f"The sample '{path}' already exists. Use --force to replace the existing file."
        )
        self.path = path


class SampleNameConflictError(KitGenError):
    """Two different source files would be copied to the same card path."""

    def __init__(self, destination: Path, first_source: Path, second_source: Path):
        super().__init__(
            f"'{second_source}' and '{first_source}' would both be copied to '{destination}'"
        )
        self.destination = destination
        self.first_source = first_source
        self.second_source = second_source
