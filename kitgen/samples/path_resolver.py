"""
Destination of a sample copied into the card.
"""

import os
from pathlib import Path
from typing import Union

from kitgen.card import DelugeCard
from kitgen.errors import DirectoryOutOfCardError, SourceNotAFileError


def resolve_sample_destination(source_path: Union[str, Path],
                               destination_directory: Union[str, Path],
                               card: DelugeCard) -> Path:
    """
    Compute where a source sample is copied inside the card.

    Args:
        source_path: Sample file to copy
        destination_directory: Relative to the card SAMPLES folder, or an
            absolute directory inside the card
        card: Target card

    Returns:
        Absolute destination file path (directory / source file name)

    Raises:
        DirectoryOutOfCardError: If the directory is not inside the card
        SourceNotAFileError: If the source is not a regular file
    """
    source_path = Path(source_path)
    destination_directory = Path(destination_directory)

    if destination_directory.is_absolute():
        directory = Path(os.path.normpath(destination_directory))
    else:
        directory = Path(os.path.normpath(card.samples_directory / destination_directory))

    if not card.contains(directory):
        raise DirectoryOutOfCardError(destination_directory, card.root_directory)

    if not source_path.is_file():
        raise SourceNotAFileError(source_path)

    return directory / source_path.name
