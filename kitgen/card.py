"""
Deluge card access.

A card is a directory tree with standard top-level folders:
- KITS: kit patches named KIT000.XML, KIT001.XML, ...
- SYNTHS: synth patches named SYNT000.XML, ...
- SAMPLES: audio files referenced by patches

Patches refer to samples by their path relative to the card root, so every
sample used in a kit must live inside the card.
"""

import logging
import os
import re
from enum import Enum
from pathlib import Path
from typing import Union

from kitgen.errors import CardError


MAX_STANDARD_PATCH_NUMBER = 999


class CardFolder(Enum):
    """Standard folders at the root of a card."""

    KITS = 'KITS'
    SYNTHS = 'SYNTHS'
    SAMPLES = 'SAMPLES'


class PatchType(Enum):
    """Patch kinds with their folder and standard file name prefix."""

    KIT = ('KIT', CardFolder.KITS)
    SYNTH = ('SYNT', CardFolder.SYNTHS)

    @property
    def prefix(self) -> str:
        return self.value[0]

    @property
    def folder(self) -> CardFolder:
        return self.value[1]


class SamplePath(str):
    """
    Location of a sample inside a card, relative to the card root with '/'
    separators (the form stored in patch files).

    Only DelugeCard.sample_path() creates these.
    """

    __slots__ = ()


class DelugeCard:
    """A Deluge card rooted at a local directory."""

    REQUIRED_FOLDERS = (CardFolder.KITS, CardFolder.SAMPLES)

    def __init__(self, root: Path):
        self._root = root

    @classmethod
    def open(cls, root: Union[str, Path], create_missing: bool = False) -> 'DelugeCard':
        """
        Open a card directory.

        Args:
            root: Path to the card root directory
            create_missing: Create missing standard folders instead of failing

        Returns:
            DelugeCard instance

        Raises:
            CardError: If the root is not a directory or a required folder is missing
        """
        root = Path(os.path.abspath(root))
        if not root.is_dir():
            raise CardError(f"Card directory not found: {root}")

        for folder in cls.REQUIRED_FOLDERS:
            folder_path = root / folder.value
            if folder_path.is_dir():
                continue
            if not create_missing:
                raise CardError(
                    f"Missing '{folder.value}' folder in card '{root}'",
                    "Use --create_card_folders to create it"
                )
            try:
                folder_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CardError(f"Cannot create '{folder_path}'", e) from e
            logging.info(f"Created card folder: {folder_path}")

        return cls(root)

    @property
    def root_directory(self) -> Path:
        return self._root

    def folder_path(self, folder: CardFolder) -> Path:
        return self._root / folder.value

    @property
    def samples_directory(self) -> Path:
        return self.folder_path(CardFolder.SAMPLES)

    def contains(self, path: Union[str, Path]) -> bool:
        """Check lexically whether an absolute path is the card root or below it."""
        normalized = Path(os.path.normpath(path))
        return normalized == self._root or self._root in normalized.parents

    def sample_path(self, path: Union[str, Path]) -> SamplePath:
        """
        Convert an absolute file path inside the card to its in-card form.

        Raises:
            CardError: If the path is not inside the card
        """
        normalized = Path(os.path.normpath(os.path.abspath(path)))
        if not self.contains(normalized) or normalized == self._root:
            raise CardError(f"'{path}' is not inside the card '{self._root}'")
        return SamplePath(normalized.relative_to(self._root).as_posix())

    def next_available_patch_path(self, patch_type: PatchType = PatchType.KIT) -> Path:
        """
        Path of the next standard patch file (e.g. KITS/KIT012.XML).

        The number follows the highest standard number already used, so new
        patches always sort after existing ones. Names that do not follow the
        standard pattern are ignored.

        Raises:
            CardError: If the folder is unreadable or all numbers are used
        """
        folder = self.folder_path(patch_type.folder)
        pattern = re.compile(rf'^{patch_type.prefix}(\d{{3}})[A-Z]?\.XML$', re.IGNORECASE)

        highest = -1
        try:
            for entry in folder.iterdir():
                match = pattern.match(entry.name)
                if match:
                    highest = max(highest, int(match.group(1)))
        except OSError as e:
            raise CardError(f"Cannot list patches in '{folder}'", e) from e

        number = highest + 1
        if number > MAX_STANDARD_PATCH_NUMBER:
            raise CardError(f"No {patch_type.prefix} patch number available in '{folder}'")

        return folder / f"{patch_type.prefix}{number:03d}.XML"
