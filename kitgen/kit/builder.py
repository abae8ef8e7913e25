"""
In-memory kit model and builder.

Rows are appended to a KitBuilder while source files are processed, then
the builder is turned into an immutable Kit exactly once.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from kitgen.card import SamplePath
from kitgen.errors import KitBuildError


@dataclass(frozen=True)
class KitRow:
    """One kit row: a sample played between two frame positions."""

    sample: SamplePath
    start_frame: int
    end_frame: int
    name: Optional[str] = None


@dataclass(frozen=True)
class Kit:
    """An ordered, immutable collection of kit rows."""

    rows: Tuple[KitRow, ...]

    def row_names(self) -> List[str]:
        """
        Display names of the rows, in order.

        Labelled rows keep their label. Unnamed rows get the next free
        positional name (U1, U2, ...), skipping names already taken.
        """
        taken = {row.name for row in self.rows if row.name}
        names = []
        counter = 0

        for row in self.rows:
            if row.name:
                names.append(row.name)
                continue
            counter += 1
            while f"U{counter}" in taken:
                counter += 1
            names.append(f"U{counter}")
            taken.add(f"U{counter}")

        return names


class KitBuilder:
    """Accumulates kit rows; build() finalizes them into a Kit."""

    def __init__(self):
        self._rows: List[KitRow] = []
        self._built = False

    def __len__(self) -> int:
        return len(self._rows)

    def add_row(self, sample: SamplePath, start_frame: int, end_frame: int) -> 'KitBuilder':
        """Append an unnamed row, identified by its position."""
        return self._append(KitRow(sample, start_frame, end_frame))

    def add_named_row(self, sample: SamplePath, start_frame: int, end_frame: int,
                      name: str) -> 'KitBuilder':
        """Append a row displayed under `name`; an empty name leaves it unnamed."""
        return self._append(KitRow(sample, start_frame, end_frame, name or None))

    def _append(self, row: KitRow) -> 'KitBuilder':
        if self._built:
            raise KitBuildError("Kit already built")
        if row.end_frame <= row.start_frame:
            raise KitBuildError(
                f"Invalid row for '{row.sample}'",
                f"end {row.end_frame} <= start {row.start_frame}"
            )
        self._rows.append(row)
        return self

    def build(self) -> Kit:
        """
        Finalize the kit.

        Raises:
            KitBuildError: If no row was added or the builder was already used
        """
        if self._built:
            raise KitBuildError("Kit already built")
        if not self._rows:
            raise KitBuildError("The kit has no rows")

        self._built = True
        return Kit(rows=tuple(self._rows))
