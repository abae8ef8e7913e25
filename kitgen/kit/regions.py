"""
Region extraction from cue points.

A marker placed in a waveform editor either spans a region (it has a
length) or only marks a start. A start-only marker plays until the next
marker, or until the end of the file for the last one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from kitgen.wav import CuePoint


@dataclass(frozen=True)
class Region:
    """A playable frame span [start_frame, end_frame) with an optional label."""

    start_frame: int
    end_frame: int
    label: Optional[str] = None

    @property
    def length(self) -> int:
        return self.end_frame - self.start_frame


def extract_regions(cue_points: Sequence[CuePoint], total_frames: int) -> List[Region]:
    """
    Resolve cue points into closed regions.

    Args:
        cue_points: Cue points in ascending frame order
        total_frames: Number of frames in the file

    Returns:
        One region per cue point with a non-empty span, in cue order.
        An empty list when there are no cue points.
    """
    regions = []

    for i, cue in enumerate(cue_points):
        if cue.length is not None:
            end_frame = cue.frame + cue.length
        elif i + 1 < len(cue_points):
            end_frame = cue_points[i + 1].frame
        else:
            end_frame = total_frames

        if end_frame <= cue.frame:
            logging.warning(f"Ignoring empty region at frame {cue.frame}"
                            f"{f' ({cue.label})' if cue.label else ''}")
            continue

        regions.append(Region(cue.frame, end_frame, cue.label))

    return regions
