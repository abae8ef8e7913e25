#!/usr/bin/env python3
"""
Verify WAV Cue Points

This script reads WAV files and displays their cue points and the kit
regions they resolve to, to check markers before generating a kit.
"""

import sys
from pathlib import Path
from typing import List

from kitgen.errors import MetadataReadError
from kitgen.kit import extract_regions
from kitgen.wav import WavCueReader


def describe_cues(filepath) -> List[str]:
    """
    Describe the cue points and regions of a WAV file.

    Args:
        filepath: Path to WAV file

    Returns:
        Report lines
    """
    reader = WavCueReader.open(filepath)
    cue_points = reader.cue_points()
    total_frames = reader.total_frame_count()

    lines = [f"=== WAV File: {Path(filepath).name} ===",
             f"Total frames: {total_frames}",
             f"Cue points: {len(cue_points)}"]

    for cue in cue_points:
        length = cue.length if cue.length is not None else '-'
        lines.append(f"  frame={cue.frame} length={length} label={cue.label or '-'}")

    regions = extract_regions(cue_points, total_frames)
    lines.append(f"Regions: {len(regions)}")
    for index, region in enumerate(regions, start=1):
        lines.append(f"  [{index}] {region.start_frame}-{region.end_frame} "
                     f"({region.length} frames) {region.label or ''}".rstrip())

    return lines


def main():
    if len(sys.argv) < 2:
        print("Usage: python verify_wav_cues.py <wav_file> [wav_file2 ...]")
        sys.exit(1)

    for filepath in sys.argv[1:]:
        path = Path(filepath)
        if not path.exists():
            print(f"Error: File not found: {filepath}")
            continue

        try:
            print('\n'.join(describe_cues(path)))
        except MetadataReadError as e:
            print(f"Error: {e}")
        print()


if __name__ == '__main__':
    main()
