"""
WAV cue point reader.

Reads the markers a waveform editor stores in a WAV file:
- 'cue ' chunk: one entry per marker with its sample offset
- 'LIST' chunk of type 'adtl' with 'labl' (marker name) and
  'ltxt' (region length) sub-chunks

The total frame count comes from soundfile so every format libsndfile
understands reports a consistent length.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple

import soundfile as sf

from kitgen.errors import MetadataReadError


CUE_ENTRY_SIZE = 24
LTXT_HEADER_SIZE = 20


@dataclass(frozen=True)
class CuePoint:
    """A marker read from the file: frame offset, optional length and label."""

    frame: int
    length: Optional[int] = None
    label: Optional[str] = None


class WavCueReader:
    """
    Cue points and frame count of one WAV file.

    Everything is read when the reader is opened; the accessors never touch
    the file again.
    """

    def __init__(self, path: Path, cue_points: List[CuePoint], total_frames: int):
        self.path = path
        self._cue_points = cue_points
        self._total_frames = total_frames

    @classmethod
    def open(cls, path) -> 'WavCueReader':
        """
        Read cue metadata and frame count from a WAV file.

        Args:
            path: Path to the WAV file

        Returns:
            WavCueReader with cue points sorted by ascending frame

        Raises:
            MetadataReadError: If the file is not a readable RIFF/WAVE file
        """
        path = Path(path)
        try:
            with open(path, 'rb') as f:
                cue_points = _read_cue_points(f, path)
        except OSError as e:
            raise MetadataReadError(f"Cannot read '{path}'", e) from e

        try:
            total_frames = sf.info(str(path)).frames
        except RuntimeError as e:
            # LibsndfileError derives from RuntimeError
            raise MetadataReadError(f"Cannot read audio format of '{path}'", e) from e

        logging.debug(f"{path.name}: {len(cue_points)} cue points, {total_frames} frames")
        return cls(path, cue_points, total_frames)

    def cue_points(self) -> List[CuePoint]:
        return list(self._cue_points)

    def total_frame_count(self) -> int:
        return self._total_frames


def _iter_chunks(f: BinaryIO, end: int, wanted: Tuple[bytes, ...]) -> Iterator[Tuple[bytes, bytes]]:
    """Yield (chunk_id, chunk_data) for the wanted chunks until `end` or end of file."""
    while f.tell() + 8 <= end:
        header = f.read(8)
        if len(header) < 8:
            break

        chunk_id, chunk_size = struct.unpack('<4sI', header)
        chunk_pos = f.tell()

        if chunk_id in wanted:
            chunk_data = f.read(chunk_size)
            if len(chunk_data) < chunk_size:
                logging.warning(f"Truncated '{chunk_id.decode('latin1')}' chunk")
                break
            yield chunk_id, chunk_data

        # Move to next chunk, skipping the pad byte of odd-sized chunks
        f.seek(chunk_pos + chunk_size + chunk_size % 2)


def _iter_sub_chunks(data: bytes) -> Iterator[Tuple[bytes, bytes]]:
    """Yield (chunk_id, chunk_data) pairs from a LIST chunk body."""
    pos = 0
    while pos + 8 <= len(data):
        chunk_id, chunk_size = struct.unpack('<4sI', data[pos:pos + 8])
        pos += 8
        yield chunk_id, data[pos:pos + chunk_size]
        pos += chunk_size + (chunk_size % 2)


def _decode_text(raw: bytes) -> Optional[str]:
    text = raw.split(b'\x00', 1)[0].decode('utf-8', errors='replace').strip()
    return text or None


def _read_cue_points(f: BinaryIO, path: Path) -> List[CuePoint]:
    riff_id, riff_size, wave_id = struct.unpack('<4sI4s', f.read(12).ljust(12, b'\x00'))
    if riff_id != b'RIFF' or wave_id != b'WAVE':
        raise MetadataReadError(f"'{path}' is not a RIFF/WAVE file")

    offsets: Dict[int, int] = {}
    order: List[int] = []
    labels: Dict[int, str] = {}
    lengths: Dict[int, int] = {}

    for chunk_id, chunk_data in _iter_chunks(f, riff_size + 8, (b'cue ', b'LIST')):
        if chunk_id == b'cue ':
            if len(chunk_data) < 4:
                raise MetadataReadError(f"Invalid cue chunk in '{path}'")
            count = struct.unpack('<I', chunk_data[:4])[0]
            if len(chunk_data) < 4 + count * CUE_ENTRY_SIZE:
                raise MetadataReadError(
                    f"Invalid cue chunk in '{path}'",
                    f"{count} cue points declared, {len(chunk_data)} bytes"
                )
            for i in range(count):
                start = 4 + i * CUE_ENTRY_SIZE
                cue_id, _, _, _, _, sample_offset = struct.unpack(
                    '<II4sIII', chunk_data[start:start + CUE_ENTRY_SIZE]
                )
                if cue_id not in offsets:
                    order.append(cue_id)
                offsets[cue_id] = sample_offset

        elif chunk_id == b'LIST' and chunk_data[:4] == b'adtl':
            for sub_id, sub_data in _iter_sub_chunks(chunk_data[4:]):
                if sub_id == b'labl' and len(sub_data) >= 4:
                    cue_id = struct.unpack('<I', sub_data[:4])[0]
                    label = _decode_text(sub_data[4:])
                    if label:
                        labels[cue_id] = label
                elif sub_id == b'ltxt' and len(sub_data) >= LTXT_HEADER_SIZE:
                    cue_id, sample_length = struct.unpack('<II', sub_data[:8])
                    lengths[cue_id] = sample_length

    cue_points = [
        CuePoint(frame=offsets[cue_id], length=lengths.get(cue_id), label=labels.get(cue_id))
        for cue_id in order
    ]
    return sorted(cue_points, key=lambda cue: cue.frame)
