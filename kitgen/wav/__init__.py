"""
WAV metadata reading for the kit generator.
"""

from .cue_reader import CuePoint, WavCueReader

__all__ = ['CuePoint', 'WavCueReader']
