"""
Deluge Kit Generator

Builds Synthstrom Deluge kit patches from the regions (cue markers) of
WAV samples:
- wav: cue point reading
- kit: regions, rows and kit builder
- samples: destination resolution and copy into the card
- export: Deluge kit XML writer
- card: card folders and patch slots
- generator: batch orchestration (one kit per file or one combined kit)
"""

__version__ = '0.3.0'
