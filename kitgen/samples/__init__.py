"""
Sample placement in the card: destination resolution and copy.
"""

from .path_resolver import resolve_sample_destination
from .sample_copier import CopyOutcome, ExistingSamplePolicy, copy_sample_if_needed

__all__ = [
    'resolve_sample_destination',
    'CopyOutcome',
    'ExistingSamplePolicy',
    'copy_sample_if_needed',
]
