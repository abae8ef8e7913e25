"""
Kit model: regions, rows and the kit builder.
"""

from .regions import Region, extract_regions
from .builder import Kit, KitBuilder, KitRow
from .row_mapper import add_regions_to_kit

__all__ = [
    'Region',
    'extract_regions',
    'Kit',
    'KitBuilder',
    'KitRow',
    'add_regions_to_kit',
]
