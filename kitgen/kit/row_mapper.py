"""
Mapping of regions to kit rows.
"""

from typing import Iterable

from kitgen.card import SamplePath
from kitgen.kit.builder import KitBuilder
from kitgen.kit.regions import Region


def add_regions_to_kit(builder: KitBuilder, regions: Iterable[Region],
                       sample_path: SamplePath) -> int:
    """
    Append one row per region to the builder, in region order.

    Labelled regions become named rows; the others are positional.

    Returns:
        Number of rows added
    """
    added = 0
    for region in regions:
        if region.label:
            builder.add_named_row(sample_path, region.start_frame, region.end_frame, region.label)
        else:
            builder.add_row(sample_path, region.start_frame, region.end_frame)
        added += 1
    return added
