"""
Kit generation from sample regions.

This module drives the whole pipeline for a batch of source samples:
- resolve where each sample goes in the card
- read its cue points and turn them into regions
- map the regions to kit rows
- write the kit patch, then copy the samples

Generation happens in two phases. The build phase reads every source and
finalizes the kit without writing anything. The commit phase writes the
patch and only then copies the samples, so a failed build never leaves
copied samples behind for a kit that does not exist.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from kitgen.card import DelugeCard, PatchType
from kitgen.errors import KitGenError, SampleNameConflictError
from kitgen.export import DelugeKitExporter
from kitgen.kit import Kit, KitBuilder, add_regions_to_kit, extract_regions
from kitgen.samples import (
    CopyOutcome,
    ExistingSamplePolicy,
    copy_sample_if_needed,
    resolve_sample_destination,
)
from kitgen.wav import WavCueReader


class GenerationMode(Enum):
    """How a batch of source samples is turned into kits."""

    PER_FILE = 'per_file'        # one kit per source sample
    COMBINE_ALL = 'combine_all'  # one kit with the regions of every sample


@dataclass(frozen=True)
class CopyTask:
    source_path: Path
    destination_path: Path


@dataclass
class KitResult:
    """A kit written to the card and the copies done for it."""

    kit_path: Path
    kit: Kit
    copies: List[Tuple[CopyTask, CopyOutcome]] = field(default_factory=list)


@dataclass
class GenerationReport:
    """Outcome of a batch: written kits and per-file failures."""

    kits: List[KitResult] = field(default_factory=list)
    failures: List[Tuple[Path, KitGenError]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


class KitGenerator:
    """
    Generate Deluge kits from the regions of source samples.

    The replace flag and the existing sample policy are fixed for the
    generator, so every file of a batch is handled the same way.
    """

    def __init__(self, card: DelugeCard,
                 destination_sample_directory: Union[str, Path] = 'KITS',
                 replace_existing: bool = False,
                 existing_sample_policy: ExistingSamplePolicy = ExistingSamplePolicy.SKIP,
                 cue_reader_factory: Callable[[Path], WavCueReader] = WavCueReader.open,
                 exporter: Optional[DelugeKitExporter] = None):
        """
        Initialize the generator.

        Args:
            card: Card receiving the kits and samples
            destination_sample_directory: Sample folder, relative to the card
                SAMPLES folder or absolute inside the card
            replace_existing: Overwrite samples already present in the card
            existing_sample_policy: Skip or fail on present samples when not replacing
            cue_reader_factory: Opens a source sample for cue reading
            exporter: Kit patch writer
        """
        self.card = card
        self.destination_sample_directory = Path(destination_sample_directory)
        self.replace_existing = replace_existing
        self.existing_sample_policy = existing_sample_policy
        self.cue_reader_factory = cue_reader_factory
        self.exporter = exporter or DelugeKitExporter()

    def generate(self, source_paths: Sequence[Union[str, Path]],
                 mode: GenerationMode = GenerationMode.PER_FILE) -> GenerationReport:
        """
        Generate kits for a batch of source samples.

        In PER_FILE mode a failing sample is logged and recorded in the
        report, and the remaining samples are still processed. In
        COMBINE_ALL mode any failure aborts the batch and is raised.

        Raises:
            KitGenError: COMBINE_ALL mode only
        """
        report = GenerationReport()
        paths = [Path(p) for p in source_paths]

        if mode is GenerationMode.COMBINE_ALL:
            report.kits.append(self.generate_kit(paths))
            return report

        for path in paths:
            try:
                report.kits.append(self.generate_kit([path]))
            except KitGenError as e:
                logging.error(f"Error processing '{path}': {e}")
                report.failures.append((path, e))

        return report

    def generate_kit(self, source_paths: Sequence[Path]) -> KitResult:
        """
        Build one kit from the regions of the given samples and commit it.

        Samples without any region are left out of the kit and not copied.

        Raises:
            KitGenError: On the first failure; nothing is written if the
                build phase fails
        """
        kit, copy_tasks = self._build_kit(source_paths)
        return self._commit(kit, copy_tasks)

    def _build_kit(self, source_paths: Sequence[Path]) -> Tuple[Kit, List[CopyTask]]:
        builder = KitBuilder()
        copy_tasks: List[CopyTask] = []
        claimed: Dict[Path, Path] = {}

        for source_path in source_paths:
            source_path = Path(source_path)
            destination = resolve_sample_destination(
                source_path, self.destination_sample_directory, self.card
            )
            sample_path = self.card.sample_path(destination)

            reader = self.cue_reader_factory(source_path)
            regions = extract_regions(reader.cue_points(), reader.total_frame_count())
            if not regions:
                logging.info(f"No regions in '{source_path}', skipped")
                continue

            # Same file name from another folder would share the card sample
            resolved = source_path.resolve()
            owner = claimed.setdefault(destination, resolved)
            if owner != resolved:
                raise SampleNameConflictError(destination, owner, source_path)

            add_regions_to_kit(builder, regions, sample_path)
            logging.debug(f"{source_path.name}: {len(regions)} regions")

            task = CopyTask(source_path, destination)
            if task not in copy_tasks:
                copy_tasks.append(task)

        return builder.build(), copy_tasks

    def _commit(self, kit: Kit, copy_tasks: List[CopyTask]) -> KitResult:
        kit_path = self.card.next_available_patch_path(PatchType.KIT)
        row_count = len(kit.rows)
        logging.info(f"Writing kit '{kit_path}' with {row_count} row{'s' if row_count > 1 else ''}")
        self.exporter.write_kit(kit, kit_path)

        result = KitResult(kit_path=kit_path, kit=kit)
        for task in copy_tasks:
            outcome = copy_sample_if_needed(
                task.source_path,
                task.destination_path,
                self.replace_existing,
                self.existing_sample_policy,
            )
            result.copies.append((task, outcome))

        return result
