#!/usr/bin/env python3
"""
Test: kit generation from sample regions

End-to-end runs on a temporary card with generated WAV files, in both
per-file and combine-all modes.
"""

import os
import sys
import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest.mock import MagicMock

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from kitgen.card import DelugeCard
from kitgen.errors import (
    DirectoryOutOfCardError,
    KitBuildError,
    MetadataReadError,
    SampleAlreadyExistsError,
    SampleNameConflictError,
    SourceNotAFileError,
)
from kitgen.generator import GenerationMode, KitGenerator
from kitgen.samples import CopyOutcome, ExistingSamplePolicy
from kitgen.wav import WavCueReader
from wav_fixtures import write_wav_with_cues


class TestKitGenerator(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        base = Path(self.tmp.name)
        (base / 'card').mkdir()
        self.card = DelugeCard.open(base / 'card', create_missing=True)
        self.sources = base / 'sources'

        self.drums = write_wav_with_cues(self.sources / 'drums.wav', 1200, [
            (100, None, 'kick'), (500, None, None), (900, None, None),
        ])
        self.perc = write_wav_with_cues(self.sources / 'perc.wav', 1000, [
            (0, 300, 'shaker'), (400, None, 'clap'),
        ])
        self.plain = write_wav_with_cues(self.sources / 'plain.wav', 1000)

    def tearDown(self):
        self.tmp.cleanup()

    @property
    def kits_folder(self) -> Path:
        return self.card.root_directory / 'KITS'

    def copied(self, name) -> Path:
        return self.card.samples_directory / 'KITS' / name

    def read_rows(self, kit_path):
        root = ET.parse(kit_path).getroot()
        return [
            (s.get('name'), s.findtext('osc1/fileName'),
             int(s.findtext('osc1/zone/startSamplePos')), int(s.findtext('osc1/zone/endSamplePos')))
            for s in root.findall('./soundSources/sound')
        ]

    def test_single_file_regions(self):
        report = KitGenerator(self.card).generate([self.drums])

        self.assertTrue(report.success)
        self.assertEqual(len(report.kits), 1)
        result = report.kits[0]
        self.assertEqual(result.kit_path, self.kits_folder / 'KIT000.XML')
        self.assertEqual(self.read_rows(result.kit_path), [
            ('kick', 'SAMPLES/KITS/drums.wav', 100, 500),
            ('U1', 'SAMPLES/KITS/drums.wav', 500, 900),
            ('U2', 'SAMPLES/KITS/drums.wav', 900, 1200),
        ])
        self.assertEqual(self.copied('drums.wav').read_bytes(), self.drums.read_bytes())
        self.assertEqual([outcome for _, outcome in result.copies], [CopyOutcome.COPIED])

    def test_per_file_mode_writes_one_kit_per_file(self):
        report = KitGenerator(self.card).generate([self.drums, self.perc], GenerationMode.PER_FILE)

        self.assertEqual([k.kit_path.name for k in report.kits], ['KIT000.XML', 'KIT001.XML'])
        self.assertEqual(len(report.kits[1].kit.rows), 2)
        self.assertTrue(self.copied('perc.wav').exists())

    def test_per_file_mode_continues_after_failure(self):
        missing = self.sources / 'missing.wav'

        with self.assertLogs(level='ERROR'):
            report = KitGenerator(self.card).generate([missing, self.plain, self.drums])

        self.assertFalse(report.success)
        self.assertEqual([path for path, _ in report.failures], [missing, self.plain])
        self.assertIsInstance(report.failures[0][1], SourceNotAFileError)
        self.assertIsInstance(report.failures[1][1], KitBuildError)
        self.assertEqual([k.kit_path.name for k in report.kits], ['KIT000.XML'])
        self.assertFalse(self.copied('plain.wav').exists())

    def test_combine_all_skips_files_without_regions(self):
        report = KitGenerator(self.card).generate([self.perc, self.plain], GenerationMode.COMBINE_ALL)

        self.assertEqual(len(report.kits), 1)
        self.assertEqual(len(report.kits[0].kit.rows), 2)
        self.assertTrue(self.copied('perc.wav').exists())
        self.assertFalse(self.copied('plain.wav').exists())
        self.assertEqual([task.source_path for task, _ in report.kits[0].copies], [self.perc])

    def test_combine_all_row_order_follows_file_order(self):
        generator = KitGenerator(self.card)

        first = generator.generate([self.drums, self.perc], GenerationMode.COMBINE_ALL).kits[0]
        second = generator.generate([self.perc, self.drums], GenerationMode.COMBINE_ALL).kits[0]

        self.assertEqual([row.name for row in first.kit.rows],
                         ['kick', None, None, 'shaker', 'clap'])
        self.assertEqual([row.name for row in second.kit.rows],
                         ['shaker', 'clap', 'kick', None, None])
        self.assertEqual(second.kit_path.name, 'KIT001.XML')

    def test_combine_all_failure_writes_nothing(self):
        missing = self.sources / 'missing.wav'

        with self.assertRaises(SourceNotAFileError):
            KitGenerator(self.card).generate([self.drums, missing], GenerationMode.COMBINE_ALL)

        self.assertEqual(list(self.kits_folder.iterdir()), [])
        self.assertFalse(self.copied('drums.wav').exists())

    def test_combine_all_without_any_region(self):
        with self.assertRaises(KitBuildError):
            KitGenerator(self.card).generate([self.plain], GenerationMode.COMBINE_ALL)
        self.assertEqual(list(self.kits_folder.iterdir()), [])

    def test_read_failure_happens_before_any_write(self):
        exporter = MagicMock()

        def reader_factory(path):
            if path == self.perc:
                raise MetadataReadError('broken cue chunk')
            return WavCueReader.open(path)

        generator = KitGenerator(self.card, cue_reader_factory=reader_factory, exporter=exporter)

        with self.assertRaises(MetadataReadError):
            generator.generate([self.drums, self.perc], GenerationMode.COMBINE_ALL)

        exporter.write_kit.assert_not_called()
        self.assertFalse(self.copied('drums.wav').exists())

    def test_copy_happens_after_kit_is_written(self):
        exporter = MagicMock()

        def check_not_copied_yet(kit, kit_path):
            self.assertFalse(self.copied('drums.wav').exists())

        exporter.write_kit.side_effect = check_not_copied_yet

        KitGenerator(self.card, exporter=exporter).generate([self.drums])

        exporter.write_kit.assert_called_once()
        self.assertTrue(self.copied('drums.wav').exists())

    def test_existing_sample_is_not_replaced(self):
        destination = self.copied('drums.wav')
        destination.parent.mkdir(parents=True)
        destination.write_bytes(b'already on card')

        report = KitGenerator(self.card, replace_existing=False).generate([self.drums])

        self.assertTrue(report.success)
        self.assertTrue(report.kits[0].kit_path.exists())
        self.assertEqual(report.kits[0].copies[0][1], CopyOutcome.ALREADY_EXISTS)
        self.assertEqual(destination.read_bytes(), b'already on card')

    def test_existing_sample_replaced_with_force(self):
        destination = self.copied('drums.wav')
        destination.parent.mkdir(parents=True)
        destination.write_bytes(b'already on card')

        report = KitGenerator(self.card, replace_existing=True).generate([self.drums])

        self.assertEqual(report.kits[0].copies[0][1], CopyOutcome.REPLACED)
        self.assertEqual(destination.read_bytes(), self.drums.read_bytes())

    def test_existing_sample_error_policy(self):
        destination = self.copied('drums.wav')
        destination.parent.mkdir(parents=True)
        destination.write_bytes(b'already on card')
        generator = KitGenerator(self.card, existing_sample_policy=ExistingSamplePolicy.ERROR)

        with self.assertRaises(SampleAlreadyExistsError):
            generator.generate([self.drums], GenerationMode.COMBINE_ALL)

        # the kit was committed before the copy step
        self.assertTrue((self.kits_folder / 'KIT000.XML').exists())
        self.assertEqual(destination.read_bytes(), b'already on card')

    def test_same_source_twice_is_copied_once(self):
        report = KitGenerator(self.card).generate([self.perc, self.perc], GenerationMode.COMBINE_ALL)

        self.assertEqual(len(report.kits[0].kit.rows), 4)
        self.assertEqual(len(report.kits[0].copies), 1)

    def test_same_file_name_from_different_folders(self):
        first = write_wav_with_cues(self.sources / 'a' / 'loop.wav', 1000, [(0, None, None)])
        second = write_wav_with_cues(self.sources / 'b' / 'loop.wav', 3000, [(2000, None, None)])

        with self.assertRaises(SampleNameConflictError):
            KitGenerator(self.card).generate([first, second], GenerationMode.COMBINE_ALL)

        self.assertEqual(list(self.kits_folder.iterdir()), [])
        self.assertFalse(self.copied('loop.wav').exists())

    def test_destination_outside_card(self):
        outside = Path(self.tmp.name) / 'elsewhere'
        generator = KitGenerator(self.card, destination_sample_directory=outside)

        with self.assertRaises(DirectoryOutOfCardError):
            generator.generate([self.drums], GenerationMode.COMBINE_ALL)

    def test_custom_destination_directory(self):
        generator = KitGenerator(self.card, destination_sample_directory='MY KITS')

        result = generator.generate([self.drums]).kits[0]

        self.assertEqual(result.kit.rows[0].sample, 'SAMPLES/MY KITS/drums.wav')
        self.assertTrue((self.card.samples_directory / 'MY KITS' / 'drums.wav').exists())


if __name__ == '__main__':
    unittest.main()
