"""
Synthstrom Deluge Kit Exporter
Writes a Kit to the Deluge kit patch format (KITnnn.XML).

Format outline:
- <kit> root with firmware version attributes
- <soundSources>: one <sound> per kit row, in row order
- each <sound> plays osc1 as a sample: file name relative to the card root
  and a zone with start/end sample positions (frames)
- <selectedDrumIndex>: row selected when the kit is loaded

The patch is written to a temporary file next to the target and moved into
place, so an interrupted write never leaves a truncated patch on the card.
"""

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict

from kitgen.errors import KitWriteError
from kitgen.kit import Kit, KitRow


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


_UMASK = _current_umask()


class DelugeKitExporter:
    """Export kits to Deluge XML patches."""

    FIRMWARE_VERSION = '4.1.4'
    EARLIEST_COMPATIBLE_FIRMWARE = '4.1.0'

    # Oscillator attributes for a one-shot, non time-stretched sample
    SAMPLE_OSC_ATTRIBUTES = {
        'type': 'sample',
        'loopMode': '0',
        'reversed': '0',
        'timeStretchEnable': '0',
        'timeStretchAmount': '0',
    }

    SOUND_DEFAULTS = {
        'polyphonic': 'poly',
        'voicePriority': '1',
        'mode': 'subtractive',
    }

    def __init__(self, firmware_version: str = FIRMWARE_VERSION,
                 earliest_compatible_firmware: str = EARLIEST_COMPATIBLE_FIRMWARE):
        """
        Initialize the kit exporter.

        Args:
            firmware_version: Value of the firmwareVersion attribute
            earliest_compatible_firmware: Value of earliestCompatibleFirmware
        """
        self.firmware_version = firmware_version
        self.earliest_compatible_firmware = earliest_compatible_firmware

    def write_kit(self, kit: Kit, kit_path: Path) -> None:
        """
        Write a kit patch file.

        Args:
            kit: Kit to write
            kit_path: Destination patch path (e.g. <card>/KITS/KIT003.XML)

        Raises:
            KitWriteError: If the file cannot be written
        """
        kit_path = Path(kit_path)
        tree = ET.ElementTree(self._create_xml(kit))
        ET.indent(tree, space='  ')

        tmp_name = None
        try:
            kit_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix='.', suffix='.tmp', dir=kit_path.parent)
            with os.fdopen(fd, 'wb') as f:
                tree.write(f, encoding='UTF-8', xml_declaration=True)
            # mkstemp creates 0600; give the patch the mode of a regular new file
            os.chmod(tmp_name, 0o666 & ~_UMASK)
            os.replace(tmp_name, kit_path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise KitWriteError(f"Failed to write kit '{kit_path}'", e) from e

        logging.debug(f"Kit XML written: {kit_path}")

    def _create_xml(self, kit: Kit) -> ET.Element:
        root = ET.Element('kit', {
            'firmwareVersion': self.firmware_version,
            'earliestCompatibleFirmware': self.earliest_compatible_firmware,
        })

        sound_sources = ET.SubElement(root, 'soundSources')
        for row, name in zip(kit.rows, kit.row_names()):
            sound_sources.append(self._create_sound(row, name))

        ET.SubElement(root, 'selectedDrumIndex').text = '0'
        return root

    def _create_sound(self, row: KitRow, name: str) -> ET.Element:
        sound = ET.Element('sound', {'name': name})

        osc1 = ET.SubElement(sound, 'osc1', dict(self.SAMPLE_OSC_ATTRIBUTES))
        ET.SubElement(osc1, 'fileName').text = str(row.sample)
        zone = ET.SubElement(osc1, 'zone')
        ET.SubElement(zone, 'startSamplePos').text = str(row.start_frame)
        ET.SubElement(zone, 'endSamplePos').text = str(row.end_frame)

        # osc2 is unused but the firmware expects it to be present
        ET.SubElement(sound, 'osc2', dict(self.SAMPLE_OSC_ATTRIBUTES))

        self._add_elements(sound, self.SOUND_DEFAULTS)
        return sound

    @staticmethod
    def _add_elements(parent: ET.Element, values: Dict[str, str]) -> None:
        for tag, value in values.items():
            ET.SubElement(parent, tag).text = value

