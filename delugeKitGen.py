"""
Deluge Kit Generator - command line entry point.

Generates Synthstrom Deluge kit patches from the regions (cue markers) of
WAV samples. The samples are copied into the card if needed.
"""

import argparse
import logging
import sys

from kitgen import __version__
from kitgen.card import DelugeCard
from kitgen.config import load_config, update_config_from_args, validate_config
from kitgen.errors import KitGenError
from kitgen.export import DelugeKitExporter
from kitgen.generator import GenerationMode, KitGenerator
from kitgen.samples import ExistingSamplePolicy


def get_arg_parser():
    parser = argparse.ArgumentParser(
        prog='deluge-kit-gen',
        description="Deluge Kit Generator - Generate kit patches for Synthstrom Deluge"
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    # Main options
    parser.add_argument('--config', type=str, default=None,
                        help='Path to config YAML (default: conf/kitgen_config.yaml if present)')
    parser.add_argument('--log_level', type=str, metavar='LEVEL',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('card_path', type=str,
                        help='Root directory of the Deluge card where the kit is created. '
                             'Samples are copied into the card as well if needed.')
    parser.add_argument('-f', '--force', action='store_true', default=None,
                        help='Force an operation, like replacing an already existing sample')
    parser.add_argument('--create_card_folders', action='store_true', default=None,
                        help='Create missing KITS and SAMPLES folders in the card')

    subparsers = parser.add_subparsers(dest='command', required=True)

    from_regions = subparsers.add_parser(
        'from-regions',
        help='Generate a kit using the regions specified by the sample metadata',
        description="Generate a kit using the regions specified by the sample metadata. "
                    "The original sample is copied into '<card>/SAMPLES/KITS' by default. "
                    "If a file with the same name already exists it is not copied again, "
                    "unless --force is specified."
    )
    from_regions.add_argument('source_sample_paths', nargs='+', metavar='SOURCE',
                              help='Paths of the source sample files')
    from_regions.add_argument('-d', '--destination_sample_directory', type=str, metavar='DIR',
                              help='Directory where the samples are copied. A relative directory '
                                   'is relative to the SAMPLES folder of the card; an absolute '
                                   'one must be inside the card (default: KITS)')
    from_regions.add_argument('--combine_all', action='store_true', default=None,
                              help='Create one kit containing the regions of all samples. '
                                   'Samples without regions are ignored.')
    from_regions.add_argument('--existing_sample_policy', type=str,
                              choices=[policy.value for policy in ExistingSamplePolicy],
                              help='What to do with a sample already in the card when '
                                   '--force is not set (default: skip)')

    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format='%(asctime)s %(levelname)s: %(message)s')


def run_from_regions(config, card_path, source_sample_paths) -> int:
    """
    Run the from-regions command.

    Returns:
        Process exit code
    """
    generation = config['generation']
    kit_config = config.get('kit', {})
    mode = GenerationMode.COMBINE_ALL if generation.get('combine_all') else GenerationMode.PER_FILE

    try:
        card = DelugeCard.open(card_path, create_missing=bool(generation.get('create_card_folders')))
        generator = KitGenerator(
            card,
            destination_sample_directory=generation['destination_sample_directory'],
            replace_existing=bool(generation.get('force')),
            existing_sample_policy=ExistingSamplePolicy.parse(generation.get('existing_sample_policy')),
            exporter=DelugeKitExporter(
                kit_config.get('firmware_version', DelugeKitExporter.FIRMWARE_VERSION),
                kit_config.get('earliest_compatible_firmware',
                               DelugeKitExporter.EARLIEST_COMPATIBLE_FIRMWARE),
            ),
        )
    except KitGenError as e:
        logging.error(f"Error: {e}")
        return 1

    if mode is GenerationMode.COMBINE_ALL:
        try:
            report = generator.generate(source_sample_paths, mode)
        except KitGenError as e:
            logging.error(f"Error processing multiple samples: {e}")
            return 1
    else:
        # Per-file failures are already reported and do not fail the run
        report = generator.generate(source_sample_paths, mode)

    logging.info(f"Done: {len(report.kits)} kit{'s' if len(report.kits) != 1 else ''} written, "
                 f"{len(report.failures)} failed")
    return 0


def main(argv=None) -> int:
    parser = get_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        update_config_from_args(config, {
            'destination_sample_directory': getattr(args, 'destination_sample_directory', None),
            'combine_all': getattr(args, 'combine_all', None),
            'force': args.force,
            'existing_sample_policy': getattr(args, 'existing_sample_policy', None),
            'create_card_folders': args.create_card_folders,
        }, 'generation')
        update_config_from_args(config, {'level': args.log_level}, 'logging')
        validate_config(config)
    except KitGenError as e:
        setup_logging('INFO')
        logging.error(f"Error: {e}")
        return 1

    setup_logging(config['logging']['level'])

    if args.command == 'from-regions':
        return run_from_regions(config, args.card_path, args.source_sample_paths)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
