#!/usr/bin/env python3
"""
Aztec Decoder - Command Line Interface
Decodes sampled Aztec symbols stored as text grids
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from tqdm import tqdm

from aztec_bit_array import parse_bit_matrix
from aztec_config import DecoderConfig, config_from_env, load_config, setup_logging
from aztec_content import TextMode
from aztec_decoder import decode
from aztec_result import DetectorResult

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        description='Decode sampled Aztec symbols from text grids',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Grid files hold one symbol row per line, 'X' for dark modules and any other
character for light ones, cells separated by a space:

  X X . X . . X ...

Examples:
  # Full range symbol, 2 layers, 30 data codewords
  python aztec_cli.py symbol.txt --layers 2 --data-blocks 30

  # Compact symbols, JSON output
  python aztec_cli.py a.txt b.txt --compact --layers 4 --data-blocks 16 --json

  # Rune
  python aztec_cli.py rune.txt --compact --layers 0 --rune 25
        """
    )

    parser.add_argument('grids', nargs='+', type=str, help='Grid text file(s)')
    parser.add_argument('--layers', type=int, required=True,
                        help='Number of data layers (0 for a rune)')
    parser.add_argument('--data-blocks', type=int, default=0,
                        help='Number of data codewords')
    parser.add_argument('--compact', action='store_true',
                        help='Compact symbol (default: full range)')
    parser.add_argument('--reader-init', action='store_true',
                        help='Reader initialisation symbol')
    parser.add_argument('--mirrored', action='store_true',
                        help='Symbol was sampled mirrored')
    parser.add_argument('--rune', type=int, default=0,
                        help='Rune value when --layers is 0')
    parser.add_argument('--set-char', type=str, default='X',
                        help="Character marking a dark module (default: 'X')")
    parser.add_argument('--no-space', action='store_true',
                        help='Cells are not separated by spaces')
    parser.add_argument('--charset', type=str, default=None,
                        help='Character set for data without ECI (default: ISO-8859-1)')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--hex', action='store_true',
                        help='Print content as hex bytes')
    parser.add_argument('--json', action='store_true',
                        help='Print results as JSON')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write the log to this file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')
    parser.add_argument('--no-progress', action='store_true',
                        help='Disable progress bar')
    return parser


def resolve_config(args):
    config = load_config(args.config) if args.config else DecoderConfig()
    config = config_from_env(config)
    overrides = {}
    if args.charset:
        overrides['default_charset'] = args.charset
    if args.verbose:
        overrides['log_level'] = 'DEBUG'
    if args.log_file:
        overrides['log_file'] = args.log_file
    if overrides:
        config = replace(config, **overrides)
    return config


def decode_grid_file(path, args, config):
    """Decode one grid file into a result dict."""
    text = Path(path).read_text(encoding='utf-8')
    matrix = parse_bit_matrix(text, args.set_char, expect_space=not args.no_space)
    detector_result = DetectorResult(
        bits=matrix,
        compact=args.compact,
        nb_datablocks=args.data_blocks,
        nb_layers=args.layers,
        reader_init=args.reader_init,
        is_mirrored=args.mirrored,
        rune_value=args.rune,
    )
    result = decode(detector_result, config)
    info = result.to_dict()
    if result.is_valid and args.hex:
        info['hex'] = result.text(TextMode.HEX)
    return info


def print_result(path, info, args):
    if not info['success']:
        print(f"{path}: ❌ {info['error']}")
        return
    print(f"{path}: ✓ {info['symbology_identifier']}")
    print(f"   Text: {info['text']}")
    if args.hex:
        print(f"   Hex: {info['hex']}")
    sa = info['structured_append']
    if sa['index'] != -1:
        print(f"   Structured Append: {sa['index'] + 1} of {sa['count'] or '?'}" + (f" (id {sa['id']})" if sa['id'] else ""))
    if info['has_eci']:
        print(f"   ECI: {info['eci_text']}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except ValueError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config)

    missing = [g for g in args.grids if not Path(g).exists()]
    if missing:
        for g in missing:
            print(f"❌ Error: Grid file '{g}' not found!", file=sys.stderr)
        return 1

    results = {}
    show_progress = len(args.grids) > 1 and not args.no_progress and not args.json
    for path in tqdm(args.grids, desc="Decoding", disable=not show_progress):
        try:
            results[path] = decode_grid_file(path, args, config)
        except ValueError as e:
            logger.warning(f"Cannot decode {path}: {e}")
            results[path] = {"success": False, "error": str(e), "error_type": "input"}

    if args.json:
        payload = results[args.grids[0]] if len(args.grids) == 1 else results
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for path, info in results.items():
            print_result(path, info, args)

    return 0 if all(info['success'] for info in results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
