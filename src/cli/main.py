"""
Harmonic Scan CLI

Command-line interface for running the harmonic pattern detector over a
CSV candle file.

Commands:
- scan: Load a CSV for one (symbol, timeframe), run one scan cycle and print
  the detected patterns and trade setups (text or JSON)
- templates: Print the ratio tolerance table for every pattern type
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from src.data.ohlc_loader import dataframe_to_candles, load_ohlc
from src.harmonic_analysis.detection_config import DetectionConfig
from src.harmonic_analysis.scanner import PatternScanner, ScanResult
from src.harmonic_analysis.schemas import build_scan_response, build_template_responses
from src.harmonic_analysis.timeframe import parse_timeframe


def build_config(args) -> DetectionConfig:
    """Environment config with command-line overrides applied on top."""
    config = DetectionConfig.from_env()
    overrides = {}
    if args.min_confidence is not None:
        overrides['min_confidence'] = args.min_confidence
    if args.swing_window is not None:
        overrides['swing_window'] = args.swing_window
    if args.stop_loss_buffer is not None:
        overrides['stop_loss_buffer_pct'] = args.stop_loss_buffer
    if args.max_candles is not None:
        overrides['max_candles'] = args.max_candles
    if args.project:
        overrides['project_completions'] = True
    return config.with_overrides(**overrides) if overrides else config


def format_scan_result(result: ScanResult) -> str:
    """Human-readable summary of one scan cycle."""
    lines = [
        f"{result.symbol} {result.timeframe}: {result.status.value}",
        f"  candles={result.candle_count} swings={result.swing_count} "
        f"windows={result.windows_evaluated} skipped={result.windows_skipped}",
    ]
    if result.reason:
        lines.append(f"  reason: {result.reason}")

    for emission in result.emissions:
        pattern, setup = emission.pattern, emission.setup
        points = " ".join(f"{p.label}={p.price:.5g}" for p in pattern.points)
        lines.append(
            f"  {pattern.pattern_type.value} {pattern.direction.value} "
            f"confidence={pattern.confidence:.1f} [{points}]"
        )
        targets = ", ".join(f"{tp:.5g}" for tp in setup.take_profits)
        rr = f"{setup.risk_reward_ratio:.2f}" if setup.risk_reward_ratio is not None else "n/a"
        status = "" if setup.is_valid else f" INVALID ({setup.invalid_reason})"
        lines.append(
            f"    entry={setup.entry_price:.5g} stop={setup.stop_loss:.5g} "
            f"targets=[{targets}] rr={rr}{status}"
        )

    for projection in result.projections:
        point = projection.projected_point
        lines.append(
            f"  forming {projection.pattern_type.value} {projection.direction.value}: "
            f"{point.label}~{point.price:.5g} PRZ [{projection.prz.lower:.5g}, {projection.prz.upper:.5g}] "
            f"confidence={projection.confidence:.1f}"
        )
    return "\n".join(lines)


def run_scan_command(args) -> bool:
    """Run one scan over a CSV file."""
    logger = logging.getLogger(__name__)
    try:
        timeframe = parse_timeframe(args.timeframe).value
        config = build_config(args)
        df = load_ohlc(args.data)
        candles = dataframe_to_candles(df, args.symbol, timeframe)
        logger.info(f"Loaded {len(candles)} candles from {args.data}")

        result = PatternScanner(config).scan(candles, args.symbol, timeframe)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return False

    if args.json:
        print(build_scan_response(result).model_dump_json(indent=2))
    else:
        print(format_scan_result(result))
    return True


def run_templates_command(args) -> bool:
    """Print the pattern ratio table."""
    templates = build_template_responses()
    if args.json:
        print(json.dumps([t.model_dump() for t in templates], indent=2))
        return True

    print(f"{'PATTERN':<10} {'LEG':<4} {'MIN':>7} {'IDEAL':>7} {'MAX':>7}")
    for template in templates:
        for leg, band in template.legs.items():
            print(f"{template.pattern_type:<10} {leg:<4} {band.min:>7.3f} {band.ideal:>7.3f} {band.max:>7.3f}")
    return True


def create_parser():
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='harmonic-scan',
        description="Harmonic pattern detection over OHLC candle files",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    scan_parser = subparsers.add_parser(
        'scan',
        help='Scan a CSV candle file for harmonic patterns'
    )
    scan_parser.add_argument(
        '--data',
        required=True,
        help='Path to the OHLC CSV file'
    )
    scan_parser.add_argument(
        '--symbol',
        required=True,
        help='Instrument symbol, e.g. BTCUSDT'
    )
    scan_parser.add_argument(
        '--timeframe',
        default='1h',
        help='Candle timeframe (1m, 5m, 15m, 30m, 1h, 4h, 1d, 1w; default: 1h)'
    )
    scan_parser.add_argument(
        '--min-confidence',
        type=float,
        help='Minimum confidence to emit a pattern (default: 70)'
    )
    scan_parser.add_argument(
        '--swing-window',
        type=int,
        help='Odd swing comparison window (default: 3)'
    )
    scan_parser.add_argument(
        '--stop-loss-buffer',
        type=float,
        help='Stop-loss buffer beyond X, in percent (default: 1.0)'
    )
    scan_parser.add_argument(
        '--max-candles',
        type=int,
        help='Number of most recent candles to scan (default: 500)'
    )
    scan_parser.add_argument(
        '--project',
        action='store_true',
        help='Also project D for patterns forming on the last four swings'
    )
    scan_parser.add_argument(
        '--json',
        action='store_true',
        help='Print the result as JSON'
    )
    scan_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable INFO logging'
    )

    templates_parser = subparsers.add_parser(
        'templates',
        help='List the ratio tolerance bands of every pattern type'
    )
    templates_parser.add_argument(
        '--json',
        action='store_true',
        help='Print the table as JSON'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    argv = sys.argv[1:] if argv is None else argv

    # If no command specified, show help
    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if getattr(args, 'verbose', False) else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == 'scan':
        success = run_scan_command(args)
    elif args.command == 'templates':
        success = run_templates_command(args)
    else:
        parser.print_help()
        return 1
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
