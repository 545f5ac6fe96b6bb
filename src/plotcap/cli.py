"""Command line entry point: turn a pcap file into a gnuplot rate plot."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from .aggregate import IntervalAggregator
from .capture import open_capture
from .errors import CorruptRecordError, InvalidIntervalError, UnsupportedFormatError
from .gnuplot import render_script, write_script
from .interval import DEFAULT_INTERVAL, interval_to_ns
from .log import setup_logger

logger = logging.getLogger("plotcap")

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INVALID_INTERVAL = 2
EXIT_UNSUPPORTED_FORMAT = 3
EXIT_CORRUPT_CAPTURE = 4


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plotcap",
        description="Plot packet and data rates of a pcap capture with gnuplot",
    )
    parser.add_argument("-r", "--read", type=Path, required=True, metavar="FILE", help="Input pcap file")
    parser.add_argument(
        "-o", "--output", type=Path, required=True, metavar="FILE", help="Gnuplot script to write"
    )
    parser.add_argument(
        "-i",
        "--interval",
        default=DEFAULT_INTERVAL,
        metavar="INTERVAL",
        help=f"Width of each plotted interval, e.g. '500ms' or '1m 30s' (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress (-vv for debug output)")
    parser.add_argument("--log-file", default=None, help="Also write log messages to this file")
    return parser


def plot_capture(input_path: Path, output_path: Path, interval: str) -> IntervalAggregator:
    """Stream ``input_path`` through the aggregator into a gnuplot script at ``output_path``."""

    aggregator = IntervalAggregator(interval)
    file_size = input_path.stat().st_size

    with open_capture(input_path) as reader:
        lines = render_script(
            aggregator.aggregate(reader),
            input_name=str(input_path),
            file_type="pcap",
            file_size=file_size,
            duration=lambda: aggregator.duration,
            generated_at=datetime.now(timezone.utc),
        )
        write_script(output_path, lines)

    logger.info(
        "Wrote %d intervals covering %d packets from %s to %s",
        aggregator.summary_count,
        aggregator.record_count,
        input_path,
        output_path,
    )
    return aggregator


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG

    try:
        interval_to_ns(args.interval)
        setup_logger("plotcap", level=level, log_file=args.log_file)
        plot_capture(args.read, args.output, args.interval)
    except InvalidIntervalError as exc:
        return _fail(EXIT_INVALID_INTERVAL, f"Invalid interval: {exc}")
    except UnsupportedFormatError as exc:
        return _fail(EXIT_UNSUPPORTED_FORMAT, f"Unsupported capture format in {args.read}: {exc}")
    except CorruptRecordError as exc:
        return _fail(EXIT_CORRUPT_CAPTURE, f"Corrupt capture {args.read}: {exc}")
    except OSError as exc:
        return _fail(EXIT_IO_ERROR, str(exc))
    return EXIT_OK


def _fail(code: int, message: str) -> int:
    logger.debug("Exiting with status %d", code)
    print(f"Error: {message}", file=sys.stderr)
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
