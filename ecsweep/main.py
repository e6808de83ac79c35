# ecsweep/main.py
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ecsweep import __version__
from ecsweep.config import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PAYLOAD,
    DEFAULT_TOTAL_SHARDS,
    SweepConfig,
    validate_total_shards,
)
from ecsweep.errors import ECSweepError, InvalidConfiguration
from ecsweep.report import ReportAggregator
from ecsweep.sweep import SweepDriver

logger = logging.getLogger(__name__)

EXIT_INVALID_CONFIGURATION = 1
EXIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecsweep",
        description="Erasure-code a file under every data/parity split of a fixed shard count "
                    "and compare storage overhead and read quorum.",
    )
    parser.add_argument("-t", "--total-shards", type=int, default=DEFAULT_TOTAL_SHARDS,
                        help="Sum of data & parity shards (even, 4..256)")
    parser.add_argument("-f", "--file", default=DEFAULT_PAYLOAD,
                        help="Input file to perform erasure-coding on")
    parser.add_argument("-r", "--read-quorum", action="store_true",
                        help="Show read quorum values for all combinations")
    parser.add_argument("-o", "--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help="Directory for temporary shard files")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress to stderr (-vv for debug)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbosity: int = 0):
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = getattr(logging, DEFAULT_LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    console = console or Console()

    try:
        validate_total_shards(args.total_shards)
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIGURATION

    config = SweepConfig(
        total_shards=args.total_shards,
        payload_path=Path(args.file),
        output_dir=Path(args.output_dir),
        show_read_quorum=args.read_quorum,
    )

    report = ReportAggregator(show_read_quorum=config.show_read_quorum)
    try:
        driver = SweepDriver(config)
        # Run to completion before printing anything: a failed sweep prints no table.
        report.extend(driver.run())
    except ECSweepError as e:
        logger.error(f"Sweep aborted: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    console.print(f"Input file size: {driver.input_size} bytes, Total shards: {config.total_shards}\n")
    report.render(console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
