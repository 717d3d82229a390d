#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .build import BuildWatcher, build
from .utils.config_manager import LOG_LEVELS, build_config
from .utils.exceptions import TortillaError
from .utils.logging import setup_logging

LOG = logging.getLogger(__name__)


def filter_paths(paths: List[str]) -> List[Path]:
    """Drop inputs that do not exist, reporting each one"""
    valid = []
    for p in paths:
        path = Path(p)
        if path.exists():
            valid.append(path)
        else:
            LOG.error(f"{p}: No such file or directory")
    return valid


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tortilla", description="Solidity compiler")
    parser.add_argument("inputs", nargs="*", metavar="INPUTS",
                        help="Input files/dirs to compile")
    parser.add_argument("-w", "--watch", action="store_true", default=None,
                        help="Rebuild whenever an input changes")
    parser.add_argument("-o", "--output", default=None,
                        help="Output directory, or '-' for stdout")
    parser.add_argument("-p", "--pretty", action="store_true", default=None,
                        help="Pretty print the JSON artifacts")
    parser.add_argument("-g", "--gas", action="store_true", default=None,
                        help="Include gas estimates")
    parser.add_argument("--solc", default=None,
                        help="Path to the solc executable")
    parser.add_argument("--config", default=None,
                        help="Path to a YAML configuration file")
    parser.add_argument("--log-level", default=None,
                        choices=LOG_LEVELS,
                        help="Logging level")
    parser.add_argument("--log-file", default=None,
                        help="Path to log file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point"""
    args = create_parser().parse_args(argv)

    setup_logging(args.log_level or "INFO", args.log_file)

    try:
        config = build_config(
            args.config,
            inputs=args.inputs or None,
            watch=args.watch,
            output=args.output,
            pretty=args.pretty,
            gas=args.gas,
            solc=args.solc,
            log_level=args.log_level,
        )
    except TortillaError as e:
        LOG.error(f"Invalid configuration: {e}")
        return 1

    if config.log_level != (args.log_level or "INFO"):
        setup_logging(config.log_level, args.log_file)

    config.inputs = filter_paths([str(p) for p in config.inputs])
    if not config.inputs:
        LOG.error("No valid inputs to compile")
        return 1

    if config.watch:
        BuildWatcher(config).run_forever()
        return 0

    try:
        build(config)
    except TortillaError as e:
        LOG.error(f"Build failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
