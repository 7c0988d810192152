# main.py
from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional

from config import DEFAULT_LOG_LEVEL, LOG_FORMAT, OUTPUT_SUFFIX
from simulator.commands import run_commands

logger = logging.getLogger(__name__)


def output_path_for(input_path: str) -> str:
    # results land next to the input file
    folder = os.path.dirname(input_path)
    stem = os.path.basename(input_path).split(".")[0]
    return os.path.join(folder, stem + OUTPUT_SUFFIX)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a delivery command script through the dispatcher.")
    parser.add_argument("input_file", help="Command script, one call per line.")
    parser.add_argument("--output", default=None, help="Output path (default: <input>_output_file.txt).")
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Logging level (DEBUG, INFO, ...).")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    out_path = args.output or output_path_for(args.input_file)
    try:
        with open(args.input_file, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except OSError:
        logger.exception("Error reading input file %s", args.input_file)
        return 1

    output = run_commands(lines)

    try:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write("\n".join(output) + ("\n" if output else ""))
    except OSError:
        logger.exception("Error writing output file %s", out_path)
        return 1

    logger.info("Wrote %d lines to %s", len(output), out_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
