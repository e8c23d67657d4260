"""
Time-distance (Marey) diagrams from periodic train line timetables.
"""

from typing import Any, TextIO
import sys
import logging
import argparse

import serde.json

from marey.types import PipelineContext
from marey.parse.error import MareyError
from marey.pipeline import (
    SourceFile,
    build_diagram,
    parse_train_lines,
    read_source,
)
from marey.schedules import compute_runs_for_line


def get_logger(verbose: bool) -> logging.Logger:
    """
    Setup and return a Logger.
    """

    level = logging.INFO if verbose else logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("%(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    root.addHandler(handler)

    return root


def _read_inputs(
    args: argparse.Namespace,
) -> tuple[list[SourceFile], SourceFile | None]:
    line_files = [read_source(path) for path in args.lines]
    topology_file = read_source(args.topology) if args.topology is not None else None

    return (line_files, topology_file)


def _write_json(args: argparse.Namespace, obj: Any) -> None:
    indent = 4 if args.pretty else None
    serialized = serde.json.to_json(obj, indent=indent)

    outfile: TextIO
    if args.output is not None:
        outfile = open(args.output, "w", encoding="utf-8")
    else:
        outfile = sys.stdout

    outfile.write(serialized)
    outfile.write("\n")

    if args.output:
        outfile.close()


def check(args: argparse.Namespace) -> int:
    """
    check subcommand
    """
    logger = get_logger(args.verbose)
    ctx = PipelineContext(logger)

    line_files, topology_file = _read_inputs(args)
    diagram = build_diagram(ctx, line_files, topology_file)

    for error in diagram.errors:
        logger.error("%s", error)
    for warning in diagram.warnings:
        logger.warning("%s", warning)

    return 1 if diagram.errors else 0


def series(args: argparse.Namespace) -> int:
    """
    series subcommand
    """
    logger = get_logger(args.verbose)
    ctx = PipelineContext(logger)

    line_files, topology_file = _read_inputs(args)
    diagram = build_diagram(ctx, line_files, topology_file)

    _write_json(args, diagram)

    return 1 if diagram.errors else 0


def runs(args: argparse.Namespace) -> int:
    """
    runs subcommand
    """
    logger = get_logger(args.verbose)
    ctx = PipelineContext(logger)

    line_files = [read_source(path) for path in args.lines]
    lines, errors = parse_train_lines(ctx, line_files)

    for error in errors:
        logger.error("%s", error)

    instances = [run for line in lines for run in compute_runs_for_line(line.spec)]
    _write_json(args, instances)

    return 1 if errors else 0


COMMANDS = {
    "check": check,
    "series": series,
    "runs": runs,
}


def main() -> None:
    """
    Parse arguments and run a command.
    """

    parser = argparse.ArgumentParser(prog="marey")
    parser.add_argument(
        "-v", "--verbose", help="enable more verbose output", action="store_true"
    )

    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser(
        "check", help="report errors and warnings for train line and topology files"
    )
    check_parser.add_argument("-t", "--topology", help="topology file", default=None)
    check_parser.add_argument("lines", nargs="+", help="train line files")

    series_parser = subparsers.add_parser(
        "series", help="output the time-distance series of all runs"
    )
    series_parser.add_argument("-t", "--topology", help="topology file", default=None)
    series_parser.add_argument("-o", "--output", help="output file", default=None)
    series_parser.add_argument(
        "-p", "--pretty", help="pretty print output", action="store_true"
    )
    series_parser.add_argument("lines", nargs="+", help="train line files")

    runs_parser = subparsers.add_parser(
        "runs", help="output the simulated runs of train line files"
    )
    runs_parser.add_argument("-o", "--output", help="output file", default=None)
    runs_parser.add_argument(
        "-p", "--pretty", help="pretty print output", action="store_true"
    )
    runs_parser.add_argument("lines", nargs="+", help="train line files")

    args = parser.parse_args()

    if not args.command in COMMANDS:
        print(f"error: unrecognized command: {args.command}", file=sys.stderr)
        sys.exit(1)

    try:
        status = COMMANDS[args.command](args)
    except MareyError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(status)
