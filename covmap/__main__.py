import argparse
import dataclasses
import json
import logging
import sys
from typing import Optional, Sequence

from .assembler import assemble_row
from .clickhouse_helper import CHException, CoverageMapSource
from .decoders import DECODERS, MapDecodeError
from .env_helper import ClickHouseConfig
from .report import format_record

logger = logging.getLogger(__name__)


def create_parser():
    parser = argparse.ArgumentParser(
        prog="covmap",
        description="Decode coverage_map rows stored in ClickHouse",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging",
        action="store_true",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    show_parser = subparsers.add_parser(
        "show", help="Fetch one row from ClickHouse and print its decoded maps"
    )
    show_parser.add_argument(
        "--hash", help="Hash of the row to show, any row when not set", default=None
    )
    show_parser.add_argument(
        "--statement-text",
        help=(
            "Fetch statement_map with toString() and decode it from text instead of"
            " reading the native column"
        ),
        action="store_true",
    )
    show_parser.add_argument(
        "--entries",
        help="Number of entries of each map to print",
        type=int,
        default=5,
    )
    show_parser.add_argument(
        "--strict",
        help="Fail when a map contains fragments that cannot be decoded",
        action="store_true",
    )

    decode_parser = subparsers.add_parser(
        "decode", help="Decode a map from its text form and print it as JSON"
    )
    decode_parser.add_argument("kind", choices=sorted(DECODERS), help="Map kind")
    decode_parser.add_argument(
        "file",
        help="File with the map text, stdin when not set",
        nargs="?",
        type=argparse.FileType("r"),
        default=sys.stdin,
    )
    decode_parser.add_argument(
        "--strict",
        help="Fail when the map contains fragments that cannot be decoded",
        action="store_true",
    )

    subparsers.add_parser("ping", help="Check the connection to ClickHouse")
    return parser


def show(args: argparse.Namespace) -> int:
    config = ClickHouseConfig.from_env()
    logger.info("Connecting to ClickHouse %s:%s", config.host, config.port)
    with CoverageMapSource(config) as source:
        row = source.fetch_one(args.hash, statement_text=args.statement_text)
    if row is None:
        logger.error("No record found in %s", config.table)
        return 1
    record = assemble_row(row, strict=args.strict)
    print(format_record(record, limit=args.entries))
    return 0


def decode(args: argparse.Namespace) -> int:
    with args.file as fd:
        text = fd.read()
    result = DECODERS[args.kind].decode(text, strict=args.strict)
    output = {
        str(key): dataclasses.asdict(value) for key, value in sorted(result.items())
    }
    print(json.dumps(output, indent=2))
    return 0


def ping(_args: argparse.Namespace) -> int:
    config = ClickHouseConfig.from_env()
    with CoverageMapSource(config) as source:
        if source.ping():
            logger.info("ClickHouse at %s is available", config.url)
            return 0
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(message)s",
    )

    commands = {"show": show, "decode": decode, "ping": ping}
    if args.command not in commands:
        parser.print_help()
        return 1
    try:
        return commands[args.command](args)
    except (CHException, MapDecodeError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
