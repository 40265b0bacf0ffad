"""Command-line interface for fastaidx."""

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from fastaidx.errors import FastaError
from fastaidx.io.faidx import Index, IndexedReader, locate_index_for
from fastaidx.io.fasta import Reader, Writer
from fastaidx.logging_utils import configure_logging, get_logger

Handler = Callable[[argparse.Namespace], int]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastaidx",
        description="Index FASTA files and fetch sequence ranges.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_index_parser(subparsers)
    _add_list_parser(subparsers)
    _add_fetch_parser(subparsers)
    _add_records_parser(subparsers)
    return parser


def _add_index_parser(subparsers) -> None:
    parser = subparsers.add_parser("index", help="Build the .fai index of a FASTA file.")
    parser.add_argument("fasta", type=Path, help="Input FASTA file.")
    parser.add_argument(
        "--out",
        type=Path,
        help="Index output path (default: FASTA path with .fai appended).",
    )
    parser.set_defaults(handler=_handle_index)


def _add_list_parser(subparsers) -> None:
    parser = subparsers.add_parser("list", help="List indexed sequences and their lengths.")
    parser.add_argument("fasta", type=Path, help="Indexed FASTA file.")
    parser.set_defaults(handler=_handle_list)


def _add_fetch_parser(subparsers) -> None:
    parser = subparsers.add_parser("fetch", help="Fetch a sequence range as FASTA.")
    parser.add_argument("fasta", type=Path, help="Indexed FASTA file.")
    parser.add_argument("name", help="Sequence name.")
    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="0-based start, inclusive (default: 0).",
    )
    parser.add_argument(
        "--stop",
        type=int,
        help="0-based end, exclusive (default: sequence length).",
    )
    parser.set_defaults(handler=_handle_fetch)


def _add_records_parser(subparsers) -> None:
    parser = subparsers.add_parser("records", help="Stream records and print id and length.")
    parser.add_argument("fasta", type=Path, help="Input FASTA file.")
    parser.set_defaults(handler=_handle_records)


def _handle_index(args: argparse.Namespace) -> int:
    _require_input(args.fasta)
    out_path = args.out or locate_index_for(args.fasta)
    with open(args.fasta, "rb") as handle:
        index = Index.from_fasta(handle)
    with open(out_path, "wb") as handle:
        index.write(handle)
    get_logger().info("Indexed %d sequences -> %s", len(index), out_path)
    return 0


def _handle_list(args: argparse.Namespace) -> int:
    _require_input(args.fasta)
    _require_input(locate_index_for(args.fasta))
    for info in Index.for_fasta(args.fasta).sequence_listing():
        sys.stdout.write(f"{info.name}\t{info.length}\n")
    return 0


def _handle_fetch(args: argparse.Namespace) -> int:
    _require_input(args.fasta)
    _require_input(locate_index_for(args.fasta))
    with IndexedReader.from_file(args.fasta) as reader:
        stop = args.stop if args.stop is not None else reader.index[args.name].length
        sequence = reader.read_range(args.name, args.start, stop)
    sys.stdout.flush()
    writer = Writer(sys.stdout.buffer)
    writer.write(f"{args.name}:{args.start}-{stop}", (), sequence)
    writer.flush()
    return 0


def _handle_records(args: argparse.Namespace) -> int:
    _require_input(args.fasta)
    count = 0
    with Reader.from_file(args.fasta) as reader:
        for record in reader:
            sys.stdout.write(f"{record.id}\t{len(record)}\n")
            count += 1
    get_logger().debug("Read %d records from %s", count, args.fasta)
    return 0


def _require_input(path: Path) -> None:
    if not Path(path).exists():
        raise FileNotFoundError(f"Input file not found: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)
    logger = get_logger()
    handler: Handler = args.handler

    try:
        return handler(args)
    except OSError as exc:
        logger.error(str(exc))
        return 1
    except FastaError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
