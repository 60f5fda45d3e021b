"""Command-line entrypoint for loading a roots corpus."""
from __future__ import annotations

import argparse
import sys
from typing import Mapping

from .application.ingest_service import RootsIngestService
from .config import MALFORMED_POLICIES, LoaderConfig, load_config, normalize_table_name
from .domain.roots import RootDecodeError, RootKind, UnsupportedKindError
from .logging_config import setup_logging
from .storage.roots_repository import RootsStorageError, open_repository


def _build_parser(config: LoaderConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roots-loader",
        description="Load word/root relationships from a corpus file into a database.",
    )
    parser.add_argument("input", metavar="INPUT", help="Corpus file, one entry per line.")
    parser.add_argument(
        "-c",
        "--connection-string",
        default=config.connection_string,
        help="PostgreSQL DSN or sqlite:///path URL (default: $DATABASE_URL).",
    )
    parser.add_argument(
        "-q",
        "--quality",
        default=config.quality,
        help="Tag stored with every record of this run (default: $ROOTS_QUALITY).",
    )
    parser.add_argument(
        "-k",
        "--kind",
        default=config.kind,
        help="Line format: morphemes or psql (default: $ROOTS_KIND).",
    )
    parser.add_argument(
        "--table",
        default=config.table,
        help="Target table (default: $ROOTS_TABLE or roots).",
    )
    parser.add_argument(
        "--on-malformed",
        choices=MALFORMED_POLICIES,
        default=config.on_malformed,
        help="Abort the run or skip lines that do not match the format.",
    )
    parser.add_argument(
        "--create-table",
        action="store_true",
        default=config.create_table,
        help="Create the target table when it does not exist.",
    )
    return parser


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    config = load_config(environ)
    parser = _build_parser(config)
    args = parser.parse_args(argv)

    try:
        kind = RootKind.parse(args.kind)
    except UnsupportedKindError as exc:
        parser.error(str(exc))
    if not args.connection_string:
        parser.error("a connection string is required (--connection-string or $DATABASE_URL)")

    logger = setup_logging(config)
    try:
        with open_repository(
            args.connection_string,
            table=normalize_table_name(args.table),
            create_table=args.create_table,
            logger_instance=logger,
        ) as repository:
            service = RootsIngestService(
                repository,
                kind=kind,
                quality=args.quality,
                on_malformed=args.on_malformed,
                log_every=config.log_every,
                logger_instance=logger,
            )
            service.ingest_file(args.input)
    except RootDecodeError as exc:
        logger.error("Malformed input, aborting: %s", exc)
        return 1
    except RootsStorageError as exc:
        logger.error("%s", exc)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Cannot read input file %s: %s", args.input, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
