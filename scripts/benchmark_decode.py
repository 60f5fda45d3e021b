from __future__ import annotations

import argparse
import time
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from roots_loader.domain.roots import RootKind, decode


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Synthetic benchmark for the roots line decoders.",
    )
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in RootKind],
        default=RootKind.MORPHEMES.value,
        help="Line format to generate and decode.",
    )
    parser.add_argument("--lines", type=int, default=100_000, help="Number of lines.")
    parser.add_argument(
        "--items-per-line",
        type=int,
        default=4,
        help="Morpheme descriptors or words in each line.",
    )
    return parser


def _build_morpheme_line(line_index: int, item_count: int) -> str:
    descriptors = [
        f"m{line_index}x{item}:{'ROOT' if item % 2 == 0 else 'SUFF'}"
        for item in range(max(1, item_count))
    ]
    return f"word{line_index}\t{'/'.join(descriptors)}"


def _build_psql_line(line_index: int, item_count: int) -> str:
    words = ",".join(f"w{line_index}x{item}" for item in range(max(1, item_count)))
    return f"root{line_index} | {{{words}}}"


def _build_lines(kind: RootKind, line_count: int, item_count: int) -> list[str]:
    builder = _build_morpheme_line if kind is RootKind.MORPHEMES else _build_psql_line
    return [builder(index, item_count) for index in range(max(0, line_count))]


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    kind = RootKind.parse(args.kind)
    lines = _build_lines(kind, args.lines, args.items_per_line)

    started_at = time.perf_counter()
    record_count = 0
    for line in lines:
        record_count += len(decode(line, kind))
    elapsed = time.perf_counter() - started_at

    print(f"lines={len(lines)}")
    print(f"records={record_count}")
    print(f"elapsed_seconds={elapsed:.6f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
