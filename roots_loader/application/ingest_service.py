"""Line-by-line ingestion of a roots corpus into a sink."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Union

from ..config import MALFORMED_POLICIES
from ..domain.roots import InsertOutcome, RootKind, decode_line
from .ports import RootsSinkPort

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    lines_read: int = 0
    blank_lines: int = 0
    malformed_lines: int = 0
    records_decoded: int = 0
    inserted: int = 0
    duplicates: int = 0

    def summary(self) -> str:
        return (
            f"lines={self.lines_read} blank={self.blank_lines} "
            f"malformed={self.malformed_lines} records={self.records_decoded} "
            f"inserted={self.inserted} duplicates={self.duplicates}"
        )


class RootsIngestService:
    def __init__(
        self,
        sink: RootsSinkPort,
        *,
        kind: Union[str, RootKind],
        quality: str,
        on_malformed: str = "abort",
        log_every: int = 1000,
        logger_instance=None,
    ) -> None:
        self.sink = sink
        self.kind = RootKind.parse(kind)
        self.quality = quality
        if on_malformed not in MALFORMED_POLICIES:
            raise ValueError(
                f"on_malformed must be one of {', '.join(MALFORMED_POLICIES)}; got {on_malformed!r}"
            )
        self.on_malformed = on_malformed
        self.log_every = max(1, int(log_every))
        self.logger = logger_instance or logger

    def ingest_lines(self, lines: Iterable[str]) -> IngestStats:
        """Decode and store every line; raises RootDecodeError when aborting on bad input."""
        stats = IngestStats()
        for line_number, raw_line in enumerate(lines, start=1):
            self._ingest_line(line_number, raw_line, stats)
            if line_number % self.log_every == 0:
                self.logger.info(
                    "Processed %s lines (%s records)", line_number, stats.records_decoded
                )
        self.logger.info("Ingest finished: %s", stats.summary())
        return stats

    def _ingest_line(self, line_number: int, raw_line: str, stats: IngestStats) -> None:
        stats.lines_read += 1
        line = raw_line.strip()
        if not line:
            stats.blank_lines += 1
            return
        self.logger.debug("%s", line)

        result = decode_line(line, self.kind, line_number=line_number)
        if not result.ok:
            if self.on_malformed == "abort":
                raise result.error
            stats.malformed_lines += 1
            self.logger.warning("Skipping malformed %s", result.error)
            return

        stats.records_decoded += len(result.records)
        for record in result.records:
            outcome = self.sink.insert(record, self.quality)
            if outcome is InsertOutcome.DUPLICATE:
                stats.duplicates += 1
                self.logger.warning("Duplicate key %r", record)
            else:
                stats.inserted += 1

    def ingest_file(self, path: str) -> IngestStats:
        self.logger.info("Loading %s lines from %s", self.kind.value, path)
        with open(path, "r", encoding="utf-8") as handle:
            return self.ingest_lines(handle)
