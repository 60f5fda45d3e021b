"""Application-level ports for record persistence."""

from __future__ import annotations

from typing import Protocol

from ..domain.roots import InsertOutcome, RootRecord


class RootsSinkPort(Protocol):
    """Port abstraction for anything that stores decoded root records."""

    def insert(self, record: RootRecord, quality: str) -> InsertOutcome: ...
