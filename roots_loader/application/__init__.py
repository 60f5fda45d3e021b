"""Application layer orchestration."""

from .ingest_service import IngestStats, RootsIngestService
from .ports import RootsSinkPort

__all__ = [
    "IngestStats",
    "RootsIngestService",
    "RootsSinkPort",
]
