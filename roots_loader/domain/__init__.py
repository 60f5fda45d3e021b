"""Domain logic for decoding word/root corpus lines."""

from .roots import (
    ROOT_TAG,
    UNTRACKED_INDEX,
    DecodeResult,
    InsertOutcome,
    RootDecodeError,
    RootKind,
    RootRecord,
    UnsupportedKindError,
    decode,
    decode_line,
    decode_morphemes,
    decode_psql,
)

__all__ = [
    "DecodeResult",
    "InsertOutcome",
    "ROOT_TAG",
    "RootDecodeError",
    "RootKind",
    "RootRecord",
    "UNTRACKED_INDEX",
    "UnsupportedKindError",
    "decode",
    "decode_line",
    "decode_morphemes",
    "decode_psql",
]
