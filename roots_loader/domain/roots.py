"""Line decoders that turn corpus lines into word/root records.

Two line formats are understood:

* ``morphemes``: ``word<TAB>text:TAG/text:TAG/...``. Every descriptor tagged
  ``ROOT`` yields one record; its index is the ordinal among ROOT descriptors
  of the line, so words with several roots keep their order.
* ``psql``: ``root | {word,word,...}`` as printed by ``psql`` for an array
  column. One root applies to every listed word and the index is ``-1``.

Decoders are pure functions. Malformed lines raise :class:`RootDecodeError`;
:func:`decode_line` wraps that into a :class:`DecodeResult` for callers that
prefer to skip bad lines instead of aborting.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

ROOT_TAG = "ROOT"
UNTRACKED_INDEX = -1

_FIELD_SEPARATOR = "\t"
_MORPHEME_SEPARATOR = "/"
_TAG_SEPARATOR = ":"
_PSQL_SEPARATOR = "|"
_PSQL_WORD_SEPARATOR = ","


class RootKind(str, Enum):
    MORPHEMES = "morphemes"
    PSQL = "psql"

    @classmethod
    def parse(cls, value: Union[str, "RootKind"]) -> "RootKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedKindError(value) from None


class UnsupportedKindError(ValueError):
    """Raised when a line kind other than morphemes/psql is requested."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        choices = ", ".join(repr(item.value) for item in RootKind)
        super().__init__(f"Unsupported kind {kind!r}; expected one of {choices}.")


class RootDecodeError(ValueError):
    """Raised when a line does not have the shape its kind requires."""

    def __init__(self, reason: str, line: str, line_number: Optional[int] = None) -> None:
        self.reason = reason
        self.line = line
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        location = f"line {self.line_number}: " if self.line_number is not None else ""
        return f"{location}{self.reason}: {self.line!r}"

    def at_line(self, line_number: int) -> "RootDecodeError":
        return RootDecodeError(self.reason, self.line, line_number)


class InsertOutcome(str, Enum):
    """What a sink did with one record."""

    INSERTED = "inserted"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class RootRecord:
    word: str
    root: str
    index: int


@dataclass(frozen=True)
class DecodeResult:
    records: tuple[RootRecord, ...] = ()
    error: Optional[RootDecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_morphemes(line: str) -> list[RootRecord]:
    fields = line.split(_FIELD_SEPARATOR)
    if len(fields) < 2:
        raise RootDecodeError("missing tab between word and morphemes", line)
    word = fields[0]

    roots: list[str] = []
    for descriptor in fields[1].split(_MORPHEME_SEPARATOR):
        pieces = descriptor.split(_TAG_SEPARATOR)
        if len(pieces) < 2:
            raise RootDecodeError(f"morpheme {descriptor!r} has no tag", line)
        if pieces[1] == ROOT_TAG:
            roots.append(pieces[0])

    return [RootRecord(word=word, root=root, index=index) for index, root in enumerate(roots)]


def decode_psql(line: str) -> list[RootRecord]:
    fields = line.split(_PSQL_SEPARATOR)
    if len(fields) < 2:
        raise RootDecodeError("missing '|' between root and word list", line)
    # One root per line; the word list shares it.
    root = fields[0].strip()
    # Strips every leading/trailing brace, so "{{a}}" reads as "a".
    words = fields[1].strip().strip("{").strip("}")
    return [
        RootRecord(word=word, root=root, index=UNTRACKED_INDEX)
        for word in words.split(_PSQL_WORD_SEPARATOR)
    ]


_DECODERS = {
    RootKind.MORPHEMES: decode_morphemes,
    RootKind.PSQL: decode_psql,
}


def decode(line: str, kind: Union[str, RootKind]) -> list[RootRecord]:
    """Decode one trimmed line with the decoder selected by kind."""
    return _DECODERS[RootKind.parse(kind)](line)


def decode_line(
    line: str,
    kind: Union[str, RootKind],
    line_number: Optional[int] = None,
) -> DecodeResult:
    """Decode one line, reporting malformed input as a result instead of raising.

    An unsupported kind still raises: it is a configuration fault, not a
    property of the line.
    """
    decoder = _DECODERS[RootKind.parse(kind)]
    try:
        records = decoder(line)
    except RootDecodeError as exc:
        if line_number is not None:
            exc = exc.at_line(line_number)
        return DecodeResult(error=exc)
    return DecodeResult(records=tuple(records))
