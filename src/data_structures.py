from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# Longest raw snippet attached to a ParseError
CONTEXT_LIMIT = 16

Span = Union[memoryview, bytes]


class Format(Enum):
    """Record formats the scanner can detect, valued by their leading byte."""
    FASTA = ord(">")
    FASTQ = ord("@")

    @classmethod
    def sniff(cls, first_byte: int) -> Optional["Format"]:
        for fmt in cls:
            if fmt.value == first_byte:
                return fmt
        return None


class ParseErrorType(Enum):
    INVALID_HEADER = "InvalidHeader"
    INVALID_RECORD = "InvalidRecord"
    PREMATURE_EOF = "PrematureEOF"


class ParseError(Exception):
    """
    Malformed input. Scanners raise it with the raw bytes around the failure,
    the driver stamps the record position on its way out.
    """

    def __init__(self, msg: str, error_type: ParseErrorType, record: int = 0, context: str = ""):
        super().__init__(msg)
        self._msg = msg
        self._error_type = error_type
        self._record = record
        self._context = context

    @property
    def msg(self) -> str:
        return self._msg

    @property
    def error_type(self) -> ParseErrorType:
        return self._error_type

    @property
    def record(self) -> int:
        """
        Position of the failing record, counting from 1: a failure in the
        first record reports 1. 0 means the input format could not be
        detected, before any record was scanned.
        """
        return self._record

    @property
    def context(self) -> str:
        return self._context

    def with_context(self, context) -> "ParseError":
        if isinstance(context, (bytes, bytearray, memoryview)):
            context = bytes(context[:CONTEXT_LIMIT]).decode("utf-8", errors="replace")
        else:
            context = context[:CONTEXT_LIMIT]
        return ParseError(self._msg, self._error_type, self._record, context)

    def with_record(self, record: int) -> "ParseError":
        return ParseError(self._msg, self._error_type, record, self._context)

    def __str__(self) -> str:
        text = f"{self._error_type.value} at record {self._record}: {self._msg}"
        if self._context:
            text += f" ({self._context!r})"
        return text

    def __reduce__(self):
        return (ParseError, (self._msg, self._error_type, self._record, self._context))


@dataclass
class Record:
    """
    One parsed record. `id`, `qual` and (for single-line bodies) `seq` are
    views into the scanner's buffer and stop working once the scanner moves
    on; call to_owned() to keep a record.
    """
    id: Span
    seq: Span
    qual: Optional[Span] = None

    def to_owned(self) -> "Record":
        return Record(
            id=bytes(self.id),
            seq=bytes(self.seq),
            qual=bytes(self.qual) if self.qual is not None else None,
        )

    def release(self) -> None:
        for span in (self.id, self.seq, self.qual):
            if isinstance(span, memoryview):
                span.release()


class ScanStatus(Enum):
    FOUND = "found"
    NEED_MORE_DATA = "need_more_data"
    MALFORMED_END = "malformed_end"


@dataclass(frozen=True)
class ScanResult:
    status: ScanStatus
    record: Optional[Record] = None
    used: int = 0
    error: Optional[ParseError] = None

    @classmethod
    def found(cls, record: Record, used: int) -> "ScanResult":
        return cls(ScanStatus.FOUND, record=record, used=used)

    @classmethod
    def need_more_data(cls) -> "ScanResult":
        return cls(ScanStatus.NEED_MORE_DATA)

    @classmethod
    def malformed_end(cls, error: Optional[ParseError] = None) -> "ScanResult":
        return cls(ScanStatus.MALFORMED_END, error=error)
