import logging
from typing import Callable, Iterator, Optional

from chunk_store import DEFAULT_CHUNK_SIZE, ChunkStore, RefillOutcome
from data_structures import CONTEXT_LIMIT, Format, ParseError, ParseErrorType, Record, ScanStatus
from fasta_parser import scan_fasta
from fastq_parser import scan_fastq
from sequence_normalizer import CR, LF, is_blank

logger = logging.getLogger(__name__)

SCANNERS = {
    Format.FASTA: scan_fasta,
    Format.FASTQ: scan_fastq,
}


def check_end(remaining, last: bool) -> None:
    """
    Validate whatever is left once no further record can be scanned.
    Only line terminators may trail the last record.
    """
    if not last:
        raise ParseError("File ended abruptly", ParseErrorType.PREMATURE_EOF)
    if not is_blank(remaining):
        raise ParseError(
            "File had extra data past end of records", ParseErrorType.PREMATURE_EOF
        ).with_context(remaining)


class RecordScanner:
    """
    Pull records out of a byte source one at a time.

    The format is sniffed from the first byte that is not a line terminator.
    Iterating yields borrowed records: each one is released as soon as the
    consumer asks for the next, so keep a record with Record.to_owned().
    """

    def __init__(self, source, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._store = ChunkStore(source, chunk_size)
        self.format: Optional[Format] = None
        self.records_read = 0

    def sniff(self) -> Format:
        if self.format is not None:
            return self.format

        store = self._store
        while True:
            pos = store.consumed
            while pos < len(store.buf) and store.buf[pos] in (CR, LF):
                pos += 1
            store.consume(pos - store.consumed)
            if store.remaining_len or store.refill() is RefillOutcome.END_OF_INPUT:
                break

        fmt = Format.sniff(store.buf[store.consumed]) if store.remaining_len else None
        if fmt is None:
            raise ParseError(
                "Could not detect file type", ParseErrorType.INVALID_HEADER
            ).with_context(bytes(store.buf[store.consumed:store.consumed + CONTEXT_LIMIT]))

        logger.info(f"Detected {fmt.name} input")
        self.format = fmt
        return fmt

    def _at_blank_tail(self) -> bool:
        store = self._store
        if not store.remaining_len:
            return True
        if store.buf[store.consumed] not in (CR, LF):
            return False
        with store.remaining() as view:
            return is_blank(view)

    def __iter__(self) -> Iterator[Record]:
        scan = SCANNERS[self.sniff()]
        store = self._store

        while True:
            if self._at_blank_tail():
                if store.last:
                    break
                store.refill()
                continue

            try:
                result = scan(store, store.last)
            except ParseError as e:
                raise e.with_record(self.records_read + 1) from None

            if result.status is ScanStatus.FOUND:
                record = result.record
                try:
                    yield record
                finally:
                    record.release()
                store.consume(result.used)
                self.records_read += 1
            elif result.status is ScanStatus.NEED_MORE_DATA:
                store.refill()
            else:
                if result.error is not None:
                    raise result.error.with_record(self.records_read + 1)
                break

        try:
            with store.remaining() as view:
                check_end(view, store.last)
        except ParseError as e:
            raise e.with_record(self.records_read + 1) from None
        logger.debug(f"Scanned {self.records_read:,} records from {store.total_read:,} bytes")


def iter_sequences(source, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Record]:
    return iter(RecordScanner(source, chunk_size))


def parse_sequences(
    source,
    format_callback: Callable[[str], None],
    record_callback: Callable[[Record], None],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Scan every record of `source`, calling `format_callback` once with the
    detected format name and then `record_callback` for each record in order.
    Records are only valid during their callback.

    Returns the number of records parsed.
    """
    scanner = RecordScanner(source, chunk_size)
    fmt = scanner.sniff()
    format_callback(fmt.name)
    for record in scanner:
        record_callback(record)
    logger.info(f"Parsed {scanner.records_read:,} {fmt.name} records")
    return scanner.records_read
