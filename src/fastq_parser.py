from chunk_store import ChunkStore
from data_structures import CONTEXT_LIMIT, ParseError, ParseErrorType, Record, ScanResult
from sequence_normalizer import strip_trailing_cr


def scan_fastq(store: ChunkStore, last: bool) -> ScanResult:
    """
    Find the next four-line FASTQ record (@id, sequence, +, quality).

    The quality line of the final record may lack its line terminator. Any
    other missing terminator means the record is still arriving, or, once
    the source is exhausted, that the stream was cut off.
    """
    buf = store.buf
    start = store.consumed
    end = len(buf)

    if buf[start] != ord("@"):
        raise ParseError(
            "FASTQ record must start with '@'", ParseErrorType.INVALID_HEADER
        ).with_context(bytes(buf[start:min(end, start + CONTEXT_LIMIT)]))

    # Line terminator positions of header, sequence and separator lines
    breaks = []
    pos = start
    for _ in range(3):
        nl = buf.find(b"\n", pos, end)
        if nl == -1:
            return ScanResult.malformed_end() if last else ScanResult.need_more_data()
        breaks.append(nl)
        pos = nl + 1
    id_end, seq_end, sep_end = breaks

    qual_end = buf.find(b"\n", pos, end)
    if qual_end == -1:
        if not last:
            return ScanResult.need_more_data()
        qual_end = end
        used = end - start
    else:
        used = qual_end + 1 - start

    if buf[seq_end + 1] != ord("+"):
        raise ParseError(
            "Sequence and quality lines must be separated by a '+'", ParseErrorType.INVALID_RECORD
        ).with_context(bytes(buf[seq_end + 1:min(sep_end, seq_end + 1 + CONTEXT_LIMIT)]))

    record_id = strip_trailing_cr(store.span(start + 1, id_end))
    seq = strip_trailing_cr(store.span(id_end + 1, seq_end))
    qual = strip_trailing_cr(store.span(sep_end + 1, qual_end))

    if len(seq) != len(qual):
        error = ParseError(
            "Sequence and quality are not the same length", ParseErrorType.INVALID_RECORD
        ).with_context(bytes(record_id))
        for span in (record_id, seq, qual):
            span.release()
        raise error

    return ScanResult.found(Record(id=record_id, seq=seq, qual=qual), used)
