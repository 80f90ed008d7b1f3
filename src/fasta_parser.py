from chunk_store import ChunkStore
from data_structures import ParseError, ParseErrorType, Record, ScanResult
from sequence_normalizer import strip_line_end, strip_trailing_cr, strip_whitespace

RECORD_START = b"\n>"


def scan_fasta(store: ChunkStore, last: bool) -> ScanResult:
    """
    Find the next FASTA record in the unconsumed part of the buffer.

    A record runs from its ">" header line up to (not including) the next
    line that starts with ">", or to the end of the buffer once the source is
    exhausted. A ">" anywhere but the start of a line is residue data.
    """
    buf = store.buf
    start = store.consumed
    end = len(buf)

    id_end = buf.find(b"\n", start, end)
    if id_end == -1:
        if not last:
            return ScanResult.need_more_data()
        header = strip_trailing_cr(bytes(buf[start + 1:end]))
        return ScanResult.malformed_end(
            ParseError("Sequence completely empty", ParseErrorType.PREMATURE_EOF).with_context(header)
        )

    # Search from the header's own terminator so ">a\n>b" gives "a" an empty body
    next_start = buf.find(RECORD_START, id_end, end)
    if next_start != -1:
        seq_end = next_start + 1
    elif last:
        seq_end = end
    else:
        return ScanResult.need_more_data()

    record_id = strip_trailing_cr(store.span(start + 1, id_end))
    if seq_end <= id_end + 1:
        seq = store.span(id_end + 1, id_end + 1)
    else:
        seq = strip_whitespace(strip_line_end(store.span(id_end + 1, seq_end)))

    return ScanResult.found(Record(id=record_id, seq=seq), seq_end - start)
