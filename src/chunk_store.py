import logging
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class RefillOutcome(Enum):
    MORE_DATA = "more_data"
    END_OF_INPUT = "end_of_input"


class ChunkStore:
    """
    Growable byte buffer fed by chunked reads from a byte source.

    Scanners look at `buf` from `consumed` onwards and hand out memoryview
    spans of it. While a span is alive the bytearray cannot be resized, so
    compacting or refilling with a stale span still around raises BufferError
    instead of silently shifting the bytes under it.
    """

    def __init__(self, source, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._source = source
        self.chunk_size = chunk_size
        self.buf = bytearray()
        self.consumed = 0
        self.last = False
        self.total_read = 0

    @property
    def remaining_len(self) -> int:
        return len(self.buf) - self.consumed

    def remaining(self) -> memoryview:
        return self.span(self.consumed, len(self.buf))

    def span(self, start: int, end: int) -> memoryview:
        with memoryview(self.buf) as view:
            return view[start:end]

    def consume(self, n: int) -> None:
        if n < 0 or n > self.remaining_len:
            raise ValueError(f"Cannot consume {n} bytes, only {self.remaining_len} left")
        self.consumed += n

    def compact(self) -> None:
        if self.consumed:
            del self.buf[:self.consumed]
            self.consumed = 0

    def refill(self) -> RefillOutcome:
        """
        Append the next chunk from the source.

        Reads at least as many bytes as are already pending, so a record that
        keeps not fitting doubles the window on every retry. Short reads are
        repeated until that many bytes arrived or the source is exhausted.
        """
        if self.last:
            return RefillOutcome.END_OF_INPUT

        self.compact()
        want = max(self.chunk_size, len(self.buf))
        appended = 0
        while appended < want:
            data = self._source.read(want - appended)
            if data is None:
                raise BlockingIOError("Byte source has no data available yet; a blocking source is required")
            if not data:
                self.last = True
                logger.debug(f"End of input after {self.total_read + appended:,} bytes")
                break
            self.buf += data
            appended += len(data)

        if not appended:
            return RefillOutcome.END_OF_INPUT

        self.total_read += appended
        logger.debug(f"Read {appended:,} bytes, buffer holds {len(self.buf):,}")
        return RefillOutcome.MORE_DATA
