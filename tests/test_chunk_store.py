import io

import pytest

from chunk_store import ChunkStore, RefillOutcome


class FailingSource:
    def read(self, size=-1):
        raise OSError("disk went away")


class ExhaustedSource:
    """Returns end of input once and fails if asked again."""

    def __init__(self):
        self.calls = 0

    def read(self, size=-1):
        self.calls += 1
        if self.calls > 1:
            raise AssertionError("read after end of input")
        return b""


class NonBlockingSource:
    def read(self, size=-1):
        return None


def test_refill_appends_and_marks_last():
    store = ChunkStore(io.BytesIO(b">a\nACGT\n"), chunk_size=4)

    assert store.refill() is RefillOutcome.MORE_DATA
    assert bytes(store.buf) == b">a\nA"
    assert store.refill() is RefillOutcome.MORE_DATA
    assert bytes(store.buf) == b">a\nACGT\n"
    assert not store.last
    assert store.refill() is RefillOutcome.END_OF_INPUT
    assert store.last
    assert store.total_read == 8


def test_last_is_monotonic():
    source = ExhaustedSource()
    store = ChunkStore(source)

    assert store.refill() is RefillOutcome.END_OF_INPUT
    assert store.refill() is RefillOutcome.END_OF_INPUT
    assert store.last
    assert source.calls == 1


def test_window_doubles_while_nothing_is_consumed():
    store = ChunkStore(io.BytesIO(b"A" * 1000), chunk_size=4)

    sizes = []
    for _ in range(5):
        store.refill()
        sizes.append(len(store.buf))

    assert sizes == [4, 8, 16, 32, 64]


def test_consume_and_compact_preserve_remaining():
    store = ChunkStore(io.BytesIO(b"0123456789"), chunk_size=10)
    store.refill()
    store.consume(4)

    with store.remaining() as before:
        assert before == b"456789"
    store.compact()

    assert store.consumed == 0
    with store.remaining() as after:
        assert after == b"456789"


def test_consume_past_end_is_rejected():
    store = ChunkStore(io.BytesIO(b"abc"))
    store.refill()

    with pytest.raises(ValueError):
        store.consume(4)


def test_refill_compacts_consumed_bytes():
    store = ChunkStore(io.BytesIO(b"abcdefgh"), chunk_size=4)
    store.refill()
    store.consume(3)
    store.refill()

    assert bytes(store.buf) == b"defgh"
    assert store.consumed == 0


def test_held_span_blocks_compaction():
    store = ChunkStore(io.BytesIO(b"abcdefgh"), chunk_size=4)
    store.refill()
    span = store.span(0, 2)
    store.consume(2)

    with pytest.raises(BufferError):
        store.compact()

    span.release()
    store.compact()
    assert bytes(store.buf) == b"cd"


def test_source_errors_propagate_unchanged():
    store = ChunkStore(FailingSource())

    with pytest.raises(OSError, match="disk went away"):
        store.refill()


def test_non_blocking_source_is_rejected():
    store = ChunkStore(NonBlockingSource())

    with pytest.raises(BlockingIOError):
        store.refill()


def test_chunk_size_must_be_positive():
    with pytest.raises(ValueError):
        ChunkStore(io.BytesIO(b""), chunk_size=0)


def test_short_reads_still_fill_the_window(trickle):
    store = ChunkStore(trickle(b"A" * 100, step=3), chunk_size=10)

    sizes = []
    for _ in range(4):
        assert store.refill() is RefillOutcome.MORE_DATA
        sizes.append(len(store.buf))

    assert sizes == [10, 20, 40, 80]
    assert not store.last


def test_short_final_read_marks_last_with_data(trickle):
    store = ChunkStore(trickle(b"A" * 25, step=4), chunk_size=16)
    store.refill()

    assert store.refill() is RefillOutcome.MORE_DATA
    assert len(store.buf) == 25
    assert store.last
    assert store.total_read == 25
    assert store.refill() is RefillOutcome.END_OF_INPUT
