import io

import pytest

from chunk_store import DEFAULT_CHUNK_SIZE
from data_structures import ParseError
from record_scanner import parse_sequences


class TrickleSource:
    """Byte source that never hands out more than `step` bytes per read."""

    def __init__(self, data: bytes, step: int):
        self._data = data
        self._pos = 0
        self.step = step
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        n = self.step if size is None or size < 0 else min(size, self.step)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += len(chunk)
        return chunk


@pytest.fixture
def trickle():
    return TrickleSource


@pytest.fixture
def parse_all():
    """
    Parse `data` and return (format names, owned records, ParseError or None).
    Records are copied inside the callback since the borrowed ones die with it.
    """
    def _parse(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE, step: int = None):
        source = TrickleSource(data, step) if step else io.BytesIO(data)
        formats = []
        records = []
        try:
            parse_sequences(source, formats.append, lambda rec: records.append(rec.to_owned()), chunk_size)
        except ParseError as e:
            return formats, records, e
        return formats, records, None

    return _parse
