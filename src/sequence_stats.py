from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from data_structures import Record, Span

PHRED_OFFSET = 33
PHRED_MAX = 93


def create_phred_quality_map(phred_offset=PHRED_OFFSET, phred_alphabet_max=PHRED_MAX):
    """Create mapping from ASCII quality characters to numeric quality scores"""
    ascii_vals = np.arange(256, dtype=np.int16)
    return np.clip(ascii_vals - phred_offset, 0, phred_alphabet_max).astype(np.uint8)


DEFAULT_PHRED_MAP = create_phred_quality_map()


def _as_array(span: Span) -> np.ndarray:
    if not len(span):
        return np.empty(0, dtype=np.uint8)
    return np.frombuffer(span, dtype=np.uint8)


def phred_scores(record: Record, phred_map: Optional[np.ndarray] = None) -> np.ndarray:
    """Decode a FASTQ record's quality string into Phred scores."""
    if record.qual is None:
        raise ValueError("Record has no quality scores")
    if phred_map is None:
        phred_map = DEFAULT_PHRED_MAP
    return phred_map[_as_array(record.qual)]


def base_counts(seq: Span) -> np.ndarray:
    """Occurrences of every byte value in `seq`, indexed by ASCII code."""
    return np.bincount(_as_array(seq), minlength=256)


@dataclass
class SequenceStats:
    """Running totals over a stream of records"""
    records: int = 0
    bases: int = 0
    min_length: Optional[int] = None
    max_length: int = 0
    quality_sum: int = 0
    quality_count: int = 0
    counts: np.ndarray = field(default_factory=lambda: np.zeros(256, dtype=np.int64))

    def add(self, record: Record, phred_map: Optional[np.ndarray] = None) -> None:
        length = len(record.seq)
        self.records += 1
        self.bases += length
        self.max_length = max(self.max_length, length)
        self.min_length = length if self.min_length is None else min(self.min_length, length)
        self.counts += base_counts(record.seq)

        if record.qual is not None:
            scores = phred_scores(record, phred_map)
            self.quality_sum += int(scores.sum(dtype=np.int64))
            self.quality_count += len(scores)

    def count_of(self, bases: bytes) -> int:
        """Total occurrences of the given bases, upper and lower case."""
        codes = set(bases.upper()) | set(bases.lower())
        return int(sum(self.counts[c] for c in codes))

    @property
    def gc_fraction(self) -> float:
        if not self.bases:
            return 0.0
        return self.count_of(b"GC") / self.bases

    @property
    def mean_quality(self) -> Optional[float]:
        if not self.quality_count:
            return None
        return self.quality_sum / self.quality_count

    def summary(self) -> Dict:
        return {
            "records": self.records,
            "bases": self.bases,
            "min_length": self.min_length or 0,
            "max_length": self.max_length,
            "gc_fraction": self.gc_fraction,
            "mean_quality": self.mean_quality,
        }
