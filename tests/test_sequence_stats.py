import io

import numpy as np
import pytest

from data_structures import Record
from record_scanner import iter_sequences
from sequence_stats import (SequenceStats, base_counts, create_phred_quality_map,
                            phred_scores)


def test_phred_quality_map():
    phred_map = create_phred_quality_map(33, 41)
    assert phred_map[ord("!")] == 0
    assert phred_map[ord("I")] == 40
    assert phred_map[ord("~")] == 41
    assert phred_map[10] == 0


def test_phred_scores():
    scores = phred_scores(Record(id=b"r", seq=b"ACG", qual=b"!+I"))
    np.testing.assert_array_equal(scores, [0, 10, 40])


def test_phred_scores_without_quality():
    with pytest.raises(ValueError):
        phred_scores(Record(id=b"r", seq=b"ACG"))


def test_base_counts():
    counts = base_counts(b"AACGTN")
    assert counts[ord("A")] == 2
    assert counts[ord("N")] == 1
    assert counts.sum() == 6
    assert base_counts(b"").sum() == 0


def test_stats_over_stream():
    data = b"@r1\nGGCA\n+\nIIII\n@r2\nAT\n+\n!!\n@r3\n\n+\n\n"
    stats = SequenceStats()
    for rec in iter_sequences(io.BytesIO(data)):
        stats.add(rec)

    assert stats.records == 3
    assert stats.bases == 6
    assert stats.min_length == 0
    assert stats.max_length == 4
    assert stats.gc_fraction == pytest.approx(3 / 6)
    assert stats.mean_quality == pytest.approx(160 / 6)
    assert stats.summary()["records"] == 3


def test_stats_on_fasta_has_no_quality():
    stats = SequenceStats()
    for rec in iter_sequences(io.BytesIO(b">a\ngcAT\n")):
        stats.add(rec)

    assert stats.gc_fraction == pytest.approx(0.5)
    assert stats.mean_quality is None
