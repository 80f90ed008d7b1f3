from typing import BinaryIO, Iterable

from data_structures import Record


def write_fasta(record: Record, outfile: BinaryIO) -> None:
    """Write `>id`, the residues and a line terminator after each."""
    outfile.write(b">")
    outfile.write(record.id)
    outfile.write(b"\n")
    outfile.write(record.seq)
    outfile.write(b"\n")


def write_fastq(record: Record, outfile: BinaryIO) -> None:
    if record.qual is None:
        raise ValueError("Cannot write a FASTQ record without quality scores")
    outfile.write(b"@")
    outfile.write(record.id)
    outfile.write(b"\n")
    outfile.write(record.seq)
    outfile.write(b"\n+\n")
    outfile.write(record.qual)
    outfile.write(b"\n")


def write_record(record: Record, outfile: BinaryIO, to_fasta: bool = False) -> None:
    if record.qual is None or to_fasta:
        write_fasta(record, outfile)
    else:
        write_fastq(record, outfile)


def write_records(records: Iterable[Record], outfile: BinaryIO, to_fasta: bool = False) -> int:
    count = 0
    for record in records:
        write_record(record, outfile, to_fasta=to_fasta)
        count += 1
    return count
