import argparse
import cProfile
import logging
import pstats
import sys
import time
from io import StringIO

from byte_source import open_byte_source
from chunk_store import DEFAULT_CHUNK_SIZE
from data_structures import ParseError
from record_scanner import RecordScanner
from sequence_stats import SequenceStats, create_phred_quality_map
from sequence_writer import write_record

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

__version__ = "0.1.0"


def scan_file(input_path: str, output_path: str = None, **kwargs) -> SequenceStats:
    """
    Stream every record of a FASTA/FASTQ file (optionally compressed),
    collecting statistics and optionally re-writing the records.
    """
    chunk_size = kwargs.get("chunk_size", DEFAULT_CHUNK_SIZE)
    to_fasta = kwargs.get("to_fasta", False)
    phred_offset = kwargs.get("phred_offset", 33)

    phred_map = create_phred_quality_map(phred_offset)
    stats = SequenceStats()

    with open_byte_source(input_path) as source:
        scanner = RecordScanner(source, chunk_size)
        fmt = scanner.sniff()

        outfile = open(output_path, "wb") if output_path else None
        try:
            for record in scanner:
                stats.add(record, phred_map)
                if outfile is not None:
                    write_record(record, outfile, to_fasta=to_fasta)
                if stats.records % 1_000_000 == 0:
                    logger.info(f"Processed {stats.records:,} records...")
        finally:
            if outfile is not None:
                outfile.close()

    logger.info(f"Format: {fmt.name}")
    logger.info(f"Records: {stats.records:,}")
    logger.info(f"Bases: {stats.bases:,} (lengths {stats.min_length or 0:,}-{stats.max_length:,})")
    logger.info(f"GC fraction: {stats.gc_fraction:.4f}")
    if stats.mean_quality is not None:
        logger.info(f"Mean quality: {stats.mean_quality:.2f}")
    if output_path:
        logger.info(f"Output saved to: {output_path}")
    return stats


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Stream FASTA/FASTQ records, report statistics and optionally re-write them.",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    # Positional Arguments
    parser.add_argument("input_path", metavar="FILE",
                        help="Path of .fasta or .fastq file, optionally gzip/bzip2/xz compressed ('-' for stdin)")

    # Output Group
    output_group = parser.add_argument_group("OUTPUT")
    output_group.add_argument("--out", type=str, metavar="FILE", default=None,
                              help="Write the parsed records to this file [null]")
    output_group.add_argument("--to_fasta", type=int, metavar="INT", default=0, choices=[0, 1],
                              help="Write FASTQ input as FASTA (0/1) [0]")
    output_group.add_argument("--phred_off", type=int, metavar="INT", default=33,
                              help="Phred quality offset [33]")

    # Performance Group
    perf_group = parser.add_argument_group("PERFORMANCE")
    perf_group.add_argument("--chunk_kb", type=int, metavar="INT", default=DEFAULT_CHUNK_SIZE // 1024,
                            help=f"Read size in KB for each refill [{DEFAULT_CHUNK_SIZE // 1024}]")
    perf_group.add_argument("--verbose", type=int, metavar="INT", default=0, choices=[0, 1],
                            help="Enable verbose logging (0/1) [0]")
    perf_group.add_argument("--profile", type=int, metavar="INT", default=0, choices=[0, 1],
                            help="Enable cProfile profiling (0/1) [0]")

    args = parser.parse_args(argv)

    if args.chunk_kb <= 0:
        parser.error("--chunk_kb must be positive")

    # Library modules log through the root logger
    logging.getLogger().setLevel(logging.DEBUG if args.verbose == 1 else logging.INFO)

    start_time = time.perf_counter()

    profiler = None
    if args.profile == 1:
        profiler = cProfile.Profile()
        profiler.enable()
        logger.info("Profiling enabled...")

    try:
        scan_file(
            args.input_path,
            args.out,
            chunk_size=args.chunk_kb * 1024,
            to_fasta=(args.to_fasta == 1),
            phred_offset=args.phred_off,
        )
    except ParseError as e:
        logger.error(f"Failed to parse {args.input_path}: {e}")
        return 1
    finally:
        if profiler is not None:
            profiler.disable()
            s = StringIO()
            ps = pstats.Stats(profiler, stream=s).sort_stats("cumulative")
            ps.print_stats(20)
            print("\n" + "=" * 80)
            print("Profiling Results:")
            print("=" * 80)
            print(s.getvalue())

    end_time = time.perf_counter()
    logger.info(f"Scan completed in {end_time - start_time:.4f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
