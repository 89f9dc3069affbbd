#!/usr/bin/env python3

import argparse
import io
import logging
import sys
import time
from collections import Counter
from typing import Dict, List, Optional

from curate.resolver import AnnotationResolver, GroupResolution, ResolvedRecord
from curate.resolver.core import ANNOTATION_FIELD, SUBJECT_FIELD
from curate.zoo_csv import (
    DEFAULT_OUTPUT_FILENAME,
    read_annotation_rows,
    write_resolved_rows,
)

__version__ = "0.1.0"

# Best-pair similarity below this is reported as low agreement in --show-stats
LOW_AGREEMENT_THRESHOLD = 0.5


def show_resolution_statistics(
    progress_data: Dict,
    input_rows: int,
    output_rows: int,
    resolutions: Optional[List[GroupResolution]] = None,
):
    """Display detailed resolution statistics.

    Without resolutions (the --no-resolve path) only the row counts and the
    stage breakdown are shown.
    """
    total_time = time.time() - progress_data["start_time"]
    resolutions = resolutions or []

    sys.stderr.write("=== Resolution Statistics ===\n")
    sys.stderr.write(f"Total processing time: {total_time:.2f} seconds\n")
    sys.stderr.write(f"Input rows: {input_rows}\n")
    sys.stderr.write(f"Output rows: {output_rows}\n")
    sys.stderr.write(
        f"Reduction: {input_rows - output_rows} rows ({((input_rows - output_rows) / input_rows * 100) if input_rows else 0:.1f}%)\n"
    )

    size_counts = Counter(r.group_size for r in resolutions)
    if size_counts:
        sys.stderr.write("\nSubjects by number of annotations:\n")
        for size in sorted(size_counts):
            sys.stderr.write(f"  {size}: {size_counts[size]}\n")

    low_agreement = [
        r
        for r in resolutions
        if r.best_similarity is not None
        and r.best_similarity < LOW_AGREEMENT_THRESHOLD
    ]
    if low_agreement:
        sys.stderr.write(
            f"\nLow agreement subjects (best similarity < {LOW_AGREEMENT_THRESHOLD}):\n"
        )
        for r in low_agreement:
            sys.stderr.write(
                f"  {r.subject_id}: {r.best_similarity:.3f} across {r.group_size} annotations\n"
            )

    stages = progress_data.get("stages", [])
    if stages:
        sys.stderr.write("\nStage breakdown:\n")
        stage_times = {}
        for i, stage_info in enumerate(stages):
            prev_time = stages[i - 1]["timestamp"] if i > 0 else 0
            stage_times.setdefault(stage_info["stage"], []).append(
                stage_info["timestamp"] - prev_time
            )
        for stage, times in stage_times.items():
            sys.stderr.write(f"  {stage}: {sum(times):.2f}s\n")

    sys.stderr.write("=============================\n\n")


def write_stdout_rows(
    records: List[ResolvedRecord], subject_field: str, annotation_field: str
) -> int:
    """Write the cleaned CSV to stdout as UTF-8 with CRLF row endings."""
    stdout_buffer = getattr(sys.stdout, "buffer", None)
    if stdout_buffer is None:
        return write_resolved_rows(records, sys.stdout, subject_field, annotation_field)

    # Wrap the binary buffer so the console encoding never applies
    sys.stdout.flush()
    utf8_stdout = io.TextIOWrapper(stdout_buffer, encoding="utf-8", newline="")
    try:
        return write_resolved_rows(
            records, utf8_stdout, subject_field, annotation_field
        )
    finally:
        utf8_stdout.flush()
        utf8_stdout.detach()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Clean a Zooniverse transcription export and keep one annotation per subject."
    )
    parser.add_argument("csv_file", nargs="?", help="Path to the classification CSV")
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help=f"Write the cleaned CSV to this file (e.g. {DEFAULT_OUTPUT_FILENAME}). If omitted, output goes to stdout.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for choosing between the two members of the best pair",
    )
    parser.add_argument(
        "--subject-field",
        default=SUBJECT_FIELD,
        help=f"Column holding the subject id (default: {SUBJECT_FIELD})",
    )
    parser.add_argument(
        "--annotation-field",
        default=ANNOTATION_FIELD,
        help=f"Column holding the annotation (default: {ANNOTATION_FIELD})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all progress updates",
    )
    parser.add_argument(
        "--no-resolve",
        action="store_true",
        help="Clean every annotation but keep all rows",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show detailed resolution statistics",
    )

    args = parser.parse_args(argv)

    if args.version:
        print(f"zooclean: {__version__}")
        return 0

    if not args.csv_file:
        parser.error("the following arguments are required: csv_file")

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("zooclean")

    start_time = time.time()
    progress_data = {"stages": [], "start_time": start_time}

    logger.info("Reading %s", args.csv_file)
    with open(args.csv_file, "r", encoding="utf-8-sig", newline="") as f:
        rows = read_annotation_rows(f, args.subject_field, args.annotation_field)

    resolver = AnnotationResolver(
        seed=args.seed,
        subject_field=args.subject_field,
        annotation_field=args.annotation_field,
    )

    def progress_callback(stage: str, current: int, total: int):
        """Progress callback for AnnotationResolver."""
        if not args.quiet:
            pct = (current / total * 100) if total else 0
            sys.stderr.write(f"\rCleaning: {stage}: {current}/{total} ({pct:.1f}%)")
            sys.stderr.flush()

        progress_data["stages"].append(
            {
                "stage": stage,
                "current": current,
                "total": total,
                "timestamp": time.time() - start_time,
            }
        )

    if args.no_resolve:
        records = resolver.record_processor.convert_rows(rows)
        normalized = resolver.normalize_records(records, progress_callback)
        output = [ResolvedRecord(r.subject_id, r.text) for r in normalized]
        if not args.quiet:
            sys.stderr.write("\n")
        if args.show_stats:
            show_resolution_statistics(progress_data, len(rows), len(output))
        sys.stderr.write(f"Cleaned {len(output)} rows without resolution\n")
    else:
        resolutions = resolver.process_rows(rows, progress_callback)
        output = [r.record for r in resolutions]
        if not args.quiet:
            sys.stderr.write("\n")
        if args.show_stats:
            show_resolution_statistics(
                progress_data, len(rows), len(output), resolutions
            )
        sys.stderr.write(f"Resolved {len(rows)} rows to {len(output)} subjects\n")

    if args.output:
        with open(args.output, "w", encoding="utf-8", newline="") as output_stream:
            write_resolved_rows(
                output, output_stream, args.subject_field, args.annotation_field
            )
    else:
        write_stdout_rows(output, args.subject_field, args.annotation_field)
    return 0


if __name__ == "__main__":
    sys.exit(main())
