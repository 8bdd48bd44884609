"""
batch_analyze.py
================
Run the PawPulse analyzer over a directory of recordings.

Usage:
    python -m sound_analysis.batch_analyze --input_dir ./recordings
    python -m sound_analysis.batch_analyze --input_dir ./barks --animal dog \
        --output results.json
"""

import argparse
import json
import logging
from collections import Counter

from .emotion_analyzer import EmotionAnalyzer
from .schema import ANIMAL_TYPES
from .utils import list_audio_files, setup_logging

logger = logging.getLogger(__name__)


def run(input_dir: str, animal=None, output=None, recursive: bool = True) -> list:
    filepaths = list_audio_files(input_dir, recursive=recursive)
    if not filepaths:
        logger.warning(f"[Batch] No .wav/.mp3 files under '{input_dir}'")
        return []

    results = EmotionAnalyzer().analyze_batch(filepaths, species=animal)

    failed = [r for r in results if "error" in r]
    counts = Counter(r["dominantEmotion"] for r in results if "error" not in r)
    logger.info(f"[Batch] Analyzed {len(results) - len(failed)}/{len(results)} files")
    for emotion, count in counts.most_common():
        logger.info(f"[Batch]   {emotion:<12} {count}")

    if output:
        with open(output, "w") as f:
            json.dump(results, f, indent=2)
        logger.info(f"[Batch] Results written to {output}")

    return results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="PawPulse — batch emotion analysis of animal recordings"
    )
    parser.add_argument(
        "--input_dir", type=str, required=True,
        help="Directory containing .wav/.mp3 recordings"
    )
    parser.add_argument(
        "--animal", type=str, default=None, choices=ANIMAL_TYPES,
        help="Species for every file (detected per file when omitted)"
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="Optional path of a JSON file to write results to"
    )
    parser.add_argument(
        "--no_recursive", action="store_true",
        help="Only look at the top level of input_dir"
    )
    parser.add_argument(
        "--log_level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level)
    results = run(
        input_dir=args.input_dir,
        animal=args.animal,
        output=args.output,
        recursive=not args.no_recursive,
    )
    return 0 if all("error" not in r for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
