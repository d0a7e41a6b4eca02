"""
Unified entry point for the App Review Analysis pipeline.

This script provides a simple way to run the full pipeline or selected phases.

Phases overview:
  1. Data preprocessing  -> clean raw review CSV (version, ASCII, score filters)
  2. Text analysis       -> word frequencies, TF-IDF, emotions/polarity by version
  3. Rating classifier   -> Naive Bayes high/low rating prediction + evaluation
  4. Report generation   -> aggregate all results into docs/analysis_report.md

Usage examples (run from project root):
  - Run the full pipeline:
      python main.py

  - Run specific phases (e.g., 2 -> 3 only):
      python main.py --phase 2 3

  - Use another raw file and a quick sample:
      SAMPLE_SIZE=5000 python main.py --data data/raw/other_reviews.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

BASE_DIR = Path(__file__).resolve().parent
SRC_DIR = BASE_DIR / "src"

# Ensure src/ is importable as top-level package (data_processing, models, etc.)
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import LOGGING_CONFIG

logger = logging.getLogger("pipeline")


def setup_logging() -> None:
    log_file = Path(LOGGING_CONFIG['log_file'])
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, LOGGING_CONFIG['level']),
        format=LOGGING_CONFIG['format'],
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def run_phase_1(raw_file: Optional[str] = None) -> None:
    """Phase 1: Data preprocessing."""
    from data_processing.review_preprocessing import main as preprocessing_main

    preprocessing_main(raw_file=raw_file)


def run_phase_2(raw_file: Optional[str] = None) -> None:
    """Phase 2: Text analysis (frequencies, TF-IDF, emotions)."""
    from data_processing.text_analysis import main as text_analysis_main

    text_analysis_main()


def run_phase_3(raw_file: Optional[str] = None) -> None:
    """Phase 3: Rating classifier (Naive Bayes)."""
    from models.rating_classifier import main as classifier_main

    classifier_main()


def run_phase_4(raw_file: Optional[str] = None) -> None:
    """Phase 4: Report generation (docs/analysis_report.md + figures)."""
    from reporting.generate_report import main as report_main

    report_main()


PHASE_RUNNERS: Dict[int, Callable[[Optional[str]], None]] = {
    1: run_phase_1,
    2: run_phase_2,
    3: run_phase_3,
    4: run_phase_4,
}

PHASE_DESCRIPTIONS: Dict[int, str] = {
    1: "Data preprocessing (clean raw review CSV)",
    2: "Text analysis (word frequencies, TF-IDF, emotions and polarity by version)",
    3: "Rating classifier (Naive Bayes + evaluation vs majority baseline)",
    4: "Report generation (docs/analysis_report.md and figures)",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the App Review Analysis pipeline (full or selected phases)."
    )
    parser.add_argument(
        "--phase",
        nargs="+",
        type=int,
        choices=range(1, 5),
        help="Phase numbers to run (1-4). If omitted, all phases run in order.",
    )
    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="Raw review CSV for phase 1 (default: config DATA_PATHS['raw_reviews']).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging()

    phases: List[int] = sorted(set(args.phase)) if args.phase else list(PHASE_RUNNERS)

    logger.info("=" * 70)
    logger.info("APP REVIEW ANALYSIS - UNIFIED PIPELINE RUNNER")
    logger.info("=" * 70)
    for p in phases:
        logger.info(f"  {p}: {PHASE_DESCRIPTIONS[p]}")

    for p in phases:
        logger.info("=" * 70)
        logger.info(f"PHASE {p}: {PHASE_DESCRIPTIONS[p]}")
        logger.info("=" * 70)
        try:
            PHASE_RUNNERS[p](args.data)
        except Exception:  # noqa: BLE001
            logger.exception(f"[ERROR] Phase {p} failed")
            # Stop the pipeline on first hard failure
            return 1

    logger.info("PIPELINE RUN COMPLETE")
    return 0


if __name__ == "__main__":
    sys.exit(main())
