"""
Data Preprocessing: Clean the raw app-review table and write a processed CSV.
"""

import json
import logging
import os
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from config import LOADER_CONFIG, LABEL_CONFIG
from utils.errors import MalformedRowError
from utils.validation import validate_required_columns

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = tuple(LOADER_CONFIG['required_columns'])


@dataclass(frozen=True)
class Review:
    """A single cleaned app-store review."""
    app: str
    content: str
    version: int            # leading component of reviewCreatedVersion
    score: int              # 1 to 5 stars


def parse_version(raw) -> int:
    """
    Parse the integer before the first "." of a dotted version string.

    "13.0.2" -> 13, "7" -> 7. Empty, missing or non-integer values raise
    MalformedRowError.
    """
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        raise MalformedRowError('missing_version')
    text = str(raw).strip()
    if not text:
        raise MalformedRowError('missing_version')

    leading = text.split('.', 1)[0].strip()
    if not (leading.isascii() and leading.isdigit()):
        raise MalformedRowError('unparsable_version', text)
    return int(leading)


def is_ascii_text(text: str) -> bool:
    """True when every character lies in code points 1..127."""
    return all(0 < ord(ch) < 128 for ch in text)


def parse_score(raw) -> int:
    min_score = LOADER_CONFIG['min_score']
    max_score = LOADER_CONFIG['max_score']
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise MalformedRowError('invalid_score', str(raw))
    if not value.is_integer() or not min_score <= value <= max_score:
        raise MalformedRowError('invalid_score', str(raw))
    return int(value)


def parse_review_row(row) -> Review:
    """
    Convert one raw row (mapping with the required columns) into a Review.

    Raises:
        MalformedRowError: with reason missing_version, unparsable_version,
            non_ascii or invalid_score
    """
    version = parse_version(row['reviewCreatedVersion'])

    content = row['content']
    if content is None or (isinstance(content, float) and pd.isna(content)):
        content = ''
    content = str(content)
    if not is_ascii_text(content):
        raise MalformedRowError('non_ascii')

    score = parse_score(row['score'])
    return Review(app=str(row['app']), content=content, version=version, score=score)


def reviews_from_frame(df: pd.DataFrame) -> List[Review]:
    """Rebuild Review objects from a cleaned frame (app, content, version, score)."""
    return [
        Review(app=str(app), content=str(content), version=int(version), score=int(score))
        for app, content, version, score in zip(df['app'], df['content'], df['version'], df['score'])
    ]


def binarize_rating(score: int, threshold: Optional[int] = None) -> str:
    """Map a 1-5 star score to 'high' (score >= threshold) or 'low'."""
    if threshold is None:
        threshold = LABEL_CONFIG['high_threshold']
    return 'high' if score >= threshold else 'low'


class ReviewCleaner:
    """
    Clean the raw review table
    Goal: keep English reviews with a parsable app version and a valid score
    """

    def __init__(self, raw_path: str = "data/raw", output_path: str = "data/processed"):
        self.raw_path = Path(raw_path)
        self.output_path = Path(output_path)
        self.cleaning_summary: Dict[str, int] = {}

    def load_raw_reviews(self, filename: str, sample_size: Optional[int] = None) -> pd.DataFrame:
        """
        Load the raw CSV with every column as text.

        Empty cells stay empty strings so an empty review body is kept and
        an empty version is caught by the version check.
        """
        filepath = Path(filename)
        if not filepath.is_absolute() and not filepath.exists():
            filepath = self.raw_path / filename

        df = pd.read_csv(filepath, dtype=str, keep_default_na=False, nrows=sample_size or None)
        validate_required_columns(df, REQUIRED_COLUMNS)
        logger.info(f"Loaded {len(df):,} raw reviews from {filepath}")
        return df

    def clean_reviews(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Clean review data:
        Requirements:
        1. Keep: app, content, reviewCreatedVersion, score
        2. Drop rows with an empty or unparsable version
        3. Drop rows whose content has non-ASCII characters
        4. Drop rows with a score outside 1-5
        5. Preserve input order of surviving rows
        """
        validate_required_columns(df, REQUIRED_COLUMNS)
        df = df[list(REQUIRED_COLUMNS)]

        reviews = []
        dropped = Counter()
        for row in df.to_dict('records'):
            try:
                reviews.append(parse_review_row(row))
            except MalformedRowError as e:
                dropped[e.reason] += 1
                logger.debug(f"Dropping row: {e}")

        clean_df = pd.DataFrame(
            [(r.app, r.content, r.version, r.score) for r in reviews],
            columns=['app', 'content', 'version', 'score']
        )
        clean_df['version'] = clean_df['version'].astype(int)
        clean_df['score'] = clean_df['score'].astype(int)

        self.cleaning_summary = {
            'input_rows': int(len(df)),
            'missing_version': int(dropped['missing_version']),
            'unparsable_version': int(dropped['unparsable_version']),
            'non_ascii': int(dropped['non_ascii']),
            'invalid_score': int(dropped['invalid_score']),
            'final_rows': int(len(clean_df)),
        }
        logger.info(f"  Kept {len(clean_df):,} of {len(df):,} reviews "
                    f"({sum(dropped.values()):,} dropped)")
        return clean_df

    def save(self, clean_df: pd.DataFrame, filename: str = "reviews_clean.csv") -> Path:
        """Write the cleaned table and the cleaning summary."""
        self.output_path.mkdir(parents=True, exist_ok=True)
        output_file = self.output_path / filename
        clean_df.to_csv(output_file, index=False)

        with open(self.output_path / "cleaning_summary.json", 'w', encoding='utf-8') as f:
            json.dump(self.cleaning_summary, f, indent=2)
        return output_file

    def generate_preprocessing_report(self) -> Path:
        """
        Generate a markdown report summarizing preprocessing results.

        Outputs:
            - <output_path>/preprocessing_report.md
        """
        summary = self.cleaning_summary
        input_rows = summary.get('input_rows', 0)
        final_rows = summary.get('final_rows', 0)

        report_lines = []
        report_lines.append("# Data Preprocessing Report")
        report_lines.append("---")
        report_lines.append("")
        report_lines.append("## Overview")
        report_lines.append("")
        report_lines.append(f"- **Input rows**: {input_rows:,}")
        report_lines.append(f"- **Final rows**: {final_rows:,}")
        report_lines.append(f"- **Data retention**: {final_rows/max(input_rows, 1)*100:.2f}%")
        report_lines.append("")
        report_lines.append("## Cleaning Operations")
        report_lines.append("")
        report_lines.append(f"1. **Missing version**: {summary.get('missing_version', 0):,}")
        report_lines.append(f"2. **Unparsable version**: {summary.get('unparsable_version', 0):,}")
        report_lines.append(f"3. **Non-ASCII content**: {summary.get('non_ascii', 0):,}")
        report_lines.append(f"4. **Invalid score**: {summary.get('invalid_score', 0):,}")
        report_lines.append("")

        self.output_path.mkdir(parents=True, exist_ok=True)
        report_path = self.output_path / "preprocessing_report.md"
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(report_lines))
        return report_path


def main(raw_file: Optional[str] = None, sample_size: Optional[int] = None):
    """Run Phase 1: Review cleaning and report generation."""
    from config import DATA_PATHS, SAMPLE_SIZE

    raw_file = raw_file or DATA_PATHS['raw_reviews']
    if sample_size is None:
        sample_size = SAMPLE_SIZE
    if sample_size:
        logger.info(f"Using SAMPLE_SIZE: {sample_size}")

    output_dir = os.path.dirname(DATA_PATHS['reviews_clean'])
    cleaner = ReviewCleaner(raw_path=os.path.dirname(raw_file), output_path=output_dir)

    raw_df = cleaner.load_raw_reviews(raw_file, sample_size)
    clean_df = cleaner.clean_reviews(raw_df)
    output_file = cleaner.save(clean_df, os.path.basename(DATA_PATHS['reviews_clean']))
    cleaner.generate_preprocessing_report()

    logger.info(f"[OK] Saved cleaned reviews: {output_file} {clean_df.shape}")
    return clean_df
