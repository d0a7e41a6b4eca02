"""
Data validation utilities for quality assurance.

This module provides validation functions to ensure data quality throughout
the pipeline, with special focus on:
- Input schema checks for raw review tables
- Label distribution checks before classifier training
- Document-feature matrix sparsity and empty-document checks
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def validate_required_columns(df: pd.DataFrame, required_columns: Iterable[str]) -> None:
    """
    Ensure every required column is present (exact names).

    Raises:
        ValueError: listing the missing columns
    """
    missing_cols = [c for c in required_columns if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")


def validate_label_quality(labels: Sequence,
                           classes: Optional[List[str]] = None,
                           min_samples_per_class: int = 1) -> Dict[str, int]:
    """
    Count labels per class and warn about under-represented classes.

    Args:
        labels: Label per document
        classes: Expected classes (defaults to the distinct labels, sorted)
        min_samples_per_class: Warn below this count

    Returns:
        Dict of {class: count}, including zero counts for expected classes
    """
    counts = pd.Series(list(labels), dtype=object).value_counts()
    if classes is None:
        classes = sorted(counts.index.tolist())

    class_counts = {cls: int(counts.get(cls, 0)) for cls in classes}
    for cls, count in class_counts.items():
        if count < min_samples_per_class:
            logger.warning(f"[WARN] Class '{cls}' has only {count} samples "
                           f"(minimum {min_samples_per_class})")
    return class_counts


def validate_dfm_quality(dfm) -> Dict:
    """
    Summarize a document-feature matrix.

    Returns:
        Dict with ndoc, nfeat, empty_documents, sparsity
    """
    ndoc, nfeat = dfm.shape
    row_totals = dfm.row_sums()
    empty_docs = int(np.sum(row_totals == 0))
    cells = ndoc * nfeat
    sparsity = 1.0 - (dfm.matrix.nnz / cells) if cells else 1.0

    report = {
        'ndoc': int(ndoc),
        'nfeat': int(nfeat),
        'empty_documents': empty_docs,
        'sparsity': float(sparsity),
    }
    if empty_docs:
        logger.info(f"  {empty_docs:,} of {ndoc:,} documents have no features")
    return report
