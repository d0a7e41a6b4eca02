"""
Classification metrics for the binarized rating task.

The confusion matrix is laid out with predicted labels as rows and true
labels as columns. Precision, recall and accuracy return NaN (and emit an
UndefinedMetricError warning) when their denominator is zero.
"""

import warnings
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix as sk_confusion_matrix

from utils.errors import UndefinedMetricError


def confusion_matrix(predicted: Sequence[str],
                     actual: Sequence[str],
                     label_order: Sequence[str]) -> pd.DataFrame:
    """
    Count (predicted, actual) pairs.

    Args:
        predicted: Predicted label per document
        actual: True label per document
        label_order: Row/column order; every label must appear here

    Returns:
        DataFrame indexed by predicted label with one column per true label
    """
    predicted = [str(p) for p in predicted]
    actual = [str(a) for a in actual]
    label_order = [str(label) for label in label_order]

    if len(predicted) != len(actual):
        raise ValueError(f"Got {len(predicted)} predictions for {len(actual)} labels")
    unknown = (set(predicted) | set(actual)) - set(label_order)
    if unknown:
        raise ValueError(f"Labels not in label_order: {sorted(unknown)}")

    if predicted:
        # scikit-learn puts true labels on rows
        counts = sk_confusion_matrix(actual, predicted, labels=label_order).T
    else:
        counts = np.zeros((len(label_order), len(label_order)), dtype=int)

    matrix = pd.DataFrame(counts, index=label_order, columns=label_order)
    matrix.index.name = 'predicted'
    matrix.columns.name = 'actual'
    return matrix


def _safe_ratio(numerator: float, denominator: float, name: str) -> float:
    if denominator == 0:
        warnings.warn(f"{name} is undefined: zero denominator", UndefinedMetricError, stacklevel=3)
        return float('nan')
    return float(numerator) / float(denominator)


def precision_recall(matrix: pd.DataFrame, positive_label: str) -> Tuple[float, float]:
    """
    Precision = TP / (TP + FP), recall = TP / (TP + FN) for one label.

    Each is NaN when its denominator is zero.
    """
    tp = matrix.loc[positive_label, positive_label]
    predicted_positive = matrix.loc[positive_label].sum()
    actual_positive = matrix[positive_label].sum()
    precision = _safe_ratio(tp, predicted_positive, 'precision')
    recall = _safe_ratio(tp, actual_positive, 'recall')
    return precision, recall


def accuracy(matrix: pd.DataFrame) -> float:
    """Trace over total; NaN for an empty matrix."""
    values = matrix.values
    return _safe_ratio(np.trace(values), values.sum(), 'accuracy')


def f1_score(precision: float, recall: float) -> float:
    """Harmonic mean of precision and recall (NaN if either is NaN or both are 0)."""
    if np.isnan(precision) or np.isnan(recall) or (precision + recall) == 0:
        return float('nan')
    return 2 * precision * recall / (precision + recall)


def majority_baseline(train_labels: Sequence[str], n_predictions: int) -> Tuple[str, list]:
    """
    Predictions of a classifier that always answers the most common training label.

    Ties go to the first label in sorted order.
    """
    counts = pd.Series([str(label) for label in train_labels]).value_counts()
    top = counts.max()
    majority = sorted(counts[counts == top].index)[0]
    return majority, [majority] * n_predictions


def evaluate_predictions(predicted: Sequence[str],
                         actual: Sequence[str],
                         label_order: Sequence[str],
                         positive_label: str) -> Dict:
    """
    Confusion matrix plus scalar metrics in a JSON-friendly dict.
    """
    matrix = confusion_matrix(predicted, actual, label_order)
    precision, recall = precision_recall(matrix, positive_label)
    return {
        'confusion_matrix': matrix,
        'precision': precision,
        'recall': recall,
        'f1_score': f1_score(precision, recall),
        'accuracy': accuracy(matrix),
        'n_documents': int(matrix.values.sum()),
        'positive_label': positive_label,
    }
