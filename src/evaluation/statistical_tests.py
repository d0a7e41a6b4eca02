"""
Statistical Significance Testing for Classifier Comparisons

This module provides statistical tests to determine if the rating classifier
beats a reference (usually the majority-class baseline) by more than
random noise.

Key Methods:
- Bootstrap Confidence Intervals for metric differences
- McNemar's test for paired classifier comparison
"""

import warnings
from typing import Dict, Sequence

import numpy as np
from scipy import stats
from sklearn.utils import resample

from evaluation.metrics import accuracy, confusion_matrix, f1_score, precision_recall
from utils.errors import UndefinedMetricError


class StatisticalTester:
    """
    Perform statistical tests to validate classifier performance differences.
    """

    def __init__(self, label_order: Sequence[str], positive_label: str, random_state: int = 42):
        """
        Initialize statistical tester.

        Args:
            label_order: Labels of the task (confusion matrix order)
            positive_label: Label treated as positive for precision/recall/f1
            random_state: Random seed for reproducibility
        """
        self.label_order = list(label_order)
        self.positive_label = positive_label
        self.random_state = random_state

    def _metric(self, metric: str, y_true: np.ndarray, y_pred: np.ndarray) -> float:
        matrix = confusion_matrix(y_pred, y_true, self.label_order)
        if metric == 'accuracy':
            return accuracy(matrix)
        precision, recall = precision_recall(matrix, self.positive_label)
        if metric == 'precision':
            return precision
        if metric == 'recall':
            return recall
        if metric == 'f1':
            return f1_score(precision, recall)
        raise ValueError(f"Unknown metric: {metric}")

    def bootstrap_confidence_interval(self,
                                      y_true: Sequence[str],
                                      pred1: Sequence[str],
                                      pred2: Sequence[str],
                                      metric: str = 'accuracy',
                                      n_iterations: int = 1000,
                                      confidence_level: float = 0.95) -> Dict:
        """
        Bootstrap confidence interval for the metric difference between two classifiers.

        This answers: "Is classifier 2 significantly better than classifier 1?"

        Args:
            y_true: True labels
            pred1: Predictions from classifier 1 (baseline)
            pred2: Predictions from classifier 2 (candidate)
            metric: 'accuracy', 'precision', 'recall', 'f1'
            n_iterations: Number of bootstrap iterations
            confidence_level: Confidence level (e.g., 0.95 for 95% CI)

        Returns:
            Dict with mean_diff, ci_low, ci_high, p_value, is_significant
        """
        y_true = np.asarray(y_true, dtype=object)
        pred1 = np.asarray(pred1, dtype=object)
        pred2 = np.asarray(pred2, dtype=object)
        if not (len(y_true) == len(pred1) == len(pred2)) or len(y_true) == 0:
            raise ValueError("y_true, pred1 and pred2 must be non-empty and aligned")

        diffs = []
        model1_scores = []
        model2_scores = []

        # Degenerate resamples (e.g. no predicted positives) give NaN and are skipped
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', UndefinedMetricError)
            for i in range(n_iterations):
                indices = resample(
                    np.arange(len(y_true)),
                    replace=True,
                    random_state=self.random_state + i
                )

                score1 = self._metric(metric, y_true[indices], pred1[indices])
                score2 = self._metric(metric, y_true[indices], pred2[indices])
                if np.isnan(score1) or np.isnan(score2):
                    continue

                model1_scores.append(score1)
                model2_scores.append(score2)
                diffs.append(score2 - score1)

        if not diffs:
            nan = float('nan')
            return {'mean_diff': nan, 'std_diff': nan, 'ci_low': nan, 'ci_high': nan,
                    'p_value': nan, 'is_significant': False, 'n_valid': 0}

        diffs = np.array(diffs)

        alpha = 1 - confidence_level
        ci_low = np.percentile(diffs, alpha / 2 * 100)
        ci_high = np.percentile(diffs, (1 - alpha / 2) * 100)

        # One-sided: classifier 2 > classifier 1
        p_value = np.mean(diffs <= 0)

        return {
            'mean_diff': float(np.mean(diffs)),
            'std_diff': float(np.std(diffs)),
            'ci_low': float(ci_low),
            'ci_high': float(ci_high),
            'p_value': float(p_value),
            'is_significant': bool(ci_low > 0),
            'model1_mean': float(np.mean(model1_scores)),
            'model2_mean': float(np.mean(model2_scores)),
            'n_valid': int(len(diffs)),
        }

    def mcnemar_test(self,
                     y_true: Sequence[str],
                     pred1: Sequence[str],
                     pred2: Sequence[str]) -> Dict:
        """
        McNemar's test for comparing two classifiers on the same documents.

        Tests whether the two classifiers disagree in systematic ways.

        Returns:
            Dict with test statistic and p-value
        """
        y_true = np.asarray(y_true, dtype=object)
        correct1 = np.asarray(pred1, dtype=object) == y_true
        correct2 = np.asarray(pred2, dtype=object) == y_true

        n01 = int(np.sum(correct1 & ~correct2))
        n10 = int(np.sum(~correct1 & correct2))

        if (n01 + n10) == 0:
            return {'statistic': 0.0, 'p_value': 1.0, 'is_significant': False,
                    'n01': n01, 'n10': n10}

        # With continuity correction
        statistic = ((abs(n01 - n10) - 1) ** 2) / (n01 + n10)
        p_value = stats.chi2.sf(statistic, df=1)

        return {
            'statistic': float(statistic),
            'p_value': float(p_value),
            'is_significant': bool(p_value < 0.05),
            'n01': n01,
            'n10': n10
        }
