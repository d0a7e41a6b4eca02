"""
Exception types shared across the pipeline.

MalformedRowError is recovered by the record loader (the row is dropped).
UndefinedMetricError is emitted with warnings.warn and never raised; the
metric that triggered it returns NaN.
"""

from typing import Optional


class ReviewAnalysisError(Exception):
    """Base class for pipeline errors."""


class MalformedRowError(ReviewAnalysisError):
    """A raw review row that cannot become a Review."""

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        message = reason if detail is None else f"{reason}: {detail}"
        super().__init__(message)


class EmptyVocabularyError(ReviewAnalysisError):
    """A document-feature matrix with no feature columns."""


class InsufficientDataError(ReviewAnalysisError):
    """A class has no training examples."""


class UndefinedMetricError(ReviewAnalysisError, UserWarning):
    """A metric with a zero denominator."""
