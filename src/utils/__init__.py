"""
Utility modules

This package contains shared utility functions for:
- Exception types used across the pipeline
- Train/test splitting
- Data quality validation
"""

from .errors import (
    ReviewAnalysisError,
    MalformedRowError,
    EmptyVocabularyError,
    InsufficientDataError,
    UndefinedMetricError
)

from .split_utils import (
    DocumentSplitter,
    get_default_splitter
)

from .validation import (
    validate_required_columns,
    validate_label_quality,
    validate_dfm_quality
)

__all__ = [
    # Errors
    'ReviewAnalysisError',
    'MalformedRowError',
    'EmptyVocabularyError',
    'InsufficientDataError',
    'UndefinedMetricError',

    # Splitting
    'DocumentSplitter',
    'get_default_splitter',

    # Validation
    'validate_required_columns',
    'validate_label_quality',
    'validate_dfm_quality',
]
