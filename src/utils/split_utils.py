"""
Unified Train/Test Split Utilities

This module provides a single source of truth for data splitting
to ensure consistency across all experiments.

Key Features:
- Bernoulli split (one independent seeded draw per document)
- Random stratified split (for comparison)
- Consistent interface for all modules
- Same seed always reproduces the same split
"""

from typing import Optional, Sequence, Tuple

import numpy as np
from sklearn.model_selection import train_test_split


class DocumentSplitter:
    """
    Unified train/test split utility.

    Ensures all experiments use the same split strategy so results stay
    comparable across runs.
    """

    def __init__(self,
                 split_type: str = 'bernoulli',
                 test_size: float = 0.2,
                 random_state: int = 42):
        """
        Initialize splitter.

        Args:
            split_type: 'bernoulli' or 'random'
            test_size: Probability (bernoulli) or proportion (random) of test documents
            random_state: Random seed for reproducibility
        """
        valid_types = ['bernoulli', 'random']
        if split_type not in valid_types:
            raise ValueError(f"split_type must be one of {valid_types}, got '{split_type}'")
        if not 0.0 < test_size < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {test_size}")

        self.split_type = split_type
        self.test_size = test_size
        self.random_state = random_state

    def split(self, n_docs: int,
              labels: Optional[Sequence] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Split document positions into train and test.

        Args:
            n_docs: Number of documents
            labels: Labels for stratification (random split only)

        Returns:
            Tuple of (train_indices, test_indices), each sorted ascending
        """
        if self.split_type == 'bernoulli':
            train_idx, test_idx = self._bernoulli_split(n_docs)
        else:
            train_idx, test_idx = self._random_split(n_docs, labels)

        if len(train_idx) == 0 or len(test_idx) == 0:
            raise ValueError("Split resulted in empty train or test set")

        return train_idx, test_idx

    def _bernoulli_split(self, n_docs: int) -> Tuple[np.ndarray, np.ndarray]:
        """Each document lands in train with probability 1 - test_size."""
        rng = np.random.default_rng(self.random_state)
        in_train = rng.random(n_docs) < (1.0 - self.test_size)
        return np.flatnonzero(in_train), np.flatnonzero(~in_train)

    def _random_split(self, n_docs: int,
                      labels: Optional[Sequence]) -> Tuple[np.ndarray, np.ndarray]:
        """Random stratified split."""
        indices = np.arange(n_docs)
        train_idx, test_idx = train_test_split(
            indices,
            test_size=self.test_size,
            random_state=self.random_state,
            stratify=list(labels) if labels is not None else None
        )
        return np.sort(train_idx), np.sort(test_idx)


def get_default_splitter(split_type: str = 'bernoulli') -> DocumentSplitter:
    """
    Get a splitter with default project settings.

    Args:
        split_type: 'bernoulli' or 'random'

    Returns:
        DocumentSplitter instance with default settings
    """
    return DocumentSplitter(
        split_type=split_type,
        test_size=0.2,
        random_state=42
    )
