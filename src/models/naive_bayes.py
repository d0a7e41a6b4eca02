"""
Multinomial Naive Bayes over document-feature matrices.

Fitting is delegated to scikit-learn's MultinomialNB, which estimates
class priors and smoothed class-conditional term probabilities
P(w|c) = (count(w, c) + smooth) / (total(c) + smooth * V).
Prediction scores each class by log P(c) + sum_w count(w) * log P(w|c) and
returns the best class; ties go to the first class in sorted order.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import scipy.sparse as sp
from sklearn.naive_bayes import MultinomialNB

from feature_engineering.dfm import DocumentFeatureMatrix, match_dfm
from utils.errors import EmptyVocabularyError, InsufficientDataError

logger = logging.getLogger(__name__)

PRIOR_SCHEMES = ('docfreq', 'uniform', 'termfreq')


@dataclass(frozen=True, eq=False)
class NaiveBayesModel:
    """A trained classifier; read-only once built."""
    classes: Tuple[str, ...]
    features: Tuple[str, ...]
    priors: np.ndarray              # shape (n_classes,)
    conditional: np.ndarray         # shape (n_classes, n_features), P(w|c)
    class_counts: Tuple[int, ...]
    estimator: MultinomialNB = field(repr=False)
    smooth: float = 1.0
    prior_scheme: str = 'docfreq'

    def __post_init__(self):
        for arr in (self.priors, self.conditional,
                    self.estimator.class_log_prior_, self.estimator.feature_log_prob_):
            arr.flags.writeable = False

    def _aligned(self, dfm: DocumentFeatureMatrix) -> sp.csr_matrix:
        if tuple(dfm.features) == self.features:
            return dfm.matrix.copy()
        return match_dfm(dfm, list(self.features)).matrix.copy()

    def predict_log_scores(self, dfm: DocumentFeatureMatrix) -> np.ndarray:
        """
        Unnormalized log posterior per (document, class).

        Terms outside the training vocabulary are ignored.
        """
        return self.estimator.predict_joint_log_proba(self._aligned(dfm))

    def predict(self, dfm: DocumentFeatureMatrix) -> List[str]:
        scores = self.predict_log_scores(dfm)
        best = np.argmax(scores, axis=1)
        return [self.classes[k] for k in best]

    def predict_proba(self, dfm: DocumentFeatureMatrix) -> pd.DataFrame:
        """Normalized posterior class probabilities per document."""
        scores = self.predict_log_scores(dfm)
        scores = scores - scores.max(axis=1, keepdims=True)
        probs = np.exp(scores)
        probs /= probs.sum(axis=1, keepdims=True)
        return pd.DataFrame(probs, index=dfm.docnames, columns=list(self.classes))

    def feature_probabilities(self, kind: str = 'conditional') -> pd.DataFrame:
        """
        Class x term probability table.

        Args:
            kind: 'conditional' for P(w|c), 'posterior' for P(c|w)
        """
        if kind == 'conditional':
            values = self.conditional
        elif kind == 'posterior':
            joint = self.conditional * self.priors[:, np.newaxis]
            totals = joint.sum(axis=0, keepdims=True)
            values = np.divide(joint, totals, out=np.zeros_like(joint), where=totals > 0)
        else:
            raise ValueError(f"kind must be 'conditional' or 'posterior', got '{kind}'")
        return pd.DataFrame(values, index=list(self.classes), columns=list(self.features))

    def top_features(self, n: int = 10, kind: str = 'conditional') -> Dict[str, pd.DataFrame]:
        """Per class, the n most probable terms (descending; ties by term)."""
        table = self.feature_probabilities(kind)
        result = {}
        for cls in self.classes:
            frame = pd.DataFrame({'feature': table.columns, 'probability': table.loc[cls].values})
            frame = frame.sort_values(['probability', 'feature'], ascending=[False, True])
            result[cls] = frame.head(n).reset_index(drop=True)
        return result

    def summary(self) -> Dict:
        return {
            'classes': list(self.classes),
            'n_features': len(self.features),
            'class_counts': dict(zip(self.classes, self.class_counts)),
            'priors': dict(zip(self.classes, [float(p) for p in self.priors])),
            'smooth': self.smooth,
            'prior_scheme': self.prior_scheme,
        }


def train_naive_bayes(dfm: DocumentFeatureMatrix,
                      labels: Sequence[str],
                      smooth: float = 1.0,
                      prior: str = 'docfreq',
                      classes: Optional[Sequence[str]] = None) -> NaiveBayesModel:
    """
    Fit a multinomial Naive Bayes model.

    Args:
        dfm: Training matrix (counts)
        labels: One label per dfm row
        smooth: Additive smoothing constant
        prior: 'docfreq' (class share of rows), 'uniform' or 'termfreq'
        classes: Expected classes; defaults to the distinct labels

    Raises:
        ValueError: misaligned or missing labels, bad arguments
        EmptyVocabularyError: dfm has no features
        InsufficientDataError: fewer than two classes, or a class without rows
    """
    labels = list(labels)
    if len(labels) != dfm.ndoc:
        raise ValueError(f"Expected {dfm.ndoc} labels, got {len(labels)}")
    if any(label is None or (isinstance(label, float) and np.isnan(label)) for label in labels):
        raise ValueError("Every training document needs a label")
    if prior not in PRIOR_SCHEMES:
        raise ValueError(f"prior must be one of {PRIOR_SCHEMES}, got '{prior}'")
    if smooth < 0:
        raise ValueError(f"smooth must be non-negative, got {smooth}")
    if dfm.nfeat == 0:
        raise EmptyVocabularyError("Cannot train on a matrix without features")

    labels = [str(label) for label in labels]
    if classes is None:
        classes = sorted(set(labels))
    else:
        classes = sorted(str(c) for c in classes)
        unknown = set(labels) - set(classes)
        if unknown:
            raise ValueError(f"Labels not among classes: {sorted(unknown)}")

    position = {cls: k for k, cls in enumerate(classes)}
    codes = np.array([position[label] for label in labels], dtype=np.int64)
    class_counts = np.bincount(codes, minlength=len(classes))

    empty = [cls for cls, count in zip(classes, class_counts) if count == 0]
    if empty:
        raise InsufficientDataError(f"No training documents for classes: {empty}")
    if len(classes) < 2:
        raise InsufficientDataError(f"Need at least two classes, got {classes}")

    if prior == 'docfreq':
        estimator = MultinomialNB(alpha=smooth, force_alpha=True)
    elif prior == 'uniform':
        estimator = MultinomialNB(alpha=smooth, force_alpha=True, fit_prior=False)
    else:
        class_totals = np.bincount(codes, weights=dfm.row_sums(), minlength=len(classes))
        grand_total = class_totals.sum()
        class_prior = (class_totals / grand_total if grand_total > 0
                       else np.full(len(classes), 1.0 / len(classes)))
        estimator = MultinomialNB(alpha=smooth, force_alpha=True, class_prior=class_prior)

    estimator.fit(dfm.matrix.copy(), np.asarray(labels))

    logger.info(f"Trained Naive Bayes on {dfm.ndoc:,} documents x {dfm.nfeat:,} features "
                f"({', '.join(f'{c}={n:,}' for c, n in zip(classes, class_counts))})")

    priors = np.exp(estimator.class_log_prior_)
    conditional = np.exp(estimator.feature_log_prob_)

    return NaiveBayesModel(
        classes=tuple(str(c) for c in estimator.classes_),
        features=tuple(dfm.features),
        priors=priors,
        conditional=conditional,
        class_counts=tuple(int(c) for c in estimator.class_count_),
        estimator=estimator,
        smooth=float(smooth),
        prior_scheme=prior,
    )
