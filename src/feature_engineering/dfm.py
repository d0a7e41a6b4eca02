"""
Document-feature matrix (DFM) construction and transforms.

A DocumentFeatureMatrix wraps a read-only scipy CSR matrix together with
row names, the feature vocabulary and a docvars frame. Every operation
(build, trim, group, weight, tfidf, match) returns a new matrix and leaves
its input untouched.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp

from utils.errors import EmptyVocabularyError

logger = logging.getLogger(__name__)

WEIGHT_SCHEMES = ('count', 'prop', 'propmax', 'logcount', 'boolean')


def _freeze(matrix: sp.csr_matrix) -> sp.csr_matrix:
    for arr in (matrix.data, matrix.indices, matrix.indptr):
        arr.flags.writeable = False
    return matrix


class DocumentFeatureMatrix:
    """
    Sparse document-by-term matrix of counts or weights.

    Attributes are exposed read-only; use the module functions to derive
    new matrices.
    """

    def __init__(self,
                 matrix,
                 docnames: Sequence[str],
                 features: Sequence[str],
                 docvars: Optional[pd.DataFrame] = None):
        matrix = sp.csr_matrix(matrix, dtype=np.float64, copy=True)
        matrix.sum_duplicates()
        matrix.eliminate_zeros()

        if matrix.shape != (len(docnames), len(features)):
            raise ValueError(f"Matrix shape {matrix.shape} does not match "
                             f"{len(docnames)} docnames x {len(features)} features")
        if docvars is None:
            docvars = pd.DataFrame(index=range(len(docnames)))
        elif len(docvars) != len(docnames):
            raise ValueError("docvars must have one row per document")

        self._matrix = _freeze(matrix)
        self._docnames = tuple(str(d) for d in docnames)
        self._features = tuple(str(f) for f in features)
        self._docvars = docvars.reset_index(drop=True).copy()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def matrix(self) -> sp.csr_matrix:
        return self._matrix

    @property
    def docnames(self) -> List[str]:
        return list(self._docnames)

    @property
    def features(self) -> List[str]:
        return list(self._features)

    @property
    def docvars(self) -> pd.DataFrame:
        return self._docvars.copy()

    @property
    def shape(self):
        return self._matrix.shape

    @property
    def ndoc(self) -> int:
        return self._matrix.shape[0]

    @property
    def nfeat(self) -> int:
        return self._matrix.shape[1]

    def row_sums(self) -> np.ndarray:
        return np.asarray(self._matrix.sum(axis=1)).ravel()

    def col_sums(self) -> np.ndarray:
        return np.asarray(self._matrix.sum(axis=0)).ravel()

    def doc_freq(self) -> np.ndarray:
        """Number of rows in which each feature is nonzero."""
        return np.bincount(self._matrix.indices, minlength=self.nfeat)

    def subset(self, rows) -> 'DocumentFeatureMatrix':
        """Rows selected by positional index array or boolean mask."""
        rows = np.asarray(rows)
        if rows.dtype == bool:
            rows = np.flatnonzero(rows)
        rows = rows.astype(np.int64)
        return DocumentFeatureMatrix(
            self._matrix[rows],
            [self._docnames[i] for i in rows],
            self._features,
            self._docvars.iloc[rows]
        )

    def topfeatures(self, n: int = 10) -> pd.Series:
        """Top-n features by column total, descending; ties by term."""
        totals = pd.DataFrame({'feature': self._features, 'value': self.col_sums()})
        totals = totals.sort_values(['value', 'feature'], ascending=[False, True]).head(n)
        return pd.Series(totals['value'].values, index=totals['feature'].values, name='frequency')

    def topfeatures_by_row(self, n: int = 10) -> Dict[str, pd.Series]:
        """Top-n features of every row, keyed by row name."""
        result = {}
        for i, name in enumerate(self._docnames):
            row = self._matrix[i]
            frame = pd.DataFrame({
                'feature': [self._features[j] for j in row.indices],
                'value': row.data,
            })
            frame = frame.sort_values(['value', 'feature'], ascending=[False, True]).head(n)
            result[name] = pd.Series(frame['value'].values, index=frame['feature'].values,
                                     name=name)
        return result

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame view, rows = docnames, columns = features."""
        return pd.DataFrame(self._matrix.toarray(), index=list(self._docnames),
                            columns=list(self._features))

    def __repr__(self) -> str:
        return f"DocumentFeatureMatrix({self.ndoc} documents, {self.nfeat} features)"


def build_dfm(documents: Iterable[Sequence[str]],
              docnames: Optional[Sequence[str]] = None,
              docvars: Optional[pd.DataFrame] = None) -> DocumentFeatureMatrix:
    """
    Count tokens per document.

    Columns follow first-seen token order. Raises EmptyVocabularyError when
    no document contributes a token.
    """
    vocabulary: Dict[str, int] = {}
    indptr = [0]
    indices: List[int] = []
    data: List[int] = []

    for tokens in documents:
        counts: Dict[int, int] = {}
        for token in tokens:
            col = vocabulary.setdefault(token, len(vocabulary))
            counts[col] = counts.get(col, 0) + 1
        indices.extend(counts.keys())
        data.extend(counts.values())
        indptr.append(len(indices))

    n_docs = len(indptr) - 1
    if not vocabulary:
        raise EmptyVocabularyError(f"No features found in {n_docs} documents")

    if docnames is None:
        docnames = [f"text{i + 1}" for i in range(n_docs)]
    matrix = sp.csr_matrix((np.asarray(data, dtype=np.float64),
                            np.asarray(indices, dtype=np.int64),
                            np.asarray(indptr, dtype=np.int64)),
                           shape=(n_docs, len(vocabulary)))
    return DocumentFeatureMatrix(matrix, docnames, list(vocabulary), docvars)


def trim_dfm(dfm: DocumentFeatureMatrix,
             min_termfreq: Optional[float] = None,
             min_docfreq: Optional[int] = None,
             max_termfreq: Optional[float] = None,
             max_docfreq: Optional[int] = None) -> DocumentFeatureMatrix:
    """
    Drop features outside the frequency thresholds.

    A column is dropped when its total count < min_termfreq OR the number of
    rows where it occurs < min_docfreq (or above the max thresholds).
    """
    term_freq = dfm.col_sums()
    doc_freq = dfm.doc_freq()

    keep = np.ones(dfm.nfeat, dtype=bool)
    if min_termfreq is not None:
        keep &= term_freq >= min_termfreq
    if min_docfreq is not None:
        keep &= doc_freq >= min_docfreq
    if max_termfreq is not None:
        keep &= term_freq <= max_termfreq
    if max_docfreq is not None:
        keep &= doc_freq <= max_docfreq

    cols = np.flatnonzero(keep)
    logger.debug(f"trim_dfm: kept {len(cols):,} of {dfm.nfeat:,} features")
    features = dfm.features
    return DocumentFeatureMatrix(dfm.matrix[:, cols], dfm.docnames,
                                 [features[j] for j in cols], dfm.docvars)


def group_dfm(dfm: DocumentFeatureMatrix,
              groups: Union[str, Sequence]) -> DocumentFeatureMatrix:
    """
    Sum rows that share a group key.

    Args:
        dfm: Input matrix
        groups: Docvar column name, or one key per row

    Returns:
        One row per distinct key (sorted key order), same columns
    """
    if isinstance(groups, str):
        group_name = groups
        keys = dfm.docvars[groups].tolist()
    else:
        group_name = 'group'
        keys = list(groups)
    if len(keys) != dfm.ndoc:
        raise ValueError(f"Expected {dfm.ndoc} group keys, got {len(keys)}")

    codes, uniques = pd.factorize(pd.Series(keys, dtype=object), sort=True)
    if (codes < 0).any():
        raise ValueError("Group keys must not be missing")

    indicator = sp.csr_matrix(
        (np.ones(dfm.ndoc), (codes, np.arange(dfm.ndoc))),
        shape=(len(uniques), dfm.ndoc)
    )
    grouped = indicator @ dfm.matrix
    docvars = pd.DataFrame({group_name: list(uniques)})
    return DocumentFeatureMatrix(grouped, [str(u) for u in uniques], dfm.features, docvars)


def weight_dfm(dfm: DocumentFeatureMatrix, scheme: str = 'prop') -> DocumentFeatureMatrix:
    """
    Re-weight cell values.

    Schemes:
        count    - unchanged
        prop     - divide by row total (all-zero rows stay zero)
        propmax  - divide by row maximum
        logcount - 1 + log10(count) for nonzero cells
        boolean  - 1 for nonzero cells
    """
    if scheme not in WEIGHT_SCHEMES:
        raise ValueError(f"scheme must be one of {WEIGHT_SCHEMES}, got '{scheme}'")

    matrix = dfm.matrix.copy()
    matrix.data.flags.writeable = True

    if scheme == 'prop':
        matrix = _scale_rows(matrix, dfm.row_sums())
    elif scheme == 'propmax':
        row_max = matrix.max(axis=1).toarray().ravel() if matrix.nnz else np.zeros(dfm.ndoc)
        matrix = _scale_rows(matrix, row_max)
    elif scheme == 'logcount':
        matrix.data = 1.0 + np.log10(matrix.data)
    elif scheme == 'boolean':
        matrix.data = np.ones_like(matrix.data)

    return DocumentFeatureMatrix(matrix, dfm.docnames, dfm.features, dfm.docvars)


def _scale_rows(matrix: sp.csr_matrix, divisors: np.ndarray) -> sp.csr_matrix:
    scale = np.zeros_like(divisors, dtype=np.float64)
    nonzero = divisors != 0
    scale[nonzero] = 1.0 / divisors[nonzero]
    return sp.diags(scale) @ matrix


def tfidf_dfm(dfm: DocumentFeatureMatrix, scheme_tf: str = 'count',
              base: float = 10) -> DocumentFeatureMatrix:
    """
    Term frequency (per weight_dfm scheme) times log_base(N / document frequency).

    N is the number of rows of the input matrix.
    """
    tf = weight_dfm(dfm, scheme_tf)
    doc_freq = dfm.doc_freq().astype(np.float64)

    idf = np.zeros(dfm.nfeat)
    present = doc_freq > 0
    idf[present] = np.log(dfm.ndoc / doc_freq[present]) / np.log(base)

    weighted = tf.matrix @ sp.diags(idf)
    return DocumentFeatureMatrix(weighted, dfm.docnames, dfm.features, dfm.docvars)


def match_dfm(dfm: DocumentFeatureMatrix, features: Sequence[str]) -> DocumentFeatureMatrix:
    """
    Realign columns to a given vocabulary.

    Features missing from dfm become zero columns; features not in the
    vocabulary are dropped.
    """
    position = {f: j for j, f in enumerate(dfm.features)}
    target_cols = [k for k, f in enumerate(features) if f in position]
    source_cols = [position[features[k]] for k in target_cols]

    selector = sp.csr_matrix(
        (np.ones(len(source_cols)), (source_cols, target_cols)),
        shape=(dfm.nfeat, len(features))
    )
    return DocumentFeatureMatrix(dfm.matrix @ selector, dfm.docnames, features, dfm.docvars)
