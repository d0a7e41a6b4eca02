"""
Lexicon (dictionary) scoring of document-feature matrices.

A Lexicon maps each term to the set of categories it belongs to, e.g. the
NRC word-emotion association list (joy, anger, ...). Scoring sums the
weighted values of every term listed under a category.
"""

import logging
from collections import abc
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

import numpy as np
import pandas as pd
import scipy.sparse as sp

from feature_engineering.dfm import DocumentFeatureMatrix

logger = logging.getLogger(__name__)


class Lexicon(abc.Mapping):
    """Read-only mapping of term -> frozenset of category labels."""

    def __init__(self, entries: Mapping[str, Iterable[str]]):
        self._entries: Dict[str, FrozenSet[str]] = {
            str(term).lower(): frozenset(categories)
            for term, categories in entries.items()
            if categories
        }
        self._categories = frozenset().union(*self._entries.values()) if self._entries else frozenset()

    @classmethod
    def from_category_map(cls, category_map: Mapping[str, Iterable[str]]) -> 'Lexicon':
        """Build from {category: [terms]}."""
        entries: Dict[str, set] = {}
        for category, terms in category_map.items():
            for term in terms:
                entries.setdefault(str(term).lower(), set()).add(category)
        return cls(entries)

    @classmethod
    def from_nrc_file(cls, path) -> 'Lexicon':
        """
        Load the NRC word-level emotion lexicon.

        Format: tab-separated lines of word, category, association flag (0/1).
        Only associations flagged 1 are kept.
        """
        path = Path(path)
        table = pd.read_csv(path, sep='\t', header=None, names=['word', 'category', 'association'],
                            dtype={'word': str, 'category': str}, keep_default_na=False,
                            comment='#')
        table = table[pd.to_numeric(table['association'], errors='coerce') == 1]

        entries: Dict[str, set] = {}
        for word, category in zip(table['word'], table['category']):
            entries.setdefault(word.strip().lower(), set()).add(category.strip())
        lexicon = cls(entries)
        logger.info(f"Loaded lexicon from {path}: {len(lexicon):,} terms, "
                    f"{len(lexicon.categories)} categories")
        return lexicon

    @property
    def categories(self) -> List[str]:
        return sorted(self._categories)

    def terms_for(self, category: str) -> List[str]:
        return sorted(t for t, cats in self._entries.items() if category in cats)

    def __getitem__(self, term: str) -> FrozenSet[str]:
        return self._entries[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def score_lexicon(dfm: DocumentFeatureMatrix,
                  lexicon: Lexicon,
                  categories: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Sum weighted feature values per lexicon category.

    Args:
        dfm: Matrix, usually already weighted (e.g. proportions)
        lexicon: Term -> categories mapping
        categories: Categories to report; a list keeps its order, a set is
            sorted; defaults to every lexicon category

    Returns:
        DataFrame indexed by dfm row names with one column per category.
        Categories without matching terms score 0.
    """
    if categories is None:
        categories = lexicon.categories
    elif isinstance(categories, (set, frozenset)):
        categories = sorted(categories)
    else:
        categories = list(categories)

    column = {c: k for k, c in enumerate(categories)}
    rows, cols = [], []
    for j, feature in enumerate(dfm.features):
        for category in lexicon.get(feature.lower(), ()):
            if category in column:
                rows.append(j)
                cols.append(column[category])

    membership = sp.csr_matrix((np.ones(len(rows)), (rows, cols)),
                               shape=(dfm.nfeat, len(categories)))
    scores = np.asarray((dfm.matrix @ membership).toarray())
    return pd.DataFrame(scores, index=dfm.docnames, columns=categories)


def scores_to_long(table: pd.DataFrame, id_name: str = 'group',
                   category_name: str = 'category', value_name: str = 'score') -> pd.DataFrame:
    """Reshape a category score table into (id, category, score) rows."""
    long_df = table.rename_axis(id_name).reset_index()
    return long_df.melt(id_vars=id_name, var_name=category_name, value_name=value_name)
