"""
Text normalization for review content.

Turns a review string into a bag-of-words token list:
lowercase -> tokenize (dropping punctuation/symbol tokens) -> strip digit
runs and '@'/'#' -> drop stopwords (exact or glob patterns) -> stem ->
optional n-grams.
"""

import fnmatch
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from nltk.stem.snowball import SnowballStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

TOKEN_PATTERN = re.compile(r"[@#]+\w+|\w+(?:['’]\w+)*|\S")
NUMBER_PATTERN = re.compile(r"\d+")
HANDLE_PATTERN = re.compile(r"[@#]")
NON_WORD_PATTERN = re.compile(r"[\W_]+")

MIN_APP_WORD_LENGTH = 3


@dataclass(frozen=True)
class NormalizerConfig:
    """Options for TextNormalizer."""
    remove_punct: bool = True
    remove_symbols: bool = True
    remove_numbers: bool = True
    stopwords: FrozenSet[str] = field(default_factory=lambda: frozenset(ENGLISH_STOP_WORDS))
    stem: bool = True
    stemmer: Optional[Callable[[str], str]] = None
    ngram_range: Tuple[int, int] = (1, 1)
    concatenator: str = '_'

    def __post_init__(self):
        low, high = self.ngram_range
        if low < 1 or high < low:
            raise ValueError(f"Invalid ngram_range: {self.ngram_range}")


def stopwords_for_apps(app_names: Iterable[str]) -> FrozenSet[str]:
    """
    Stopword patterns that drop app names from review text.

    Every name gives one glob over the whole name with spaces removed
    ('plentyoffish*'). Words of a multi-word name add their own glob
    ('plenty*', 'fish*') unless they are English stopwords or shorter than
    MIN_APP_WORD_LENGTH. A name that short is matched exactly, not as a prefix.
    """
    patterns = set()
    for name in app_names:
        words = [NON_WORD_PATTERN.sub('', w) for w in str(name).lower().split()]
        words = [w for w in words if w]
        if not words:
            continue

        joined = ''.join(words)
        patterns.add(f"{joined}*" if len(joined) >= MIN_APP_WORD_LENGTH else joined)
        if len(words) > 1:
            for word in words:
                if len(word) >= MIN_APP_WORD_LENGTH and word not in ENGLISH_STOP_WORDS:
                    patterns.add(f"{word}*")
    return frozenset(patterns)


def _is_category(token: str, prefix: str) -> bool:
    return all(unicodedata.category(ch).startswith(prefix) for ch in token)


class StopwordMatcher:
    """Case-insensitive matcher over exact words and glob patterns."""

    def __init__(self, stopwords: Iterable[str]):
        words = [w.lower() for w in stopwords]
        self.exact = frozenset(w for w in words if not any(ch in w for ch in '*?['))
        globs = [w for w in words if w not in self.exact]
        self.pattern = re.compile('|'.join(fnmatch.translate(g) for g in globs)) if globs else None

    def __call__(self, token: str) -> bool:
        token = token.lower()
        if token in self.exact:
            return True
        return self.pattern is not None and self.pattern.match(token) is not None


class TextNormalizer:
    """
    Normalize review text into feature tokens.

    Token order within a document is kept so n-grams are contiguous.
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()
        self._is_stopword = StopwordMatcher(self.config.stopwords)

        if self.config.stemmer is not None:
            self._stem = self.config.stemmer
        elif self.config.stem:
            self._stem = SnowballStemmer('english').stem
        else:
            self._stem = None

    def iter_tokens(self, text: str) -> Iterator[str]:
        """Yield normalized unigram tokens of one document."""
        cfg = self.config
        for token in TOKEN_PATTERN.findall((text or '').lower()):
            if cfg.remove_punct and _is_category(token, 'P'):
                continue
            if cfg.remove_symbols and _is_category(token, 'S'):
                continue
            if cfg.remove_numbers:
                token = NUMBER_PATTERN.sub('', token)
            token = HANDLE_PATTERN.sub('', token)
            if not token or self._is_stopword(token):
                continue
            if cfg.stem and self._stem is not None:
                token = self._stem(token)
            if token:
                yield token

    def normalize(self, text: str) -> List[str]:
        """Normalized feature tokens of one document (n-grams when configured)."""
        tokens = list(self.iter_tokens(text))
        low, high = self.config.ngram_range
        if high == 1:
            return tokens
        return make_ngrams(tokens, low, high, self.config.concatenator)


def make_ngrams(tokens: Sequence[str], low: int, high: int, concatenator: str = '_') -> List[str]:
    """All contiguous n-grams for n in [low, high], shorter n first."""
    ngrams = []
    for n in range(low, high + 1):
        for start in range(len(tokens) - n + 1):
            ngrams.append(concatenator.join(tokens[start:start + n]))
    return ngrams


class TokenizedCorpus:
    """
    Lazy, restartable token view of a list of texts.

    Every iteration re-normalizes the texts, so the corpus can be consumed
    more than once without holding all token lists in memory.
    """

    def __init__(self, texts: Sequence[str], normalizer: TextNormalizer,
                 docnames: Optional[Sequence[str]] = None):
        self.texts = list(texts)
        self.normalizer = normalizer
        if docnames is None:
            docnames = [f"text{i + 1}" for i in range(len(self.texts))]
        if len(docnames) != len(self.texts):
            raise ValueError("docnames must align with texts")
        self.docnames = [str(d) for d in docnames]

    def __iter__(self) -> Iterator[List[str]]:
        for text in self.texts:
            yield self.normalizer.normalize(text)

    def __len__(self) -> int:
        return len(self.texts)

    def token_count(self) -> int:
        return sum(len(tokens) for tokens in self)
