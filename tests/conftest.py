import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from feature_engineering.lexicon import Lexicon
from feature_engineering.normalizer import NormalizerConfig, TextNormalizer


HIGH_TEXTS = [
    "Love the new matching, great design",
    "Great app, love it",
    "Smooth and fast, love the design",
    "Great people and fast replies",
    "Love how easy it is to chat",
]

LOW_TEXTS = [
    "Hate the constant crash after update",
    "Crash on login, terrible support",
    "Terrible bugs and slow loading",
]


@pytest.fixture
def plain_normalizer():
    """Unstemmed normalizer with the default English stopwords."""
    return TextNormalizer(NormalizerConfig(stem=False))


@pytest.fixture
def raw_reviews_df():
    """Raw loader input with one row per drop reason."""
    return pd.DataFrame({
        'app': ['Tinder', 'Tinder', 'Bumble', 'Bumble', 'Hinge', 'Hinge', 'Tinder'],
        'content': ['Love it', 'Great matches', 'Café dates are great',
                    'Crashes all the time', '', 'Bad', 'Fine'],
        'reviewCreatedVersion': ['13.0.2', '', '5.1', 'beta', '7', '8.2', '12.4'],
        'score': ['5', '4', '5', '1', '3', '9', '2'],
    })


@pytest.fixture
def clean_reviews_csv(tmp_path):
    """A cleaned review table covering two apps, two versions each."""
    rows = []
    for i in range(30):
        app = 'Tinder' if i % 2 == 0 else 'Bumble'
        version = 12 + (i % 4) // 2
        if i % 3 == 2:
            content, score = LOW_TEXTS[i % len(LOW_TEXTS)], 1 + i % 2
        else:
            content, score = HIGH_TEXTS[i % len(HIGH_TEXTS)], 4 + i % 2
        rows.append({'app': app, 'content': content, 'version': version, 'score': score})

    path = tmp_path / "reviews_clean.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def small_lexicon():
    return Lexicon.from_category_map({
        'joy': ['love', 'great', 'smooth'],
        'anger': ['hate', 'terrible', 'crash'],
        'trust': ['great', 'support'],
    })


@pytest.fixture
def nrc_lexicon_file(tmp_path):
    lines = [
        "love\tjoy\t1",
        "love\tanger\t0",
        "love\tpositive\t1",
        "great\tjoy\t1",
        "great\ttrust\t1",
        "great\tpositive\t1",
        "hate\tanger\t1",
        "hate\tnegative\t1",
        "terrible\tanger\t1",
        "terrible\tfear\t1",
        "terrible\tnegative\t1",
        "crash\tfear\t1",
        "support\ttrust\t1",
    ]
    path = tmp_path / "nrc.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
