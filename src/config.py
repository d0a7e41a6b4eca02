"""
Global Configuration for the App Review Analysis pipeline

This file contains all hyperparameters and settings used across the project.
Centralizing configuration ensures consistency and reproducibility.

Usage:
    from config import DATA_PATHS, NORMALIZE_CONFIG, TRIM_CONFIG, SPLIT_CONFIG

    splitter = DocumentSplitter(**SPLIT_CONFIG)
    model = train_naive_bayes(dfm, labels, **NAIVE_BAYES_CONFIG)
"""

import os

# ============================================================================
# DATA PATHS - UNIFIED DATA SOURCES FOR ALL PHASES
# ============================================================================

DATA_PATHS = {
    # Raw data
    'raw_reviews': 'data/raw/app_reviews.csv',

    # Processed data - ALL ANALYSIS PHASES USE THIS FILE
    'reviews_clean': 'data/processed/reviews_clean.csv',
    'cleaning_summary': 'data/processed/cleaning_summary.json',

    # External assets
    'emotion_lexicon': 'data/lexicon/NRC-Emotion-Lexicon-Wordlevel-v0.92.txt',

    # Phase outputs
    'text_analysis': 'src/data_processing/text_analysis',
    'classifier': 'src/models/rating_classifier',
    'docs': 'docs',
}

# ============================================================================
# GLOBAL SETTINGS
# ============================================================================

RANDOM_STATE = 42

LOGGING_CONFIG = {
    'level': 'INFO',
    'format': '%(asctime)s - %(levelname)s - %(message)s',
    'log_file': 'logs/pipeline.log',
}


def read_sample_size(raw):
    """Parse a SAMPLE_SIZE value; blank, non-numeric or 0 means no cap."""
    raw = (raw or '').strip()
    if not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw) or None


# Optional row cap for quick runs, e.g. SAMPLE_SIZE=5000 python main.py
SAMPLE_SIZE = read_sample_size(os.environ.get('SAMPLE_SIZE', ''))

# ============================================================================
# RECORD LOADER
# ============================================================================

LOADER_CONFIG = {
    'required_columns': ['app', 'content', 'reviewCreatedVersion', 'score'],
    'min_score': 1,
    'max_score': 5,
}

# ============================================================================
# LABELS - BINARIZED RATING
# ============================================================================

LABEL_CONFIG = {
    'high_threshold': 4,         # score >= 4 -> 'high'
    'label_order': ['high', 'low'],
    'positive_label': 'high',
}

# ============================================================================
# TEXT NORMALIZATION
# ============================================================================

NORMALIZE_CONFIG = {
    'remove_punct': True,
    'remove_symbols': True,
    'remove_numbers': True,
    'stem': True,
    'ngram_range': (1, 1),
    'concatenator': '_',
}

# Lexicon lookups match surface forms, so emotion scoring skips stemming
EMOTION_NORMALIZE_CONFIG = dict(NORMALIZE_CONFIG, stem=False)

BIGRAM_NORMALIZE_CONFIG = dict(NORMALIZE_CONFIG, ngram_range=(2, 2))

# Extra stopword patterns on top of English stopwords and app names
EXTRA_STOPWORDS = ['app', 'apps']

# ============================================================================
# DOCUMENT-FEATURE MATRIX
# ============================================================================

TRIM_CONFIG = {
    'min_termfreq': 5,
    'min_docfreq': 2,
}

TFIDF_CONFIG = {
    'scheme_tf': 'prop',
    'base': 10,
}

# ============================================================================
# SPLIT CONFIGURATION
# ============================================================================

SPLIT_CONFIG = {
    'split_type': 'bernoulli',   # 'bernoulli' or 'random'
    'test_size': 0.2,
    'random_state': RANDOM_STATE,
}

# ============================================================================
# CLASSIFIER
# ============================================================================

NAIVE_BAYES_CONFIG = {
    'smooth': 1.0,
    'prior': 'docfreq',          # 'docfreq', 'uniform' or 'termfreq'
}

BOOTSTRAP_CONFIG = {
    'n_iterations': 1000,
    'confidence_level': 0.95,
}

# ============================================================================
# LEXICON
# ============================================================================

LEXICON_CONFIG = {
    'categories': ['anger', 'anticipation', 'disgust', 'fear',
                   'joy', 'sadness', 'surprise', 'trust'],
    'polarity_categories': ['positive', 'negative'],
}

# ============================================================================
# REPORTING
# ============================================================================

REPORT_CONFIG = {
    'top_n': 20,
    'wordcloud_max_words': 100,
    'dpi': 300,
}
