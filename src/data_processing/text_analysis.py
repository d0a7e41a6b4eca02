"""
Text Analysis: word frequencies, distinctive terms and emotion/sentiment
trends over the cleaned review table, with plots and a JSON summary.

"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from config import (BIGRAM_NORMALIZE_CONFIG, DATA_PATHS, EMOTION_NORMALIZE_CONFIG,
                    EXTRA_STOPWORDS, LABEL_CONFIG, LEXICON_CONFIG, NORMALIZE_CONFIG,
                    REPORT_CONFIG, TFIDF_CONFIG, TRIM_CONFIG)
from data_processing.review_preprocessing import binarize_rating
from feature_engineering.dfm import (DocumentFeatureMatrix, build_dfm, group_dfm,
                                     tfidf_dfm, trim_dfm, weight_dfm)
from feature_engineering.lexicon import Lexicon, score_lexicon, scores_to_long
from feature_engineering.normalizer import (NormalizerConfig, TextNormalizer,
                                            TokenizedCorpus, stopwords_for_apps)
from reporting.plots import ReportPlotter
from utils.errors import EmptyVocabularyError
from utils.validation import validate_dfm_quality, validate_required_columns

logger = logging.getLogger(__name__)


class ReviewTextAnalyzer:
    """
    Exploratory text analysis
    Focus: what users of each app talk about, and how the tone moves across versions
    """

    def __init__(self,
                 data_path: str = DATA_PATHS['reviews_clean'],
                 output_path: str = DATA_PATHS['text_analysis'],
                 lexicon_path: Optional[str] = DATA_PATHS['emotion_lexicon'],
                 top_n: int = REPORT_CONFIG['top_n'],
                 trim_config: Optional[Dict] = None,
                 make_plots: bool = True):
        self.data_path = Path(data_path)
        self.output_path = Path(output_path)
        self.output_path.mkdir(parents=True, exist_ok=True)
        self.lexicon_path = Path(lexicon_path) if lexicon_path else None
        self.top_n = top_n
        self.trim_config = dict(TRIM_CONFIG if trim_config is None else trim_config)
        self.make_plots = make_plots

        self.plotter = ReportPlotter(self.output_path / "plots",
                                     dpi=REPORT_CONFIG['dpi'],
                                     max_words=REPORT_CONFIG['wordcloud_max_words'])

        self.reviews = None
        self.stopwords = None
        self.results = {}

    def load_data(self):
        """Load the cleaned review table."""
        self.reviews = pd.read_csv(self.data_path, keep_default_na=False,
                                   dtype={'app': str, 'content': str})
        validate_required_columns(self.reviews, ['app', 'content', 'version', 'score'])
        self.reviews['rating'] = self.reviews['score'].apply(
            lambda s: binarize_rating(int(s), LABEL_CONFIG['high_threshold']))

        self.stopwords = (frozenset(ENGLISH_STOP_WORDS)
                          | stopwords_for_apps(self.reviews['app'].unique())
                          | frozenset(EXTRA_STOPWORDS))
        logger.info(f"Loaded {len(self.reviews):,} reviews for "
                    f"{self.reviews['app'].nunique()} apps")

    def build_dfm(self, normalize_config: Dict) -> DocumentFeatureMatrix:
        """Normalize every review and count tokens; docvars carry app/version/score/rating."""
        normalizer = TextNormalizer(NormalizerConfig(stopwords=self.stopwords, **normalize_config))
        corpus = TokenizedCorpus(self.reviews['content'].tolist(), normalizer,
                                 docnames=[f"review{i + 1}" for i in range(len(self.reviews))])
        docvars = self.reviews[['app', 'version', 'score', 'rating']]
        return build_dfm(corpus, docnames=corpus.docnames, docvars=docvars)

    def word_frequencies_by_app(self, dfm: DocumentFeatureMatrix) -> Dict[str, pd.Series]:
        """Top terms per app: trim at document level, group by app, proportions."""
        trimmed = trim_dfm(dfm, **self.trim_config)
        by_app = weight_dfm(group_dfm(trimmed, 'app'), 'prop')
        return by_app.topfeatures_by_row(self.top_n)

    def distinctive_terms_by_app(self, dfm: DocumentFeatureMatrix) -> Dict[str, pd.Series]:
        """Top TF-IDF terms per app: the words that set one app's reviews apart."""
        trimmed = trim_dfm(dfm, **self.trim_config)
        by_app = tfidf_dfm(group_dfm(trimmed, 'app'), **TFIDF_CONFIG)
        return by_app.topfeatures_by_row(self.top_n)

    def top_bigrams(self) -> pd.Series:
        """Most frequent bigrams across all reviews."""
        try:
            bigram_dfm = self.build_dfm(BIGRAM_NORMALIZE_CONFIG)
        except EmptyVocabularyError:
            logger.warning("[WARN] No bigrams found, skipping")
            return pd.Series(dtype=float, name='frequency')
        return bigram_dfm.topfeatures(self.top_n)

    def _lexicon_by_version(self, lexicon: Lexicon, categories) -> pd.DataFrame:
        dfm = self.build_dfm(EMOTION_NORMALIZE_CONFIG)
        app_values = dfm.docvars['app']

        frames = []
        for app in sorted(app_values.unique()):
            app_dfm = dfm.subset((app_values == app).values)
            by_version = weight_dfm(group_dfm(app_dfm, 'version'), 'prop')
            scores = score_lexicon(by_version, lexicon, categories)
            scores.index = by_version.docvars['version'].astype(int).values
            long_df = scores_to_long(scores, id_name='version')
            long_df.insert(0, 'app', app)
            frames.append(long_df)
        return pd.concat(frames, ignore_index=True)

    def emotion_by_version(self, lexicon: Lexicon) -> pd.DataFrame:
        """
        Lexicon emotion scores per (app, version).

        Rows of one app are grouped by version, turned into proportions and
        scored, so each score is the share of a version's words tied to
        that emotion.
        """
        return self._lexicon_by_version(lexicon, LEXICON_CONFIG['categories'])

    def lexicon_polarity_by_version(self, lexicon: Lexicon) -> pd.DataFrame:
        """Share of positive and negative lexicon words per (app, version)."""
        return self._lexicon_by_version(lexicon, LEXICON_CONFIG['polarity_categories'])

    def polarity_by_version(self) -> pd.DataFrame:
        """Mean VADER compound score per (app, version)."""
        analyzer = SentimentIntensityAnalyzer()
        df = self.reviews[['app', 'version']].copy()
        df['compound'] = self.reviews['content'].apply(
            lambda t: analyzer.polarity_scores(str(t))['compound'] if t else 0.0)
        polarity = df.groupby(['app', 'version'], as_index=False).agg(
            compound=('compound', 'mean'), reviews=('compound', 'size'))
        return polarity.sort_values(['app', 'version']).reset_index(drop=True)

    def load_lexicon(self) -> Optional[Lexicon]:
        if self.lexicon_path is None or not self.lexicon_path.exists():
            logger.warning(f"[WARN] Emotion lexicon not found at {self.lexicon_path}; "
                           f"skipping emotion scoring")
            return None
        return Lexicon.from_nrc_file(self.lexicon_path)

    def generate_visualizations(self):
        """Word clouds per app, emotion and polarity trends by version."""
        self.plotter.plot_rating_distribution(self.reviews)
        self.plotter.plot_group_word_clouds(self.results['top_words_by_app'], prefix='wordcloud')
        self.plotter.plot_group_word_clouds(self.results['tfidf_by_app'], prefix='tfidf_cloud')

        emotions = self.results.get('emotion_by_version')
        if emotions is not None and not emotions.empty:
            for app, app_df in emotions.groupby('app'):
                safe = ''.join(ch if ch.isalnum() else '_' for ch in str(app).lower())
                self.plotter.plot_category_trend(app_df, x='version',
                                                 filename=f"emotion_by_version_{safe}.png",
                                                 title=f"Emotions by Version - {app}")

        polarity = self.results['polarity_by_version']
        if not polarity.empty:
            self.plotter.plot_category_trend(polarity, x='version', y='compound', hue='app',
                                             filename='polarity_by_version.png',
                                             title='Mean VADER Compound Score by Version')

    def save_results(self) -> Path:
        """Write CSV tables and a compact JSON summary for the final report."""
        summary = {
            'n_reviews': int(len(self.reviews)),
            'n_apps': int(self.reviews['app'].nunique()),
            'dfm': self.results['dfm_quality'],
            'top_words_by_app': {app: s.round(6).to_dict()
                                 for app, s in self.results['top_words_by_app'].items()},
            'tfidf_by_app': {app: s.round(6).to_dict()
                             for app, s in self.results['tfidf_by_app'].items()},
            'top_bigrams': self.results['top_bigrams'].to_dict(),
        }

        emotions = self.results.get('emotion_by_version')
        if emotions is not None:
            emotions.to_csv(self.output_path / "emotion_by_version.csv", index=False)
            summary['emotion_overall'] = (emotions.groupby('category')['score']
                                          .mean().round(6).to_dict())
        lexicon_polarity = self.results.get('lexicon_polarity_by_version')
        if lexicon_polarity is not None:
            lexicon_polarity.to_csv(self.output_path / "lexicon_polarity_by_version.csv", index=False)
            summary['lexicon_polarity_overall'] = (lexicon_polarity.groupby('category')['score']
                                                   .mean().round(6).to_dict())
        self.results['polarity_by_version'].to_csv(
            self.output_path / "polarity_by_version.csv", index=False)

        summary_path = self.output_path / "text_analysis_summary.json"
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2)
        return summary_path

    def run_pipeline(self) -> Dict:
        """Execute the complete text analysis"""
        logger.info("=" * 70)
        logger.info("TEXT ANALYSIS")
        logger.info("=" * 70)

        # Step 1: Load data
        self.load_data()

        # Step 2: Unigram DFM
        dfm = self.build_dfm(NORMALIZE_CONFIG)
        self.results['dfm_quality'] = validate_dfm_quality(dfm)
        logger.info(f"  Vocabulary: {dfm.nfeat:,} stemmed terms")

        # Step 3: Word frequencies and distinctive terms
        self.results['top_words_by_app'] = self.word_frequencies_by_app(dfm)
        self.results['tfidf_by_app'] = self.distinctive_terms_by_app(dfm)
        self.results['top_bigrams'] = self.top_bigrams()

        # Step 4: Emotion and polarity trends
        lexicon = self.load_lexicon()
        if lexicon is not None:
            self.results['emotion_by_version'] = self.emotion_by_version(lexicon)
            self.results['lexicon_polarity_by_version'] = self.lexicon_polarity_by_version(lexicon)
        self.results['polarity_by_version'] = self.polarity_by_version()

        # Step 5: Plots and outputs
        if self.make_plots:
            self.generate_visualizations()
        summary_path = self.save_results()
        logger.info(f"[OK] Text analysis summary: {summary_path}")
        return self.results


def main():
    """Run Phase 2: Text analysis."""
    analyzer = ReviewTextAnalyzer()
    analyzer.run_pipeline()
