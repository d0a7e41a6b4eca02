"""
Rating Classifier: predict a binarized star rating (high/low) from review text.

This module implements:
1. Review loading and rating binarization
2. Text normalization and document-feature matrix construction with trimming
3. Seeded Bernoulli (or stratified) train/test split
4. Multinomial Naive Bayes training and prediction
5. Evaluation: confusion matrix, precision, recall, accuracy, F1
6. Comparison with a majority-class baseline (bootstrap CI + McNemar)
7. Feature inspection and visualizations
"""

import json
import logging
import pickle
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from config import (BOOTSTRAP_CONFIG, DATA_PATHS, EXTRA_STOPWORDS, LABEL_CONFIG,
                    NAIVE_BAYES_CONFIG, NORMALIZE_CONFIG, RANDOM_STATE, REPORT_CONFIG,
                    SPLIT_CONFIG, TRIM_CONFIG)
from data_processing.review_preprocessing import binarize_rating
from evaluation.metrics import evaluate_predictions, majority_baseline
from evaluation.statistical_tests import StatisticalTester
from feature_engineering.dfm import build_dfm, trim_dfm
from feature_engineering.normalizer import (NormalizerConfig, TextNormalizer,
                                            TokenizedCorpus, stopwords_for_apps)
from models.naive_bayes import train_naive_bayes
from reporting.plots import ReportPlotter
from utils.split_utils import DocumentSplitter
from utils.validation import (validate_dfm_quality, validate_label_quality,
                              validate_required_columns)

logger = logging.getLogger(__name__)


class RatingClassifierPipeline:
    """
    Complete Naive Bayes rating classifier pipeline.

    Pipeline Steps:
    1. Load reviews and derive high/low labels
    2. Build and trim the document-feature matrix
    3. Train-test split
    4. Train Naive Bayes
    5. Evaluate on the held-out documents and compare with the majority baseline
    6. Save summary, model and plots
    """

    def __init__(self,
                 data_path: str = DATA_PATHS['reviews_clean'],
                 output_path: str = DATA_PATHS['classifier'],
                 random_state: int = RANDOM_STATE,
                 split_type: str = SPLIT_CONFIG['split_type'],
                 test_size: float = SPLIT_CONFIG['test_size'],
                 normalize_config: Optional[Dict] = None,
                 trim_config: Optional[Dict] = None,
                 nb_config: Optional[Dict] = None,
                 make_plots: bool = True,
                 n_bootstrap: int = BOOTSTRAP_CONFIG['n_iterations']):
        """
        Initialize the classifier pipeline.

        Args:
            data_path: Path to the cleaned review CSV
            output_path: Directory to save outputs
            random_state: Seed for the train/test split and bootstrap
            split_type: 'bernoulli' or 'random'
            test_size: Test share of documents
            normalize_config: Overrides for NORMALIZE_CONFIG
            trim_config: Overrides for TRIM_CONFIG
            nb_config: Overrides for NAIVE_BAYES_CONFIG
            make_plots: Write PNG plots
            n_bootstrap: Bootstrap iterations for the baseline comparison
        """
        self.data_path = Path(data_path)
        self.output_path = Path(output_path)
        self.output_path.mkdir(parents=True, exist_ok=True)
        self.models_path = self.output_path / "saved_models"
        self.models_path.mkdir(exist_ok=True)

        self.random_state = random_state
        self.splitter = DocumentSplitter(split_type=split_type, test_size=test_size,
                                         random_state=random_state)
        self.normalize_config = dict(NORMALIZE_CONFIG, **(normalize_config or {}))
        self.trim_config = dict(TRIM_CONFIG if trim_config is None else trim_config)
        self.nb_config = dict(NAIVE_BAYES_CONFIG, **(nb_config or {}))
        self.make_plots = make_plots
        self.n_bootstrap = n_bootstrap

        self.label_order = LABEL_CONFIG['label_order']
        self.positive_label = LABEL_CONFIG['positive_label']

        self.plotter = ReportPlotter(self.output_path / "plots", dpi=REPORT_CONFIG['dpi'])

        # Data containers
        self.reviews = None
        self.labels = None
        self.dfm = None
        self.train_idx = None
        self.test_idx = None

        # Model results
        self.model = None
        self.results = {}

    def load_data(self):
        """Load cleaned reviews and derive labels."""
        self.reviews = pd.read_csv(self.data_path, keep_default_na=False,
                                   dtype={'app': str, 'content': str})
        validate_required_columns(self.reviews, ['app', 'content', 'version', 'score'])
        self.labels = np.array([binarize_rating(int(s), LABEL_CONFIG['high_threshold'])
                                for s in self.reviews['score']], dtype=object)
        self.results['label_counts'] = validate_label_quality(self.labels, self.label_order)
        logger.info(f"Loaded {len(self.reviews):,} reviews: {self.results['label_counts']}")

    def build_features(self):
        """Normalize text, count tokens and trim rare terms."""
        stopwords = (frozenset(ENGLISH_STOP_WORDS)
                     | stopwords_for_apps(self.reviews['app'].unique())
                     | frozenset(EXTRA_STOPWORDS))
        normalizer = TextNormalizer(NormalizerConfig(stopwords=stopwords, **self.normalize_config))
        corpus = TokenizedCorpus(self.reviews['content'].tolist(), normalizer,
                                 docnames=[f"review{i + 1}" for i in range(len(self.reviews))])

        dfm = build_dfm(corpus, docnames=corpus.docnames,
                        docvars=self.reviews[['app', 'version', 'score']])
        self.dfm = trim_dfm(dfm, **self.trim_config)
        self.results['dfm'] = validate_dfm_quality(self.dfm)
        logger.info(f"  Features: {dfm.nfeat:,} -> {self.dfm.nfeat:,} after trimming")

    def prepare_train_test_split(self):
        """Split documents with the configured seeded splitter."""
        self.train_idx, self.test_idx = self.splitter.split(self.dfm.ndoc, self.labels)
        self.results['split'] = {
            'split_type': self.splitter.split_type,
            'random_state': self.random_state,
            'n_train': int(len(self.train_idx)),
            'n_test': int(len(self.test_idx)),
        }
        logger.info(f"  Train: {len(self.train_idx):,}, Test: {len(self.test_idx):,}")

    def train_model(self):
        """Train Naive Bayes on the training rows."""
        train_dfm = self.dfm.subset(self.train_idx)
        self.model = train_naive_bayes(train_dfm, self.labels[self.train_idx],
                                       classes=self.label_order, **self.nb_config)

        with open(self.models_path / "naive_bayes.pkl", 'wb') as f:
            pickle.dump(self.model, f)

    def evaluate_model(self):
        """Evaluate on held-out rows and compare with the majority baseline."""
        test_dfm = self.dfm.subset(self.test_idx)
        y_test = list(self.labels[self.test_idx])
        y_pred = self.model.predict(test_dfm)

        self.results['naive_bayes'] = evaluate_predictions(
            y_pred, y_test, self.label_order, self.positive_label)

        majority, y_base = majority_baseline(self.labels[self.train_idx], len(y_test))
        self.results['majority_baseline'] = evaluate_predictions(
            y_base, y_test, self.label_order, self.positive_label)
        self.results['majority_baseline']['majority_label'] = majority

        tester = StatisticalTester(self.label_order, self.positive_label, self.random_state)
        self.results['significance'] = {
            'bootstrap_accuracy': tester.bootstrap_confidence_interval(
                y_test, y_base, y_pred, metric='accuracy',
                n_iterations=self.n_bootstrap,
                confidence_level=BOOTSTRAP_CONFIG['confidence_level']),
            'mcnemar': tester.mcnemar_test(y_test, y_base, y_pred),
        }

        self.results['predictions'] = pd.DataFrame({
            'docname': test_dfm.docnames,
            'app': test_dfm.docvars['app'].values,
            'actual': y_test,
            'predicted': y_pred,
        })

        nb = self.results['naive_bayes']
        logger.info(f"  Naive Bayes: accuracy={nb['accuracy']:.4f} "
                    f"precision={nb['precision']:.4f} recall={nb['recall']:.4f}")
        logger.info(f"  Majority baseline ({majority}): "
                    f"accuracy={self.results['majority_baseline']['accuracy']:.4f}")

    def inspect_features(self, n: int = REPORT_CONFIG['top_n']):
        """Top terms per class by P(w|c) and P(c|w)."""
        self.results['top_features'] = self.model.top_features(n, kind='conditional')
        self.results['top_features_posterior'] = self.model.top_features(n, kind='posterior')

    def generate_visualizations(self):
        self.plotter.plot_confusion_matrix(self.results['naive_bayes']['confusion_matrix'])
        self.plotter.plot_top_features(self.results['top_features'], 'top_features_conditional.png')
        self.plotter.plot_top_features(self.results['top_features_posterior'],
                                       'top_features_posterior.png')

    def save_results(self) -> Path:
        """Compact JSON summary for final report aggregation."""
        def metric_block(metrics: Dict) -> Dict:
            block = {k: (None if isinstance(v, float) and np.isnan(v) else v)
                     for k, v in metrics.items() if k != 'confusion_matrix'}
            block['confusion_matrix'] = metrics['confusion_matrix'].to_dict()
            return block

        summary = {
            'label_counts': self.results['label_counts'],
            'dfm': self.results['dfm'],
            'split': self.results['split'],
            'model': self.model.summary(),
            'naive_bayes': metric_block(self.results['naive_bayes']),
            'majority_baseline': metric_block(self.results['majority_baseline']),
            'significance': self.results['significance'],
            'top_features': {cls: frame.set_index('feature')['probability'].round(6).to_dict()
                             for cls, frame in self.results['top_features'].items()},
        }
        summary_path = self.output_path / "classifier_results_summary.json"
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2, default=_json_default)

        self.results['predictions'].to_csv(self.output_path / "test_predictions.csv", index=False)
        return summary_path

    def run_pipeline(self) -> Dict:
        """Execute complete classifier pipeline"""
        logger.info("=" * 70)
        logger.info("RATING CLASSIFIER - NAIVE BAYES")
        logger.info("=" * 70)

        # Step 1: Load data
        self.load_data()

        # Step 2: Document-feature matrix
        self.build_features()

        # Step 3: Train-test split
        self.prepare_train_test_split()

        # Step 4: Train model
        self.train_model()

        # Step 5: Evaluate model
        self.evaluate_model()

        # Step 6: Feature inspection
        self.inspect_features()

        # Step 7: Visualizations and summary
        if self.make_plots:
            self.generate_visualizations()
        summary_path = self.save_results()
        logger.info(f"[OK] Classifier summary: {summary_path}")
        return self.results


def _json_default(value):
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main():
    """Run Phase 3: Rating classifier."""
    pipeline = RatingClassifierPipeline()
    pipeline.run_pipeline()
