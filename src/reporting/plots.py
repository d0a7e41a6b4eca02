"""
Plotting for the review analysis outputs.

Every method writes one PNG under the plot directory and returns its path.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from wordcloud import WordCloud

logger = logging.getLogger(__name__)

# Configure plotting style
plt.style.use('seaborn-v0_8-darkgrid')
sns.set_palette("husl")


class ReportPlotter:
    """Render word clouds, trend lines and classifier diagnostics."""

    def __init__(self, plot_path: str, dpi: int = 300, max_words: int = 100):
        self.plot_path = Path(plot_path)
        self.plot_path.mkdir(parents=True, exist_ok=True)
        self.dpi = dpi
        self.max_words = max_words

    def _save(self, filename: str) -> Path:
        path = self.plot_path / filename
        plt.tight_layout()
        plt.savefig(path, dpi=self.dpi, bbox_inches='tight')
        plt.close()
        return path

    def plot_word_cloud(self, frequencies: pd.Series, filename: str,
                        title: Optional[str] = None) -> Optional[Path]:
        """Word cloud sized by a term -> weight series. Skipped if no positive weights."""
        frequencies = frequencies[frequencies > 0]
        if frequencies.empty:
            logger.warning(f"[WARN] No terms to draw for {filename}, skipping")
            return None

        cloud = WordCloud(background_color="white", width=800, height=400,
                          max_words=self.max_words)
        cloud.generate_from_frequencies({str(k): float(v) for k, v in frequencies.items()})

        plt.figure(figsize=(10, 5))
        plt.imshow(cloud, interpolation='bilinear')
        plt.axis("off")
        if title:
            plt.title(title, fontsize=14, fontweight='bold')
        return self._save(filename)

    def plot_group_word_clouds(self, top_terms: Dict[str, pd.Series],
                               prefix: str = 'wordcloud') -> Dict[str, Path]:
        """One word cloud per group (e.g. per app)."""
        paths = {}
        for group, terms in top_terms.items():
            safe = ''.join(ch if ch.isalnum() else '_' for ch in str(group).lower())
            path = self.plot_word_cloud(terms, f"{prefix}_{safe}.png", title=str(group))
            if path is not None:
                paths[group] = path
        return paths

    def plot_category_trend(self, long_df: pd.DataFrame, x: str, filename: str,
                            title: str, hue: str = 'category', y: str = 'score') -> Path:
        """Line chart of category scores across an ordered key such as version."""
        fig, ax = plt.subplots(figsize=(12, 6))
        sns.lineplot(data=long_df, x=x, y=y, hue=hue, marker='o', ax=ax)
        ax.set_xlabel(x.replace('_', ' ').title(), fontsize=11, fontweight='bold')
        ax.set_ylabel(y.replace('_', ' ').title(), fontsize=11, fontweight='bold')
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.legend(bbox_to_anchor=(1.02, 1), loc='upper left')
        return self._save(filename)

    def plot_confusion_matrix(self, matrix: pd.DataFrame, filename: str = 'confusion_matrix.png',
                              title: str = 'Confusion Matrix - Naive Bayes') -> Path:
        """Heatmap with predicted labels on rows, true labels on columns."""
        plt.figure(figsize=(7, 6))
        sns.heatmap(matrix, annot=True, fmt='d', cmap='Blues', cbar_kws={'label': 'Count'})
        plt.title(title, fontsize=14, pad=15)
        plt.ylabel('Predicted Label', fontsize=11)
        plt.xlabel('True Label', fontsize=11)
        return self._save(filename)

    def plot_top_features(self, top_features: Dict[str, pd.DataFrame],
                          filename: str = 'top_features.png',
                          value_col: str = 'probability') -> Path:
        """Horizontal bars of the top terms per class."""
        n_classes = len(top_features)
        fig, axes = plt.subplots(1, n_classes, figsize=(8 * n_classes, 8), squeeze=False)
        fig.suptitle('Most Probable Terms per Class', fontsize=16, fontweight='bold')

        for ax, (cls, frame) in zip(axes[0], top_features.items()):
            plot_data = frame.iloc[::-1]
            colors = plt.cm.viridis(np.linspace(0.3, 0.9, len(plot_data)))
            ax.barh(range(len(plot_data)), plot_data[value_col], color=colors, edgecolor='black')
            ax.set_yticks(range(len(plot_data)))
            ax.set_yticklabels(plot_data['feature'], fontsize=9)
            ax.set_xlabel(value_col.title(), fontsize=11, fontweight='bold')
            ax.set_title(f"Class: {cls}", fontsize=12, fontweight='bold')
            ax.grid(axis='x', alpha=0.3)
        return self._save(filename)

    def plot_rating_distribution(self, reviews: pd.DataFrame,
                                 filename: str = 'rating_distribution.png') -> Path:
        """Star-score counts per app."""
        plt.figure(figsize=(10, 6))
        sns.countplot(data=reviews, x='score', hue='app')
        plt.title('Rating Distribution by App', fontsize=14, fontweight='bold')
        plt.xlabel('Score')
        plt.ylabel('Reviews')
        return self._save(filename)
