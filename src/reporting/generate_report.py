"""
Analysis Report Generator

This module aggregates results from all pipeline phases and generates
a single markdown report.

Inputs:
- cleaning_summary.json (preprocessing)
- text_analysis_summary.json (word frequencies, TF-IDF, emotions)
- classifier_results_summary.json (Naive Bayes evaluation)
- Plots from all phases

Outputs:
- analysis_report.md
- figures/: all figures collected for the report

Report Structure:
1. Data
2. What Users Talk About
3. Emotion and Sentiment
4. Rating Classifier
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from config import DATA_PATHS

logger = logging.getLogger(__name__)


class AnalysisReportGenerator:
    """
    Generate the analysis report by aggregating all phase results.
    """

    def __init__(self,
                 output_path: str = DATA_PATHS['docs'],
                 figures_path: Optional[str] = None,
                 phase_paths: Optional[Dict[str, str]] = None):
        """
        Initialize report generator.

        Args:
            output_path: Directory to save the report
            figures_path: Directory to collect all figures (default: <output>/figures)
            phase_paths: Override locations of phase summaries
        """
        self.output_path = Path(output_path)
        self.output_path.mkdir(parents=True, exist_ok=True)
        self.figures_path = Path(figures_path) if figures_path else self.output_path / "figures"
        self.figures_path.mkdir(parents=True, exist_ok=True)

        paths = {
            'preprocessing': DATA_PATHS['cleaning_summary'],
            'text_analysis': str(Path(DATA_PATHS['text_analysis']) / 'text_analysis_summary.json'),
            'classifier': str(Path(DATA_PATHS['classifier']) / 'classifier_results_summary.json'),
        }
        paths.update(phase_paths or {})
        self.phase_paths = {k: Path(v) for k, v in paths.items()}

        self.results = {}

    def collect_results(self):
        """Collect results from all phases."""
        for phase, path in self.phase_paths.items():
            if path.exists():
                with open(path, 'r', encoding='utf-8') as f:
                    self.results[phase] = json.load(f)
                logger.info(f"[OK] Loaded {phase} results")
            else:
                logger.warning(f"[WARN] Missing {phase} results: {path}")

    def collect_figures(self) -> List[Path]:
        """Copy every phase plot into the report figures directory."""
        copied = []
        for phase, path in self.phase_paths.items():
            plot_dir = path.parent / "plots"
            if not plot_dir.exists():
                continue
            for figure in sorted(plot_dir.glob("*.png")):
                target = self.figures_path / f"{phase}_{figure.name}"
                shutil.copy(figure, target)
                copied.append(target)
        return copied

    @staticmethod
    def _fmt(value, digits: int = 4) -> str:
        if value is None:
            return "n/a"
        if isinstance(value, float):
            return f"{value:.{digits}f}"
        return str(value)

    def _data_section(self) -> List[str]:
        lines = ["## 1. Data", ""]
        prep = self.results.get('preprocessing')
        if not prep:
            return lines + ["_Preprocessing results not available._", ""]
        lines.append(f"- **Input rows**: {prep.get('input_rows', 0):,}")
        lines.append(f"- **Final rows**: {prep.get('final_rows', 0):,}")
        lines.append(f"- Dropped: missing version {prep.get('missing_version', 0):,}, "
                     f"unparsable version {prep.get('unparsable_version', 0):,}, "
                     f"non-ASCII {prep.get('non_ascii', 0):,}, "
                     f"invalid score {prep.get('invalid_score', 0):,}")
        lines.append("")
        return lines

    def _text_section(self) -> List[str]:
        lines = ["## 2. What Users Talk About", ""]
        text = self.results.get('text_analysis')
        if not text:
            return lines + ["_Text analysis results not available._", ""]

        for title, key in [("Top words by app (share of words)", 'top_words_by_app'),
                           ("Distinctive words by app (TF-IDF)", 'tfidf_by_app')]:
            lines.append(f"### {title}")
            lines.append("")
            for app, terms in text.get(key, {}).items():
                top = ", ".join(list(terms)[:10])
                lines.append(f"- **{app}**: {top}")
            lines.append("")

        bigrams = text.get('top_bigrams', {})
        if bigrams:
            lines.append("### Top bigrams")
            lines.append("")
            lines.append(", ".join(f"{b.replace('_', ' ')} ({int(c)})" for b, c in bigrams.items()))
            lines.append("")
        return lines

    def _emotion_section(self) -> List[str]:
        lines = ["## 3. Emotion and Sentiment", ""]
        text = self.results.get('text_analysis') or {}
        emotions = text.get('emotion_overall')
        if not emotions:
            return lines + ["_Emotion scores not available (lexicon missing)._", ""]
        lines.append("| Emotion | Mean share of words |")
        lines.append("|---|---|")
        for category, score in sorted(emotions.items(), key=lambda kv: -kv[1]):
            lines.append(f"| {category} | {score:.4f} |")
        lines.append("")
        polarity = text.get('lexicon_polarity_overall')
        if polarity:
            lines.append("Lexicon polarity: " + ", ".join(
                f"{category} {score:.4f}" for category, score in sorted(polarity.items())))
            lines.append("")
        return lines

    def _classifier_section(self) -> List[str]:
        lines = ["## 4. Rating Classifier", ""]
        clf = self.results.get('classifier')
        if not clf:
            return lines + ["_Classifier results not available._", ""]

        split = clf.get('split', {})
        lines.append(f"Multinomial Naive Bayes on {clf['dfm']['nfeat']:,} terms; "
                     f"{split.get('n_train', 0):,} training and {split.get('n_test', 0):,} "
                     f"test reviews ({split.get('split_type')} split, seed {split.get('random_state')}).")
        lines.append("")
        lines.append("| Model | Accuracy | Precision | Recall | F1 |")
        lines.append("|---|---|---|---|---|")
        for name, key in [("Naive Bayes", 'naive_bayes'), ("Majority baseline", 'majority_baseline')]:
            m = clf.get(key, {})
            lines.append(f"| {name} | {self._fmt(m.get('accuracy'))} | {self._fmt(m.get('precision'))} "
                         f"| {self._fmt(m.get('recall'))} | {self._fmt(m.get('f1_score'))} |")
        lines.append("")

        boot = clf.get('significance', {}).get('bootstrap_accuracy', {})
        if boot:
            lines.append(f"Accuracy gain over baseline: {self._fmt(boot.get('mean_diff'))} "
                         f"(95% CI {self._fmt(boot.get('ci_low'))} to {self._fmt(boot.get('ci_high'))}, "
                         f"significant: {boot.get('is_significant')})")
            lines.append("")

        for cls, terms in clf.get('top_features', {}).items():
            lines.append(f"- **{cls}**: {', '.join(list(terms)[:10])}")
        lines.append("")
        return lines

    def generate_markdown_report(self) -> Path:
        report_lines = ["# App Review Analysis Report", "---", ""]
        report_lines += self._data_section()
        report_lines += self._text_section()
        report_lines += self._emotion_section()
        report_lines += self._classifier_section()

        report_path = self.output_path / "analysis_report.md"
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(report_lines))
        return report_path

    def run_pipeline(self) -> Path:
        """Collect results and figures, then write the report."""
        self.collect_results()
        figures = self.collect_figures()
        report_path = self.generate_markdown_report()
        logger.info(f"[OK] Report written to {report_path} ({len(figures)} figures)")
        return report_path


def main():
    """Run Phase 4: Report generation."""
    generator = AnalysisReportGenerator()
    generator.run_pipeline()
