"""Text normalization, document-feature matrices and lexicon scoring."""
