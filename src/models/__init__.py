"""Rating classifier models and pipeline."""
