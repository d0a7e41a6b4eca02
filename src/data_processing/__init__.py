"""Review loading, cleaning and exploratory text analysis."""
