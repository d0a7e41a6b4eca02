"""Plots and the aggregated analysis report."""
