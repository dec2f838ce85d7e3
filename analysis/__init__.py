"""Metrics, event log and algorithm comparison for simulation runs."""
