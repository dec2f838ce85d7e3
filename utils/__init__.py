"""Logging, scenario loading and built-in presets."""
