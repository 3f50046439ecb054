"""Vertical defaults (benchmarks) shared by every platform."""
