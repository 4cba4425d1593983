"""Parallel per-file command runner."""

__version__ = "0.1.0"
