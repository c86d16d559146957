"""Concurrent FIFO queue algorithms and a benchmark harness for them."""

__version__ = "0.1.0"