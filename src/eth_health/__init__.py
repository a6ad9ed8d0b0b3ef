"""Ethereum node health checker - block lag monitoring with pluggable alerts."""

__version__ = "0.1.0"
