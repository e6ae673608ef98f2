"""Resilient batch creation of DEX trading pairs."""

__version__ = "0.1.0"
