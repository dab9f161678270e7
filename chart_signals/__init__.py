"""Indicator alignment and signal derivation for stock charts."""

__version__ = "0.1.0"
