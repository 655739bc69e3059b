"""Descriptor tables, printf dialect, C-string routines, text console and heap models."""

__version__ = "0.1.0"