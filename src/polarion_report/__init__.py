"""Polarion XML results reporter for pytest runs."""

__version__ = "0.1.0"
