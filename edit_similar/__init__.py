"""Suggest related pages that need attention right after an edit."""

__version__ = "0.1.0"
