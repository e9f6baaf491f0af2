"""Utility functions for the display hub."""

from .fetcher import fetch_json, fetch_text

__all__ = [
    'fetch_json',
    'fetch_text',
]
