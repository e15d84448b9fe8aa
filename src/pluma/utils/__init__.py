"""Utility modules for pluma.

Provides:
- text: slugify, escape_html, split_lines for text processing
- hashing: hash_str for content fingerprinting
- logger: get_logger for logging
"""

from pluma.utils.hashing import hash_str
from pluma.utils.logger import get_logger
from pluma.utils.text import escape_html, slugify, split_lines

__all__ = [
    "escape_html",
    "get_logger",
    "hash_str",
    "slugify",
    "split_lines",
]
