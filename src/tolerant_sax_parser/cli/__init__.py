"""Command-line interface module for the tolerant SAX parser.

This module provides the ``tolerant-sax`` tool for printing event streams
and readable text of markup files.
"""

from .main import main

__all__ = ["main"]
