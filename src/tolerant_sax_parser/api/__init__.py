"""Public API for the tolerant SAX parser.

Level 1 functions for one-shot use; ``SaxParser`` remains available from
``tolerant_sax_parser.tokenization`` for reuse and fine-grained callbacks.
"""

from .parser import (
    BLOCK_TAGS,
    SKIPPED_TEXT_TAGS,
    EventRecorder,
    TextExtractor,
    collect_events,
    extract_text,
    parse,
    parse_file,
)

__all__ = [
    "BLOCK_TAGS",
    "SKIPPED_TEXT_TAGS",
    "EventRecorder",
    "TextExtractor",
    "collect_events",
    "extract_text",
    "parse",
    "parse_file",
]
