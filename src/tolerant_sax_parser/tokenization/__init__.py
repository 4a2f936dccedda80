"""Tokenization layer of the tolerant SAX parser.

This module turns markup into a stream of start-tag, end-tag and text
callbacks without building a tree and without stopping on malformed input.

Key Components:
    SaxParser: Parser state with three callback slots and a caller context
    SaxHandler: No-op base class for object-style consumers
    MarkupTokenizer: The single-pass scanning loop
    AttributeScanner: Extracts attributes from a start tag
    AttributeList: Bounded, ordered attribute pairs of one tag
"""

from .attributes import (
    AttributeList,
    AttributeScanner,
    find_attribute,
)
from .handlers import (
    Dispatch,
    ParseAction,
    SaxHandler,
)
from .parser import SaxParser
from .tokenizer import (
    MarkupTokenizer,
    working_buffer,
)

__all__ = [
    "AttributeList",
    "AttributeScanner",
    "Dispatch",
    "MarkupTokenizer",
    "ParseAction",
    "SaxHandler",
    "SaxParser",
    "find_attribute",
    "working_buffer",
]
