"""Tolerant SAX Parser.

A never-stop, single-pass tokenizer for XML and loosely structured HTML that
reports tags, attributes and text through callbacks without building a tree.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), collect_events(), extract_text(), parse_file()
- Level 2: Reusable parser - SaxParser with callback slots or a SaxHandler
- Level 3: Building blocks - MarkupTokenizer, AttributeScanner, EntityDecoder
"""

__version__ = "0.1.0"
__author__ = "Tolerant SAX Parser Team"

# Level 1: Simple functions
from .api import collect_events, extract_text, parse, parse_file

# Level 3: Building blocks
from .decoding import ENTITY_TABLE, DecodedText, DecodeMode, EntityDecoder, decode_entities

# Configuration and result objects
from .shared.config import MAX_ATTRIBUTES, ConfigValidationError, ParserConfig
from .shared.result import EventType, ParseEvent, ParseResult

# Level 2: Reusable parser
from .tokenization import (
    AttributeList,
    ParseAction,
    SaxHandler,
    SaxParser,
    find_attribute,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "collect_events",
    "extract_text",
    "parse_file",

    # Level 2: Reusable parser and dispatch interface
    "SaxParser",
    "SaxHandler",
    "ParseAction",
    "AttributeList",
    "find_attribute",

    # Level 3: Decoding building blocks
    "ENTITY_TABLE",
    "DecodedText",
    "DecodeMode",
    "EntityDecoder",
    "decode_entities",

    # Configuration and result objects
    "MAX_ATTRIBUTES",
    "ConfigValidationError",
    "ParserConfig",
    "EventType",
    "ParseEvent",
    "ParseResult",
]
