"""Entity decoding for text runs and attribute values.

Key Components:
    EntityDecoder: Decodes references inside a span of the working buffer
    DecodeMode: General text, CDATA passthrough, or attribute normalization
    DecodedText: Result telling whether the caller's buffer was reused
    ENTITY_TABLE: Built-in named entities
"""

from .decoder import (
    BufferOwnership,
    DecodedText,
    DecodeMode,
    EntityDecoder,
    decode_entities,
)
from .entities import ENTITY_TABLE, MAX_ENTITY_NAME_LENGTH

__all__ = [
    "BufferOwnership",
    "DecodedText",
    "DecodeMode",
    "ENTITY_TABLE",
    "EntityDecoder",
    "MAX_ENTITY_NAME_LENGTH",
    "decode_entities",
]
