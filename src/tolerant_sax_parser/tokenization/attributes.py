"""Attribute scanning for start tags.

Attributes may be double quoted, single quoted, unquoted, or carry no value
at all. Names are lowercased; values are decoded in attribute mode with
their case preserved. Only a bounded number of attributes is kept per tag.
"""

import re
from typing import Iterable, Iterator, List, Optional, Tuple, Union, overload

from tolerant_sax_parser.decoding import DecodeMode, EntityDecoder
from tolerant_sax_parser.shared.config import MAX_ATTRIBUTES

EQUALS = 0x3D
SLASH = 0x2F
GREATER_THAN = 0x3E
DOUBLE_QUOTE = 0x22
SINGLE_QUOTE = 0x27

_WHITESPACE_RUN = re.compile(rb"[\t\r\n ]*")
_NAME = re.compile(rb"[^\t\r\n =/>]*")
_VALUE_PREFIX = re.compile(rb"[\t\r\n =]*")
_UNQUOTED_VALUE = re.compile(rb"[^\t\r\n />]*")

AttributePair = Tuple[str, str]


class AttributeList:
    """Ordered ``(name, value)`` pairs of a single start tag.

    The list holds at most ``capacity`` pairs. Further pairs are counted in
    ``dropped`` and otherwise ignored. The tokenizer reuses one instance for
    every tag of a parse and clears it before each tag, so consumers must
    copy what they need (``copy()`` or ``list(attributes)``) before their
    callback returns.
    """

    __slots__ = ("capacity", "dropped", "_pairs")

    def __init__(self, capacity: int = MAX_ATTRIBUTES) -> None:
        if not 1 <= capacity <= MAX_ATTRIBUTES:
            raise ValueError(f"capacity must be between 1 and {MAX_ATTRIBUTES}")
        self.capacity = capacity
        self.dropped = 0
        self._pairs: List[AttributePair] = []

    @property
    def is_full(self) -> bool:
        return len(self._pairs) >= self.capacity

    def append(self, name: str, value: str) -> bool:
        """Add a pair; returns False when the list is full and the pair was dropped."""
        if self.is_full:
            self.dropped += 1
            return False
        self._pairs.append((name, value))
        return True

    def clear(self) -> None:
        self._pairs.clear()
        self.dropped = 0

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the first attribute named ``key``."""
        for name, value in self._pairs:
            if name == key:
                return value
        return default

    def names(self) -> List[str]:
        return [name for name, _ in self._pairs]

    def copy(self) -> List[AttributePair]:
        return list(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[AttributePair]:
        return iter(self._pairs)

    @overload
    def __getitem__(self, index: int) -> AttributePair: ...

    @overload
    def __getitem__(self, index: slice) -> List[AttributePair]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[AttributePair, List[AttributePair]]:
        return self._pairs[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeList):
            return self._pairs == other._pairs
        if isinstance(other, (list, tuple)):
            return self._pairs == [tuple(pair) for pair in other]
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AttributeList({self._pairs!r})"


def find_attribute(
    attributes: Optional[Iterable[AttributePair]], key: Optional[str]
) -> Optional[str]:
    """Return the value of the first attribute named ``key``, or None.

    Works on an ``AttributeList`` or any iterable of pairs. Names are
    compared exactly; reported names are already lowercase.

    Examples:
        >>> find_attribute([("href", "a.html"), ("href", "b.html")], "href")
        'a.html'
        >>> find_attribute([("disabled", "")], "checked") is None
        True
    """
    if attributes is None or key is None:
        return None
    for name, value in attributes:
        if name == key:
            return value
    return None


class AttributeScanner:
    """Extracts attributes from the region of a start tag after its name."""

    def __init__(self, decoder: EntityDecoder, errors: str = "replace") -> None:
        """Initialize the scanner.

        Args:
            decoder: Decoder used for attribute values
            errors: Codec error policy for names and values
        """
        self.decoder = decoder
        self.errors = errors

    def scan(
        self,
        buffer: bytearray,
        position: int,
        end: int,
        attributes: AttributeList,
    ) -> int:
        """Scan attributes from ``position`` up to ``/``, ``>`` or ``end``.

        Values are decoded in place inside ``buffer``; bytes outside value
        spans are left alone.

        Returns:
            Position of the ``/`` or ``>`` that ended the scan, or ``end``
        """
        position = _WHITESPACE_RUN.match(buffer, position, end).end()
        while position < end and buffer[position] not in (SLASH, GREATER_THAN):
            if buffer[position] == EQUALS:
                # Stray "=", e.g. from `"val"=`; without skipping it the scan would stall
                position = _WHITESPACE_RUN.match(buffer, position + 1, end).end()
                continue

            name_end = _NAME.match(buffer, position, end).end()
            cursor = _WHITESPACE_RUN.match(buffer, name_end, end).end()
            has_value = cursor < end and buffer[cursor] == EQUALS
            value_start = value_end = cursor
            if has_value:
                cursor = _VALUE_PREFIX.match(buffer, cursor, end).end()
                value_start, value_end, cursor = self._value_span(buffer, cursor, end)

            if attributes.is_full:
                attributes.dropped += 1
            else:
                name = buffer[position:name_end].decode("utf-8", self.errors).lower()
                value = ""
                if has_value:
                    value = self.decoder.decode(
                        buffer, value_start, value_end, DecodeMode.ATTRIBUTE
                    ).to_text(self.errors)
                attributes.append(name, value)

            position = _WHITESPACE_RUN.match(buffer, cursor, end).end()
        return position

    @staticmethod
    def _value_span(buffer: bytearray, position: int, end: int) -> Tuple[int, int, int]:
        """Locate a value starting at ``position``.

        Returns:
            Value start, value end, and the position just past the value
        """
        if position < end and buffer[position] in (DOUBLE_QUOTE, SINGLE_QUOTE):
            quote = buffer[position]
            closing = buffer.find(quote, position + 1, end)
            if closing == -1:
                return position + 1, end, end
            return position + 1, closing, closing + 1
        value_end = _UNQUOTED_VALUE.match(buffer, position, end).end()
        return position, value_end, value_end
