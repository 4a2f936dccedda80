"""Entity and character reference decoding with in-place buffer reuse.

The decoder works directly on a span of the parser's working buffer. Output
is written back over the span being decoded for as long as every
replacement is no longer than the reference it replaces; the first
replacement that would grow the span moves the output into freshly
allocated storage, and decoding continues there. The caller receives a
``DecodedText`` telling which of the two happened.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Mapping, Optional, Pattern, Tuple

from tolerant_sax_parser.shared.logging import get_logger

from .entities import ENTITY_TABLE

AMPERSAND = 0x26
HASH = 0x23
CARRIAGE_RETURN = 0x0D
LINE_FEED = 0x0A

MAX_CODE_POINT = 0x10FFFF
SURROGATE_RANGE_START = 0xD800
SURROGATE_RANGE_END = 0xDFFF
MAX_REFERENCE_DIGITS = 8  # after leading zeros are dropped

_SPACE = b" "
_NEWLINE = b"\n"

_CHARACTER_REFERENCE = re.compile(rb"&#(?:x([0-9a-fA-F]+)|([0-9]+));")


class DecodeMode(Enum):
    """How much decoding a span receives."""

    GENERAL = auto()    # Text content: references decoded
    CDATA = auto()      # CDATA sections: newline normalization only
    ATTRIBUTE = auto()  # Attribute values: references decoded, whitespace to spaces


# Bytes needing attention per mode; anything else is copied unchanged
_SPECIAL_BYTES: Dict[DecodeMode, Pattern[bytes]] = {
    DecodeMode.GENERAL: re.compile(rb"[&\r]"),
    DecodeMode.CDATA: re.compile(rb"\r"),
    DecodeMode.ATTRIBUTE: re.compile(rb"[&\r\t\n\v\f ]"),
}


class BufferOwnership(Enum):
    """Where decoded bytes live."""

    BORROWED = auto()  # A span of the caller's buffer
    OWNED = auto()     # A buffer allocated by the decoder


@dataclass(frozen=True)
class DecodedText:
    """Decoded bytes, either borrowed from the caller's buffer or owned.

    Attributes:
        ownership: Whether ``buffer`` is the caller's buffer or a new one
        buffer: Storage holding the decoded bytes
        start: Offset of the first decoded byte in ``buffer``
        end: Offset one past the last decoded byte in ``buffer``
        complete: False when growing the output failed and the tail of the
            span was left undecoded
    """

    ownership: BufferOwnership
    buffer: bytearray
    start: int
    end: int
    complete: bool = True

    @classmethod
    def borrowed(cls, buffer: bytearray, start: int, end: int) -> "DecodedText":
        """Wrap a decoded span of the caller's buffer."""
        return cls(BufferOwnership.BORROWED, buffer, start, end)

    @classmethod
    def owned(cls, buffer: bytearray, complete: bool = True) -> "DecodedText":
        """Wrap a buffer allocated during decoding."""
        return cls(BufferOwnership.OWNED, buffer, 0, len(buffer), complete)

    @property
    def is_borrowed(self) -> bool:
        return self.ownership is BufferOwnership.BORROWED

    def __len__(self) -> int:
        return self.end - self.start

    def to_bytes(self) -> bytes:
        """Copy the decoded bytes out of the underlying buffer."""
        return bytes(self.buffer[self.start:self.end])

    def to_text(self, errors: str = "replace") -> str:
        """Decode the UTF-8 bytes to ``str`` with the given error policy."""
        return self.buffer[self.start:self.end].decode("utf-8", errors)


class _Output:
    """Write side of a decode: in place over the source span until detached."""

    def __init__(self, buffer: bytearray, start: int) -> None:
        self.buffer = buffer
        self.start = start
        self.write = start
        self.owned: Optional[bytearray] = None

    def copy(self, read_start: int, read_end: int) -> None:
        """Append source bytes ``[read_start:read_end]`` unchanged."""
        if self.owned is not None:
            self.owned += self.buffer[read_start:read_end]
            return
        length = read_end - read_start
        if self.write != read_start:
            self.buffer[self.write:self.write + length] = self.buffer[read_start:read_end]
        self.write += length

    def put(self, data: bytes) -> None:
        """Append replacement bytes; in place only when they fit behind the reader."""
        if self.owned is not None:
            self.owned += data
            return
        self.buffer[self.write:self.write + len(data)] = data
        self.write += len(data)

    def detach(self, allocate: Callable[[bytes], bytearray]) -> None:
        self.owned = allocate(bytes(self.buffer[self.start:self.write]))

    def result(self) -> DecodedText:
        if self.owned is not None:
            return DecodedText.owned(self.owned)
        return DecodedText.borrowed(self.buffer, self.start, self.write)


class EntityDecoder:
    """Decodes named and numeric references and normalizes line endings.

    Newline normalization always applies: a carriage return becomes a line
    feed and swallows one line feed directly after it. Named references are
    resolved through ``entities``. A named replacement shorter than its
    reference is scanned again, so double-escaped text such as ``&amp;lt;``
    decodes to ``<``; longer replacements and character references are
    not. Unknown or malformed references are kept literally.
    """

    def __init__(
        self,
        entities: Mapping[str, str] = ENTITY_TABLE,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the decoder.

        Args:
            entities: Entity names (without ``&``, with trailing ``;``) mapped
                to their replacement text
            correlation_id: Optional correlation ID for log records
        """
        self._entities: Dict[bytes, bytes] = {
            name.encode("utf-8"): value.encode("utf-8")
            for name, value in entities.items()
        }
        self._max_name_length = max((len(name) for name in self._entities), default=0)
        self.logger = get_logger(__name__, correlation_id, "entity_decoder")

    def decode(
        self,
        buffer: bytearray,
        start: int = 0,
        end: Optional[int] = None,
        mode: DecodeMode = DecodeMode.GENERAL,
    ) -> DecodedText:
        """Decode ``buffer[start:end]`` according to ``mode``.

        Bytes inside the span may be overwritten. Bytes outside it are never
        touched and the buffer never changes length.

        Args:
            buffer: Working buffer holding UTF-8 bytes
            start: First byte of the span
            end: One past the last byte of the span (defaults to buffer end)
            mode: Decoding mode

        Returns:
            Borrowed span of ``buffer`` when nothing grew, owned buffer otherwise
        """
        if end is None:
            end = len(buffer)
        special = _SPECIAL_BYTES[mode]
        out = _Output(buffer, start)
        read = start

        while True:
            match = special.search(buffer, read, end)
            stop = match.start() if match else end
            if stop > read:
                out.copy(read, stop)
            if match is None:
                break
            read = stop
            byte = buffer[read]

            if byte == CARRIAGE_RETURN:
                out.put(_SPACE if mode is DecodeMode.ATTRIBUTE else _NEWLINE)
                read += 1
                if read < end and buffer[read] == LINE_FEED:
                    read += 1
            elif byte == AMPERSAND:
                consumed, replacement = self._reference(buffer, read, end)
                if replacement is None:
                    out.copy(read, read + 1)
                    read += 1
                    continue
                if buffer[read + 1] != HASH and len(replacement) < consumed:
                    # Put the replacement back in front of the unread input
                    read += consumed - len(replacement)
                    buffer[read:read + len(replacement)] = replacement
                    continue
                try:
                    if len(replacement) > consumed and out.owned is None:
                        out.detach(self._allocate)
                    out.put(replacement)
                except MemoryError:
                    return self._incomplete(out, read, end)
                read += consumed
            else:
                out.put(_SPACE)
                read += 1

        return out.result()

    def decode_text(self, text: str, mode: DecodeMode = DecodeMode.GENERAL) -> str:
        """Decode a ``str`` and return the result as ``str``."""
        buffer = bytearray(text.encode("utf-8", "surrogatepass"))
        return self.decode(buffer, mode=mode).to_text("surrogatepass")

    def _reference(
        self, buffer: bytearray, position: int, end: int
    ) -> Tuple[int, Optional[bytes]]:
        """Resolve the reference starting at ``&``.

        Returns:
            Number of source bytes consumed and the replacement, or
            ``(0, None)`` when the text is not a reference we can decode
        """
        after = position + 1
        if after < end and buffer[after] == HASH:
            return self._character_reference(buffer, position, end)

        semicolon = buffer.find(b";", after, min(end, after + self._max_name_length))
        if semicolon == -1:
            return 0, None
        replacement = self._entities.get(bytes(buffer[after:semicolon + 1]))
        if replacement is None:
            return 0, None
        return semicolon + 1 - position, replacement

    @staticmethod
    def _character_reference(
        buffer: bytearray, position: int, end: int
    ) -> Tuple[int, Optional[bytes]]:
        match = _CHARACTER_REFERENCE.match(buffer, position, end)
        if match is None:
            return 0, None
        hex_digits, decimal_digits = match.groups()
        digits = (hex_digits if hex_digits is not None else decimal_digits).lstrip(b"0")
        if not digits or len(digits) > MAX_REFERENCE_DIGITS:
            return 0, None

        code_point = int(digits, 16 if hex_digits is not None else 10)
        if code_point > MAX_CODE_POINT:
            return 0, None
        if SURROGATE_RANGE_START <= code_point <= SURROGATE_RANGE_END:
            return 0, None
        # One byte below 0x80, otherwise as many as the code point's bit width needs
        return match.end() - position, chr(code_point).encode("utf-8")

    @staticmethod
    def _allocate(initial: bytes) -> bytearray:
        return bytearray(initial)

    def _incomplete(self, out: _Output, read: int, end: int) -> DecodedText:
        """Best available result after growth failed: decoded prefix plus raw tail."""
        self.logger.warning(
            "Could not grow decode buffer; leaving the rest of the span undecoded",
            extra={"decoded_bytes": out.write - out.start, "undecoded_bytes": end - read},
        )
        if out.owned is not None:
            salvaged = out.owned
        else:
            salvaged = bytearray(out.buffer[out.start:out.write])
        salvaged += out.buffer[read:end]
        return DecodedText.owned(salvaged, complete=False)


_default_decoder: Optional[EntityDecoder] = None


def decode_entities(text: str, mode: DecodeMode = DecodeMode.GENERAL) -> str:
    """Decode references in ``text`` with the built-in entity table.

    Examples:
        >>> decode_entities("&lt;b&gt; &#65;&#x41; &euro;")
        '<b> AA €'
        >>> decode_entities("a\\r\\nb", DecodeMode.CDATA)
        'a\\nb'
    """
    global _default_decoder
    if _default_decoder is None:
        _default_decoder = EntityDecoder()
    return _default_decoder.decode_text(text, mode)
