"""Single-pass markup tokenizer.

The tokenizer walks a working buffer once, left to right, and reports start
tags, end tags and text through a ``Dispatch``. Comments, DOCTYPE
declarations and processing instructions are skipped; CDATA content is
reported as text. Malformed markup never raises: a construct whose end
cannot be found simply ends the parse.
"""

import re
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from tolerant_sax_parser.decoding import DecodeMode, EntityDecoder
from tolerant_sax_parser.shared.config import ParserConfig
from tolerant_sax_parser.shared.logging import get_logger

from .attributes import AttributeList, AttributeScanner
from .handlers import Dispatch, ParseStopped

SLASH = 0x2F
OPEN_BRACKET = 0x5B

COMMENT_OPEN = b"!--"
COMMENT_CLOSE = b"-->"
CDATA_OPEN = b"![CDATA["
CDATA_CLOSE = b"]]>"
DOCTYPE_OPEN = b"!DOCTYPE"
DOCTYPE_SUBSET_CLOSE = b"]>"
PI_OPEN = b"?"
PI_CLOSE = b"?>"

_WHITESPACE_RUN = re.compile(rb"[\t\r\n ]*")
_TAG_NAME = re.compile(rb"[^\t\r\n />]*")
_DOCTYPE_STOP = re.compile(rb"[\[>]")

MarkupInput = Union[str, bytes, bytearray, memoryview]


@contextmanager
def working_buffer(markup: MarkupInput) -> Iterator[bytearray]:
    """Mutable UTF-8 copy of ``markup``, emptied again on every exit path."""
    if isinstance(markup, str):
        buffer = bytearray(markup.encode("utf-8", "surrogatepass"))
    else:
        buffer = bytearray(markup)
    try:
        yield buffer
    finally:
        buffer.clear()


class MarkupTokenizer:
    """Scans a working buffer and dispatches tags and text.

    The tokenizer keeps no state between calls to ``tokenize``, so one
    instance can serve many parses, though not concurrently with a shared
    buffer.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        decoder: Optional[EntityDecoder] = None,
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Parser configuration (defaults to ``ParserConfig()``)
            decoder: Entity decoder for text and attribute values
        """
        self.config = config or ParserConfig()
        self.decoder = decoder or EntityDecoder(correlation_id=self.config.correlation_id)
        self.scanner = AttributeScanner(self.decoder, self.config.decode_errors)
        self.logger = get_logger(__name__, self.config.correlation_id, "markup_tokenizer")

    def tokenize(self, buffer: bytearray, dispatch: Dispatch) -> None:
        """Scan ``buffer`` and report every construct through ``dispatch``.

        Decoding happens in place, so ``buffer`` is left modified. Exceptions
        raised by callbacks propagate unchanged.
        """
        try:
            self._scan(buffer, dispatch)
        except ParseStopped as stop:
            self.logger.debug(
                "Parse stopped by callback",
                extra={"after": str(stop), "events": dispatch.events},
            )

    def _scan(self, buffer: bytearray, dispatch: Dispatch) -> None:
        end = len(buffer)
        attributes = AttributeList(self.config.max_attributes)
        position = text_start = 0

        while True:
            tag_open = buffer.find(b"<", position)
            if tag_open == -1:
                self._flush(buffer, text_start, end, DecodeMode.GENERAL, dispatch)
                return
            self._flush(buffer, text_start, tag_open, DecodeMode.GENERAL, dispatch)
            position = tag_open + 1

            if buffer.startswith(COMMENT_OPEN, position):
                close = buffer.find(COMMENT_CLOSE, position)
                if close == -1:
                    self._truncated("comment", tag_open)
                    return
                position = close + len(COMMENT_CLOSE)

            elif buffer.startswith(CDATA_OPEN, position):
                content = position + len(CDATA_OPEN)
                close = buffer.find(CDATA_CLOSE, position)
                if close == -1:
                    # Not closed: everything left is CDATA text
                    self._flush(buffer, content, end, DecodeMode.CDATA, dispatch)
                    self._truncated("CDATA section", tag_open)
                    return
                self._flush(buffer, content, close, DecodeMode.CDATA, dispatch)
                position = close + len(CDATA_CLOSE)

            elif buffer.startswith(DOCTYPE_OPEN, position):
                stop = _DOCTYPE_STOP.search(buffer, position)
                if stop is None:
                    self._truncated("DOCTYPE", tag_open)
                    return
                if buffer[stop.start()] == OPEN_BRACKET:
                    close = buffer.find(DOCTYPE_SUBSET_CLOSE, stop.start())
                    if close == -1:
                        self._truncated("DOCTYPE internal subset", tag_open)
                        return
                    position = close + len(DOCTYPE_SUBSET_CLOSE)
                else:
                    position = stop.end()

            elif buffer.startswith(PI_OPEN, position):
                close = buffer.find(PI_CLOSE, position)
                if close == -1:
                    self._truncated("processing instruction", tag_open)
                    return
                position = close + len(PI_CLOSE)

            else:
                position = self._tag(buffer, position, end, attributes, dispatch)
                close = buffer.find(b">", position)
                if close == -1:
                    self._truncated("tag", tag_open)
                    return
                position = close + 1

            text_start = position

    def _tag(
        self,
        buffer: bytearray,
        position: int,
        end: int,
        attributes: AttributeList,
        dispatch: Dispatch,
    ) -> int:
        """Handle a start or end tag whose ``<`` precedes ``position``.

        Returns:
            Position from which to look for the closing ``>``
        """
        position = _WHITESPACE_RUN.match(buffer, position, end).end()
        if position < end and buffer[position] == SLASH:
            position = _WHITESPACE_RUN.match(buffer, position + 1, end).end()
            name_end = _TAG_NAME.match(buffer, position, end).end()
            if name_end > position:
                dispatch.end_tag(self._name(buffer, position, name_end))
            return name_end

        name_end = _TAG_NAME.match(buffer, position, end).end()
        if name_end == position:
            return position
        name = self._name(buffer, position, name_end)

        attributes.clear()
        position = self.scanner.scan(buffer, name_end, end, attributes)
        if attributes.dropped:
            self.logger.debug(
                "Dropped attributes beyond the per-tag limit",
                extra={"tag": name, "kept": len(attributes), "dropped": attributes.dropped},
            )
        dispatch.start_tag(name, attributes)

        position = _WHITESPACE_RUN.match(buffer, position, end).end()
        if position < end and buffer[position] == SLASH:
            # Self-closing
            position += 1
            dispatch.end_tag(name)
        return position

    def _name(self, buffer: bytearray, start: int, end: int) -> str:
        return buffer[start:end].decode("utf-8", self.config.decode_errors).lower()

    def _flush(
        self,
        buffer: bytearray,
        start: int,
        end: int,
        mode: DecodeMode,
        dispatch: Dispatch,
    ) -> None:
        """Decode and deliver pending text; empty spans are not delivered."""
        if end <= start:
            return
        decoded = self.decoder.decode(buffer, start, end, mode)
        dispatch.text(decoded.to_text(self.config.decode_errors))

    def _truncated(self, construct: str, offset: int) -> None:
        if self.config.log_truncations:
            self.logger.debug(
                "Unterminated construct ends the parse",
                extra={"construct": construct, "offset": offset},
            )
