"""Parser state: callback slots, caller context and the parse entry point."""

import time
from typing import Any, Optional

from tolerant_sax_parser.shared.config import ParserConfig
from tolerant_sax_parser.shared.logging import get_logger

from .handlers import (
    Dispatch,
    EndTagCallback,
    SaxHandler,
    StartTagCallback,
    TextCallback,
    noop_end_tag,
    noop_start_tag,
    noop_text,
)
from .tokenizer import MarkupInput, MarkupTokenizer, working_buffer

MS_PER_SECOND = 1000


class SaxParser:
    """Tolerant SAX-style parser for XML and loose HTML.

    Tags and text are reported through three callback slots, each defaulting
    to a no-op. Tag and attribute names arrive lowercased, self-closing tags
    produce a start and an end event, and malformed input never raises.

    A parser keeps no state between ``parse`` calls and may be reused, but
    one instance must not run two parses at the same time.

    Example:
        >>> names = []
        >>> parser = SaxParser(names)
        >>> parser.set_tag_handler(lambda ctx, name, attrs: ctx.append(name), None)
        >>> parser.parse('<DIV class="x"><br/></div>')
        >>> names
        ['div', 'br']
    """

    def __init__(
        self,
        context: Any = None,
        config: Optional[ParserConfig] = None,
        handler: Optional[SaxHandler] = None,
    ) -> None:
        """Initialize the parser.

        Args:
            context: Opaque value passed as first argument to every callback
            config: Parser configuration (defaults to ``ParserConfig()``)
            handler: Optional handler object installed into all three slots
        """
        self.context = context
        self.config = config or ParserConfig()
        self.tokenizer = MarkupTokenizer(self.config)
        self.logger = get_logger(__name__, self.config.correlation_id, "sax_parser")

        self.on_start_tag: StartTagCallback = noop_start_tag
        self.on_end_tag: EndTagCallback = noop_end_tag
        self.on_text: TextCallback = noop_text
        if handler is not None:
            self.set_handler(handler)

    def set_tag_handler(
        self,
        on_start_tag: Optional[StartTagCallback] = None,
        on_end_tag: Optional[EndTagCallback] = None,
    ) -> None:
        """Install the start-tag and end-tag callbacks; None restores the no-op."""
        self.on_start_tag = on_start_tag or noop_start_tag
        self.on_end_tag = on_end_tag or noop_end_tag

    def set_text_handler(self, on_text: Optional[TextCallback] = None) -> None:
        """Install the text callback; None restores the no-op."""
        self.on_text = on_text or noop_text

    def set_handler(self, handler: Optional[SaxHandler]) -> None:
        """Install all three slots from a handler object, or reset them with None."""
        if handler is None:
            self.set_tag_handler(None, None)
            self.set_text_handler(None)
            return
        self.set_tag_handler(handler.on_start_tag, handler.on_end_tag)
        self.set_text_handler(handler.on_text)

    def parse(self, markup: Optional[MarkupInput]) -> None:
        """Parse ``markup`` and invoke the callbacks in document order.

        Args:
            markup: UTF-8 markup as ``str`` or bytes; None parses nothing
        """
        if markup is None:
            return

        start_time = time.time()
        dispatch = Dispatch(self.context, self.on_start_tag, self.on_end_tag, self.on_text)
        with working_buffer(markup) as buffer:
            input_bytes = len(buffer)
            self.tokenizer.tokenize(buffer, dispatch)

        self.logger.debug(
            "Parse finished",
            extra={
                "input_bytes": input_bytes,
                "events": dispatch.events,
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            },
        )
