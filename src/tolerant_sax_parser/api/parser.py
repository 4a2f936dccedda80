"""High-level parsing API.

Progressive disclosure from one-shot functions to the configurable
``SaxParser``:

- ``parse()`` runs a parse with a ``SaxHandler``
- ``collect_events()`` / ``parse_file()`` capture the callback stream as data
- ``extract_text()`` returns readable text, e.g. from an HTML mail body
"""

import time
from pathlib import Path
from typing import Any, List, Optional, Union

from tolerant_sax_parser.shared import (
    EventType,
    ParseEvent,
    ParseResult,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from tolerant_sax_parser.tokenization import AttributeList, SaxHandler, SaxParser
from tolerant_sax_parser.tokenization.tokenizer import MarkupInput

MS_PER_SECOND = 1000

# Content of these elements is never readable text
SKIPPED_TEXT_TAGS = frozenset({"script", "style"})

# Elements that separate runs of text
BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "ol",
    "p", "pre", "section", "table", "td", "th", "tr", "ul",
})


class EventRecorder(SaxHandler):
    """Handler that records every callback as a ``ParseEvent``."""

    def __init__(self) -> None:
        self.events: List[ParseEvent] = []

    def on_start_tag(self, context: Any, name: str, attributes: AttributeList) -> None:
        self.events.append(ParseEvent(EventType.START_TAG, name, tuple(attributes)))

    def on_end_tag(self, context: Any, name: str) -> None:
        self.events.append(ParseEvent(EventType.END_TAG, name))

    def on_text(self, context: Any, text: str, length: int) -> None:
        self.events.append(ParseEvent(EventType.TEXT, text=text))


class TextExtractor(SaxHandler):
    """Handler collecting readable text, split into blocks at block-level tags."""

    def __init__(self) -> None:
        self._blocks: List[List[str]] = [[]]
        self._skip_depth = 0

    def on_start_tag(self, context: Any, name: str, attributes: AttributeList) -> None:
        if name in SKIPPED_TEXT_TAGS:
            self._skip_depth += 1
        elif name in BLOCK_TAGS:
            self._blocks.append([])

    def on_end_tag(self, context: Any, name: str) -> None:
        if name in SKIPPED_TEXT_TAGS:
            if self._skip_depth > 0:
                self._skip_depth -= 1
        elif name in BLOCK_TAGS:
            self._blocks.append([])

    def on_text(self, context: Any, text: str, length: int) -> None:
        if self._skip_depth == 0:
            self._blocks[-1].append(text)

    def get_text(self, separator: str = " ") -> str:
        """Blocks with whitespace collapsed, empty ones dropped, joined by ``separator``."""
        blocks = (" ".join("".join(parts).split()) for parts in self._blocks)
        return separator.join(block for block in blocks if block)


def parse(
    markup: Optional[MarkupInput],
    handler: Optional[SaxHandler] = None,
    context: Any = None,
    config: Optional[ParserConfig] = None,
) -> None:
    """Parse ``markup`` once, reporting to ``handler``.

    Examples:
        >>> class Links(SaxHandler):
        ...     def on_start_tag(self, context, name, attributes):
        ...         if name == "a":
        ...             context.append(attributes.get("href"))
        >>> found = []
        >>> parse('<A HREF="x.html">x</a>', Links(), found)
        >>> found
        ['x.html']
    """
    SaxParser(context, config, handler).parse(markup)


def collect_events(
    markup: Optional[MarkupInput], config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse ``markup`` and return every callback as recorded data.

    Examples:
        >>> result = collect_events("<input disabled>")
        >>> [(e.type.value, e.name, e.attributes) for e in result.events]
        [('start', 'input', (('disabled', ''),))]
    """
    config = config or ParserConfig()
    logger = get_logger(__name__, config.correlation_id, "collect_events")
    recorder = EventRecorder()

    start_time = time.time()
    SaxParser(None, config, recorder).parse(markup)
    processing_time = (time.time() - start_time) * MS_PER_SECOND

    metrics = PerformanceMetrics(
        processing_time_ms=processing_time,
        bytes_processed=_input_size(markup),
        events_emitted=len(recorder.events),
    )
    logger.debug(
        "Collected parse events",
        extra={"events": metrics.events_emitted, "processing_time_ms": processing_time},
    )
    return ParseResult(recorder.events, metrics, config.correlation_id)


def parse_file(
    path: Union[str, Path], config: Optional[ParserConfig] = None
) -> ParseResult:
    """Read a file as bytes and collect its parse events.

    Raises:
        OSError: If the file cannot be read
    """
    return collect_events(Path(path).read_bytes(), config)


def extract_text(
    markup: Optional[MarkupInput],
    config: Optional[ParserConfig] = None,
    separator: str = " ",
) -> str:
    """Return the readable text of ``markup``.

    Text inside ``<script>`` and ``<style>`` is dropped, whitespace is
    collapsed, and runs separated by block-level tags are joined with
    ``separator``.

    Examples:
        >>> extract_text("<p>Hello&nbsp;<b>World</b></p><script>x()</script><p>Bye</p>", separator="\\n")
        'Hello World\\nBye'
    """
    extractor = TextExtractor()
    SaxParser(None, config, extractor).parse(markup)
    return extractor.get_text(separator)


def _input_size(markup: Optional[MarkupInput]) -> int:
    if markup is None:
        return 0
    if isinstance(markup, str):
        return len(markup.encode("utf-8", "surrogatepass"))
    return len(markup)
