"""Tests for the high-level parsing API."""

import pytest

from tolerant_sax_parser.api import (
    EventRecorder,
    TextExtractor,
    collect_events,
    extract_text,
    parse,
    parse_file,
)
from tolerant_sax_parser.shared import EventType, ParseEvent, ParserConfig
from tolerant_sax_parser.tokenization import ParseAction, SaxHandler


class TestParse:
    """Test the one-shot parse function."""

    def test_handler_and_context(self):
        """Test the handler receives the given context."""
        class Links(SaxHandler):
            def on_start_tag(self, context, name, attributes):
                if name == "a":
                    context.append(attributes.get("href"))

        found = []
        parse('<A HREF="one.html">1</A><a href=two.html>2</a><a>3</a>', Links(), found)
        assert found == ["one.html", "two.html", None]

    def test_without_handler(self):
        """Test parsing without a handler does nothing visible."""
        assert parse("<p>x</p>") is None

    def test_stop(self):
        """Test a handler can end the parse early."""
        class FirstTitle(SaxHandler):
            def __init__(self):
                self.in_title = False
                self.title = None

            def on_start_tag(self, context, name, attributes):
                self.in_title = name == "title"

            def on_text(self, context, text, length):
                if self.in_title:
                    self.title = text
                    return ParseAction.STOP
                return None

        handler = FirstTitle()
        parse("<html><title>One</title><title>Two</title>", handler)
        assert handler.title == "One"


class TestCollectEvents:
    """Test capturing the callback stream as data."""

    def test_events(self):
        """Test events are recorded in document order."""
        result = collect_events('<p id="x">a<br/></p>')
        assert result.events == [
            ParseEvent(EventType.START_TAG, "p", (("id", "x"),)),
            ParseEvent(EventType.TEXT, text="a"),
            ParseEvent(EventType.START_TAG, "br"),
            ParseEvent(EventType.END_TAG, "br"),
            ParseEvent(EventType.END_TAG, "p"),
        ]
        assert result.event_count == 5
        assert [event.name for event in result.start_tags] == ["p", "br"]
        assert [event.name for event in result.end_tags] == ["br", "p"]

    def test_attributes_copied(self):
        """Test recorded attributes survive later tags."""
        result = collect_events("<a x=1><b y=2>")
        assert result.events[0].attributes == (("x", "1"),)
        assert result.events[1].attributes == (("y", "2"),)

    def test_text_property(self):
        """Test text events are concatenated."""
        result = collect_events("<p>a &amp; b</p><![CDATA[<c>]]>")
        assert result.text == "a & b<c>"

    def test_metrics(self):
        """Test the performance metrics."""
        result = collect_events("<p>é</p>")
        assert result.performance.bytes_processed == len("<p>é</p>".encode("utf-8"))
        assert result.performance.events_emitted == 3
        assert result.performance.processing_time_ms >= 0

    def test_none_input(self):
        """Test None input yields an empty result."""
        result = collect_events(None)
        assert result.events == []
        assert result.performance.bytes_processed == 0

    def test_correlation_id(self):
        """Test the configured correlation ID is carried on the result."""
        result = collect_events("<a>", ParserConfig(correlation_id="abc"))
        assert result.correlation_id == "abc"

    def test_config_applied(self):
        """Test the configuration reaches the tokenizer."""
        result = collect_events("<a x=1 y=2>", ParserConfig(max_attributes=1))
        assert result.events[0].attributes == (("x", "1"),)

    def test_to_dict(self):
        """Test the plain-data form."""
        data = collect_events("<a href='x'>t</a>").to_dict()
        assert data["events"] == [
            {"type": "start", "name": "a", "attributes": [["href", "x"]]},
            {"type": "text", "text": "t"},
            {"type": "end", "name": "a"},
        ]
        assert data["metrics"]["events_emitted"] == 3


class TestParseFile:
    """Test parsing files."""

    def test_parse_file(self, tmp_path):
        """Test a file is read as bytes and parsed."""
        path = tmp_path / "doc.html"
        path.write_bytes("<p>Grüße</p>".encode("utf-8"))

        result = parse_file(path)
        assert result.text == "Grüße"
        assert result.performance.bytes_processed == path.stat().st_size

    def test_parse_file_str_path(self, tmp_path):
        """Test a str path is accepted."""
        path = tmp_path / "doc.xml"
        path.write_text("<root/>", encoding="utf-8")
        assert parse_file(str(path)).event_count == 2

    def test_missing_file(self, tmp_path):
        """Test a missing file raises OSError."""
        with pytest.raises(OSError):
            parse_file(tmp_path / "missing.xml")


class TestExtractText:
    """Test readable-text extraction."""

    def test_blocks_and_skipped_content(self):
        """Test script content is dropped and blocks are separated."""
        markup = "<p>Hello&nbsp;<b>World</b></p><script>x()</script><p>Bye</p>"
        assert extract_text(markup, separator="\n") == "Hello World\nBye"

    def test_default_separator(self):
        """Test blocks are joined with a space by default."""
        assert extract_text("<div>a</div><div>b</div>") == "a b"

    def test_whitespace_collapsed(self):
        """Test runs of whitespace inside a block collapse."""
        assert extract_text("<p>  a \n\t b  </p>") == "a b"

    def test_inline_tags_do_not_split(self):
        """Test inline tags keep text in one block."""
        assert extract_text("<p>un<i>believ</i>able</p>", separator="|") == "unbelievable"

    def test_line_breaks(self):
        """Test <br> separates blocks."""
        assert extract_text("one<br>two<br/>three", separator="\n") == "one\ntwo\nthree"

    def test_style_and_nested_skip(self):
        """Test style content and nested skipped elements."""
        markup = "a<style>p{}</style><script><script>x</script>y</script>b"
        assert extract_text(markup) == "ab"

    def test_stray_closing_script(self):
        """Test an unmatched </script> does not hide later text."""
        assert extract_text("a</script>b") == "ab"

    def test_comments_ignored(self):
        """Test comments contribute no text."""
        assert extract_text("a<!-- hidden -->b") == "ab"

    def test_empty(self):
        """Test empty input gives an empty string."""
        assert extract_text("") == ""
        assert extract_text(None) == ""


class TestHandlers:
    """Test the API's handler classes directly."""

    def test_event_recorder(self):
        """Test the recorder can be used with any parse."""
        recorder = EventRecorder()
        parse("<x/>", recorder)
        assert [event.type for event in recorder.events] == [EventType.START_TAG, EventType.END_TAG]

    def test_text_extractor(self):
        """Test the extractor with a custom separator after parsing."""
        extractor = TextExtractor()
        parse("<li>a</li><li>b</li>", extractor)
        assert extractor.get_text(", ") == "a, b"
