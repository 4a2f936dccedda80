"""Tests for the bounded attribute list and the attribute scanner."""

import pytest

from tolerant_sax_parser.decoding import EntityDecoder
from tolerant_sax_parser.shared.config import MAX_ATTRIBUTES
from tolerant_sax_parser.tokenization import AttributeList, AttributeScanner, find_attribute


def scan(interior: str, capacity: int = MAX_ATTRIBUTES):
    """Scan a tag interior and return the attributes, stop position and buffer."""
    buffer = bytearray(interior.encode("utf-8"))
    attributes = AttributeList(capacity)
    scanner = AttributeScanner(EntityDecoder())
    position = scanner.scan(buffer, 0, len(buffer), attributes)
    return attributes, position, buffer


class TestAttributeList:
    """Test the bounded attribute container."""

    def test_append_and_lookup(self):
        """Test pairs keep insertion order and first-match lookup."""
        attributes = AttributeList()
        assert attributes.append("href", "a.html")
        assert attributes.append("href", "b.html")
        assert attributes.append("class", "nav")

        assert len(attributes) == 3
        assert attributes.get("href") == "a.html"
        assert attributes.get("id") is None
        assert attributes.get("id", "none") == "none"
        assert attributes.names() == ["href", "href", "class"]
        assert attributes[2] == ("class", "nav")
        assert attributes[:1] == [("href", "a.html")]

    def test_capacity_bound(self):
        """Test pairs beyond the capacity are counted, not stored."""
        attributes = AttributeList(capacity=2)
        assert attributes.append("a", "1")
        assert attributes.append("b", "2")
        assert attributes.is_full
        assert not attributes.append("c", "3")
        assert not attributes.append("d", "4")

        assert list(attributes) == [("a", "1"), ("b", "2")]
        assert attributes.dropped == 2

    def test_clear_resets_dropped(self):
        """Test clearing empties the pairs and the dropped count."""
        attributes = AttributeList(capacity=1)
        attributes.append("a", "1")
        attributes.append("b", "2")
        attributes.clear()

        assert len(attributes) == 0
        assert attributes.dropped == 0
        assert not attributes.is_full

    @pytest.mark.parametrize("capacity", [0, -1, MAX_ATTRIBUTES + 1])
    def test_invalid_capacity(self, capacity):
        """Test the capacity can not leave 1..MAX_ATTRIBUTES."""
        with pytest.raises(ValueError):
            AttributeList(capacity)

    def test_copy_is_independent(self):
        """Test a copy survives clearing the list."""
        attributes = AttributeList()
        attributes.append("id", "x")
        copied = attributes.copy()
        attributes.clear()
        assert copied == [("id", "x")]

    def test_equality(self):
        """Test comparison with other lists and plain sequences."""
        attributes = AttributeList()
        attributes.append("disabled", "")
        other = AttributeList(capacity=5)
        other.append("disabled", "")

        assert attributes == other
        assert attributes == [("disabled", "")]
        assert attributes == (["disabled", ""],)
        assert attributes != [("checked", "")]
        assert attributes != "disabled"

    def test_unhashable(self):
        """Test the mutable list can not be hashed."""
        with pytest.raises(TypeError):
            hash(AttributeList())

    def test_repr(self):
        """Test the repr shows the pairs."""
        attributes = AttributeList()
        attributes.append("a", "b")
        assert repr(attributes) == "AttributeList([('a', 'b')])"


class TestFindAttribute:
    """Test the attribute lookup helper."""

    def test_first_match(self):
        """Test the first pair with a matching key wins."""
        attributes = AttributeList()
        attributes.append("src", "1.png")
        attributes.append("src", "2.png")
        assert find_attribute(attributes, "src") == "1.png"

    def test_empty_value_is_not_absent(self):
        """Test a bare attribute is found with an empty value."""
        assert find_attribute([("disabled", "")], "disabled") == ""

    def test_absent(self):
        """Test missing keys and missing inputs give None."""
        assert find_attribute([("a", "1")], "b") is None
        assert find_attribute(None, "a") is None
        assert find_attribute([("a", "1")], None) is None

    def test_exact_comparison(self):
        """Test keys are compared exactly."""
        assert find_attribute([("class", "x")], "CLASS") is None


class TestAttributeScanner:
    """Test attribute extraction from a tag interior."""

    def test_quote_styles(self):
        """Test double quoted, single quoted, unquoted and bare attributes."""
        attributes, position, _ = scan(""" a="1" b='2' c=3 d>""")
        assert attributes == [("a", "1"), ("b", "2"), ("c", "3"), ("d", "")]
        assert position == len(""" a="1" b='2' c=3 d""")

    def test_stops_at_slash(self):
        """Test the scan ends at the self-closing slash."""
        attributes, position, buffer = scan(' src="x.png" />')
        assert attributes == [("src", "x.png")]
        assert buffer[position:position + 1] == b"/"

    def test_unquoted_value_stops_at_slash(self):
        """Test an unquoted value ends before a slash."""
        attributes, position, buffer = scan(" a=b/>")
        assert attributes == [("a", "b")]
        assert buffer[position:position + 1] == b"/"

    def test_whitespace_around_equals(self):
        """Test whitespace between name, equals sign and value."""
        attributes, _, _ = scan(' a \t= \n"1" b\r\n=2>')
        assert attributes == [("a", "1"), ("b", "2")]

    def test_quoted_value_may_contain_markup_characters(self):
        """Test '>' and '/' inside quotes do not end the value."""
        attributes, position, buffer = scan(' title="1 > 0" href=\'/a/b\'>')
        assert attributes == [("title", "1 > 0"), ("href", "/a/b")]
        assert buffer[position:] == b">"

    def test_other_quote_inside_value(self):
        """Test the opposite quote character is ordinary text."""
        attributes, _, _ = scan(""" a='say "hi"' b="it's">""")
        assert attributes == [("a", 'say "hi"'), ("b", "it's")]

    def test_empty_values(self):
        """Test empty quoted values."""
        attributes, _, _ = scan(""" a="" b=''>""")
        assert attributes == [("a", ""), ("b", "")]

    def test_unclosed_quote_runs_to_end(self):
        """Test an unclosed quote takes the rest of the input."""
        attributes, position, _ = scan(' a="1> <b>')
        assert attributes == [("a", "1> <b>")]
        assert position == len(' a="1> <b>')

    def test_stray_equals(self):
        """Test a stray '=' after a value is skipped instead of stalling."""
        attributes, _, _ = scan(' x="1"=y>')
        assert attributes == [("x", "1"), ("y", "")]

    def test_leading_stray_equals(self):
        """Test a stray '=' before any attribute is skipped."""
        attributes, _, _ = scan(" = checked>")
        assert attributes == [("checked", "")]

    def test_name_case_folded_value_preserved(self):
        """Test names are lowercased and values keep their case."""
        attributes, _, _ = scan(' CLASS="Nav Main" Data-ID=AbC>')
        assert attributes == [("class", "Nav Main"), ("data-id", "AbC")]

    def test_value_decoding(self):
        """Test values decode references and turn whitespace into spaces."""
        attributes, _, _ = scan(' title="Tom &amp; Jerry\n&lt;3\t&#33;">')
        assert attributes == [("title", "Tom & Jerry <3 !")]

    def test_unknown_entity_in_value(self):
        """Test unknown references stay literal."""
        attributes, _, _ = scan(' href="?a=1&b=2">')
        assert attributes == [("href", "?a=1&b=2")]

    def test_multibyte_value(self):
        """Test non-ASCII values and referenced characters."""
        attributes, _, _ = scan(' alt="Grüße &euro;">')
        assert attributes == [("alt", "Grüße €")]

    def test_cap_drops_extra_attributes(self):
        """Test attributes beyond the capacity are skipped but counted."""
        attributes, position, buffer = scan(' a=1 b=2 c="&amp;" d=4>', capacity=2)
        assert attributes == [("a", "1"), ("b", "2")]
        assert attributes.dropped == 2
        assert buffer[position:] == b">"
        # Dropped values are not decoded
        assert b"&amp;" in buffer

    def test_empty_interior(self):
        """Test a tag without attributes."""
        attributes, position, _ = scan(">")
        assert len(attributes) == 0
        assert position == 0

    def test_scan_to_end_without_terminator(self):
        """Test the scan returns the span end when no '/' or '>' follows."""
        attributes, position, _ = scan(" a=1 b")
        assert attributes == [("a", "1"), ("b", "")]
        assert position == len(" a=1 b")
