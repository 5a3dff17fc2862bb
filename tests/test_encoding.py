"""
Encoding detection tests.

Run with: pytest tests/test_encoding.py -v
"""

import codecs
import io
import logging

from epub_core.encoding.detector import decode_bytes, detect_encoding, open_text_stream


class TestByteOrderMark:
    """Byte-order marks take priority over everything else."""

    def test_utf8_bom_ignores_hint(self):
        """A UTF-8 BOM decodes correctly whatever the hint says."""
        data = codecs.BOM_UTF8 + "<p>naïve</p>".encode("utf-8")
        with open_text_stream(data, "ISO-8859-1") as reader:
            assert reader.read() == "<p>naïve</p>"

    def test_utf8_bom_overrides_declaration(self):
        """A BOM wins over a conflicting declaration."""
        data = codecs.BOM_UTF8 + '<?xml version="1.0" encoding="ISO-8859-1"?><a>é</a>'.encode("utf-8")
        detection = detect_encoding(data)
        assert detection.encoding == "utf-8"
        assert detection.source == "bom"
        assert detection.bom_length == 3

    def test_utf16_bom(self):
        """UTF-16 content with a BOM decodes without the BOM character."""
        data = "<a>über</a>".encode("utf-16")
        with open_text_stream(data) as reader:
            assert reader.read() == "<a>über</a>"

    def test_utf32_bom_checked_before_utf16(self):
        """The UTF-32 LE mark is not mistaken for UTF-16 LE."""
        data = codecs.BOM_UTF32_LE + "<a/>".encode("utf-32-le")
        assert detect_encoding(data).encoding == "utf-32-le"
        assert decode_bytes(data) == "<a/>"


class TestDeclaration:
    """Encoding declarations inside the document."""

    def test_xml_declaration(self):
        """An XML declaration without BOM selects the declared encoding."""
        data = b'<?xml version="1.0" encoding="ISO-8859-1"?>\n<p>caf\xe9</p>'
        detection = detect_encoding(data, "UTF-8")
        assert detection.source == "declaration"
        assert decode_bytes(data, "UTF-8").endswith("<p>café</p>")

    def test_single_quoted_declaration(self):
        data = b"<?xml version='1.0' encoding='windows-1252'?><p>\x80</p>"
        assert decode_bytes(data).endswith("<p>€</p>")

    def test_meta_charset(self):
        """An HTML meta charset is used when there is no XML declaration."""
        data = b'<html><head><meta charset="windows-1252"></head><body>\x93hi\x94</body></html>'
        assert "“hi”" in decode_bytes(data, "UTF-8")

    def test_meta_http_equiv(self):
        data = (
            b'<html><head><meta http-equiv="Content-Type" '
            b'content="text/html; charset=iso-8859-1"/></head><body>\xe9</body></html>'
        )
        assert detect_encoding(data).encoding == "iso8859-1"

    def test_bomless_utf16(self):
        """'<?' in 16-bit code units selects UTF-16 by byte order."""
        data = '<?xml version="1.0" encoding="UTF-16"?><a>ü</a>'.encode("utf-16-le")
        assert detect_encoding(data).encoding == "utf-16-le"
        assert decode_bytes(data).endswith("<a>ü</a>")

    def test_unknown_declared_encoding_falls_back(self, caplog):
        """An unknown declared name is ignored with a warning."""
        data = b'<?xml version="1.0" encoding="no-such-codec"?><a/>'
        with caplog.at_level(logging.WARNING, logger="epub_core.encoding.detector"):
            detection = detect_encoding(data, "ISO-8859-1")
        assert detection.encoding == "iso8859-1"
        assert detection.source == "hint"
        assert "no-such-codec" in caplog.text

    def test_declaration_beyond_prefix_ignored(self):
        """Only the bounded prefix is inspected."""
        data = b" " * 100 + b'<meta charset="iso-8859-1">'
        assert detect_encoding(data[:50], "UTF-8").source == "hint"


class TestHint:
    """Fallback to the hinted encoding."""

    def test_hint_used_without_markers(self):
        detection = detect_encoding(b"plain text", "ISO-8859-1")
        assert detection.encoding == "iso8859-1"
        assert detection.source == "hint"

    def test_default_is_utf8(self):
        assert detect_encoding(b"plain text").encoding == "utf-8"

    def test_unknown_hint_uses_utf8(self):
        assert detect_encoding(b"plain", "bogus-encoding").encoding == "utf-8"


class TestStreaming:
    """The returned stream replays the inspected prefix."""

    def test_multibyte_split_at_prefix_boundary(self):
        """A character spanning the prefix boundary is decoded intact."""
        text = "a" * 4095 + "é" + "tail"
        with open_text_stream(text.encode("utf-8"), prefix_size=4096) as reader:
            assert reader.read() == text

    def test_tiny_prefix(self):
        text = "ééé€€"
        with open_text_stream(text.encode("utf-8"), prefix_size=1) as reader:
            assert reader.read() == text

    def test_binary_stream_source(self):
        """File objects are consumed exactly once, prefix included."""
        body = "<root>" + "x" * 10000 + "</root>"
        data = ('<?xml version="1.0" encoding="ISO-8859-1"?>' + body).encode("latin-1")
        with open_text_stream(io.BytesIO(data), prefix_size=64) as reader:
            text = reader.read()
        assert text.startswith("<?xml")
        assert text.endswith(body)
        assert len(text) == len(data)

    def test_preserves_line_endings(self):
        with open_text_stream(b"a\r\nb") as reader:
            assert reader.read() == "a\r\nb"
