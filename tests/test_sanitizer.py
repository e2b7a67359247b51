"""
Tests for the sanitizer module.
"""

from src.outlook_features.sanitizer import body_to_text, extract_text_from_html


class TestExtractTextFromHtml:
    """Tests for extract_text_from_html function."""

    def test_empty_string(self):
        """Test with empty input."""
        assert extract_text_from_html("") == ""

    def test_simple_html(self):
        """Test with simple HTML content."""
        result = extract_text_from_html("<p>Hello <strong>World</strong></p>")
        assert "Hello" in result
        assert "World" in result
        assert "<" not in result

    def test_removes_script_and_style(self):
        """Test that non-content elements are removed."""
        html = (
            "<html><head><title>t</title><style>p {color: red}</style></head>"
            "<body><p>Content</p><script>alert('xss')</script></body></html>"
        )
        result = extract_text_from_html(html)
        assert "Content" in result
        assert "alert" not in result
        assert "color" not in result

    def test_block_elements_stay_separate_words(self):
        """Test that adjacent blocks do not merge into one word."""
        result = extract_text_from_html("<div>one</div><div>two</div>")
        assert result.split() == ["one", "two"]


class TestBodyToText:
    """Tests for body_to_text function."""

    def test_text_body_unchanged(self):
        assert body_to_text("a <b>literal</b> body", "text") == "a <b>literal</b> body"

    def test_html_body_converted(self):
        assert body_to_text("<p>Hi</p>", "HTML").strip() == "Hi"

    def test_empty_body(self):
        assert body_to_text("", "html") == ""
