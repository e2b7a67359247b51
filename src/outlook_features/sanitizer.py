"""Email body normalization.

Objective:
    Convert raw body content returned by Microsoft Graph (often HTML) into the
    plain text an Outlook client exposes as the message body, so word counts
    are taken over visible text rather than markup.

High-level call tree:
    - :func:`body_to_text`
        - :func:`extract_text_from_html` (HTML input)
"""

from bs4 import BeautifulSoup


def extract_text_from_html(html_content: str) -> str:
    """Extract plain text from HTML.

    Removes non-content elements (scripts, styles, document metadata) and
    returns the visible text.

    Args:
        html_content: Raw HTML string.

    Returns:
        str: Extracted plain text.
    """
    if not html_content:
        return ""

    soup = BeautifulSoup(html_content, "html.parser")

    # Remove script and style elements
    for element in soup(["script", "style", "head", "meta", "link"]):
        element.decompose()

    return soup.get_text(separator=" ")


def body_to_text(body_content: str, content_type: str = "text") -> str:
    """Return the plain-text form of a message body.

    Args:
        body_content: Raw body content.
        content_type: Graph content type ("html" or "text").

    Returns:
        str: Plain text (unchanged for text bodies).
    """
    if not body_content:
        return ""

    if content_type.lower() == "html":
        return extract_text_from_html(body_content)
    return body_content
