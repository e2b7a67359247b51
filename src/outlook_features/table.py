"""Comma-delimited table encoding.

Objective:
    Serialize feature records into the plain-text table consumed by the
    training tooling, using a small custom escaping grammar.

Escaping grammar (:func:`escape_csv`):
    =========  ====================  ===============
    input      output                forces quoting
    =========  ====================  ===============
    newline    ``\\n`` (2 chars)     yes
    tab        ``\\t`` (2 chars)     yes
    ``,``      ``,``                 yes
    space      space                 yes
    ``"``      ``\\"``               yes
    other      unchanged             no
    =========  ====================  ===============

    A field that contained any quoting character is wrapped in double quotes;
    any other field is emitted as-is. ``None`` becomes an empty field.

High-level call tree:
    - :func:`write_table`
        - :func:`encode_table`
            - :func:`to_csv_string`
                - :func:`escape_csv`
    - :func:`split_row` (best-effort reader for headers and field counts)

Operational notes:
    - The header is taken from the first record only; every record must share
      its key order.
    - Backslashes in the input are not escaped, so :func:`split_row` cannot
      always distinguish a literal ``\\n`` from an encoded newline.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .models import FeatureRecord

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\n": "\\n",
    "\t": "\\t",
    ",": ",",
    " ": " ",
    '"': '\\"',
}

_UNESCAPES = {
    "n": "\n",
    "t": "\t",
    '"': '"',
}


def escape_csv(value: str) -> str:
    """Escape one field value.

    Args:
        value: Raw field text.

    Returns:
        str: Escaped field, quoted when it contained a newline, tab, comma,
        space or double quote.
    """
    escaped = []
    apply_quotes = False

    for char in value:
        replacement = _ESCAPES.get(char)
        if replacement is None:
            escaped.append(char)
        else:
            escaped.append(replacement)
            apply_quotes = True

    field = "".join(escaped)
    if apply_quotes:
        return f'"{field}"'
    return field


def to_csv_string(value: Any) -> str:
    """Render a record value as a table field.

    Args:
        value: Any record value.

    Returns:
        str: Empty string for ``None``; otherwise the escaped ``str()`` form.
    """
    if value is None:
        return ""
    return escape_csv(str(value))


def encode_table(records: Sequence[FeatureRecord]) -> str:
    """Encode records as table text.

    Args:
        records: Records sharing the key order of ``records[0]``.

    Returns:
        str: Header line followed by one line per record, each ending in
        ``\\n``.

    Raises:
        ValueError: If ``records`` is empty.
    """
    if not records:
        raise ValueError("Cannot encode an empty record sequence")

    columns = list(records[0].keys())
    lines = [",".join(columns)]
    for record in records:
        lines.append(",".join(to_csv_string(record[column]) for column in columns))

    return "\n".join(lines) + "\n"


def write_table(records: Sequence[FeatureRecord], destination: Path) -> Path:
    """Encode records and replace ``destination`` with the result.

    Args:
        records: Records to write (must be non-empty).
        destination: Output file path; parent directories are created.

    Returns:
        Path: The written path.

    Raises:
        ValueError: If ``records`` is empty.
    """
    text = encode_table(records)

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text, encoding="utf-8")

    logger.info(f"Wrote {len(records)} rows to {destination}")
    return destination


def split_row(line: str) -> list[str]:
    """Split one table line back into field values.

    Quoted fields are unescaped (``\\"``, ``\\n``, ``\\t``); any other
    backslash pair inside quotes is kept verbatim. Unquoted fields are
    returned unchanged.

    Args:
        line: One table line without its terminator.

    Returns:
        list[str]: Field values.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if in_quotes:
            if char == "\\" and i + 1 < len(line):
                following = line[i + 1]
                current.append(_UNESCAPES.get(following, char + following))
                i += 2
                continue
            if char == '"':
                in_quotes = False
            else:
                current.append(char)
        elif char == '"' and not current:
            in_quotes = True
        elif char == ",":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields
