"""
CSV serialization for export rows.

Headers are the Row field names in lowercase hyphenated form, values are
comma separated, and a value is quoted only when it contains a comma, a double
quote or a newline.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, List, Sequence, Union

from catalog.row import ROW_FIELDS, Row

logger = logging.getLogger("dexport.serializer")

_NEEDS_QUOTING = re.compile(r'[",\n]')
# An underscore after a letter becomes a hyphen; one after a digit is dropped,
# so ability1_description -> ability1description and egg_group1 -> egg-group1.
_WORD_BREAK = re.compile(r"(?<=[a-z])_")


class EmptyTableError(ValueError):
    """Raised when asked to serialize a table with no rows."""


def column_name(field_name: str) -> str:
    """Header text for a Row field (`special_attack` -> `special-attack`)."""
    return _WORD_BREAK.sub("-", field_name).replace("_", "").lower()


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def csv_escape(value: Any) -> str:
    text = format_value(value)
    if _NEEDS_QUOTING.search(text):
        return '"' + text.replace('"', '""') + '"'
    return text


def header_line() -> str:
    return ",".join(column_name(name) for name in ROW_FIELDS)


def serialize_rows(rows: Sequence[Row]) -> str:
    """
    Render rows as CSV text.

    Args:
        rows: Rows to render.

    Returns:
        Header line followed by one line per row, joined with newlines.

    Raises:
        EmptyTableError: If `rows` is empty.
    """
    if not rows:
        raise EmptyTableError("No rows to serialize; the catalog came back empty")

    lines = [header_line()]
    lines.extend(",".join(csv_escape(value) for value in row.values()) for row in rows)
    return "\n".join(lines)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


async def write_table(rows: List[Row], path: Union[str, Path]) -> Path:
    """
    Serialize rows and write them to `path`, replacing any existing file.

    Returns:
        The path written.
    """
    path = Path(path)
    content = serialize_rows(rows)
    await asyncio.to_thread(_write_text, path, content)
    logger.info(f"CSV file created at {path}", extra={"row_count": len(rows)})
    return path
