from __future__ import annotations

import re

import sqlparse

DEFAULT_DELIMITER = ";"


def split_statements(text: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split ``text`` into stripped, non-empty statements.

    ``;`` goes through sqlparse. A word delimiter such as ``GO`` only counts on
    a line of its own; any other delimiter splits wherever it appears.
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    line_delimited = re.fullmatch(r"\w+", delimiter) is not None
    if delimiter == DEFAULT_DELIMITER:
        raw = sqlparse.split(text)
    elif line_delimited:
        raw = re.split(rf"^[ \t]*{re.escape(delimiter)}[ \t]*$", text, flags=re.MULTILINE | re.IGNORECASE)
    else:
        raw = text.split(delimiter)

    statements: list[str] = []
    for item in raw:
        statement = item.strip()
        while not line_delimited and statement.endswith(delimiter):
            statement = statement[: -len(delimiter)].rstrip()
        if statement:
            statements.append(statement)
    return statements
