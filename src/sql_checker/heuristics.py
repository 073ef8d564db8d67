"""Lexical helpers for recognising table-creation statements.

Neither helper tokenizes SQL. ``create table`` inside a string literal or a
comment is still treated as a creation statement.
"""

from __future__ import annotations

import re

CREATE_TABLE = "create table"

_CREATE_TABLE_RE = re.compile(re.escape(CREATE_TABLE), re.IGNORECASE)
_WHITESPACE_RUN = re.compile(r"\s+")
_NAME_DELIMITER = re.compile(r"[\s(]")


def is_create_statement(statement: str) -> bool:
    return CREATE_TABLE in statement.lower()


def get_table_name(statement: str) -> str:
    """Return the identifier following ``create table``, or ``""``.

    Runs of whitespace are collapsed and an opening parenthesis ends the
    name, so ``create table users(id int)`` yields ``users``. Quoted and
    schema-qualified names come back as written, e.g. ``public.users``.
    """
    match = _CREATE_TABLE_RE.search(statement)
    if match is None:
        return ""

    rest = _WHITESPACE_RUN.sub(" ", statement[match.end():]).strip()
    name = _NAME_DELIMITER.split(rest, maxsplit=1)[0]
    return name.rstrip(";")
