"""Prioritised field extraction from loosely shaped JSON documents.

Identity-service responses carry the values the client needs at paths that
may or may not exist, depending on the outcome (a rejected login has no
``session_token``; a whoami answer may use ``tokenized``, ``token`` or
``jwt``). Each lookup is expressed as a tuple of *field paths* evaluated in
order; the first path that resolves to a non-empty string wins.

A field path is a tuple of object keys (``str``) and array indexes
(``int``)::

    first_non_empty(doc, [("ui", "messages", 0, "text"), ("message",)])
"""

from __future__ import annotations

from typing import Any, Sequence, Union

PathSegment = Union[str, int]
FieldPath = tuple[PathSegment, ...]


def dig(document: Any, path: FieldPath) -> Any:
    """Follow *path* into *document*.

    Args:
        document: Parsed JSON value.
        path: Keys and indexes to follow.

    Returns:
        The value at *path*, or ``None`` when any segment is missing or
        applied to a value of the wrong type.
    """
    current = document
    for segment in path:
        if isinstance(segment, int):
            if not isinstance(current, list) or not -len(current) <= segment < len(current):
                return None
            current = current[segment]
        else:
            if not isinstance(current, dict) or segment not in current:
                return None
            current = current[segment]
    return current


def string_at(document: Any, path: FieldPath) -> str:
    """Return the string at *path*, or ``""`` if it is absent or not a string."""
    value = dig(document, path)
    return value if isinstance(value, str) else ""


def first_non_empty(document: Any, paths: Sequence[FieldPath]) -> str:
    """Return the first non-empty string found along *paths*, in order.

    Later paths are only consulted when every earlier path yields nothing,
    so the order of *paths* is the precedence contract.

    Args:
        document: Parsed JSON value.
        paths: Candidate field paths, highest priority first.

    Returns:
        The first non-empty string, or ``""`` if none of the paths match.
    """
    for path in paths:
        value = string_at(document, path)
        if value:
            return value
    return ""
