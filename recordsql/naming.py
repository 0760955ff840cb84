from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """
    Convert an attribute or class name to snake_case.

    Example:
        >>> snake_case("UserID")
        'user_id'
        >>> snake_case("HTTPServer")
        'http_server'
        >>> snake_case("created_at")
        'created_at'
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


def pluralize(word: str) -> str:
    # English suffix rules only; irregular nouns need an explicit __tablename__.
    if not word:
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def table_name(class_name: str) -> str:
    return pluralize(snake_case(class_name))


def column_name(attr_name: str) -> str:
    return snake_case(attr_name)


def is_primary_key(attr_name: str) -> bool:
    """An attribute named ``id`` in any letter case is the primary key."""
    return attr_name.lower() == "id"
