from __future__ import annotations

import pytest

from recordsql.config import NamingConvention
from recordsql.naming import is_primary_key, pluralize, snake_case, table_name


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Name", "name"),
        ("Id", "id"),
        ("ID", "id"),
        ("UserID", "user_id"),
        ("HTTPServer", "http_server"),
        ("createdAt", "created_at"),
        ("created_at", "created_at"),
    ],
)
def test_snake_case(name: str, expected: str) -> None:
    assert snake_case(name) == expected


@pytest.mark.parametrize(
    "word,expected",
    [
        ("user", "users"),
        ("category", "categories"),
        ("key", "keys"),
        ("box", "boxes"),
        ("address", "addresses"),
        ("batch", "batches"),
    ],
)
def test_pluralize(word: str, expected: str) -> None:
    assert pluralize(word) == expected


def test_table_name_is_pluralized_snake_case() -> None:
    assert table_name("User") == "users"
    assert table_name("OrderItem") == "order_items"


def test_primary_key_convention_ignores_case() -> None:
    assert is_primary_key("id")
    assert is_primary_key("Id")
    assert is_primary_key("ID")
    assert not is_primary_key("user_id")


def test_naming_convention_rejects_non_callables() -> None:
    with pytest.raises(TypeError):
        NamingConvention(column_name="name")  # type: ignore[arg-type]
