from __future__ import annotations

from typing import Any

import pytest

from stache import DictLoader, Environment

PARTIALS = {
    "item": "<li class=\"item\">{{name}}: {{price}}</li>\n",
    "header": "<header><h1>{{title}}</h1></header>\n",
}


def build_small_context() -> dict[str, Any]:
    """Small view: a handful of scalars."""
    return {"title": "Hello", "name": "World", "count": 3, "show": True}


def build_medium_context() -> dict[str, Any]:
    """Medium view: ~100 variables with nested structures."""
    context: dict[str, Any] = {
        "title": "Catalog",
        "items": [{"id": i, "name": f"Item {i}", "price": i * 1.5} for i in range(100)],
        "categories": [f"Category {i}" for i in range(10)],
    }
    for i in range(80):
        context[f"var_{i}"] = f"value_{i}"
    return context


def build_large_context() -> dict[str, Any]:
    """Large view: 1000 items with nested owners and tags."""
    return {
        "title": "Inventory <all>",
        "items": [
            {
                "id": i,
                "name": f"Item {i} & co",
                "price": i * 1.5,
                "owner": {"name": f"Owner {i % 17}", "email": f"o{i % 17}@example.com"},
                "tags": [f"tag{j}" for j in range(i % 5)],
            }
            for i in range(1000)
        ],
    }


@pytest.fixture(scope="session")
def stache_env() -> Environment:
    return Environment(loader=DictLoader(PARTIALS))


@pytest.fixture(scope="session")
def stache_env_no_cache() -> Environment:
    return Environment(loader=DictLoader(PARTIALS), cache=None)


@pytest.fixture(scope="session")
def small_context() -> dict[str, Any]:
    return build_small_context()


@pytest.fixture(scope="session")
def medium_context() -> dict[str, Any]:
    return build_medium_context()


@pytest.fixture(scope="session")
def large_context() -> dict[str, Any]:
    return build_large_context()
