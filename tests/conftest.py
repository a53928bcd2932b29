"""Pytest configuration and fixtures for stache tests."""

import pytest

import stache
from stache import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic stache Environment."""
    return Environment()


@pytest.fixture
def env_no_cache():
    """Create an Environment with caching disabled."""
    return Environment(cache=None)


@pytest.fixture
def env_with_loader():
    """Create an Environment whose loader provides a few partials."""
    loader = DictLoader(
        {
            "user": "<b>{{name}}</b>",
            "list": "<ul>\n{{#items}}\n  <li>{{.}}</li>\n{{/items}}\n</ul>\n",
            "page": "<h1>{{title}}</h1>\n{{>user}}",
        }
    )
    return Environment(loader=loader)


@pytest.fixture
def default_env():
    """The module-level default environment, restored after the test."""
    env = stache.default_environment
    escape, tags, loader = env.escape, env.tags, env.loader
    env.clear_cache()
    yield env
    env.escape, env.tags, env.loader = escape, tags, loader
    env.clear_cache()
