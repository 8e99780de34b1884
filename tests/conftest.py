"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from supergraph_bridge.core import registry

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared subgraph documents
# ---------------------------------------------------------------------------

USERS_SDL = '''\
"""A registered user."""
type User @key(fields: "id") {
  id: ID!
  name: String
}

type Query {
  me: User
}
'''

REVIEWS_SDL = '''\
"""Someone who writes reviews."""
type User @key(fields: "id") {
  id: ID!
  reviews: [Review]
}

type Review {
  body: String
  author: User
}

type Query {
  latestReviews: [Review]
}
'''


@pytest.fixture
def users_sdl() -> str:
    return USERS_SDL


@pytest.fixture
def reviews_sdl() -> str:
    return REVIEWS_SDL


@pytest.fixture
def clean_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start the test with no compose entry point registered."""
    monkeypatch.setattr(registry, "_entry_point", None)
