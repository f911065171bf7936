from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import hits` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hits.badge.fonts import load_typefaces  # noqa: E402
from hits.badge.text_width import TextWidthResolver  # noqa: E402
from hits.main import app  # noqa: E402


@pytest.fixture
def client() -> Iterator[TestClient]:
    """TestClient with the lifespan running.

    Each test gets freshly built services, so counters start at zero and
    the broadcaster has no subscribers.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def resolver() -> TextWidthResolver:
    """Resolver over whatever fonts this machine has (or Pillow's embedded one)."""
    return TextWidthResolver(load_typefaces())
