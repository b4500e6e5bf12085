"""Root conftest: src/ on sys.path, and no real HTTP from any test."""
import sys
from pathlib import Path

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    def refuse(self, request, **kwargs):
        raise requests.ConnectionError(f"network disabled in tests: {request.url}")

    monkeypatch.setattr(requests.Session, "send", refuse)
