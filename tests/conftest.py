"""
Pytest fixtures for LegalEase. The Flask app runs with the simulated
latency disabled and an empty export cache per test.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def flask_app():
    import app as app_module

    app_module.app.config.update(TESTING=True, ANALYSIS_DELAY=0)
    app_module._cache.clear()
    yield app_module.app
    app_module._cache.clear()


@pytest.fixture
def client(flask_app):
    """Flask test client with a fresh session."""
    with flask_app.test_client() as c:
        yield c


@pytest.fixture
def liability_doc():
    return "This Agreement is governed by the laws of California. Liability is limited to fees paid."
