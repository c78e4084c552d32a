"""Shared fixtures."""

import os

import pytest

# No rate limiting or auth in tests unless a test sets them
os.environ.setdefault("DEFAULT_LIMITS", "")
os.environ.pop("API_KEY", None)
os.environ.pop("SENTRY_DSN", None)

from emissions import EmissionEngine  # noqa: E402
from route_table import Route, RouteTable, default_table  # noqa: E402


@pytest.fixture
def engine():
    return EmissionEngine()


@pytest.fixture
def routes():
    return default_table()


@pytest.fixture
def small_routes():
    """Fixture table with a duplicate pair that disagrees on distance."""
    return RouteTable([
        Route("Alpha, AA", "Beta, BB", 100),
        Route("Gamma, CC", "Alpha, AA", 250.5),
        Route("Beta, BB", "Alpha, AA", 999),
    ])


@pytest.fixture
def client(engine, routes):
    from app import create_app

    flask_app = create_app(engine, routes)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c
