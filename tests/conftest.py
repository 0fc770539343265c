"""Shared fixtures for the calculator tests."""

import pytest

from rates import build_rate_table


@pytest.fixture
def table():
    """A freshly built rate table, independent of the process-wide one."""
    return build_rate_table()


@pytest.fixture
def client():
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
