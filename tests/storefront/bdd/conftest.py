"""Shared BDD fixtures for the storefront."""

import pytest


@pytest.fixture()
def outcome():
    """Container for the result of the last When step."""
    return {"result": None}
