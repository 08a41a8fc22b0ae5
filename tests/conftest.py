"""Shared fixtures for the exposure engine tests."""

import logging

import pytest

from tests.factories import make_classification


@pytest.fixture
def classification():
    """Small country/sector table; services never see the bundled JSON."""
    return make_classification()


@pytest.fixture
def no_sector_vocabulary():
    """Table without a sector list, so sector names pass through unchanged."""
    return make_classification(sectors=[], sector_synonyms={})


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """CLI tests reconfigure the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
