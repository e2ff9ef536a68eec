"""Pytest configuration and fixtures."""

import pytest

from repofinder.config import DetectionConfig
from repofinder.detector import Detector
from repofinder.models.ledger import Ledger
from tests.helpers.factories import abc_ledger, make_config


@pytest.fixture
def config() -> DetectionConfig:
    """Config with a [0, 1%] daily band and default search bounds."""
    return make_config()


@pytest.fixture
def ledger_abc() -> Ledger:
    """Ledger with one three-transaction repo (A repaid by B and C)."""
    return abc_ledger()


@pytest.fixture
def detector(config: DetectionConfig) -> Detector:
    """A detector using the test config."""
    return Detector(config=config)
