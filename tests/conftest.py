"""Shared fixtures for the PathForge test suite."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """A seeded generator so sampling tests are repeatable."""
    return np.random.default_rng(1234)
