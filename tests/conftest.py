"""Pytest configuration and shared fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add the source directory to the Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture
def config():
    """Default configuration: 2 inputs, 1 output, no bias, no recurrence."""
    from neatcore.run.config import Config
    return Config()


@pytest.fixture
def registry(config):
    """Empty innovation registry matching the default configuration."""
    from neatcore.genotype.innovation_registry import InnovationRegistry
    return InnovationRegistry.for_config(config)


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return random.Random(1234)
