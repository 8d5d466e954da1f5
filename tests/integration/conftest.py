"""
Shared fixtures for integration tests.
"""

import random

import numpy as np
import pytest

from neatcore.run.config import Config


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility (for code falling back to the global generators)."""
    np.random.seed(42)
    random.seed(42)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def xor_inputs_standard():
    """XOR inputs for standard network (list format)."""
    return [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]


@pytest.fixture
def xor_outputs_standard():
    """XOR expected outputs for standard network (list format)."""
    return [[0.0], [1.0], [1.0], [0.0]]


@pytest.fixture
def xor_inputs_batch():
    """XOR inputs for batch networks (numpy array format)."""
    return np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])


@pytest.fixture
def xor_config():
    """Configuration for evolving XOR networks."""
    config = Config()
    config.use_bias                   = True
    config.population_size            = 60
    config.initial_cxn_policy         = "full"
    config.compatibility_threshold    = 3.0
    config.node_add_probability       = 0.1
    config.connection_add_probability = 0.2
    config.activation                 = "steepened_sigmoid"
    return config
