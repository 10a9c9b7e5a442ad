"""
Pytest configuration and fixtures for map tests
"""

import pytest
import numpy as np
from sofm import SOM, SOMParameters, ConnectionType, InitType


@pytest.fixture
def sample_data():
    """Generate sample 3D data for testing"""
    rng = np.random.RandomState(42)
    return rng.random_sample((50, 3))


@pytest.fixture
def small_data():
    """Generate small dataset for quick tests"""
    rng = np.random.RandomState(42)
    return rng.random_sample((10, 2))


@pytest.fixture
def two_clusters():
    """Two well separated pairs of points"""
    return np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]])


@pytest.fixture
def basic_parameters():
    """Parameters with a fixed seed"""
    return SOMParameters(seed=42)


@pytest.fixture
def trained_som(sample_data, basic_parameters):
    """Pre-trained map for testing"""
    som = SOM(sample_data, 4, 4, 10, ConnectionType.GRID_EIGHT, basic_parameters)
    som.train()
    return som


@pytest.fixture
def all_conn_types():
    """All connection types for testing"""
    return list(ConnectionType)


@pytest.fixture
def all_init_types():
    """All initialization types for testing"""
    return list(InitType)
