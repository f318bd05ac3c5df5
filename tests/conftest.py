import sys
import os
import pytest

# Make the 'cachevis' package importable when running from a source checkout
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cachevis.core.geometry import make_geometry


@pytest.fixture
def geometry():
    """The visualizer's default cache: 256B, 32B blocks, 4-way -> 2 sets."""
    return make_geometry(256, 32, 4)


@pytest.fixture
def direct_mapped():
    return make_geometry(256, 32, 1)


@pytest.fixture
def fully_assoc():
    return make_geometry(256, 32, "fully")
