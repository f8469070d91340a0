"""Shared fixtures for the Spiral Handrail Studio test suite."""
import sys
import os
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spiral_handrail import DEFAULT_CONFIG


@pytest.fixture
def default_config():
    """Returns a copy of the default handrail configuration (the measured 220 degree rail)."""
    return DEFAULT_CONFIG.copy()


@pytest.fixture
def scaled_config():
    """A larger rail: longer arc, more rise, taller pitch block."""
    config = DEFAULT_CONFIG.copy()
    config.update({
        "total_degrees": 270.0,
        "total_helical_rise": 9.5,
        "total_arc_distance": 24.0,
        "pitch_block": 1.5,
        "total_segments": 12,
    })
    return config


@pytest.fixture
def sample_overrides():
    """Manual rise overrides at whole and half inch marks."""
    return {2.0: 2.1, 5.5: 3.6, 10.0: 4.95}
