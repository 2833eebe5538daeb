"""
Pytest Configuration and Shared Fixtures

This module provides common fixtures used across all test categories:
- Unit tests
- Integration tests
- Regression tests
"""

import pytest
import shutil
import tempfile
import sys
from pathlib import Path
import numpy as np

# Ensure project root is in path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================

@pytest.fixture
def temp_output_dir():
    """Provide temp dir that cleans up after test."""
    d = tempfile.mkdtemp(prefix="hmdsim_test_")
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# OPTICS FIXTURES
# =============================================================================

@pytest.fixture
def cardboard_config():
    """Cardboard-style clone viewer (the OpticalConfig defaults)."""
    from src.optics.config import OpticalConfig
    return OpticalConfig(
        f=0.043, ipd=0.065, eye_relief=0.018, dist_lens2display=0.042,
        display_width=0.12096, display_height=0.068, far_from_near=1.5,
    )


@pytest.fixture
def cardboard_v2_config():
    """Google Cardboard 2.0 optics."""
    from src.optics.config import OpticalConfig
    return OpticalConfig(
        f=0.040, ipd=0.064, eye_relief=0.018, dist_lens2display=0.039,
        display_width=0.12096, display_height=0.06803, far_from_near=1.5,
    )


@pytest.fixture
def derived(cardboard_config):
    """Derived optics for the Cardboard clone."""
    from src.optics.solver import derive_optics
    return derive_optics(cardboard_config)


@pytest.fixture
def solver(cardboard_config):
    """OpticalSolver primed with the Cardboard clone."""
    from src.optics.solver import OpticalSolver
    return OpticalSolver(cardboard_config)


# =============================================================================
# RIG FIXTURES
# =============================================================================

@pytest.fixture
def identity_pose():
    """Headset at its default position with identity orientation."""
    from src.rig.pose import HMDPose
    return HMDPose(position=[0.0, 0.1, -0.5], rotation=[0.0, 0.0, 0.0])


@pytest.fixture
def rig():
    from src.rig.eye_rig import EyePoseRig
    return EyePoseRig()


# =============================================================================
# CONTROLLER FIXTURES
# =============================================================================

@pytest.fixture
def controller(cardboard_config):
    """HMDController on a 1920x1080 canvas in simulation (PIP) mode."""
    from src.hmd import HMDController
    return HMDController(config=cardboard_config, canvas_size=(1920, 1080))


@pytest.fixture
def presets_dir() -> Path:
    """Return path to bundled presets directory."""
    return PROJECT_ROOT / 'config' / 'presets'


# =============================================================================
# HELPER FIXTURES
# =============================================================================

@pytest.fixture
def assert_approx():
    """Helper for approximate float comparisons."""
    def _assert_approx(actual, expected, rel=1e-6, abs=1e-9):
        if isinstance(expected, (list, tuple, np.ndarray)):
            for a, e in zip(actual, expected):
                assert pytest.approx(e, rel=rel, abs=abs) == a
        else:
            assert pytest.approx(expected, rel=rel, abs=abs) == actual
    return _assert_approx


# =============================================================================
# PYTEST HOOKS
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Component unit tests")
    config.addinivalue_line("markers", "slow: Slow running tests")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their location."""
    for item in items:
        path = str(item.path)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "regression" in path:
            item.add_marker(pytest.mark.regression)
