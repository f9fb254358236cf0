"""Root-level pytest fixtures for the stipple test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of raw
dicts.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

import numpy as np

from stipple.schemas import ParamConfig, UserConfig, resolve_config
from stipple.schemas.internal import DotParameters


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_processor_init(internal_config):
    ...     proc = StillImageProcessor(internal_config)
    ...     assert proc.max_canvas_size == 4096
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_block(make_config):
    ...     config = make_config(block_size=10)
    ...     assert config.render.block_size == 10
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


@pytest.fixture
def make_params():
    """Factory for DotParameters with the default control values."""
    def _make(**overrides):
        values = dict(block_size=6, max_radius=3, spacing=1,
                      threshold_percent=20, dark_background=False)
        values.update(overrides)
        return DotParameters(**values)

    return _make


# =============================================================================
# Raster Fixtures
# =============================================================================

@pytest.fixture
def white_raster():
    """Opaque white 8x8 raster."""
    return np.full((8, 8, 4), 255, dtype=np.uint8)


@pytest.fixture
def black_raster():
    """Opaque black 8x8 raster."""
    raster = np.zeros((8, 8, 4), dtype=np.uint8)
    raster[..., 3] = 255
    return raster


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard stipple output directory structure.

    Returns dict with keys: base, renders, animations, logs
    """
    from stipple.setup_directories import setup_output_directories
    return setup_output_directories(temp_dir)
