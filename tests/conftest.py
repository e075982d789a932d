"""
Pytest configuration for instrument-classifier tests.

Adds project root to sys.path so that 'instrument_classifier' and 'main'
import without installation. Defines markers and shared fixtures.
"""
import logging
import sys
import numpy as np
import pytest
from pathlib import Path
from typing import List

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from instrument_classifier.core import SpectrogramConfig, SpectrogramEngine


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "invariant: Numeric invariant tests")
    config.addinivalue_line("markers", "slow: Slow tests (default-size engine)")
    config.addinivalue_line("markers", "e2e: End-to-end tests (CLI, audio files)")


# =============================================================================
# Helpers
# =============================================================================

def make_tone(frequencies, duration: float, sr: int, amplitude: float = 0.5) -> np.ndarray:
    """Sum of sines, one per frequency, float64."""
    t = np.arange(int(duration * sr)) / sr
    y = np.zeros_like(t)
    for f in frequencies:
        y += amplitude * np.sin(2 * np.pi * f * t)
    return y / max(len(frequencies), 1)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logger() so tests don't leak streams."""
    yield
    package_logger = logging.getLogger("instrument_classifier")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def project_root() -> Path:
    """Return project root path."""
    return PROJECT_ROOT


@pytest.fixture
def labels() -> List[str]:
    """Three-class label set used by the decision scenarios."""
    return ["khaen", "pin", "sing"]


@pytest.fixture
def small_config() -> SpectrogramConfig:
    """Small, fast engine configuration (16 kHz, 512-point FFT, 40 Mels)."""
    return SpectrogramConfig(
        sample_rate=16000,
        fft_size=512,
        hop_length=256,
        num_mels=40,
        f_max=8000.0,
    )


@pytest.fixture
def small_engine(small_config) -> SpectrogramEngine:
    return SpectrogramEngine(small_config)


@pytest.fixture
def tone_16k() -> np.ndarray:
    """1 second, 1 kHz tone at 16 kHz."""
    return make_tone([1000.0], duration=1.0, sr=16000)


@pytest.fixture
def tone_44k() -> np.ndarray:
    """1 second, 440 + 880 Hz at 44.1 kHz."""
    return make_tone([440.0, 880.0], duration=1.0, sr=44100)
