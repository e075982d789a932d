"""
Mel-spectrogram engine.

Pipeline per buffer (all float64 until the final float32 tensor):

    framing (fft_size / hop_length) -> Hann window -> FFT
    -> power spectrum (first fft_size/2+1 bins) -> Mel projection
    -> dB (10·log10(x + eps)) -> normalization -> flatten per layout

The window and filterbank are computed once per engine and stored read-only,
so one engine can be shared by concurrent callers; every call allocates its
own scratch arrays.

Normalization policies:
    MAX_RELATIVE_DB  10·log10((mel + eps) / (max + eps)), values <= 0 (default)
    MIN_MAX          dB rescaled to [0, 1] with the global min/max

Tensor layouts:
    MEL_MAJOR    [mel][frame] flattened row-major (default)
    FRAME_MAJOR  [frame][mel] flattened row-major
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import librosa
import numpy as np

from ..utils.logger import get_logger
from .errors import (
    ConfigurationError,
    EmptyBufferError,
    NonPowerOfTwoFFTSizeError,
    ShapeMismatchError,
)
from .primitives.fft import fft, is_power_of_two
from .primitives.mel import filterbank_report, mel_filterbank
from .primitives.window import hann_window

logger = get_logger(__name__)


class NormalizationPolicy(str, Enum):
    """How dB Mel energies are scaled."""
    MAX_RELATIVE_DB = "max_relative_db"
    MIN_MAX = "min_max"

    def __str__(self):
        return self.value


class TensorLayout(str, Enum):
    """Flattening order of the (frame, mel) matrix."""
    MEL_MAJOR = "mel_major"
    FRAME_MAJOR = "frame_major"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class SpectrogramConfig:
    """
    Feature extraction parameters.

    Must match the extraction the deployed model was trained with.

    Attributes:
        input_shape: Declared model input shape without the batch axis, e.g.
            (128, -1, 1). One axis may be -1 (inferred from the tensor size).
            None means a flat vector.
    """
    sample_rate: int = 44100
    fft_size: int = 2048
    hop_length: int = 512
    num_mels: int = 128
    f_min: float = 0.0
    f_max: float = 8000.0
    epsilon: float = 1e-10
    normalization: NormalizationPolicy = NormalizationPolicy.MAX_RELATIVE_DB
    layout: TensorLayout = TensorLayout.MEL_MAJOR
    input_shape: Optional[Tuple[int, ...]] = None

    @property
    def num_bins(self) -> int:
        """Number of non-redundant FFT bins."""
        return self.fft_size // 2 + 1

    def with_options(self, **changes) -> 'SpectrogramConfig':
        """Copy with some fields replaced."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, values: Dict[str, Any], sample_rate: Optional[int] = None) -> 'SpectrogramConfig':
        """
        Build from a plain mapping (the ``features`` config section).

        Unknown keys are ignored. Enum values are given by name string.
        """
        kwargs: Dict[str, Any] = {}
        for key in ('fft_size', 'hop_length', 'num_mels'):
            if values.get(key) is not None:
                kwargs[key] = int(values[key])
        for key in ('f_min', 'f_max', 'epsilon'):
            if values.get(key) is not None:
                kwargs[key] = float(values[key])

        try:
            if values.get('normalization') is not None:
                kwargs['normalization'] = NormalizationPolicy(values['normalization'])
            if values.get('layout') is not None:
                kwargs['layout'] = TensorLayout(values['layout'])
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid feature configuration: {e}",
                data={"normalization": values.get('normalization'), "layout": values.get('layout')},
            ) from e

        if values.get('input_shape') is not None:
            kwargs['input_shape'] = tuple(int(d) for d in values['input_shape'])
        if sample_rate is not None:
            kwargs['sample_rate'] = int(sample_rate)

        return cls(**kwargs)

    @classmethod
    def from_config(cls, config) -> 'SpectrogramConfig':
        """
        Build from a Config object.

        A non-null ``features.preset`` selects a named preset and replaces the
        individual feature keys; ``audio.sample_rate`` always applies.
        """
        sample_rate = config.get('audio.sample_rate')
        preset = config.get('features.preset')
        if preset:
            base = get_preset(preset)
            if sample_rate is not None:
                base = base.with_options(sample_rate=int(sample_rate))
            return base
        return cls.from_dict(config.features, sample_rate=sample_rate)


# Historic feature variants, each a complete configuration
PRESETS: Dict[str, SpectrogramConfig] = {
    # Single-shot CNN: [1, 128, frames, 1], min-max scaled
    'single_shot_v1': SpectrogramConfig(
        normalization=NormalizationPolicy.MIN_MAX,
        layout=TensorLayout.MEL_MAJOR,
        input_shape=(128, -1, 1),
    ),
    # Attention model: per-segment mel-major vectors, max-relative dB
    'segmented_v2': SpectrogramConfig(
        normalization=NormalizationPolicy.MAX_RELATIVE_DB,
        layout=TensorLayout.MEL_MAJOR,
    ),
    # Dense model over a flat frame-major vector
    'frame_major_flat': SpectrogramConfig(
        normalization=NormalizationPolicy.MAX_RELATIVE_DB,
        layout=TensorLayout.FRAME_MAJOR,
        input_shape=(-1,),
    ),
}


def get_preset(name: str) -> SpectrogramConfig:
    """Look up a named preset."""
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown feature preset: {name}",
            data={"preset": name, "available": sorted(PRESETS)},
        ) from None


@dataclass(frozen=True, eq=False)
class FeatureTensor:
    """Flattened, normalized Mel-spectrogram for one buffer."""
    data: np.ndarray  # 1-D float32
    num_frames: int
    num_mels: int
    layout: TensorLayout

    @property
    def shape(self) -> Tuple[int, int]:
        """2-D shape in the declared layout."""
        if self.layout == TensorLayout.MEL_MAJOR:
            return (self.num_mels, self.num_frames)
        return (self.num_frames, self.num_mels)

    def as_matrix(self) -> np.ndarray:
        return self.data.reshape(self.shape)

    def __len__(self) -> int:
        return self.data.shape[0]


class SpectrogramEngine:
    """
    Computes normalized Mel-spectrogram features from sample buffers.

    Construction validates the configuration and precomputes the Hann window
    and Mel filterbank. Calls are pure functions of the input buffer.
    """

    def __init__(self, config: Optional[SpectrogramConfig] = None):
        """
        Initialize engine.

        Args:
            config: Feature configuration (default: SpectrogramConfig())

        Raises:
            NonPowerOfTwoFFTSizeError: If config.fft_size is not a power of two
            ConfigurationError: If hop_length, num_mels or the band edges are invalid
        """
        if config is None:
            config = SpectrogramConfig()

        if not is_power_of_two(config.fft_size):
            raise NonPowerOfTwoFFTSizeError(
                f"fft_size must be a power of 2, got {config.fft_size}",
                data={"fft_size": config.fft_size},
            )
        if config.hop_length < 1 or config.num_mels < 1:
            raise ConfigurationError(
                "hop_length and num_mels must be positive",
                data={"hop_length": config.hop_length, "num_mels": config.num_mels},
            )
        if not 0.0 <= config.f_min < config.f_max:
            raise ConfigurationError(
                "Band edges must satisfy 0 <= f_min < f_max",
                data={"f_min": config.f_min, "f_max": config.f_max},
            )

        self.config = config
        self.window = hann_window(config.fft_size)
        self.filterbank = mel_filterbank(
            config.num_mels,
            config.num_bins,
            config.sample_rate,
            config.f_min,
            config.f_max,
        )

        report = filterbank_report(self.filterbank)
        logger.info("Spectrogram engine ready", data={
            "fft_size": config.fft_size,
            "hop_length": config.hop_length,
            "num_mels": config.num_mels,
            "normalization": str(config.normalization),
            "layout": str(config.layout),
            "empty_filters": len(report.empty_rows),
        })

    # ============== Framing ==============

    def num_frames(self, length: int) -> int:
        """
        Frame count for a buffer of the given length.

        floor((length - fft_size) / hop_length) + 1; buffers shorter than
        fft_size are zero-padded to a single frame.
        """
        if length <= 0:
            return 0
        if length < self.config.fft_size:
            return 1
        return (length - self.config.fft_size) // self.config.hop_length + 1

    def _samples(self, buffer) -> np.ndarray:
        samples = np.asarray(buffer, dtype=np.float64).reshape(-1)
        if samples.shape[0] == 0:
            raise EmptyBufferError("Sample buffer is empty", data={"length": 0})
        if samples.shape[0] < self.config.fft_size:
            padded = np.zeros(self.config.fft_size, dtype=np.float64)
            padded[:samples.shape[0]] = samples
            return padded
        return np.ascontiguousarray(samples)

    def frames(self, buffer) -> np.ndarray:
        """
        Windowed analysis frames.

        Returns:
            (n_frames, fft_size) float64 array
        """
        samples = self._samples(buffer)
        framed = librosa.util.frame(
            samples,
            frame_length=self.config.fft_size,
            hop_length=self.config.hop_length,
            axis=0,
        )
        return framed * self.window

    # ============== Spectral ==============

    def stft(self, buffer) -> np.ndarray:
        """
        Short-time Fourier transform.

        Returns:
            (n_frames, fft_size) complex128 spectra (full, unscaled)
        """
        return fft(self.frames(buffer))

    def power_spectrum(self, spectra: np.ndarray) -> np.ndarray:
        """
        re² + im² over the first fft_size/2 + 1 bins.

        Returns:
            (n_frames, num_bins) float64
        """
        half = spectra[..., :self.config.num_bins]
        return half.real ** 2 + half.imag ** 2

    def mel_power(self, buffer) -> np.ndarray:
        """
        Linear Mel band energies.

        Returns:
            (n_frames, num_mels) float64
        """
        power = self.power_spectrum(self.stft(buffer))
        return power @ self.filterbank.T

    def normalize(self, mel: np.ndarray) -> np.ndarray:
        """Apply dB conversion and the configured normalization policy."""
        eps = self.config.epsilon

        if self.config.normalization == NormalizationPolicy.MAX_RELATIVE_DB:
            ref = np.max(mel)
            return 10.0 * np.log10((mel + eps) / (ref + eps))

        db = 10.0 * np.log10(mel + eps)
        db_min = np.min(db)
        db_max = np.max(db)
        if db_max <= db_min:
            # Constant spectrogram (e.g. digital silence)
            return np.zeros_like(db)
        return (db - db_min) / (db_max - db_min)

    def compute_mel_spectrogram(self, buffer) -> np.ndarray:
        """
        Normalized Mel-spectrogram.

        Args:
            buffer: SampleBuffer or 1-D array of samples

        Returns:
            (n_frames, num_mels) float64

        Raises:
            EmptyBufferError: If the buffer has no samples
        """
        return self.normalize(self.mel_power(buffer))

    # ============== Tensor ==============

    def to_tensor(self, mel_spec: np.ndarray) -> FeatureTensor:
        """Flatten a (n_frames, num_mels) matrix in the configured layout."""
        n_frames, n_mels = mel_spec.shape
        if self.config.layout == TensorLayout.MEL_MAJOR:
            ordered = mel_spec.T
        else:
            ordered = mel_spec
        data = np.ascontiguousarray(ordered, dtype=np.float32).reshape(-1)
        return FeatureTensor(
            data=data,
            num_frames=n_frames,
            num_mels=n_mels,
            layout=self.config.layout,
        )

    def extract(self, buffer) -> FeatureTensor:
        """
        Compute the feature tensor for one buffer.

        This is the single-shot entry point: buffer in, flat tensor out.
        """
        mel_spec = self.compute_mel_spectrogram(buffer)
        tensor = self.to_tensor(mel_spec)
        logger.debug("Extracted Mel-spectrogram", data={
            "frames": tensor.num_frames,
            "mels": tensor.num_mels,
            "layout": str(tensor.layout),
        })
        return tensor

    def prepare_model_input(
        self,
        tensor: FeatureTensor,
        input_shape: Optional[Tuple[int, ...]] = None,
    ) -> np.ndarray:
        """
        Reshape a feature tensor to the declared model input.

        Args:
            tensor: Output of extract()
            input_shape: Shape without batch axis; defaults to config.input_shape.
                One axis may be -1. None gives a flat (1, n) batch.

        Returns:
            float32 array with a leading batch axis of 1

        Raises:
            ShapeMismatchError: If the tensor cannot fill the declared shape
        """
        if input_shape is None:
            input_shape = self.config.input_shape
        if input_shape is None:
            return tensor.data[np.newaxis, :]

        shape = resolve_shape(tuple(input_shape), len(tensor))
        return tensor.data.reshape((1,) + shape)


def resolve_shape(shape: Tuple[int, ...], size: int) -> Tuple[int, ...]:
    """
    Resolve at most one -1 axis so that prod(shape) == size.

    Raises:
        ShapeMismatchError: If no such shape exists
    """
    wildcards = [i for i, d in enumerate(shape) if d == -1]
    if len(wildcards) > 1 or any(d == 0 or d < -1 for d in shape):
        raise ShapeMismatchError(
            f"Invalid declared input shape {shape}",
            data={"input_shape": list(shape), "size": size},
        )

    known = int(np.prod([d for d in shape if d != -1], dtype=np.int64)) if shape else 1
    if wildcards:
        if known == 0 or size % known != 0:
            raise ShapeMismatchError(
                f"Tensor of {size} values does not fit shape {shape}",
                data={"input_shape": list(shape), "size": size},
            )
        resolved = list(shape)
        resolved[wildcards[0]] = size // known
        return tuple(resolved)

    if known != size:
        raise ShapeMismatchError(
            f"Tensor of {size} values does not fit shape {shape}",
            data={"input_shape": list(shape), "size": size},
        )
    return shape
