"""Audio file loading into sample buffers."""

import librosa
from pathlib import Path
from typing import Optional

from ..core.errors import AudioLoadError
from ..utils import get_logger
from .buffer import DEFAULT_SAMPLE_RATE, SampleBuffer

logger = get_logger(__name__)


class AudioLoader:
    """Loads audio files as mono SampleBuffers at a fixed sample rate."""

    SUPPORTED_FORMATS = {'.wav', '.flac', '.ogg', '.mp3', '.m4a'}

    def __init__(self, sample_rate: int = DEFAULT_SAMPLE_RATE):
        """
        Initialize audio loader.

        Args:
            sample_rate: Target sample rate for audio loading
        """
        self.sample_rate = sample_rate

    @classmethod
    def is_supported_format(cls, file_path: str) -> bool:
        """
        Check if file format is supported.

        Args:
            file_path: Path to audio file

        Returns:
            True if format is supported
        """
        suffix = Path(file_path).suffix.lower()
        return suffix in cls.SUPPORTED_FORMATS

    def load(
        self,
        file_path: str,
        duration: Optional[float] = None,
        offset: float = 0.0
    ) -> SampleBuffer:
        """
        Load audio file.

        Args:
            file_path: Path to audio file
            duration: Duration to load in seconds (None = entire file)
            offset: Start offset in seconds

        Returns:
            SampleBuffer at self.sample_rate

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is not supported
            AudioLoadError: If file cannot be decoded
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        if not self.is_supported_format(str(file_path)):
            raise ValueError(
                f"Unsupported format: {file_path.suffix}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED_FORMATS))}"
            )

        try:
            y, sr = librosa.load(
                str(file_path),
                sr=self.sample_rate,
                duration=duration,
                offset=offset,
                mono=True
            )
        except Exception as e:
            raise AudioLoadError(
                f"Failed to load audio file: {e}",
                data={"path": str(file_path)},
                cause=e,
            ) from e

        logger.info(f"Loaded {file_path.name}: {len(y)/sr:.2f}s, {sr}Hz")
        return SampleBuffer(y, sample_rate=sr)
