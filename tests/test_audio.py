"""
Tests for SampleBuffer and AudioLoader.

Audio files are synthesized into tmp_path with soundfile.
"""

import numpy as np
import pytest
import soundfile as sf

from instrument_classifier.audio import AudioLoader, SampleBuffer
from instrument_classifier.core import AudioLoadError

from conftest import make_tone


@pytest.fixture
def wav_file(tmp_path):
    """1 second, 440 Hz mono WAV at 44.1 kHz."""
    path = tmp_path / "tone.wav"
    sf.write(str(path), make_tone([440.0], duration=1.0, sr=44100).astype(np.float32), 44100)
    return path


# =============================================================================
# SampleBuffer
# =============================================================================

@pytest.mark.unit
class TestSampleBuffer:
    """Tests for SampleBuffer."""

    def test_basic_properties(self):
        buffer = SampleBuffer(np.zeros(22050), sample_rate=44100)

        assert len(buffer) == 22050
        assert buffer.sample_rate == 44100
        assert buffer.duration_sec == pytest.approx(0.5)
        assert buffer.samples.dtype == np.float64

    def test_copies_and_read_only(self):
        source = np.ones(10)
        buffer = SampleBuffer.from_array(source, sample_rate=8000)
        source[0] = 5.0

        assert buffer.samples[0] == 1.0
        with pytest.raises(ValueError):
            buffer.samples[0] = 2.0

    def test_array_protocol(self):
        buffer = SampleBuffer([0.1, 0.2, 0.3])

        assert np.allclose(np.asarray(buffer), [0.1, 0.2, 0.3])
        assert np.asarray(buffer, dtype=np.float32).dtype == np.float32

    def test_rejects_multichannel(self):
        with pytest.raises(ValueError):
            SampleBuffer(np.zeros((2, 100)))

    def test_rejects_bad_sample_rate(self):
        with pytest.raises(ValueError):
            SampleBuffer(np.zeros(10), sample_rate=0)

    def test_repr(self):
        assert repr(SampleBuffer(np.zeros(44100))) == "SampleBuffer(44100 samples, 44100 Hz, 1.00s)"


# =============================================================================
# AudioLoader
# =============================================================================

@pytest.mark.e2e
class TestAudioLoader:
    """Tests for AudioLoader."""

    def test_load_wav(self, wav_file):
        buffer = AudioLoader(sample_rate=44100).load(str(wav_file))

        assert isinstance(buffer, SampleBuffer)
        assert buffer.sample_rate == 44100
        assert len(buffer) == 44100
        assert np.max(np.abs(buffer.samples)) == pytest.approx(0.5, abs=1e-3)

    def test_load_resamples(self, wav_file):
        buffer = AudioLoader(sample_rate=22050).load(str(wav_file))

        assert buffer.sample_rate == 22050
        assert len(buffer) == 22050

    def test_duration_and_offset(self, wav_file):
        buffer = AudioLoader().load(str(wav_file), duration=0.25, offset=0.5)
        assert len(buffer) == pytest.approx(11025, abs=1)

    def test_from_file(self, wav_file):
        buffer = SampleBuffer.from_file(str(wav_file), sample_rate=44100)
        assert len(buffer) == 44100

    def test_supported_formats(self):
        assert AudioLoader.is_supported_format("a/b/track.WAV")
        assert AudioLoader.is_supported_format("take.flac")
        assert not AudioLoader.is_supported_format("notes.txt")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(str(tmp_path / "missing.wav"))

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "not_audio.txt"
        path.write_text("hello")
        with pytest.raises(ValueError):
            AudioLoader().load(str(path))

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF\x00\x00\x00\x00garbage")
        with pytest.raises(AudioLoadError):
            AudioLoader().load(str(path))
