"""
Error classes with structured logging.

Every error carries a structured ``data`` payload and is logged through the
structured logger when raised. Precondition errors also subclass
``ValueError`` so generic callers can catch them without importing this module.
"""

from typing import Optional, Dict, Any

from ..utils.logger import get_logger

logger = get_logger(__name__)


class ClassifierError(Exception):
    """
    Base error class for all classifier errors.

    Automatically logs the error with its structured data when raised.
    """

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        # Traceback of the cause, not of whatever is being handled now
        logger.error(self.message, data=log_data, exc_info=self.cause)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "cause": str(self.cause) if self.cause else None,
        }


# Feature extraction errors
class FeatureExtractionError(ClassifierError):
    """Error during feature extraction (framing, FFT, Mel projection)."""
    pass


class InvalidLengthError(FeatureExtractionError, ValueError):
    """FFT input length is not a power of two."""
    pass


class EmptyBufferError(FeatureExtractionError, ValueError):
    """Sample buffer has no samples."""
    pass


class NonPowerOfTwoFFTSizeError(FeatureExtractionError, ValueError):
    """Configured FFT size is not a power of two."""
    pass


class ShapeMismatchError(FeatureExtractionError, ValueError):
    """Feature tensor does not fit the declared model input shape."""
    pass


# Decision errors
class DecisionError(ClassifierError):
    """Error while turning model output into a decision."""
    pass


class NoLabelsError(DecisionError, ValueError):
    """Label set is empty."""
    pass


# Configuration errors
class ConfigurationError(ClassifierError, ValueError):
    """Error in configuration."""
    pass


# Audio input errors
class AudioLoadError(ClassifierError):
    """Error loading audio file into a sample buffer."""
    pass


# External model errors
class InferenceError(ClassifierError):
    """Error raised by the external model callable."""
    pass
