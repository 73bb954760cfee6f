"""Terminal speech-to-text recorder with live volume metering, transcription and history."""

__version__ = "0.0.2"
__all__ = ["__version__"]