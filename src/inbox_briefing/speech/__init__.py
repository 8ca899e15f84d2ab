"""Speech synthesis adapters."""

from .elevenlabs import ElevenLabsClient, SpeechError

__all__ = ["ElevenLabsClient", "SpeechError"]
