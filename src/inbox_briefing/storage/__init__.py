"""Storage backends for generated artefacts."""

from .audio import LocalAudioStore, new_audio_key

__all__ = ["LocalAudioStore", "new_audio_key"]
