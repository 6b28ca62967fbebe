"""Imaginarium - prompt-driven image generation with sketching and masked edits."""

__version__ = "0.1.0"

from imaginarium.core.config import ImaginariumConfig, config

__all__ = [
    "ImaginariumConfig",
    "config",
]
