"""Art Director Image Generator - style-consistent AI image generation."""

__version__ = "0.3.0"

from artdirector.core.config import ArtDirectorConfig, config

__all__ = [
    "ArtDirectorConfig",
    "config",
]
