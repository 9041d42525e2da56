"""Core functionality for the Art Director Image Generator.

This package holds everything that is not HTTP wiring:

- **Extraction**: images (``image_extractor``), colours and fonts
  (``style_extractor``) and content sections (``section_extractor``) from
  page HTML
- **Styles and prompts**: the preset table (``style_presets``), colour
  naming (``color_names``) and deterministic prompt composition
  (``prompt_generator``)
- **CSV batches**: parsing, task lifecycle and export (``csv_parser``) and
  the sequential runner (``batch``)
- **Providers**: adapter base and registry (``provider_adapters``) with
  the OpenAI, stock photo and web adapters in ``adapters/``
- **Persistence**: saved images (``image_store``) and the capped history
  (``history_store``)
- **ArtDirectorConfig**: configuration using Pydantic Settings
"""

from .config import ArtDirectorConfig, config
from .errors import ArtDirectorError, ProviderError

__all__ = [
    "ArtDirectorConfig",
    "ArtDirectorError",
    "ProviderError",
    "config",
]
