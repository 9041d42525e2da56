"""Configuration management for the Art Director Image Generator.

This module provides centralized configuration management using Pydantic Settings.
Application settings are loaded from environment variables with the ARTDIRECTOR_
prefix.  Provider API keys are read from their conventional, unprefixed names so
the same ``.env`` file works with the providers' own tooling.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ARTDIRECTOR_* prefix, plus the provider key names)
2. .env file in the project root
3. Default values defined in ArtDirectorConfig

Example .env file:
    OPENAI_API_KEY=sk-...
    UNSPLASH_ACCESS_KEY=...
    PEXELS_API_KEY=...
    ARTDIRECTOR_OUTPUTS_DIR=generated-images
    ARTDIRECTOR_SERVER_PORT=3000

Provider Keys
-------------
The presence of each key gates a feature:

- ``OPENAI_API_KEY``: image generation, vision analysis, text models
- ``UNSPLASH_ACCESS_KEY``: Unsplash library search
- ``PEXELS_API_KEY``: Pexels library search

``GET /api/check-config`` reports which of them are configured without ever
echoing the values.

Usage Example
-------------
    from artdirector.core.config import config

    print(config.outputs_dir)
    print(config.is_configured("openai"))
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ArtDirectorConfig(BaseSettings):
    """Main configuration for the Art Director Image Generator.

    All Path fields are created on initialisation if they don't exist.

    Attributes
    ----------
    Provider Keys:
        openai_api_key : str | None
            Key for image generation, vision and text models
        unsplash_access_key : str | None
            Access key for Unsplash search
        pexels_api_key : str | None
            Key for Pexels search

    Provider Settings:
        openai_base_url : str
            Base URL of the OpenAI-compatible API
        image_model : str
            Default image generation model
        vision_model : str
            Model used for vision and page analysis
        text_model : str
            Model used for short text tasks (subject extraction)
        request_timeout : float
            Timeout in seconds for provider calls
        page_fetch_timeout : float
            Timeout in seconds when fetching a web page

    Extraction:
        min_image_size : int
            Images whose declared width and height are both below this are dropped

    Batch:
        analysis_delay : float
            Pause between two subject extraction calls in a CSV batch
        generation_delay : float
            Pause between two image generation calls in a batch

    Paths:
        outputs_dir : Path
            Root of the date-partitioned saved image tree
        data_dir : Path
            Directory holding ``styles.json``
        history_file : Path
            JSON file holding the capped generation history

    Server:
        server_host : str
        server_port : int
        log_level : str
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ARTDIRECTOR_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider keys (unprefixed environment names)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "ARTDIRECTOR_OPENAI_API_KEY"),
    )
    unsplash_access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("UNSPLASH_ACCESS_KEY", "ARTDIRECTOR_UNSPLASH_ACCESS_KEY"),
    )
    pexels_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PEXELS_API_KEY", "ARTDIRECTOR_PEXELS_API_KEY"),
    )

    # Provider settings
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    unsplash_base_url: str = Field(default="https://api.unsplash.com")
    pexels_base_url: str = Field(default="https://api.pexels.com/v1")
    image_model: str = Field(default="dall-e-3", description="Default image model")
    vision_model: str = Field(default="gpt-4o", description="Vision / page analysis model")
    text_model: str = Field(default="gpt-4o-mini", description="Short text task model")
    request_timeout: float = Field(default=120.0, gt=0)
    page_fetch_timeout: float = Field(default=10.0, gt=0)
    library_results_per_page: int = Field(default=12, ge=1, le=80)

    # Extraction
    min_image_size: int = Field(
        default=50,
        ge=0,
        description="Declared width and height both below this drop an extracted image",
    )

    # Batch pacing (rate-limit courtesy, not concurrency control)
    analysis_delay: float = Field(default=0.5, ge=0)
    generation_delay: float = Field(default=2.0, ge=0)

    # Paths
    outputs_dir: Path = Field(
        default=Path("generated-images"),
        description="Root directory for saved images",
    )
    data_dir: Path = Field(
        default=_PACKAGE_DATA_DIR,
        description="Directory holding styles.json",
    )
    history_file: Path = Field(
        default=Path("state") / "history.json",
        description="JSON file for the generation history",
    )
    history_limit: int = Field(default=100, ge=1)

    # Server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=3000, ge=1024, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.outputs_dir.mkdir(parents=True, exist_ok=True)
        self.history_file.parent.mkdir(parents=True, exist_ok=True)

    def is_configured(self, provider: str) -> bool:
        """Return whether the key for *provider* is set and non-empty."""
        keys = {
            "openai": self.openai_api_key,
            "unsplash": self.unsplash_access_key,
            "pexels": self.pexels_api_key,
        }
        return bool(keys.get(provider))


# Global configuration instance
config = ArtDirectorConfig()
