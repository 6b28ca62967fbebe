"""Configuration management for Imaginarium.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the IMAGINARIUM_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (IMAGINARIUM_* prefix)
2. .env file in the project root
3. Default values defined in ImaginariumConfig

Example .env file:
    IMAGINARIUM_API_KEY=your-gemini-key
    IMAGINARIUM_MODEL_ID=gemini-2.5-flash-image
    IMAGINARIUM_CANVAS_WIDTH=800
    IMAGINARIUM_CANVAS_HEIGHT=600

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Nothing is written to disk: the application keeps all session state in memory.

Usage Example
-------------
    from imaginarium.core.config import config

    print(config.model_id)
    print(config.canvas_width, config.canvas_height)

See Also
--------
- .env.example: Template with all available configuration options
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from imaginarium.core.models import AspectRatio


class ImaginariumConfig(BaseSettings):
    """Main configuration for Imaginarium.

    Attributes
    ----------
    Generation Service:
        api_key : str | None
            Credential for the external image-generation service. Only
            required when a generation is actually submitted.
        model_id : str
            Fixed model identifier forwarded with every request.
        default_aspect_ratio : AspectRatio
            Aspect ratio a fresh workspace starts with.

    Canvas:
        canvas_width : int
            Logical raster width in pixels (independent of display size).
        canvas_height : int
            Logical raster height in pixels.

    Server:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Port for uvicorn (1024-65535).
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root log level configured by the console entry point.

    Examples
    --------
        >>> custom = ImaginariumConfig(canvas_width=400, canvas_height=300)
        >>> custom.canvas_width
        400
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMAGINARIUM_",
        case_sensitive=False,
    )

    # Generation service
    api_key: str | None = Field(
        default=None,
        description="API key for the image generation service",
    )
    model_id: str = Field(
        default="gemini-2.5-flash-image",
        description="Model identifier sent with every generation request",
    )
    default_aspect_ratio: AspectRatio = Field(
        default=AspectRatio.SQUARE,
        description="Aspect ratio selected when a workspace is created",
    )

    # Canvas
    canvas_width: int = Field(default=800, ge=64, le=4096)
    canvas_height: int = Field(default=600, ge=64, le=4096)

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the console entry point",
    )


# Global configuration instance
config = ImaginariumConfig()
