"""Configuration management for bezierforge.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- GeometryConfig: Curve sampling settings
- InteractionConfig: Hit radii and editing gesture settings
- HistoryConfig: Undo/redo depth
- ViewportConfig: Zoom bounds and wheel step
- ImportConfig: Import limits, chunking and canvas fitting
- LoggingConfig: Logging settings
- BezierForgeSettings: Main application settings
"""

from bezierforge.config.settings import (
    ArcMode,
    BezierForgeSettings,
    GeometryConfig,
    HistoryConfig,
    ImportConfig,
    InteractionConfig,
    LoggingConfig,
    ViewportConfig,
    ZoomMode,
    get_default_settings,
)

__all__ = [
    "ArcMode",
    "BezierForgeSettings",
    "GeometryConfig",
    "HistoryConfig",
    "ImportConfig",
    "InteractionConfig",
    "LoggingConfig",
    "ViewportConfig",
    "ZoomMode",
    "get_default_settings",
]
