"""Configuration settings for Bezierforge."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ArcMode(str, Enum):
    """How elliptical arc commands are converted to cubic segments."""

    SUBDIVIDE = "subdivide"
    SINGLE = "single"


class ZoomMode(str, Enum):
    """How a wheel notch changes the zoom factor."""

    RELATIVE = "relative"
    ABSOLUTE = "absolute"


class GeometryConfig(BaseModel):
    """Configuration for curve sampling and point construction."""

    samples_per_segment: int = Field(
        default=30,
        ge=2,
        le=500,
        description="Evaluations per cubic segment when sampling curves and parallel strokes",
    )
    closure_tolerance: float = Field(
        default=0.01,
        ge=0.0,
        le=10.0,
        description="Distance under which the last and first anchors count as coincident",
    )
    default_handle_offset: float = Field(
        default=50.0,
        ge=0.0,
        description="Horizontal handle offset for newly placed anchors",
    )


class InteractionConfig(BaseModel):
    """Configuration for hit testing and editing gestures.

    Radii are expressed in screen pixels and divided by the current zoom
    before testing against canvas coordinates.
    """

    anchor_hit_radius: float = Field(
        default=8.0,
        gt=0.0,
        le=64.0,
        description="Hit radius for anchors in screen pixels",
    )
    handle_hit_radius: float = Field(
        default=6.0,
        gt=0.0,
        le=64.0,
        description="Hit radius for handles in screen pixels",
    )
    selection_padding: float = Field(
        default=20.0,
        ge=0.0,
        description="Padding around a multi-point selection that starts a group drag",
    )
    paste_offset: float = Field(
        default=20.0,
        description="Diagonal offset applied to pasted points",
    )


class HistoryConfig(BaseModel):
    """Configuration for the undo/redo log."""

    max_entries: int = Field(
        default=50,
        ge=2,
        le=500,
        description="Maximum number of snapshots kept before oldest-first eviction",
    )


class ViewportConfig(BaseModel):
    """Configuration for the pan/zoom mapping."""

    min_zoom: float = Field(default=0.1, gt=0.0, description="Lower zoom bound")
    max_zoom: float = Field(default=5.0, gt=0.0, description="Upper zoom bound")
    zoom_step: float = Field(
        default=0.1,
        gt=0.0,
        lt=1.0,
        description="Zoom change per wheel notch (fraction or absolute, see zoom_mode)",
    )
    zoom_mode: ZoomMode = Field(
        default=ZoomMode.RELATIVE,
        description="Apply zoom_step as a relative factor or an absolute increment",
    )


class ImportConfig(BaseModel):
    """Configuration for SVG and JSON import."""

    max_objects: int = Field(
        default=20,
        ge=1,
        le=10_000,
        description="Maximum objects created by one import",
    )
    max_points_per_object: int = Field(
        default=20,
        ge=2,
        le=10_000,
        description="Maximum anchors kept per imported object",
    )
    chunk_size: int = Field(
        default=15,
        ge=1,
        le=1000,
        description="Paths or objects processed before yielding control",
    )
    canvas_width: float = Field(default=800.0, gt=0.0, description="Target canvas width")
    canvas_height: float = Field(default=600.0, gt=0.0, description="Target canvas height")
    fill_ratio: float = Field(
        default=0.7,
        gt=0.0,
        le=1.0,
        description="Fraction of the canvas the imported bounding box should occupy",
    )
    min_scale: float = Field(default=0.1, gt=0.0, description="Lower bound of the fit scale")
    max_scale: float = Field(default=10.0, gt=0.0, description="Upper bound of the fit scale")
    arc_mode: ArcMode = Field(
        default=ArcMode.SUBDIVIDE,
        description="Arc conversion strategy",
    )
    normalize: bool = Field(
        default=True,
        description="Center and scale imported SVG geometry onto the canvas",
    )
    use_view_box: bool = Field(
        default=True,
        description="Fit the document viewBox instead of the geometry bounds when one is declared",
    )
    replace_existing: bool = Field(
        default=True,
        description="Replace the current collection instead of appending to it",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class BezierForgeSettings(BaseModel):
    """Main application settings."""

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    importing: ImportConfig = Field(default_factory=ImportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> BezierForgeSettings:
    """Get default application settings."""
    return BezierForgeSettings()
