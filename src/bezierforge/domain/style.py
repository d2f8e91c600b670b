"""Stroke styling and transform settings for curve objects."""

from dataclasses import dataclass, field, replace
from typing import Any

from bezierforge.domain.point import coerce_number

DEFAULT_COLOR = "#000000"
DEFAULT_WIDTH = 2.0


@dataclass
class CurveStyle:
    """Rendering attributes for one stroke.

    Attributes:
        color: Stroke color
        width: Stroke width in canvas units
        fill: Fill paint, "none" for open strokes
        opacity: Stroke opacity in [0, 1]
        line_cap: SVG stroke-linecap value
        line_join: SVG stroke-linejoin value
        dash_array: SVG stroke-dasharray value, empty for solid strokes
    """

    color: str = DEFAULT_COLOR
    width: float = DEFAULT_WIDTH
    fill: str = "none"
    opacity: float = 1.0
    line_cap: str = "round"
    line_join: str = "round"
    dash_array: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            "color": self.color,
            "width": self.width,
            "fill": self.fill,
            "opacity": self.opacity,
            "lineCap": self.line_cap,
            "lineJoin": self.line_join,
            "dashArray": self.dash_array,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurveStyle":
        """Deserialize, replacing missing or non-numeric attributes with defaults."""
        return cls(
            color=str(data.get("color", DEFAULT_COLOR)),
            width=coerce_number(data.get("width"), DEFAULT_WIDTH),
            fill=str(data.get("fill", "none")),
            opacity=min(1.0, max(0.0, coerce_number(data.get("opacity"), 1.0))),
            line_cap=str(data.get("lineCap", "round")),
            line_join=str(data.get("lineJoin", "round")),
            dash_array=str(data.get("dashArray", "")),
        )


@dataclass
class CurveConfig:
    """Main stroke style plus parallel offset strokes.

    The main stroke uses styles[0]. Parallel stroke k (1..parallel_count)
    is offset by k * spacing and styled by styles[k - 1], falling back to
    styles[0] when the list is shorter.

    Attributes:
        styles: Stroke styles, never empty
        parallel_count: Number of additional offset strokes
        spacing: Distance between consecutive parallel strokes
    """

    styles: list[CurveStyle] = field(default_factory=lambda: [CurveStyle()])
    parallel_count: int = 0
    spacing: float = 0.0

    def __post_init__(self) -> None:
        if self.parallel_count < 0:
            raise ValueError(f"parallel_count must be >= 0, got {self.parallel_count}")
        if not self.styles:
            self.styles = [CurveStyle()]

    @property
    def main_style(self) -> CurveStyle:
        """Style of the main stroke."""
        return self.styles[0]

    def parallel_style(self, k: int) -> CurveStyle:
        """Style for parallel stroke k (1-based)."""
        if 1 <= k <= len(self.styles):
            return self.styles[k - 1]
        return self.styles[0]

    def parallel_offsets(self) -> list[tuple[float, CurveStyle]]:
        """Offset distance and style for every parallel stroke."""
        return [(k * self.spacing, self.parallel_style(k)) for k in range(1, self.parallel_count + 1)]

    def copy(self) -> "CurveConfig":
        """Return a deep copy."""
        return CurveConfig(
            styles=[replace(s) for s in self.styles],
            parallel_count=self.parallel_count,
            spacing=self.spacing,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            "styles": [s.to_dict() for s in self.styles],
            "parallelCount": self.parallel_count,
            "spacing": self.spacing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurveConfig":
        """Deserialize, tolerating missing fields and negative counts."""
        raw_styles = data.get("styles")
        styles = (
            [CurveStyle.from_dict(s) for s in raw_styles if isinstance(s, dict)]
            if isinstance(raw_styles, list)
            else []
        )
        return cls(
            styles=styles,
            parallel_count=max(0, int(coerce_number(data.get("parallelCount"), 0))),
            spacing=coerce_number(data.get("spacing"), 0.0),
        )


@dataclass(frozen=True, slots=True)
class TransformSettings:
    """Rotation and scale applied about an object's anchor centroid.

    Attributes:
        rotation: Rotation in degrees
        scale_x: Horizontal scale factor
        scale_y: Vertical scale factor
    """

    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def is_identity(self) -> bool:
        """Whether applying this transform leaves points unchanged."""
        return self.rotation % 360 == 0 and self.scale_x == 1 and self.scale_y == 1

    @property
    def is_invertible(self) -> bool:
        """Whether neither scale factor is zero."""
        return self.scale_x != 0 and self.scale_y != 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {"rotation": self.rotation, "scaleX": self.scale_x, "scaleY": self.scale_y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransformSettings":
        """Deserialize, defaulting to identity for missing or invalid fields."""
        return cls(
            rotation=coerce_number(data.get("rotation"), 0.0),
            scale_x=coerce_number(data.get("scaleX"), 1.0),
            scale_y=coerce_number(data.get("scaleY"), 1.0),
        )
