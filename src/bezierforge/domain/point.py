"""Point types for compound cubic paths.

This module defines the fundamental geometric types of the editor:
- Point: An immutable 2D coordinate
- ControlPoint: An anchor with its incoming and outgoing handles
- HandleKind: Which part of a control point is addressed
"""

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Offset used when a stored point is missing a usable handle
REPAIR_HANDLE_OFFSET = 30.0


def generate_id() -> str:
    """Generate a fresh identifier for objects, points and groups."""
    return uuid.uuid4().hex


class HandleKind(str, Enum):
    """Addressable part of a control point.

    Values match the persisted names so they can be stored directly.
    """

    ANCHOR = "main"
    HANDLE_IN = "handleIn"
    HANDLE_OUT = "handleOut"


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D canvas space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in canvas units
        y: Y coordinate in canvas units
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def translated(self, dx: float, dy: float) -> "Point":
        """Return a copy moved by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)

    def reflected_about(self, center: "Point") -> "Point":
        """Return the point mirrored through center."""
        return Point(2 * center.x - self.x, 2 * center.y - self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))


def coerce_number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _coerce_point(value: Any) -> Point | None:
    if not isinstance(value, dict):
        return None
    x = coerce_number(value.get("x"), math.nan)
    y = coerce_number(value.get("y"), math.nan)
    if math.isnan(x) or math.isnan(y):
        return None
    return Point(x, y)


@dataclass
class ControlPoint:
    """An anchor on a compound curve plus its two tangent handles.

    Control points are mutated in place by the interaction layer, so this
    class is deliberately not frozen. Handles carry no enforced symmetry.

    Attributes:
        x: Anchor X coordinate
        y: Anchor Y coordinate
        handle_in: Control point shaping the segment arriving at the anchor
        handle_out: Control point shaping the segment leaving the anchor
        id: Identifier unique within the owning object's lifetime
    """

    x: float
    y: float
    handle_in: Point
    handle_out: Point
    id: str = field(default_factory=generate_id)

    @classmethod
    def create(cls, x: float, y: float, handle_offset: float = 50.0) -> "ControlPoint":
        """Create a new anchor with symmetric horizontal handles.

        Args:
            x: Anchor X coordinate
            y: Anchor Y coordinate
            handle_offset: Horizontal distance of each handle from the anchor

        Returns:
            New ControlPoint with a fresh id
        """
        return cls(
            x=x,
            y=y,
            handle_in=Point(x - handle_offset, y),
            handle_out=Point(x + handle_offset, y),
        )

    @property
    def anchor(self) -> Point:
        """The on-curve point as an immutable Point."""
        return Point(self.x, self.y)

    def get(self, kind: HandleKind) -> Point:
        """Return the anchor or one of the handles."""
        if kind is HandleKind.HANDLE_IN:
            return self.handle_in
        if kind is HandleKind.HANDLE_OUT:
            return self.handle_out
        return self.anchor

    def translate(self, dx: float, dy: float) -> None:
        """Move the anchor and both handles rigidly by (dx, dy)."""
        self.x += dx
        self.y += dy
        self.handle_in = self.handle_in.translated(dx, dy)
        self.handle_out = self.handle_out.translated(dx, dy)

    def copy(self, new_id: bool = False) -> "ControlPoint":
        """Return an independent copy, optionally with a fresh id."""
        return ControlPoint(
            x=self.x,
            y=self.y,
            handle_in=self.handle_in,
            handle_out=self.handle_out,
            id=generate_id() if new_id else self.id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "handleIn": self.handle_in.to_dict(),
            "handleOut": self.handle_out.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ControlPoint":
        """Deserialize and repair a stored control point.

        Non-numeric anchor coordinates become 0, missing or invalid handles
        are placed horizontally beside the anchor and a missing id is
        regenerated.

        Args:
            data: Stored point, possibly incomplete

        Returns:
            Valid ControlPoint instance
        """
        raw = data if isinstance(data, dict) else {}
        x = coerce_number(raw.get("x"), 0.0)
        y = coerce_number(raw.get("y"), 0.0)
        handle_in = _coerce_point(raw.get("handleIn")) or Point(x - REPAIR_HANDLE_OFFSET, y)
        handle_out = _coerce_point(raw.get("handleOut")) or Point(x + REPAIR_HANDLE_OFFSET, y)
        point_id = raw.get("id")
        if not isinstance(point_id, str) or not point_id:
            point_id = generate_id()
        return cls(x=x, y=y, handle_in=handle_in, handle_out=handle_out, id=point_id)


def clone_points(points: list[ControlPoint], new_ids: bool = False) -> list[ControlPoint]:
    """Copy a list of control points.

    Args:
        points: Source points
        new_ids: Whether copies receive freshly generated ids

    Returns:
        List of independent ControlPoint copies
    """
    return [p.copy(new_id=new_ids) for p in points]
