"""Domain models for bezierforge.

This module contains the core domain models representing curve objects,
their control points, styling, transforms, groups and saved designs. All
models serialize to the persisted camelCase JSON shape via to_dict/from_dict.

Key classes:
- Point: An immutable 2D coordinate
- ControlPoint: An anchor plus its in/out handles
- CurveStyle / CurveConfig: Stroke styles and parallel strokes
- TransformSettings: Rotation and scale about the anchor centroid
- BezierObject: A compound cubic path
- ObjectGroup: A named set of object ids
- DesignData: A full saved design
"""

from bezierforge.domain.design import BackgroundImage, DesignData
from bezierforge.domain.objects import BezierObject, ObjectGroup
from bezierforge.domain.point import (
    ControlPoint,
    HandleKind,
    Point,
    clone_points,
    generate_id,
)
from bezierforge.domain.style import CurveConfig, CurveStyle, TransformSettings

__all__: list[str] = [
    # Enums
    "HandleKind",
    # Core types
    "Point",
    "ControlPoint",
    "CurveStyle",
    "CurveConfig",
    "TransformSettings",
    "BezierObject",
    "ObjectGroup",
    "BackgroundImage",
    "DesignData",
    # Helpers
    "clone_points",
    "generate_id",
]
