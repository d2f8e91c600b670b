"""Geometric operations for cubic paths.

This module provides the core mathematical utilities for:
- Cubic Bezier evaluation and derivative
- Normal-offset ("parallel") points
- Sampling paths and parallel strokes into polylines
- Centroid, bounding box and rectangle containment
- Applying and re-basing rotation/scale transforms about a centroid

All functions are pure and stateless.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass

from bezierforge.domain import BezierObject, ControlPoint, CurveStyle, Point, TransformSettings
from bezierforge.exceptions import InvalidTransformError

Segment = tuple[Point, Point, Point, Point]
Rect = tuple[float, float, float, float]


def evaluate_cubic(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """Evaluate a cubic Bezier curve.

    Defined for any real t; callers sampling on-curve points clamp t to
    [0, 1]. Returns p0 and p3 exactly at t=0 and t=1.

    Args:
        p0: Start point
        p1: First control point
        p2: Second control point
        p3: End point
        t: Curve parameter

    Returns:
        Point on the curve

    Examples:
        >>> evaluate_cubic(Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0), 0.5)
        Point(x=5.0, y=7.5)
    """
    if t == 0:
        return p0
    if t == 1:
        return p3
    mt = 1 - t
    a = mt * mt * mt
    b = 3 * mt * mt * t
    c = 3 * mt * t * t
    d = t * t * t
    return Point(
        a * p0.x + b * p1.x + c * p2.x + d * p3.x,
        a * p0.y + b * p1.y + c * p2.y + d * p3.y,
    )


def tangent_cubic(p0: Point, p1: Point, p2: Point, p3: Point, t: float) -> Point:
    """Evaluate the (unnormalized) derivative of a cubic Bezier curve.

    Args:
        p0: Start point
        p1: First control point
        p2: Second control point
        p3: End point
        t: Curve parameter

    Returns:
        Derivative vector as a Point
    """
    mt = 1 - t
    a = 3 * mt * mt
    b = 6 * mt * t
    c = 3 * t * t
    return Point(
        a * (p1.x - p0.x) + b * (p2.x - p1.x) + c * (p3.x - p2.x),
        a * (p1.y - p0.y) + b * (p2.y - p1.y) + c * (p3.y - p2.y),
    )


def parallel_point(
    p0: Point, p1: Point, p2: Point, p3: Point, t: float, offset: float
) -> Point:
    """Offset a curve point along its left-hand unit normal.

    The normal of tangent (tx, ty) is (-ty, tx) normalized, so a positive
    offset lies to the left of the direction of travel. A zero-length
    tangent returns the curve point unchanged.

    Args:
        p0: Start point
        p1: First control point
        p2: Second control point
        p3: End point
        t: Curve parameter
        offset: Signed distance along the normal

    Returns:
        Offset point
    """
    point = evaluate_cubic(p0, p1, p2, p3, t)
    if offset == 0:
        return point
    tangent = tangent_cubic(p0, p1, p2, p3, t)
    length = math.hypot(tangent.x, tangent.y)
    if length == 0:
        return point
    nx = -tangent.y / length
    ny = tangent.x / length
    return Point(point.x + nx * offset, point.y + ny * offset)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def is_point_near(point: Point, target: Point, radius: float) -> bool:
    """Check whether point lies within radius of target (inclusive)."""
    return distance(point, target) <= radius


def normalize_rect(x: float, y: float, width: float, height: float) -> Rect:
    """Convert an origin/size rectangle to (min_x, min_y, max_x, max_y).

    Negative width or height is allowed and flips the corresponding edge.
    """
    return (min(x, x + width), min(y, y + height), max(x, x + width), max(y, y + height))


def point_in_rect(point: Point, rect: Rect) -> bool:
    """Closed-interval containment test against a normalized rectangle."""
    min_x, min_y, max_x, max_y = rect
    return min_x <= point.x <= max_x and min_y <= point.y <= max_y


def points_centroid(points: list[ControlPoint]) -> Point:
    """Unweighted centroid of the anchors.

    Handles do not contribute. An empty list yields the origin.
    """
    if not points:
        return Point(0.0, 0.0)
    n = len(points)
    return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def points_bounding_box(points: list[ControlPoint]) -> Rect | None:
    """Bounding box of anchors and both handles.

    Returns:
        (min_x, min_y, max_x, max_y), or None for an empty list
    """
    if not points:
        return None
    xs: list[float] = []
    ys: list[float] = []
    for p in points:
        xs.extend((p.x, p.handle_in.x, p.handle_out.x))
        ys.extend((p.y, p.handle_in.y, p.handle_out.y))
    return (min(xs), min(ys), max(xs), max(ys))


def transform_point(point: Point, center: Point, transform: TransformSettings) -> Point:
    """Scale then rotate a point about center.

    Scale is applied strictly before rotation; the order matters for
    non-uniform scale.
    """
    dx = (point.x - center.x) * transform.scale_x
    dy = (point.y - center.y) * transform.scale_y
    angle = math.radians(transform.rotation)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return Point(
        center.x + dx * cos_a - dy * sin_a,
        center.y + dx * sin_a + dy * cos_a,
    )


def inverse_transform_point(point: Point, center: Point, transform: TransformSettings) -> Point:
    """Undo transform_point: rotate back, then divide out the scale.

    Raises:
        InvalidTransformError: If either scale factor is zero
    """
    if not transform.is_invertible:
        raise InvalidTransformError("cannot invert a zero scale factor")
    angle = math.radians(-transform.rotation)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    dx = point.x - center.x
    dy = point.y - center.y
    rx = dx * cos_a - dy * sin_a
    ry = dx * sin_a + dy * cos_a
    return Point(center.x + rx / transform.scale_x, center.y + ry / transform.scale_y)


def _map_control_point(point: ControlPoint, fn) -> ControlPoint:
    anchor = fn(point.anchor)
    return ControlPoint(
        x=anchor.x,
        y=anchor.y,
        handle_in=fn(point.handle_in),
        handle_out=fn(point.handle_out),
        id=point.id,
    )


def transform_control_points(
    points: list[ControlPoint],
    transform: TransformSettings,
    center: Point | None = None,
) -> list[ControlPoint]:
    """Apply a transform to every anchor and both handles.

    Args:
        points: Source points (left untouched)
        transform: Rotation and scale to apply
        center: Pivot; defaults to the anchor centroid

    Returns:
        New list of transformed points with the same ids
    """
    pivot = center if center is not None else points_centroid(points)
    return [_map_control_point(p, lambda q: transform_point(q, pivot, transform)) for p in points]


def retransform_control_points(
    points: list[ControlPoint],
    old: TransformSettings,
    new: TransformSettings,
) -> list[ControlPoint]:
    """Re-base points from one baked transform to another.

    The anchor centroid is a fixed point of both transforms, so it serves
    as the pivot for removing the old transform and applying the new one.

    Raises:
        InvalidTransformError: If the old transform has a zero scale factor
    """
    if old == new:
        return [p.copy() for p in points]
    pivot = points_centroid(points)

    def rebase(q: Point) -> Point:
        return transform_point(inverse_transform_point(q, pivot, old), pivot, new)

    return [_map_control_point(p, rebase) for p in points]


def iter_segments(points: list[ControlPoint], closed: bool = False) -> Iterator[Segment]:
    """Yield (p0, p1, p2, p3) for each cubic segment of a path.

    Segment i runs from anchor i through its handle_out and the next
    anchor's handle_in to the next anchor. A closed path adds a segment from
    the last anchor back to the first.
    """
    for prev, curr in zip(points, points[1:]):
        yield (prev.anchor, prev.handle_out, curr.handle_in, curr.anchor)
    if closed and len(points) > 2:
        last, first = points[-1], points[0]
        yield (last.anchor, last.handle_out, first.handle_in, first.anchor)


def sample_segment(segment: Segment, steps: int, offset: float = 0.0) -> list[Point]:
    """Sample steps + 1 evenly spaced parameters of one segment."""
    p0, p1, p2, p3 = segment
    return [parallel_point(p0, p1, p2, p3, i / steps, offset) for i in range(steps + 1)]


def sample_path(
    points: list[ControlPoint],
    steps: int = 30,
    offset: float = 0.0,
    closed: bool = False,
) -> list[Point]:
    """Sample a whole path (or its parallel offset) into a polyline.

    Consecutive segments share their joint sample, which is emitted once.
    A single anchor samples to itself.

    Args:
        points: Path anchors
        steps: Evaluations per segment
        offset: Parallel offset distance, 0 for the path itself
        closed: Include the closing segment

    Returns:
        Polyline vertices
    """
    if not points:
        return []
    if len(points) == 1:
        return [points[0].anchor]
    polyline: list[Point] = []
    for segment in iter_segments(points, closed=closed):
        samples = sample_segment(segment, steps, offset)
        polyline.extend(samples if not polyline else samples[1:])
    return polyline


@dataclass
class SampledStroke:
    """One stroke of an object ready for a rendering surface.

    Attributes:
        offset: Parallel offset distance (0 for the main stroke)
        style: Stroke style
        points: Polyline vertices
    """

    offset: float
    style: CurveStyle
    points: list[Point]


def sample_object(obj: BezierObject, steps: int = 30, closed: bool = False) -> list[SampledStroke]:
    """Sample an object's main stroke followed by its parallel strokes.

    Args:
        obj: Object to sample
        steps: Evaluations per segment
        closed: Include the closing segment

    Returns:
        Main stroke first, then parallel strokes k = 1..parallel_count
    """
    config = obj.curve_config
    strokes = [SampledStroke(0.0, config.main_style, sample_path(obj.points, steps, 0.0, closed))]
    for offset, style in config.parallel_offsets():
        strokes.append(SampledStroke(offset, style, sample_path(obj.points, steps, offset, closed)))
    return strokes
