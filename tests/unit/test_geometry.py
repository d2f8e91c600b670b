"""Unit tests for cubic geometry, transforms and sampling."""

import math

import pytest

from bezierforge.core.geometry import (
    evaluate_cubic,
    inverse_transform_point,
    iter_segments,
    normalize_rect,
    parallel_point,
    point_in_rect,
    points_bounding_box,
    points_centroid,
    retransform_control_points,
    sample_object,
    sample_path,
    tangent_cubic,
    transform_control_points,
    transform_point,
)
from bezierforge.domain import (
    BezierObject,
    ControlPoint,
    CurveConfig,
    CurveStyle,
    Point,
    TransformSettings,
)
from bezierforge.exceptions import InvalidTransformError

QUADRUPLES = [
    (Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0)),
    (Point(0.1, 0.2), Point(0.7, -3.3), Point(1e6, 3), Point(-5.5, 7.25)),
    (Point(-1 / 3, 2 / 3), Point(1, 1), Point(1, 1), Point(1 / 7, 1e-9)),
]
PARAMS = [0, 0.25, 0.5, 0.75, 1]


def _line_point(x: float, y: float) -> ControlPoint:
    return ControlPoint(x=x, y=y, handle_in=Point(x, y), handle_out=Point(x, y))


class TestEvaluateCubic:
    """Tests for evaluate_cubic and tangent_cubic."""

    @pytest.mark.parametrize("quad", QUADRUPLES)
    def test_endpoints_exact(self, quad) -> None:
        """Test the curve passes exactly through both end points."""
        assert evaluate_cubic(*quad, 0) == quad[0]
        assert evaluate_cubic(*quad, 1) == quad[3]

    def test_midpoint(self) -> None:
        """Test a known midpoint."""
        p = evaluate_cubic(Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0), 0.5)
        assert p.x == pytest.approx(5.0)
        assert p.y == pytest.approx(7.5)

    def test_tangent_of_straight_line(self) -> None:
        """Test the derivative of an evenly parameterized line is constant."""
        quad = (Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0))
        for t in PARAMS:
            tangent = tangent_cubic(*quad, t)
            assert tangent.x == pytest.approx(3.0)
            assert tangent.y == pytest.approx(0.0)


class TestParallelPoint:
    """Tests for parallel_point."""

    @pytest.mark.parametrize("quad", QUADRUPLES)
    @pytest.mark.parametrize("t", PARAMS)
    def test_zero_offset_is_curve_point(self, quad, t) -> None:
        """Test offset 0 returns the curve point."""
        assert parallel_point(*quad, t, 0) == evaluate_cubic(*quad, t)

    def test_offset_is_left_normal(self) -> None:
        """Test a positive offset lies left of the direction of travel."""
        quad = (Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0))
        p = parallel_point(*quad, 0.5, 2)
        assert p.x == pytest.approx(1.5)
        assert p.y == pytest.approx(2.0)

    def test_zero_tangent_falls_back(self) -> None:
        """Test a degenerate segment returns the unperturbed point."""
        quad = (Point(4, 4), Point(4, 4), Point(4, 4), Point(4, 4))
        assert parallel_point(*quad, 0.5, 10) == Point(4, 4)


class TestRectangles:
    """Tests for rectangle helpers."""

    def test_normalize_negative_size(self) -> None:
        """Test negative sizes flip the edges."""
        assert normalize_rect(10, 10, -5, -20) == (5, -10, 10, 10)

    def test_point_in_rect_is_closed(self) -> None:
        """Test edges are inside."""
        rect = (0, 0, 10, 10)
        assert point_in_rect(Point(10, 0), rect)
        assert not point_in_rect(Point(10.01, 0), rect)


class TestCentroidAndBounds:
    """Tests for centroid and bounding box."""

    def test_centroid_ignores_handles(self) -> None:
        """Test only anchors contribute to the centroid."""
        points = [ControlPoint.create(0, 0, 100), ControlPoint.create(10, 20, 100)]
        assert points_centroid(points) == Point(5, 10)

    def test_centroid_empty(self) -> None:
        """Test an empty list yields the origin."""
        assert points_centroid([]) == Point(0, 0)

    def test_bounding_box_includes_handles(self) -> None:
        """Test handles extend the box."""
        points = [ControlPoint.create(0, 0, 5), ControlPoint.create(10, 10, 5)]
        assert points_bounding_box(points) == (-5, 0, 15, 10)
        assert points_bounding_box([]) is None


class TestTransforms:
    """Tests for centroid transforms."""

    def test_scale_then_rotate(self) -> None:
        """Test scale is applied before rotation."""
        t = TransformSettings(rotation=90, scale_x=2, scale_y=1)
        p = transform_point(Point(1, 0), Point(0, 0), t)
        assert p.x == pytest.approx(0.0, abs=1e-12)
        assert p.y == pytest.approx(2.0)

    def test_inverse_round_trip(self) -> None:
        """Test the inverse undoes the transform."""
        t = TransformSettings(rotation=33, scale_x=1.5, scale_y=-0.5)
        center = Point(3, 4)
        q = Point(-7, 11)
        back = inverse_transform_point(transform_point(q, center, t), center, t)
        assert back.x == pytest.approx(q.x)
        assert back.y == pytest.approx(q.y)

    def test_inverse_rejects_zero_scale(self) -> None:
        """Test a zero scale cannot be inverted."""
        with pytest.raises(InvalidTransformError):
            inverse_transform_point(Point(1, 1), Point(0, 0), TransformSettings(scale_x=0))

    def test_transform_control_points_keeps_centroid(self) -> None:
        """Test the anchor centroid is a fixed point."""
        points = [ControlPoint.create(0, 0, 5), ControlPoint.create(10, 0, 5)]
        moved = transform_control_points(points, TransformSettings(rotation=90, scale_x=2))
        centroid = points_centroid(moved)
        assert centroid.x == pytest.approx(5)
        assert centroid.y == pytest.approx(0)
        assert moved[0].x == pytest.approx(5)
        assert moved[0].y == pytest.approx(-10)
        assert [p.id for p in moved] == [p.id for p in points]

    def test_retransform_is_idempotent(self) -> None:
        """Test re-applying the same settings changes nothing."""
        points = [ControlPoint.create(0, 0, 5), ControlPoint.create(10, 4, 5)]
        t = TransformSettings(rotation=20, scale_x=2, scale_y=2)
        once = retransform_control_points(points, TransformSettings(), t)
        twice = retransform_control_points(once, t, t)
        for a, b in zip(once, twice):
            assert a.x == pytest.approx(b.x)
            assert a.y == pytest.approx(b.y)

    def test_retransform_back_to_identity(self) -> None:
        """Test removing a transform restores the original geometry."""
        points = [ControlPoint.create(0, 0, 5), ControlPoint.create(10, 4, 5)]
        t = TransformSettings(rotation=45, scale_x=3, scale_y=0.5)
        applied = retransform_control_points(points, TransformSettings(), t)
        restored = retransform_control_points(applied, t, TransformSettings())
        for original, back in zip(points, restored):
            assert back.x == pytest.approx(original.x)
            assert back.y == pytest.approx(original.y)
            assert back.handle_out.x == pytest.approx(original.handle_out.x)
            assert back.handle_out.y == pytest.approx(original.handle_out.y)


class TestSampling:
    """Tests for path sampling."""

    def test_segments_open_and_closed(self) -> None:
        """Test the closing segment only exists for closed paths."""
        points = [_line_point(0, 0), _line_point(10, 0), _line_point(10, 10)]
        assert len(list(iter_segments(points))) == 2
        assert len(list(iter_segments(points, closed=True))) == 3

    def test_joints_not_duplicated(self) -> None:
        """Test consecutive segments share one joint sample."""
        points = [_line_point(0, 0), _line_point(10, 0), _line_point(10, 10)]
        polyline = sample_path(points, steps=10)
        assert len(polyline) == 21
        assert polyline[0] == Point(0, 0)
        assert polyline[10] == Point(10, 0)
        assert polyline[-1] == Point(10, 10)

    def test_single_and_empty(self) -> None:
        """Test degenerate inputs."""
        assert sample_path([]) == []
        assert sample_path([_line_point(3, 4)]) == [Point(3, 4)]

    def test_offset_polyline(self) -> None:
        """Test a parallel polyline is shifted along the normal."""
        points = [
            ControlPoint(x=0, y=0, handle_in=Point(0, 0), handle_out=Point(1, 0)),
            ControlPoint(x=3, y=0, handle_in=Point(2, 0), handle_out=Point(3, 0)),
        ]
        polyline = sample_path(points, steps=4, offset=-1)
        assert all(p.y == pytest.approx(-1) for p in polyline)

    def test_sample_object_strokes(self) -> None:
        """Test main stroke first then one stroke per parallel."""
        obj = BezierObject(
            points=[ControlPoint.create(0, 0, 10), ControlPoint.create(100, 0, 10)],
            curve_config=CurveConfig(
                styles=[CurveStyle(color="#111111"), CurveStyle(color="#222222")],
                parallel_count=2,
                spacing=5,
            ),
        )
        strokes = sample_object(obj, steps=8)
        assert [s.offset for s in strokes] == [0, 5, 10]
        assert strokes[0].style.color == "#111111"
        assert strokes[2].style.color == "#222222"
        assert all(len(s.points) == 9 for s in strokes)
        assert math.isclose(strokes[1].points[4].y, 5.0)
