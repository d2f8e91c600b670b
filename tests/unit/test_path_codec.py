"""Unit tests for the SVG path codec."""

import pytest

from bezierforge.config import ArcMode
from bezierforge.core.geometry import evaluate_cubic, sample_path
from bezierforge.domain import ControlPoint, Point
from bezierforge.exceptions import PathSyntaxError
from bezierforge.io.path_codec import (
    arc_to_cubics,
    decode_path,
    decode_path_detailed,
    encode_path,
    fit_to_canvas,
    format_number,
    single_arc_guess,
    tokenize_path,
)


def _cross(a: Point, b: Point, c: Point) -> float:
    """Z component of (b - a) x (c - a); zero when colinear."""
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


class TestTokenize:
    """Tests for tokenize_path."""

    def test_implicit_lineto_after_moveto(self) -> None:
        """Test extra moveto pairs become linetos."""
        commands, dropped = tokenize_path("M0,0 10,0 10,10")
        assert [c.command for c in commands] == ["M", "L", "L"]
        assert dropped == 0

    def test_relative_implicit_lineto(self) -> None:
        """Test extra relative moveto pairs become relative linetos."""
        commands, _ = tokenize_path("m1 1 2 2")
        assert [c.command for c in commands] == ["m", "l"]

    def test_compact_numbers(self) -> None:
        """Test numbers without separators."""
        commands, _ = tokenize_path("M10-5L.5.5")
        assert commands[0].params == [10, -5]
        assert commands[1].params == [0.5, 0.5]

    def test_repeated_curve_groups(self) -> None:
        """Test a parameter run longer than one group repeats the command."""
        commands, _ = tokenize_path("M0 0 C1 1 2 2 3 3 4 4 5 5 6 6")
        assert [c.command for c in commands] == ["M", "C", "C"]

    def test_incomplete_group_dropped(self) -> None:
        """Test trailing values that do not fill a group are dropped."""
        commands, dropped = tokenize_path("M0 0 L10 10 20")
        assert [c.command for c in commands] == ["M", "L"]
        assert dropped == 1

    def test_compact_arc_flags(self) -> None:
        """Test arc flags written without separators."""
        commands, _ = tokenize_path("M0 0 a5 5 0 1110 0")
        assert commands[1].params == [5, 5, 0, 1, 1, 10, 0]

    def test_strict_mode_raises(self) -> None:
        """Test strict mode rejects malformed data."""
        with pytest.raises(PathSyntaxError):
            tokenize_path("M0 0 L10", strict=True)
        with pytest.raises(PathSyntaxError, match="before the first command"):
            tokenize_path("5 5 M0 0", strict=True)


class TestDecode:
    """Tests for decode_path."""

    def test_lines_produce_colinear_handles(self) -> None:
        """Test each line segment's handles lie on the segment."""
        points = decode_path("M 0,0 L 10,0 L 10,10")
        assert len(points) == 3
        for prev, curr in zip(points, points[1:]):
            assert _cross(prev.anchor, curr.anchor, prev.handle_out) == pytest.approx(0)
            assert _cross(prev.anchor, curr.anchor, curr.handle_in) == pytest.approx(0)
        assert points[0].handle_out.x == pytest.approx(10 / 3)
        assert points[1].handle_in.x == pytest.approx(20 / 3)

    def test_smooth_curve_reflection(self) -> None:
        """Test S reflects the previous second control point."""
        points = decode_path("M0,0 C10,0 10,10 20,10 S30,20 40,20")
        assert len(points) == 3
        assert points[1].handle_out == Point(30, 10)
        assert points[2].handle_in == Point(30, 20)
        assert points[2].anchor == Point(40, 20)

    def test_smooth_curve_without_previous_cubic(self) -> None:
        """Test S after a line uses the current point as first control."""
        points = decode_path("M0,0 L10,0 S20,10 30,0")
        assert points[1].handle_out == Point(10, 0)

    def test_cubic_sets_handles(self) -> None:
        """Test C assigns handle_out and handle_in of adjacent anchors."""
        points = decode_path("M0,0 C5,-5 15,-5 20,0")
        assert points[0].handle_out == Point(5, -5)
        assert points[1].handle_in == Point(15, -5)
        assert points[1].handle_out == Point(25, 5)

    def test_relative_commands(self) -> None:
        """Test relative commands are resolved against the current point."""
        points = decode_path("m10,10 l10,0 v10 h-10")
        assert [p.anchor for p in points] == [
            Point(10, 10),
            Point(20, 10),
            Point(20, 20),
            Point(10, 20),
        ]

    def test_quadratic_elevation(self) -> None:
        """Test Q controls are elevated to cubic at two thirds."""
        points = decode_path("M0,0 Q30,30 60,0")
        assert points[0].handle_out.to_tuple() == pytest.approx((20, 20))
        assert points[1].handle_in.to_tuple() == pytest.approx((40, 20))

    def test_smooth_quadratic_reflection(self) -> None:
        """Test T reflects the previous quadratic control."""
        points = decode_path("M0,0 Q30,30 60,0 T120,0")
        # Reflected control is (90, -30)
        assert points[1].handle_out.x == pytest.approx(60 + 2 / 3 * 30)
        assert points[1].handle_out.y == pytest.approx(-20)

    def test_close_sets_closing_handles(self) -> None:
        """Test Z shapes the closing segment and reports closure."""
        decoded = decode_path_detailed("M0,0 L30,0 L30,30 Z")
        assert decoded.closed
        assert len(decoded.points) == 3
        assert decoded.points[-1].handle_out == Point(20, 20)
        assert decoded.points[0].handle_in == Point(10, 10)

    def test_zero_length_segments_skipped(self) -> None:
        """Test degenerate segments add no anchors."""
        points = decode_path("M5,5 L5,5 L10,5 H10")
        assert len(points) == 2

    def test_non_finite_values_dropped(self) -> None:
        """Test overflowing numbers are discarded."""
        decoded = decode_path_detailed("M0,0 L1e999,0 L10,10")
        assert decoded.dropped_values == 2
        assert [p.anchor for p in decoded.points] == [Point(0, 0), Point(10, 10)]

    def test_truncation(self) -> None:
        """Test the anchor cap truncates instead of failing."""
        d = "M0,0 " + " ".join(f"L{i},0" for i in range(1, 50))
        decoded = decode_path_detailed(d, max_points=20)
        assert len(decoded.points) == 20
        assert decoded.truncated

    def test_unlimited(self) -> None:
        """Test max_points None keeps everything."""
        d = "M0,0 " + " ".join(f"L{i},0" for i in range(1, 50))
        assert len(decode_path(d, max_points=None)) == 50

    def test_empty_and_garbage(self) -> None:
        """Test inputs with nothing drawable."""
        assert decode_path("") == []
        assert decode_path("hello") == []

    def test_second_subpath_appends(self) -> None:
        """Test a later moveto adds an anchor in the same list."""
        points = decode_path("M0,0 L10,0 M20,20 L30,20")
        assert [p.anchor for p in points] == [
            Point(0, 0),
            Point(10, 0),
            Point(20, 20),
            Point(30, 20),
        ]

    def test_draw_after_close_without_moveto(self) -> None:
        """Test drawing after Z starts from the subpath start."""
        points = decode_path("M0,0 L10,0 L10,10 Z L0,10")
        assert points[-1].anchor == Point(0, 10)
        assert points[-2].anchor == Point(0, 0)


class TestArcs:
    """Tests for arc conversion."""

    def test_arc_endpoint_exact(self) -> None:
        """Test the final arc anchor is the exact endpoint."""
        points = decode_path("M0,0 A10,10 0 0 1 20,0")
        assert points[-1].anchor == Point(20, 0)
        assert len(points) >= 3

    def test_semicircle_midpoint_on_circle(self) -> None:
        """Test subdivided arcs stay on the circle."""
        pieces = arc_to_cubics(Point(0, 0), 10, 10, 0, False, True, Point(20, 0))
        start = Point(0, 0)
        for c1, c2, end in pieces:
            mid = evaluate_cubic(start, c1, c2, end, 0.5)
            radius = ((mid.x - 10) ** 2 + mid.y**2) ** 0.5
            assert radius == pytest.approx(10, rel=1e-3)
            start = end

    def test_zero_radius_is_line(self) -> None:
        """Test rx or ry of zero degrades to a straight segment."""
        points = decode_path("M0,0 A0,5 0 0 1 30,0")
        assert len(points) == 2
        assert points[0].handle_out == Point(10, 0)

    def test_same_endpoint_skipped(self) -> None:
        """Test an arc to the current point is omitted."""
        assert len(decode_path("M0,0 A5,5 0 0 1 0,0")) == 1

    def test_single_mode(self) -> None:
        """Test the single-cubic heuristic adds exactly one anchor."""
        points = decode_path("M0,0 A10,10 0 0 1 20,0", arc_mode=ArcMode.SINGLE)
        assert len(points) == 2
        assert points[1].anchor == Point(20, 0)

    def test_single_guess_bulges_by_sweep(self) -> None:
        """Test the sweep flag selects the bulge side."""
        c1_sweep, _, _ = single_arc_guess(Point(0, 0), 10, 10, True, Point(20, 0))
        c1_other, _, _ = single_arc_guess(Point(0, 0), 10, 10, False, Point(20, 0))
        assert c1_sweep.y == pytest.approx(-c1_other.y)
        assert c1_sweep.y != 0


class TestEncode:
    """Tests for encode_path and format_number."""

    def test_format_number(self) -> None:
        """Test compact number formatting."""
        assert format_number(3.0) == "3"
        assert format_number(-0.00001) == "0"
        assert format_number(6.666666) == "6.6667"
        assert format_number(1.23456, precision=2) == "1.23"

    def test_encode_basic(self) -> None:
        """Test the emitted command sequence."""
        points = decode_path("M0,0 C10,0 10,10 20,10")
        assert encode_path(points) == "M 0,0 C 10,0 10,10 20,10"

    def test_encode_empty(self) -> None:
        """Test no anchors encode to an empty string."""
        assert encode_path([]) == ""

    def test_encode_close_adds_closing_curve(self) -> None:
        """Test closing adds a curve back to the first anchor and Z."""
        points = decode_path("M0,0 L30,0 L30,30 Z")
        d = encode_path(points, close=True)
        assert d.endswith("C 20,20 10,10 0,0 Z")

    def test_encode_close_coincident_endpoints(self) -> None:
        """Test no closing curve when last and first anchors coincide."""
        points = decode_path("M0,0 L30,0 L30,30 L0,0")
        d = encode_path(points, close=True)
        assert d.count("C") == 3
        assert d.endswith("Z")

    def test_encode_close_needs_three_points(self) -> None:
        """Test two-anchor paths are never closed."""
        points = decode_path("M0,0 L30,0")
        assert "Z" not in encode_path(points, close=True)

    def test_round_trip_sampled_curve(self) -> None:
        """Test decode, encode, decode preserves the sampled curve."""
        original = "M 0,0 C 10,0 10,10 0,10 Z"
        decoded = decode_path(original)
        redecoded = decode_path(encode_path(decoded, close=True))
        expected = [
            evaluate_cubic(Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10), i / 30)
            for i in range(31)
        ]
        for polyline in (sample_path(decoded), sample_path(redecoded)):
            assert len(polyline) == len(expected)
            for got, want in zip(polyline, expected):
                assert got.x == pytest.approx(want.x, abs=1e-3)
                assert got.y == pytest.approx(want.y, abs=1e-3)


class TestFitToCanvas:
    """Tests for fit_to_canvas."""

    def test_fit_centers_and_scales(self) -> None:
        """Test the box fills 70% of the limiting dimension, centered."""
        path = [
            ControlPoint(x=0, y=0, handle_in=Point(0, 0), handle_out=Point(0, 0)),
            ControlPoint(x=100, y=50, handle_in=Point(100, 50), handle_out=Point(100, 50)),
        ]
        scale = fit_to_canvas([path], canvas_width=800, canvas_height=600)
        assert scale == pytest.approx(5.6)
        assert path[0].anchor.x == pytest.approx(400 - 280)
        assert path[0].anchor.y == pytest.approx(300 - 140)
        assert path[1].anchor.x == pytest.approx(400 + 280)

    def test_fit_clamps_scale(self) -> None:
        """Test tiny geometry is scaled at most by max_scale."""
        path = [
            ControlPoint(x=0, y=0, handle_in=Point(0, 0), handle_out=Point(0, 0)),
            ControlPoint(x=1, y=1, handle_in=Point(1, 1), handle_out=Point(1, 1)),
        ]
        assert fit_to_canvas([path]) == 10.0

    def test_fit_empty(self) -> None:
        """Test nothing to fit leaves scale 1."""
        assert fit_to_canvas([[]]) == 1.0
