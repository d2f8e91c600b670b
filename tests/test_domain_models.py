"""Tests for domain models to verify they work correctly."""

import pytest

from bezierforge.domain import (
    BackgroundImage,
    BezierObject,
    ControlPoint,
    CurveConfig,
    CurveStyle,
    DesignData,
    HandleKind,
    ObjectGroup,
    Point,
    TransformSettings,
    clone_points,
)
from bezierforge.exceptions import DesignFormatError


class TestPoint:
    """Tests for Point class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point(100.0, 200.0)
        assert p.x == 100.0
        assert p.y == 200.0

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point(1.5, -2.0).to_tuple() == (1.5, -2.0)

    def test_point_serialization(self) -> None:
        """Test point serialization and deserialization."""
        p1 = Point(100.0, 200.0)
        assert Point.from_dict(p1.to_dict()) == p1

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point(100.0, 200.0)
        with pytest.raises(AttributeError):
            p.x = 150.0  # type: ignore[misc]

    def test_point_hashable(self) -> None:
        """Test that points can be used in sets."""
        assert len({Point(1, 2), Point(1, 2), Point(2, 1)}) == 2

    def test_reflected_about(self) -> None:
        """Test mirroring a point through a center."""
        assert Point(10, 10).reflected_about(Point(20, 10)) == Point(30, 10)


class TestControlPoint:
    """Tests for ControlPoint class."""

    def test_create_places_horizontal_handles(self) -> None:
        """Test new anchors get symmetric horizontal handles."""
        cp = ControlPoint.create(100, 50)
        assert cp.handle_in == Point(50, 50)
        assert cp.handle_out == Point(150, 50)
        assert cp.id

    def test_create_custom_offset(self) -> None:
        """Test a custom handle offset."""
        cp = ControlPoint.create(0, 0, handle_offset=10)
        assert cp.handle_in == Point(-10, 0)
        assert cp.handle_out == Point(10, 0)

    def test_translate_moves_handles_rigidly(self) -> None:
        """Test translation moves the anchor and both handles."""
        cp = ControlPoint.create(0, 0, handle_offset=10)
        cp.translate(5, -3)
        assert cp.anchor == Point(5, -3)
        assert cp.handle_in == Point(-5, -3)
        assert cp.handle_out == Point(15, -3)

    def test_get_by_kind(self) -> None:
        """Test addressing anchor and handles by kind."""
        cp = ControlPoint.create(1, 2, handle_offset=1)
        assert cp.get(HandleKind.ANCHOR) == Point(1, 2)
        assert cp.get(HandleKind.HANDLE_IN) == Point(0, 2)
        assert cp.get(HandleKind.HANDLE_OUT) == Point(2, 2)

    def test_copy_keeps_or_regenerates_id(self) -> None:
        """Test copies are independent and optionally re-identified."""
        cp = ControlPoint.create(1, 1)
        same = cp.copy()
        fresh = cp.copy(new_id=True)
        assert same.id == cp.id
        assert fresh.id != cp.id
        same.translate(1, 1)
        assert cp.anchor == Point(1, 1)

    def test_serialization_uses_camel_case(self) -> None:
        """Test the persisted shape."""
        cp = ControlPoint(x=1, y=2, handle_in=Point(0, 2), handle_out=Point(3, 2), id="p1")
        assert cp.to_dict() == {
            "id": "p1",
            "x": 1,
            "y": 2,
            "handleIn": {"x": 0, "y": 2},
            "handleOut": {"x": 3, "y": 2},
        }
        assert ControlPoint.from_dict(cp.to_dict()) == cp

    def test_from_dict_repairs_missing_handles(self) -> None:
        """Test repair of missing handles and id."""
        cp = ControlPoint.from_dict({"x": 10, "y": 20})
        assert cp.handle_in == Point(-20, 20)
        assert cp.handle_out == Point(40, 20)
        assert cp.id

    def test_from_dict_repairs_non_numeric_coordinates(self) -> None:
        """Test non-numeric and non-finite coordinates become zero."""
        cp = ControlPoint.from_dict({"x": "abc", "y": float("nan"), "handleIn": {"x": "1"}})
        assert cp.anchor == Point(0, 0)
        assert cp.handle_in == Point(-30, 0)

    def test_from_dict_accepts_garbage(self) -> None:
        """Test a non-dict value yields a valid point at the origin."""
        cp = ControlPoint.from_dict(None)
        assert cp.anchor == Point(0, 0)

    def test_clone_points(self) -> None:
        """Test cloning a list of points."""
        points = [ControlPoint.create(0, 0), ControlPoint.create(10, 0)]
        clones = clone_points(points, new_ids=True)
        assert [c.anchor for c in clones] == [p.anchor for p in points]
        assert all(c.id != p.id for c, p in zip(clones, points))


class TestCurveConfig:
    """Tests for CurveStyle and CurveConfig."""

    def test_default_style(self) -> None:
        """Test the default stroke style."""
        style = CurveStyle()
        assert style.color == "#000000"
        assert style.width == 2.0
        assert style.fill == "none"

    def test_empty_styles_replaced(self) -> None:
        """Test an empty style list falls back to the default style."""
        config = CurveConfig(styles=[])
        assert config.main_style == CurveStyle()

    def test_negative_parallel_count_rejected(self) -> None:
        """Test parallel_count must be non-negative."""
        with pytest.raises(ValueError):
            CurveConfig(parallel_count=-1)

    def test_parallel_offsets(self) -> None:
        """Test parallel stroke k is offset by k * spacing."""
        red = CurveStyle(color="#ff0000")
        blue = CurveStyle(color="#0000ff")
        config = CurveConfig(styles=[red, blue], parallel_count=3, spacing=5)
        offsets = config.parallel_offsets()
        assert [o for o, _ in offsets] == [5, 10, 15]
        assert [s.color for _, s in offsets] == ["#ff0000", "#0000ff", "#ff0000"]

    def test_from_dict_clamps_negative_count(self) -> None:
        """Test stored negative counts are clamped to zero."""
        config = CurveConfig.from_dict({"parallelCount": -4, "spacing": 2})
        assert config.parallel_count == 0
        assert config.spacing == 2

    def test_round_trip(self) -> None:
        """Test serialization round trip."""
        config = CurveConfig(styles=[CurveStyle(dash_array="4 2")], parallel_count=2, spacing=3)
        assert CurveConfig.from_dict(config.to_dict()) == config

    def test_copy_is_deep(self) -> None:
        """Test copies do not share styles."""
        config = CurveConfig()
        clone = config.copy()
        clone.styles[0].color = "#123456"
        assert config.main_style.color == "#000000"

    def test_from_dict_replaces_invalid_numbers(self) -> None:
        """Test non-numeric stored values fall back to defaults."""
        config = CurveConfig.from_dict(
            {
                "styles": [{"color": "#ff0000", "width": "thick", "opacity": None}],
                "parallelCount": None,
                "spacing": "wide",
            }
        )
        assert config.main_style.color == "#ff0000"
        assert config.main_style.width == 2.0
        assert config.main_style.opacity == 1.0
        assert config.parallel_count == 0
        assert config.spacing == 0.0

    def test_from_dict_ignores_non_list_styles(self) -> None:
        """Test a scalar styles field yields the default style."""
        assert CurveConfig.from_dict({"styles": 3}).main_style == CurveStyle()


class TestTransformSettings:
    """Tests for TransformSettings."""

    def test_identity(self) -> None:
        """Test identity detection."""
        assert TransformSettings().is_identity
        assert TransformSettings(rotation=360).is_identity
        assert not TransformSettings(scale_x=2).is_identity

    def test_invertible(self) -> None:
        """Test zero scale is not invertible."""
        assert TransformSettings(scale_x=-1).is_invertible
        assert not TransformSettings(scale_y=0).is_invertible

    def test_round_trip(self) -> None:
        """Test camelCase serialization."""
        t = TransformSettings(rotation=45, scale_x=2, scale_y=0.5)
        assert t.to_dict() == {"rotation": 45, "scaleX": 2, "scaleY": 0.5}
        assert TransformSettings.from_dict(t.to_dict()) == t

    def test_from_dict_replaces_null_fields(self) -> None:
        """Test null or non-numeric fields become identity values."""
        transform = TransformSettings.from_dict({"rotation": None, "scaleX": "2", "scaleY": 3})
        assert transform == TransformSettings(rotation=0.0, scale_x=1.0, scale_y=3.0)


class TestBezierObject:
    """Tests for BezierObject and ObjectGroup."""

    def test_defaults(self) -> None:
        """Test a new object is empty with identity transform."""
        obj = BezierObject()
        assert obj.is_empty
        assert obj.transform.is_identity
        assert not obj.is_selected

    def test_has_index(self) -> None:
        """Test index bounds checking."""
        obj = BezierObject(points=[ControlPoint.create(0, 0)])
        assert obj.has_index(0)
        assert not obj.has_index(1)
        assert not obj.has_index(-1)

    def test_copy_is_structural(self) -> None:
        """Test copies do not alias points."""
        obj = BezierObject(points=[ControlPoint.create(0, 0)])
        clone = obj.copy()
        clone.points[0].translate(10, 10)
        assert obj.points[0].anchor == Point(0, 0)
        assert clone.id == obj.id

    def test_copy_new_ids(self) -> None:
        """Test copies with regenerated ids."""
        obj = BezierObject(points=[ControlPoint.create(0, 0)])
        clone = obj.copy(new_ids=True)
        assert clone.id != obj.id
        assert clone.points[0].id != obj.points[0].id

    def test_round_trip(self) -> None:
        """Test serialization round trip."""
        obj = BezierObject(
            name="Wave",
            points=[ControlPoint.create(0, 0), ControlPoint.create(10, 5)],
            curve_config=CurveConfig(parallel_count=1, spacing=4),
            transform=TransformSettings(rotation=30),
        )
        restored = BezierObject.from_dict(obj.to_dict())
        assert restored == obj

    def test_from_dict_default_name(self) -> None:
        """Test a missing name uses the given default."""
        obj = BezierObject.from_dict({"points": []}, default_name="Curve 7")
        assert obj.name == "Curve 7"

    def test_group_live_ids(self) -> None:
        """Test dangling ids are filtered on read."""
        group = ObjectGroup(object_ids=["a", "b", "c"])
        assert group.live_ids({"a", "c"}) == ["a", "c"]
        group.discard("b")
        assert group.object_ids == ["a", "c"]

    def test_from_dict_ignores_non_list_fields(self) -> None:
        """Test scalar points and member lists are treated as empty."""
        obj = BezierObject.from_dict({"id": "a", "points": 7})
        assert obj.points == []
        group = ObjectGroup.from_dict({"id": "g", "objectIds": "a"})
        assert group.object_ids == []


class TestDesignData:
    """Tests for DesignData parsing."""

    def test_objects_shape(self) -> None:
        """Test the exchanged shape with a background image."""
        data = {
            "objects": [{"id": "o1", "name": "A", "points": [{"x": 1, "y": 2}]}],
            "backgroundImage": {"url": "bg.png", "opacity": 0.3},
        }
        design = DesignData.from_dict(data)
        assert [o.id for o in design.objects] == ["o1"]
        assert design.background_image == BackgroundImage(url="bg.png", opacity=0.3)

    def test_list_shape(self) -> None:
        """Test a bare list of objects with default names."""
        design = DesignData.from_dict([{"points": []}, {"points": []}])
        assert [o.name for o in design.objects] == ["Curve 1", "Curve 2"]

    def test_legacy_points_shape(self) -> None:
        """Test the legacy shape becomes one implicit object."""
        design = DesignData.from_dict({"points": [{"x": 0, "y": 0}, {"x": 5, "y": 5}]})
        assert len(design.objects) == 1
        assert design.objects[0].name == "Curve 1"
        assert len(design.objects[0].points) == 2

    def test_groups_restored(self) -> None:
        """Test groups are read alongside objects."""
        design = DesignData.from_dict(
            {"objects": [{"id": "o1"}], "groups": [{"id": "g1", "objectIds": ["o1"]}]}
        )
        assert design.groups[0].object_ids == ["o1"]

    def test_unknown_shape_rejected(self) -> None:
        """Test shapes without objects or points raise."""
        with pytest.raises(DesignFormatError, match="missing"):
            DesignData.from_dict({"shapes": []})
        with pytest.raises(DesignFormatError):
            DesignData.from_dict(42)

    def test_to_dict_omits_empty_optionals(self) -> None:
        """Test groups and background are omitted when unset."""
        assert DesignData().to_dict() == {"objects": []}

    def test_unreadable_object_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test one object failing to deserialize leaves the others."""
        original = BezierObject.from_dict.__func__

        def from_dict(cls, data, default_name="Curve"):
            if data.get("id") == "bad":
                raise ValueError("corrupt object")
            return original(cls, data, default_name)

        monkeypatch.setattr(BezierObject, "from_dict", classmethod(from_dict))
        design = DesignData.from_dict(
            {"objects": [{"id": "bad", "points": []}, {"id": "good", "points": [{"x": 1, "y": 2}]}, 5]}
        )
        assert [o.id for o in design.objects] == ["good"]
