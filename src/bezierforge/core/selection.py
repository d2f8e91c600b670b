"""Selection state and hit testing.

Hit testing visits objects and then points in index order, testing the
anchor before handle_in before handle_out; the first match wins. That order
makes overlapping targets resolve deterministically.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from bezierforge.core.geometry import Rect, is_point_near, normalize_rect, point_in_rect
from bezierforge.domain import BezierObject, HandleKind, Point

_HIT_ORDER = (HandleKind.ANCHOR, HandleKind.HANDLE_IN, HandleKind.HANDLE_OUT)


@dataclass(frozen=True, slots=True)
class PointRef:
    """Reference to one anchor of one object."""

    object_id: str
    point_index: int


@dataclass(frozen=True, slots=True)
class HitTarget:
    """An anchor or handle found under the cursor."""

    object_id: str
    point_index: int
    kind: HandleKind

    @property
    def ref(self) -> PointRef:
        return PointRef(self.object_id, self.point_index)


@dataclass
class SelectionState:
    """Current selection of objects and points.

    Attributes:
        object_ids: Selected objects in selection order
        points: Selected anchors (point granularity)
        active: The single anchor or handle being edited, if any
        pending_rect: Rubber-band rectangle as (x, y, width, height)
    """

    object_ids: list[str] = field(default_factory=list)
    points: list[PointRef] = field(default_factory=list)
    active: HitTarget | None = None
    pending_rect: tuple[float, float, float, float] | None = None

    @property
    def is_empty(self) -> bool:
        return not self.object_ids and not self.points and self.active is None

    def clear(self) -> None:
        """Drop every selection and any pending rectangle."""
        self.object_ids = []
        self.points = []
        self.active = None
        self.pending_rect = None

    def clear_points(self) -> None:
        """Drop point-level selection, keeping selected objects."""
        self.points = []
        self.active = None

    def select_object(self, object_id: str, additive: bool = False) -> None:
        """Select an object, toggling it when additive."""
        if not additive:
            self.object_ids = [object_id]
            return
        if object_id in self.object_ids:
            self.object_ids = [oid for oid in self.object_ids if oid != object_id]
        else:
            self.object_ids = [*self.object_ids, object_id]

    def select_point(self, ref: PointRef, additive: bool = False) -> None:
        """Select an anchor; additive keeps the existing point selection."""
        if not additive:
            self.points = [ref]
        elif ref not in self.points:
            self.points = [*self.points, ref]
        if ref.object_id not in self.object_ids:
            self.object_ids = [*self.object_ids, ref.object_id] if additive else [ref.object_id]

    def is_point_selected(self, ref: PointRef) -> bool:
        return ref in self.points

    def discard_object(self, object_id: str) -> None:
        """Remove every reference to an object."""
        self.object_ids = [oid for oid in self.object_ids if oid != object_id]
        self.points = [ref for ref in self.points if ref.object_id != object_id]
        if self.active is not None and self.active.object_id == object_id:
            self.active = None

    def prune(self, objects: Mapping[str, BezierObject]) -> None:
        """Drop references to objects or indices that no longer exist."""
        self.object_ids = [oid for oid in self.object_ids if oid in objects]
        self.points = [
            ref
            for ref in self.points
            if ref.object_id in objects and objects[ref.object_id].has_index(ref.point_index)
        ]
        if self.active is not None:
            obj = objects.get(self.active.object_id)
            if obj is None or not obj.has_index(self.active.point_index):
                self.active = None

    def selected_refs(self) -> list[PointRef]:
        """Selected anchors, falling back to the active anchor."""
        if self.points:
            return list(self.points)
        if self.active is not None:
            return [self.active.ref]
        return []


def hit_test(
    objects: Iterable[BezierObject],
    point: Point,
    zoom: float = 1.0,
    anchor_radius: float = 8.0,
    handle_radius: float = 6.0,
) -> HitTarget | None:
    """Find the first anchor or handle within reach of a canvas point.

    Radii are in screen pixels and are divided by zoom.

    Args:
        objects: Objects in drawing order
        point: Canvas position
        zoom: Current zoom factor
        anchor_radius: Anchor hit radius in screen pixels
        handle_radius: Handle hit radius in screen pixels

    Returns:
        The matching target, or None
    """
    anchor_reach = anchor_radius / zoom
    handle_reach = handle_radius / zoom
    for obj in objects:
        for index, cp in enumerate(obj.points):
            for kind in _HIT_ORDER:
                reach = anchor_reach if kind is HandleKind.ANCHOR else handle_reach
                if is_point_near(point, cp.get(kind), reach):
                    return HitTarget(obj.id, index, kind)
    return None


def selection_bounds(
    objects: Mapping[str, BezierObject], refs: Iterable[PointRef], padding: float = 0.0
) -> Rect | None:
    """Bounding box of the referenced anchors, grown by padding.

    Stale references are ignored. Returns None when nothing resolves.
    """
    xs: list[float] = []
    ys: list[float] = []
    for ref in refs:
        obj = objects.get(ref.object_id)
        if obj is None or not obj.has_index(ref.point_index):
            continue
        cp = obj.points[ref.point_index]
        xs.append(cp.x)
        ys.append(cp.y)
    if not xs:
        return None
    return (min(xs) - padding, min(ys) - padding, max(xs) + padding, max(ys) + padding)


def objects_in_rect(
    objects: Iterable[BezierObject], rect: tuple[float, float, float, float]
) -> tuple[list[str], int]:
    """Whole-object rubber-band selection.

    An object is selected when any of its anchors lies in the rectangle;
    all of its anchors then count as selected.

    Args:
        objects: Candidate objects
        rect: Rectangle as (x, y, width, height), sizes may be negative

    Returns:
        Selected object ids and the total number of their anchors
    """
    bounds = normalize_rect(*rect)
    selected: list[str] = []
    point_count = 0
    for obj in objects:
        if any(point_in_rect(cp.anchor, bounds) for cp in obj.points):
            selected.append(obj.id)
            point_count += len(obj.points)
    return selected, point_count
