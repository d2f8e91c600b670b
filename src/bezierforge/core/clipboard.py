"""Copy, cut and paste of selected control points.

Every copy and every paste regenerates point ids, so points are never
shared by id across objects.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from bezierforge.core.selection import PointRef
from bezierforge.domain import BezierObject, ControlPoint


@dataclass
class Clipboard:
    """Points held for pasting.

    Attributes:
        points: Copied points with fresh ids
    """

    points: list[ControlPoint] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.points


def copy_points(objects: dict[str, BezierObject], refs: list[PointRef]) -> list[ControlPoint]:
    """Clone the referenced points with fresh ids.

    Stale references are skipped.

    Args:
        objects: Object arena keyed by id
        refs: Points to copy, in the order they are returned

    Returns:
        Copied points
    """
    copied: list[ControlPoint] = []
    for ref in refs:
        obj = objects.get(ref.object_id)
        if obj is None or not obj.has_index(ref.point_index):
            continue
        copied.append(obj.points[ref.point_index].copy(new_id=True))
    return copied


def remove_points(objects: dict[str, BezierObject], refs: list[PointRef]) -> list[str]:
    """Delete the referenced points in place.

    Objects left without points are removed from the arena.

    Args:
        objects: Object arena keyed by id (mutated)
        refs: Points to delete

    Returns:
        Ids of objects dissolved because they became empty
    """
    by_object: dict[str, set[int]] = {}
    for ref in refs:
        by_object.setdefault(ref.object_id, set()).add(ref.point_index)

    dissolved: list[str] = []
    for object_id, indices in by_object.items():
        obj = objects.get(object_id)
        if obj is None:
            continue
        obj.points = [p for i, p in enumerate(obj.points) if i not in indices]
        if obj.is_empty:
            del objects[object_id]
            dissolved.append(object_id)
    return dissolved


def cut_points(
    objects: dict[str, BezierObject], refs: list[PointRef]
) -> tuple[list[ControlPoint], list[str]]:
    """Copy the referenced points, then remove them from their objects.

    Returns:
        Copied points and the ids of dissolved objects
    """
    copied = copy_points(objects, refs)
    return copied, remove_points(objects, refs)


def paste_points(
    objects: dict[str, BezierObject],
    clipboard: list[ControlPoint],
    target_id: str | None,
    offset: float,
    new_object: Callable[[list[ControlPoint]], BezierObject],
) -> tuple[str, list[PointRef]]:
    """Insert clipboard points, shifted diagonally, with fresh ids.

    Args:
        objects: Object arena keyed by id (mutated)
        clipboard: Points to paste
        target_id: Object receiving the points; a new object is created
            when None or unknown
        offset: Diagonal shift applied to anchors and handles
        new_object: Factory building a new object around the pasted points

    Returns:
        Id of the receiving object and references to exactly the pasted points
    """
    pasted = []
    for point in clipboard:
        clone = point.copy(new_id=True)
        clone.translate(offset, offset)
        pasted.append(clone)

    target = objects.get(target_id) if target_id is not None else None
    if target is None:
        target = new_object(pasted)
        objects[target.id] = target
        return target.id, [PointRef(target.id, i) for i in range(len(pasted))]

    start = len(target.points)
    target.points.extend(pasted)
    return target.id, [PointRef(target.id, start + i) for i in range(len(pasted))]
