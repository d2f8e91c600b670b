"""Curve objects and groups.

A BezierObject is the unit of selection, transform and persistence. It
exclusively owns its control points and style list. ObjectGroup holds weak
references (ids) to objects and never owns them.
"""

from dataclasses import dataclass, field
from typing import Any

from bezierforge.domain.point import ControlPoint, clone_points, generate_id
from bezierforge.domain.style import CurveConfig, TransformSettings


@dataclass
class BezierObject:
    """A compound cubic path with its styling and transform.

    Attributes:
        id: Object identifier
        name: Display name
        points: Anchors in path order
        curve_config: Main and parallel stroke configuration
        transform: Transform currently baked into the points
        is_selected: Object-level selection flag
    """

    id: str = field(default_factory=generate_id)
    name: str = "Curve"
    points: list[ControlPoint] = field(default_factory=list)
    curve_config: CurveConfig = field(default_factory=CurveConfig)
    transform: TransformSettings = field(default_factory=TransformSettings)
    is_selected: bool = False

    @property
    def is_empty(self) -> bool:
        """Whether the object has no anchors."""
        return not self.points

    def has_index(self, index: int) -> bool:
        """Whether index addresses an existing point."""
        return 0 <= index < len(self.points)

    def copy(self, new_ids: bool = False) -> "BezierObject":
        """Return a structural deep copy.

        Args:
            new_ids: Regenerate the object id and every point id

        Returns:
            Independent BezierObject
        """
        return BezierObject(
            id=generate_id() if new_ids else self.id,
            name=self.name,
            points=clone_points(self.points, new_ids=new_ids),
            curve_config=self.curve_config.copy(),
            transform=self.transform,
            is_selected=self.is_selected,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            "id": self.id,
            "name": self.name,
            "points": [p.to_dict() for p in self.points],
            "curveConfig": self.curve_config.to_dict(),
            "transform": self.transform.to_dict(),
            "isSelected": self.is_selected,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_name: str = "Curve") -> "BezierObject":
        """Deserialize a stored object, repairing its points.

        Args:
            data: Stored object
            default_name: Name used when the stored one is missing

        Returns:
            BezierObject instance
        """
        object_id = data.get("id")
        config = data.get("curveConfig")
        transform = data.get("transform")
        points = data.get("points")
        return cls(
            id=object_id if isinstance(object_id, str) and object_id else generate_id(),
            name=str(data.get("name") or default_name),
            points=[ControlPoint.from_dict(p) for p in points] if isinstance(points, list) else [],
            curve_config=CurveConfig.from_dict(config) if isinstance(config, dict) else CurveConfig(),
            transform=(
                TransformSettings.from_dict(transform)
                if isinstance(transform, dict)
                else TransformSettings()
            ),
            is_selected=bool(data.get("isSelected", False)),
        )


@dataclass
class ObjectGroup:
    """A named, non-owning set of object ids.

    Attributes:
        id: Group identifier
        name: Display name
        object_ids: Referenced object ids, possibly dangling
        is_selected: Group-level selection flag
    """

    id: str = field(default_factory=generate_id)
    name: str = "Group"
    object_ids: list[str] = field(default_factory=list)
    is_selected: bool = False

    def live_ids(self, existing: set[str] | dict[str, Any]) -> list[str]:
        """Return member ids that still resolve, in group order."""
        return [oid for oid in self.object_ids if oid in existing]

    def discard(self, object_id: str) -> None:
        """Remove an id from the group if present."""
        self.object_ids = [oid for oid in self.object_ids if oid != object_id]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            "id": self.id,
            "name": self.name,
            "objectIds": list(self.object_ids),
            "isSelected": self.is_selected,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectGroup":
        """Deserialize a stored group."""
        object_ids = data.get("objectIds")
        return cls(
            id=str(data.get("id") or generate_id()),
            name=str(data.get("name") or "Group"),
            object_ids=[str(oid) for oid in object_ids] if isinstance(object_ids, list) else [],
            is_selected=bool(data.get("isSelected", False)),
        )
