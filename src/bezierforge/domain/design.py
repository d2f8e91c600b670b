"""Persisted design document.

The exchanged JSON shape is ``{objects: [...], backgroundImage?: {...}}``.
Two older shapes are still accepted on input: a bare list of objects and
``{points: [...]}`` which becomes a single implicit object.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from bezierforge.domain.objects import BezierObject, ObjectGroup
from bezierforge.domain.point import ControlPoint, coerce_number
from bezierforge.exceptions import DesignFormatError

logger = structlog.get_logger("bezierforge.design")


@dataclass
class BackgroundImage:
    """Reference image displayed behind the curves.

    Attributes:
        url: Image location
        opacity: Display opacity in [0, 1]
        name: Optional original file name
    """

    url: str
    opacity: float = 0.5
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting an unset name."""
        data: dict[str, Any] = {"url": self.url, "opacity": self.opacity}
        if self.name is not None:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackgroundImage":
        """Deserialize from dictionary."""
        name = data.get("name")
        return cls(
            url=str(data["url"]),
            opacity=min(1.0, max(0.0, coerce_number(data.get("opacity"), 0.5))),
            name=str(name) if name is not None else None,
        )


@dataclass
class DesignData:
    """Full saved design: objects, groups and an optional background.

    Attributes:
        objects: Curve objects in drawing order
        groups: Object groups
        background_image: Optional reference image
    """

    objects: list[BezierObject] = field(default_factory=list)
    groups: list[ObjectGroup] = field(default_factory=list)
    background_image: BackgroundImage | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the exchanged JSON shape."""
        data: dict[str, Any] = {"objects": [o.to_dict() for o in self.objects]}
        if self.groups:
            data["groups"] = [g.to_dict() for g in self.groups]
        if self.background_image is not None:
            data["backgroundImage"] = self.background_image.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "DesignData":
        """Deserialize any accepted design shape.

        Args:
            data: Decoded JSON value

        Returns:
            DesignData instance

        Raises:
            DesignFormatError: If data matches no accepted shape
        """
        if isinstance(data, list):
            return cls(objects=_objects_from_list(data))

        if not isinstance(data, dict):
            raise DesignFormatError(f"expected an object or a list, got {type(data).__name__}")

        background = data.get("backgroundImage")
        background_image = (
            BackgroundImage.from_dict(background)
            if isinstance(background, dict) and background.get("url")
            else None
        )

        if isinstance(data.get("objects"), list):
            groups = [
                ObjectGroup.from_dict(g) for g in data.get("groups") or [] if isinstance(g, dict)
            ]
            return cls(
                objects=_objects_from_list(data["objects"]),
                groups=groups,
                background_image=background_image,
            )

        if isinstance(data.get("points"), list):
            legacy = BezierObject(
                name="Curve 1",
                points=[ControlPoint.from_dict(p) for p in data["points"]],
            )
            return cls(objects=[legacy], background_image=background_image)

        raise DesignFormatError("missing 'objects' or 'points'")


def _objects_from_list(items: list[Any]) -> list[BezierObject]:
    objects = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping stored object", index=index, reason="not an object")
            continue
        try:
            objects.append(BezierObject.from_dict(item, default_name=f"Curve {index + 1}"))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping stored object", index=index, reason=str(e))
    return objects
