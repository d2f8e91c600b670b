"""Core editing algorithms for bezierforge.

This module contains the state-free geometry and the editor state services:

- Cubic evaluation, tangents and parallel offsets
- Anchor-centroid transforms and curve sampling
- Undo/redo history, viewport mapping, selection and clipboard

The stateful layers are imported from their own modules, since they depend
on bezierforge.io:

- bezierforge.core.engine: BezierEngine and EngineContext
- bezierforge.core.interaction: InteractionController and InteractionState

Key functions:
- evaluate_cubic: Point on a cubic segment
- tangent_cubic: Derivative of a cubic segment
- parallel_point: Point offset along the unit normal
- sample_path: Polyline for a (possibly offset) curve
- hit_test: Anchor or handle under the cursor

Key classes:
- HistoryManager: Bounded snapshot log with a cursor
- Viewport: Screen/canvas mapping with clamped zoom
- SelectionState: Selected objects and points
- Clipboard: Copied points
"""

from bezierforge.core.clipboard import Clipboard, copy_points, cut_points, paste_points
from bezierforge.core.geometry import (
    SampledStroke,
    evaluate_cubic,
    inverse_transform_point,
    parallel_point,
    points_bounding_box,
    points_centroid,
    retransform_control_points,
    sample_object,
    sample_path,
    tangent_cubic,
    transform_control_points,
    transform_point,
)
from bezierforge.core.history import HistoryEntry, HistoryManager
from bezierforge.core.selection import (
    HitTarget,
    PointRef,
    SelectionState,
    hit_test,
    objects_in_rect,
    selection_bounds,
)
from bezierforge.core.viewport import Viewport

__all__ = [
    # Clipboard
    "Clipboard",
    # History
    "HistoryEntry",
    "HistoryManager",
    # Selection
    "HitTarget",
    "PointRef",
    # Geometry
    "SampledStroke",
    "SelectionState",
    # Viewport
    "Viewport",
    "copy_points",
    "cut_points",
    "evaluate_cubic",
    "hit_test",
    "inverse_transform_point",
    "objects_in_rect",
    "parallel_point",
    "paste_points",
    "points_bounding_box",
    "points_centroid",
    "retransform_control_points",
    "sample_object",
    "sample_path",
    "selection_bounds",
    "tangent_cubic",
    "transform_control_points",
    "transform_point",
]
