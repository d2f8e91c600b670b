"""Pointer and keyboard state machine for editing curves.

The controller translates screen-space pointer and key events into engine
mutations. Drags move geometry incrementally on every pointer move and
commit a single history entry on pointer-up, so one gesture is one undo
step. Escape restores the collection captured at pointer-down.
"""

from enum import Enum

import structlog

from bezierforge.core.engine import BezierEngine
from bezierforge.core.history import HistoryEntry
from bezierforge.core.selection import (
    HitTarget,
    PointRef,
    hit_test,
    objects_in_rect,
    selection_bounds,
)
from bezierforge.domain import BezierObject, ControlPoint, HandleKind, Point
from bezierforge.exceptions import ObjectNotFoundError, PointIndexError
from bezierforge.ports import Severity

logger = structlog.get_logger("bezierforge.interaction")


class InteractionState(Enum):
    """Gesture states."""

    IDLE = "idle"
    PLACING_NEW_ANCHOR = "placing_new_anchor"
    DRAGGING_ANCHOR = "dragging_anchor"
    DRAGGING_HANDLE = "dragging_handle"
    DRAGGING_MULTIPLE = "dragging_multiple"
    RUBBER_BAND_SELECTING = "rubber_band_selecting"
    PANNING = "panning"


_DRAG_STATES = frozenset(
    {
        InteractionState.DRAGGING_ANCHOR,
        InteractionState.DRAGGING_HANDLE,
        InteractionState.DRAGGING_MULTIPLE,
    }
)


class InteractionController:
    """Drive a BezierEngine from pointer and keyboard events.

    Pointer coordinates are screen pixels; they are mapped through the
    engine's viewport before touching geometry.

    Args:
        engine: Engine whose collection is edited
    """

    def __init__(self, engine: BezierEngine) -> None:
        self._engine = engine
        self._state = InteractionState.IDLE
        self._draw_mode = False
        self._draw_target: str | None = None
        self._space_held = False
        self._additive = False
        self._placing = False
        self._changed = False
        self._origin = Point(0.0, 0.0)
        self._last = Point(0.0, 0.0)
        self._last_screen = Point(0.0, 0.0)
        self._gesture_snapshot: list[BezierObject] | None = None
        self._gesture_entry: HistoryEntry | None = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def engine(self) -> BezierEngine:
        return self._engine

    @property
    def draw_mode(self) -> bool:
        return self._draw_mode

    @property
    def draw_target(self) -> str | None:
        """Object receiving anchors placed in draw mode."""
        return self._draw_target

    @property
    def space_held(self) -> bool:
        return self._space_held

    def _resting_state(self) -> InteractionState:
        return InteractionState.PLACING_NEW_ANCHOR if self._draw_mode else InteractionState.IDLE

    def _finish(self) -> None:
        self._state = self._resting_state()
        self._placing = False
        self._changed = False
        self._gesture_snapshot = None
        self._gesture_entry = None

    def _history_moved(self) -> bool:
        return self._engine.history.current is not self._gesture_entry

    def set_draw_mode(self, enabled: bool, object_id: str | None = None) -> None:
        """Toggle draw mode.

        Args:
            enabled: Whether clicks on empty canvas place anchors
            object_id: Object that receives placed anchors; a new object is
                created on the first placement when None
        """
        self._draw_mode = enabled
        self._draw_target = object_id if enabled else None
        if self._state in (InteractionState.IDLE, InteractionState.PLACING_NEW_ANCHOR):
            self._state = self._resting_state()

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float, shift: bool = False) -> InteractionState:
        """Start a gesture at a screen position.

        Returns:
            The state entered
        """
        engine = self._engine
        self._last_screen = Point(sx, sy)
        if self._space_held:
            self._state = InteractionState.PANNING
            return self._state

        canvas = engine.viewport.screen_to_canvas(sx, sy)
        self._origin = canvas
        self._last = canvas
        self._additive = shift
        self._changed = False
        self._gesture_snapshot = engine.snapshot()
        self._gesture_entry = engine.history.current

        settings = engine.settings.interaction
        zoom = engine.viewport.zoom
        selection = engine.selection
        hit = hit_test(
            engine.objects,
            canvas,
            zoom,
            anchor_radius=settings.anchor_hit_radius,
            handle_radius=settings.handle_hit_radius,
        )

        if not shift and len(selection.points) > 1 and self._starts_group_drag(canvas, hit):
            self._state = InteractionState.DRAGGING_MULTIPLE
            return self._state

        if hit is not None:
            return self._begin_hit(hit, shift)

        if shift:
            selection.pending_rect = (canvas.x, canvas.y, 0.0, 0.0)
            self._state = InteractionState.RUBBER_BAND_SELECTING
            return self._state

        if self._draw_mode:
            return self._place_anchor(canvas)

        engine.clear_selection()
        self._finish()
        return self._state

    def _starts_group_drag(self, canvas: Point, hit: HitTarget | None) -> bool:
        selection = self._engine.selection
        if hit is not None:
            return hit.kind is HandleKind.ANCHOR and hit.ref in selection.points
        padding = self._engine.settings.interaction.selection_padding / self._engine.viewport.zoom
        bounds = selection_bounds(self._engine.arena, selection.points, padding)
        if bounds is None:
            return False
        min_x, min_y, max_x, max_y = bounds
        return min_x <= canvas.x <= max_x and min_y <= canvas.y <= max_y

    def _begin_hit(self, hit: HitTarget, shift: bool) -> InteractionState:
        selection = self._engine.selection
        if hit.kind is HandleKind.ANCHOR:
            if shift:
                selection.select_point(hit.ref, additive=True)
                selection.active = hit
                self._engine.sync_selection_flags()
                self._finish()
                return self._state
            selection.select_point(hit.ref)
            selection.active = hit
            self._state = InteractionState.DRAGGING_ANCHOR
        else:
            selection.select_point(hit.ref)
            selection.active = hit
            self._state = InteractionState.DRAGGING_HANDLE
        self._engine.sync_selection_flags()
        return self._state

    def _place_anchor(self, canvas: Point) -> InteractionState:
        engine = self._engine
        target = engine.find_object(self._draw_target) if self._draw_target else None
        if target is None:
            self._draw_target = engine.create_object(commit=False)
            target = engine.get_object(self._draw_target)
        offset = engine.settings.geometry.default_handle_offset
        target.points.append(ControlPoint.create(canvas.x, canvas.y, handle_offset=offset))
        index = len(target.points) - 1
        hit = HitTarget(target.id, index, HandleKind.ANCHOR)
        engine.selection.select_point(hit.ref)
        engine.selection.active = hit
        self._engine.sync_selection_flags()
        self._placing = True
        self._changed = True
        self._state = InteractionState.DRAGGING_ANCHOR
        logger.debug("Anchor placed", object_id=target.id, index=index)
        return self._state

    def pointer_move(self, sx: float, sy: float) -> None:
        """Continue the current gesture."""
        engine = self._engine
        if self._state is InteractionState.PANNING:
            engine.viewport.pan_by(sx - self._last_screen.x, sy - self._last_screen.y)
            self._last_screen = Point(sx, sy)
            return

        canvas = engine.viewport.screen_to_canvas(sx, sy)
        dx = canvas.x - self._last.x
        dy = canvas.y - self._last.y

        if self._state is InteractionState.RUBBER_BAND_SELECTING:
            engine.selection.pending_rect = (
                self._origin.x,
                self._origin.y,
                canvas.x - self._origin.x,
                canvas.y - self._origin.y,
            )
        elif self._state is InteractionState.DRAGGING_ANCHOR:
            cp = self._active_point()
            if cp is None:
                return
            if self._placing:
                if canvas == cp.anchor:
                    return
                cp.handle_out = canvas
                cp.handle_in = canvas.reflected_about(cp.anchor)
            elif dx or dy:
                cp.translate(dx, dy)
                self._changed = True
        elif self._state is InteractionState.DRAGGING_HANDLE:
            cp = self._active_point()
            if cp is None:
                return
            active = engine.selection.active
            kind = active.kind if active is not None else HandleKind.HANDLE_OUT
            if cp.get(kind) != canvas:
                if kind is HandleKind.HANDLE_IN:
                    cp.handle_in = canvas
                else:
                    cp.handle_out = canvas
                self._changed = True
        elif self._state is InteractionState.DRAGGING_MULTIPLE:
            moved = 0
            for ref in engine.selection.points:
                obj = engine.find_object(ref.object_id)
                if obj is not None and obj.has_index(ref.point_index):
                    obj.points[ref.point_index].translate(dx, dy)
                    moved += 1
            if moved == 0:
                self._abort("Selected points no longer exist")
                return
            if dx or dy:
                self._changed = True

        self._last = canvas

    def _active_point(self) -> ControlPoint | None:
        active = self._engine.selection.active
        if active is None:
            self._abort("No point is being edited")
            return None
        obj = self._engine.find_object(active.object_id)
        if obj is None:
            self._abort(str(ObjectNotFoundError(active.object_id)))
            return None
        if not obj.has_index(active.point_index):
            self._abort(str(PointIndexError(active.object_id, active.point_index)))
            return None
        return obj.points[active.point_index]

    def _abort(self, reason: str) -> None:
        self._engine.report("Edit cancelled", reason, Severity.WARNING)
        self._engine.selection.prune(self._engine.arena)
        if self._changed and not self._history_moved():
            self._engine.commit("drag")
        self._finish()

    def pointer_up(self, sx: float, sy: float) -> None:
        """End the current gesture, committing any change once."""
        engine = self._engine
        state = self._state
        if state is InteractionState.RUBBER_BAND_SELECTING:
            self.pointer_move(sx, sy)
            rect = engine.selection.pending_rect
            engine.selection.pending_rect = None
            if rect is not None:
                ids, point_count = objects_in_rect(engine.objects, rect)
                if ids:
                    engine.select_objects(ids, additive=self._additive)
                    engine.report(
                        "Selection",
                        f"{len(ids)} objects selected ({point_count} points)",
                        Severity.INFO,
                    )
                elif not self._additive:
                    engine.clear_selection()
        elif state in _DRAG_STATES:
            self.pointer_move(sx, sy)
            if self._state is state and self._changed and not self._history_moved():
                engine.commit(state.value)
        self._finish()

    def double_click(self, sx: float, sy: float) -> bool:
        """Delete the anchor under the cursor.

        Returns:
            Whether an anchor was deleted
        """
        engine = self._engine
        canvas = engine.viewport.screen_to_canvas(sx, sy)
        settings = engine.settings.interaction
        hit = hit_test(
            engine.objects,
            canvas,
            engine.viewport.zoom,
            anchor_radius=settings.anchor_hit_radius,
            handle_radius=settings.handle_hit_radius,
        )
        if hit is None or hit.kind is not HandleKind.ANCHOR:
            return False
        self._finish()
        return engine.delete_points([hit.ref]) > 0

    def wheel(self, delta_y: float, sx: float, sy: float) -> float:
        """Zoom about the cursor."""
        return self._engine.viewport.wheel(delta_y, sx, sy)

    # ------------------------------------------------------------------
    # Keyboard events
    # ------------------------------------------------------------------

    def key_down(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """Handle a key press.

        Args:
            key: Key name ("Escape", "Delete", "z", " ", ...)
            ctrl: Ctrl (or Cmd) held
            shift: Shift held

        Returns:
            Whether the key was handled
        """
        engine = self._engine
        if key == " ":
            self._space_held = True
            return True
        if key == "Escape":
            self.cancel_gesture()
            return True
        if key in ("Delete", "Backspace"):
            self.delete_selection()
            return True
        if not ctrl:
            return False

        name = key.lower()
        if name in ("z", "y", "x", "v"):
            self._interrupt_gesture()
        if name == "z":
            if shift:
                engine.redo()
            else:
                engine.undo()
        elif name == "y":
            engine.redo()
        elif name == "c":
            engine.copy_points()
        elif name == "x":
            engine.cut_points()
        elif name == "v":
            engine.paste()
        elif name == "a":
            engine.select_all()
        elif name in ("=", "+"):
            engine.viewport.zoom_in()
        elif name == "-":
            engine.viewport.zoom_out()
        elif name == "0":
            engine.viewport.reset()
        else:
            return False
        return True

    def key_up(self, key: str) -> None:
        """Handle a key release."""
        if key == " ":
            self._space_held = False

    def cancel_gesture(self) -> None:
        """Abort the current gesture and clear the selection.

        Geometry changed since pointer-down is restored without a commit.
        """
        self._interrupt_gesture()
        self._engine.clear_selection()

    def _interrupt_gesture(self) -> None:
        if self._state in _DRAG_STATES and self._gesture_snapshot is not None:
            self._engine.restore(self._gesture_snapshot)
            if self._placing and self._draw_target not in self._engine.arena:
                self._draw_target = None
        self._engine.selection.pending_rect = None
        self._finish()

    def delete_selection(self) -> int:
        """Delete selected points, or selected objects when no point is selected.

        Returns:
            Number of points or objects deleted
        """
        engine = self._engine
        refs: list[PointRef] = engine.selection.selected_refs()
        self._finish()
        if refs:
            return engine.delete_points(refs)
        return engine.delete_selected()
