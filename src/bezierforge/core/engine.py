"""The editing engine: one object collection, one history log.

BezierEngine owns an explicit EngineContext (object arena, groups,
selection, viewport, history, clipboard) and exposes the operations that
mutate it. Every mutating operation ends with exactly one history commit.
Invalid operations (unknown ids, undo at the oldest entry, stale indices)
are no-ops reported through the notification sink rather than exceptions.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from bezierforge.config import BezierForgeSettings, ImportConfig, get_default_settings
from bezierforge.core.clipboard import (
    Clipboard,
    copy_points,
    cut_points,
    paste_points,
    remove_points,
)
from bezierforge.core.geometry import SampledStroke, retransform_control_points, sample_object
from bezierforge.core.history import HistoryManager
from bezierforge.core.selection import PointRef, SelectionState
from bezierforge.core.viewport import Viewport
from bezierforge.domain import (
    BackgroundImage,
    BezierObject,
    ControlPoint,
    CurveConfig,
    DesignData,
    ObjectGroup,
    TransformSettings,
    clone_points,
    generate_id,
)
from bezierforge.exceptions import (
    BezierForgeError,
    DesignFormatError,
    GroupNotFoundError,
    ImportCancelledError,
    InvalidTransformError,
    ObjectNotFoundError,
    PersistenceError,
)
from bezierforge.io.design_json import dump_design, load_design
from bezierforge.io.importer import ImportJob, ImportResult
from bezierforge.io.path_codec import encode_path
from bezierforge.io.svg_writer import export_svg
from bezierforge.ports import LoggingNotifier, NotificationSink, PersistenceClient, Severity

logger = structlog.get_logger("bezierforge.engine")


@dataclass
class EngineContext:
    """All mutable editor state, passed explicitly instead of held globally.

    Attributes:
        objects: Object arena keyed by id, in drawing order
        groups: Groups keyed by id
        selection: Current selection
        viewport: Pan/zoom mapping
        history: Undo/redo log
        clipboard: Copied points
        background_image: Optional reference image
    """

    objects: dict[str, BezierObject] = field(default_factory=dict)
    groups: dict[str, ObjectGroup] = field(default_factory=dict)
    selection: SelectionState = field(default_factory=SelectionState)
    viewport: Viewport = field(default_factory=Viewport)
    history: HistoryManager = field(default_factory=HistoryManager)
    clipboard: Clipboard = field(default_factory=Clipboard)
    background_image: BackgroundImage | None = None

    @classmethod
    def from_settings(cls, settings: BezierForgeSettings) -> "EngineContext":
        return cls(
            viewport=Viewport(settings.viewport),
            history=HistoryManager(settings.history.max_entries),
        )


class BezierEngine:
    """Operations over one editable object collection.

    Args:
        settings: Application settings (defaults when omitted)
        notifier: Sink for user-visible status; logs when omitted
        persistence: Optional store for named designs
        context: Existing state to operate on; a fresh one when omitted
    """

    def __init__(
        self,
        settings: BezierForgeSettings | None = None,
        notifier: NotificationSink | None = None,
        persistence: PersistenceClient | None = None,
        context: EngineContext | None = None,
    ) -> None:
        self._settings = settings or get_default_settings()
        self._notifier: NotificationSink = notifier or LoggingNotifier()
        self._persistence = persistence
        self._context = context or EngineContext.from_settings(self._settings)
        if len(self._context.history) == 0:
            self._context.history.save(self.objects)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def settings(self) -> BezierForgeSettings:
        return self._settings

    @property
    def context(self) -> EngineContext:
        return self._context

    @property
    def notifier(self) -> NotificationSink:
        return self._notifier

    @property
    def selection(self) -> SelectionState:
        return self._context.selection

    @property
    def viewport(self) -> Viewport:
        return self._context.viewport

    @property
    def history(self) -> HistoryManager:
        return self._context.history

    @property
    def clipboard(self) -> Clipboard:
        return self._context.clipboard

    @property
    def arena(self) -> dict[str, BezierObject]:
        """The live object arena (mutable)."""
        return self._context.objects

    @property
    def objects(self) -> list[BezierObject]:
        """Objects in drawing order."""
        return list(self._context.objects.values())

    @property
    def groups(self) -> list[ObjectGroup]:
        return list(self._context.groups.values())

    def find_object(self, object_id: str) -> BezierObject | None:
        return self._context.objects.get(object_id)

    def get_object(self, object_id: str) -> BezierObject:
        """Look up an object.

        Raises:
            ObjectNotFoundError: If the id is unknown
        """
        obj = self._context.objects.get(object_id)
        if obj is None:
            raise ObjectNotFoundError(object_id)
        return obj

    def report(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        """Forward a user-visible status message to the notification sink."""
        self._notifier.notify(title, description, severity)

    def commit(self, action: str) -> None:
        """Record the current collection as one history entry."""
        self._context.history.save(self.objects)
        logger.debug("History commit", action=action, entries=len(self._context.history))

    def snapshot(self) -> list[BezierObject]:
        """Deep copy of the collection for restoring an aborted gesture."""
        return [obj.copy() for obj in self._context.objects.values()]

    def restore(self, objects: list[BezierObject]) -> None:
        """Replace the collection without committing."""
        self._context.objects = {obj.id: obj for obj in objects}
        self._context.selection.prune(self._context.objects)
        self.sync_selection_flags()

    def sync_selection_flags(self) -> None:
        selected = set(self._context.selection.object_ids)
        for obj in self._context.objects.values():
            obj.is_selected = obj.id in selected

    def _missing(self, object_id: str, action: str) -> bool:
        self.report(f"Cannot {action}", str(ObjectNotFoundError(object_id)), Severity.ERROR)
        return False

    def _next_name(self) -> str:
        return f"Curve {len(self._context.objects) + 1}"

    # ------------------------------------------------------------------
    # Object operations
    # ------------------------------------------------------------------

    def create_object(
        self,
        points: list[ControlPoint] | None = None,
        name: str | None = None,
        commit: bool = True,
    ) -> str:
        """Create an object with a default style and identity transform.

        Args:
            points: Initial anchors (copied)
            name: Display name; "Curve N" when omitted
            commit: Record a history entry

        Returns:
            The new object's id
        """
        obj = BezierObject(name=name or self._next_name(), points=clone_points(points or []))
        self._context.objects[obj.id] = obj
        logger.debug("Object created", object_id=obj.id, points=len(obj.points))
        if commit:
            self.commit("create_object")
        return obj.id

    def apply_points(self, object_id: str, points: list[ControlPoint], commit: bool = True) -> bool:
        """Replace an object's points."""
        obj = self.find_object(object_id)
        if obj is None:
            return self._missing(object_id, "update points")
        obj.points = clone_points(points)
        self._context.selection.clear_points()
        if commit:
            self.commit("apply_points")
        return True

    def apply_transform(
        self, object_id: str, transform: TransformSettings, commit: bool = True
    ) -> bool:
        """Change an object's transform, re-basing its points.

        The previous transform is removed and the new one applied about the
        anchor centroid, so applying the same settings twice is idempotent.
        """
        obj = self.find_object(object_id)
        if obj is None:
            return self._missing(object_id, "transform object")
        if not transform.is_invertible:
            self.report(
                "Cannot transform object",
                str(InvalidTransformError("scale factors must be non-zero")),
                Severity.ERROR,
            )
            return False
        obj.points = retransform_control_points(obj.points, obj.transform, transform)
        obj.transform = transform
        self._context.selection.clear_points()
        if commit:
            self.commit("apply_transform")
        return True

    def apply_curve_config(self, object_id: str, config: CurveConfig, commit: bool = True) -> bool:
        """Replace an object's stroke configuration."""
        obj = self.find_object(object_id)
        if obj is None:
            return self._missing(object_id, "update style")
        obj.curve_config = config.copy()
        self._context.selection.clear_points()
        if commit:
            self.commit("apply_curve_config")
        return True

    def rename_object(self, object_id: str, name: str) -> bool:
        obj = self.find_object(object_id)
        if obj is None:
            return self._missing(object_id, "rename object")
        obj.name = name.strip() or obj.name
        self.commit("rename_object")
        return True

    def _purge(self, object_id: str) -> None:
        """Remove an id from every group and from the selection."""
        for group_id, group in list(self._context.groups.items()):
            group.discard(object_id)
            if not group.object_ids:
                del self._context.groups[group_id]
                logger.debug("Group dissolved", group_id=group_id)
        self._context.selection.discard_object(object_id)

    def delete_object(self, object_id: str) -> bool:
        """Delete an object and purge it from groups and the selection."""
        if self._context.objects.pop(object_id, None) is None:
            return self._missing(object_id, "delete object")
        self._purge(object_id)
        self.commit("delete_object")
        return True

    def delete_selected(self) -> int:
        """Delete every selected object.

        Returns:
            Number of objects deleted
        """
        ids = [oid for oid in self._context.selection.object_ids if oid in self._context.objects]
        if not ids:
            self.report("Nothing to delete", "No objects are selected", Severity.WARNING)
            return 0
        for object_id in ids:
            del self._context.objects[object_id]
            self._purge(object_id)
        self._context.selection.clear()
        self.commit("delete_selected")
        self.report("Objects deleted", f"{len(ids)} objects deleted", Severity.SUCCESS)
        return len(ids)

    def set_all_objects(self, objects: list[BezierObject], commit: bool = True) -> None:
        """Replace the whole collection."""
        self._context.objects = {obj.id: obj for obj in objects}
        self._context.selection.clear()
        self.sync_selection_flags()
        for group in self._context.groups.values():
            group.object_ids = group.live_ids(self._context.objects)
        if commit:
            self.commit("set_all_objects")

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_object(self, object_id: str, multi_select: bool = False) -> bool:
        """Select an object; multi_select toggles it within the selection."""
        if object_id not in self._context.objects:
            return self._missing(object_id, "select object")
        self._context.selection.select_object(object_id, additive=multi_select)
        self._context.selection.clear_points()
        self.sync_selection_flags()
        return True

    def select_all(self) -> int:
        self._context.selection.clear()
        self._context.selection.object_ids = list(self._context.objects)
        self.sync_selection_flags()
        return len(self._context.selection.object_ids)

    def select_objects(self, object_ids: list[str], additive: bool = False, whole: bool = True) -> int:
        """Select several objects at once.

        Args:
            object_ids: Objects to select
            additive: Keep the current selection
            whole: Also select every anchor of those objects

        Returns:
            Number of anchors selected through the objects
        """
        selection = self._context.selection
        existing = [oid for oid in object_ids if oid in self._context.objects]
        if not additive:
            selection.clear()
        for object_id in existing:
            if object_id not in selection.object_ids:
                selection.object_ids.append(object_id)
        point_count = 0
        if whole:
            for object_id in existing:
                obj = self._context.objects[object_id]
                for index in range(len(obj.points)):
                    ref = PointRef(object_id, index)
                    if ref not in selection.points:
                        selection.points.append(ref)
                point_count += len(obj.points)
        self.sync_selection_flags()
        return point_count

    def clear_selection(self) -> None:
        self._context.selection.clear()
        self.sync_selection_flags()

    def selected_objects(self) -> list[BezierObject]:
        return [
            self._context.objects[oid]
            for oid in self._context.selection.object_ids
            if oid in self._context.objects
        ]

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def create_group(self, object_ids: list[str], name: str | None = None) -> str | None:
        """Group existing objects.

        Returns:
            The group id, or None when no id resolves
        """
        members = [oid for oid in dict.fromkeys(object_ids) if oid in self._context.objects]
        if not members:
            self.report("Cannot create group", "No existing objects given", Severity.ERROR)
            return None
        group = ObjectGroup(name=name or f"Group {len(self._context.groups) + 1}", object_ids=members)
        self._context.groups[group.id] = group
        return group.id

    def delete_group(self, group_id: str) -> bool:
        """Dissolve a group; member objects are kept."""
        if self._context.groups.pop(group_id, None) is None:
            self.report("Cannot delete group", str(GroupNotFoundError(group_id)), Severity.ERROR)
            return False
        return True

    def group_members(self, group_id: str) -> list[BezierObject]:
        """Objects a group references, skipping dangling ids.

        Raises:
            GroupNotFoundError: If the group id is unknown
        """
        group = self._context.groups.get(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return [self._context.objects[oid] for oid in group.live_ids(self._context.objects)]

    def select_group(self, group_id: str) -> bool:
        group = self._context.groups.get(group_id)
        if group is None:
            self.report("Cannot select group", str(GroupNotFoundError(group_id)), Severity.ERROR)
            return False
        self.select_objects(group.live_ids(self._context.objects), whole=False)
        return True

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def delete_points(self, refs: list[PointRef]) -> int:
        """Delete points; objects left empty are removed.

        Returns:
            Number of points deleted
        """
        live = self._live_refs(refs)
        if not live:
            self.report("Nothing to delete", "No points are selected", Severity.WARNING)
            return 0
        self._finish_removal(remove_points(self._context.objects, live), "delete_points")
        return len(live)

    def copy_points(self, refs: list[PointRef] | None = None) -> int:
        """Copy points (the current selection by default) to the clipboard."""
        targets = refs if refs is not None else self._context.selection.selected_refs()
        copied = copy_points(self._context.objects, targets)
        if not copied:
            self.report("Nothing to copy", "No points are selected", Severity.WARNING)
            return 0
        self._context.clipboard.points = copied
        self.report("Copied", f"{len(copied)} points copied", Severity.INFO)
        return len(copied)

    def cut_points(self, refs: list[PointRef] | None = None) -> int:
        """Copy points to the clipboard, then delete them."""
        targets = refs if refs is not None else self._context.selection.selected_refs()
        live = self._live_refs(targets)
        if not live:
            self.report("Nothing to cut", "No points are selected", Severity.WARNING)
            return 0
        copied, dissolved = cut_points(self._context.objects, live)
        self._context.clipboard.points = copied
        self._finish_removal(dissolved, "cut_points")
        return len(copied)

    def _live_refs(self, refs: list[PointRef]) -> list[PointRef]:
        objects = self._context.objects
        return [
            ref
            for ref in dict.fromkeys(refs)
            if ref.object_id in objects and objects[ref.object_id].has_index(ref.point_index)
        ]

    def _finish_removal(self, dissolved: list[str], action: str) -> None:
        for object_id in dissolved:
            self._purge(object_id)
        self._context.selection.clear_points()
        self._context.selection.prune(self._context.objects)
        self.sync_selection_flags()
        self.commit(action)

    def paste(self, target_id: str | None = None) -> list[PointRef]:
        """Paste clipboard points into target_id or a new object.

        The pasted points, and only those, become the point selection.
        """
        if self._context.clipboard.is_empty:
            self.report("Nothing to paste", "The clipboard is empty", Severity.WARNING)
            return []

        def new_object(points: list[ControlPoint]) -> BezierObject:
            return BezierObject(name=self._next_name(), points=points)

        object_id, refs = paste_points(
            self._context.objects,
            self._context.clipboard.points,
            target_id,
            self._settings.interaction.paste_offset,
            new_object,
        )
        selection = self._context.selection
        selection.clear()
        selection.object_ids = [object_id]
        selection.points = list(refs)
        self.sync_selection_flags()
        self.commit("paste")
        return refs

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _restore_from_history(self, objects: list[BezierObject]) -> None:
        self._context.objects = {obj.id: obj for obj in objects}
        self._context.selection.clear()
        self.sync_selection_flags()

    def undo(self) -> bool:
        """Restore the previous history entry and clear the selection."""
        restored = self._context.history.undo()
        if restored is None:
            self.report("Cannot undo", "Already at the oldest change", Severity.WARNING)
            return False
        self._restore_from_history(restored)
        return True

    def redo(self) -> bool:
        """Restore the next history entry and clear the selection."""
        restored = self._context.history.redo()
        if restored is None:
            self.report("Cannot redo", "Already at the newest change", Severity.WARNING)
            return False
        self._restore_from_history(restored)
        return True

    # ------------------------------------------------------------------
    # Rendering and export
    # ------------------------------------------------------------------

    def sample_object(self, object_id: str, closed: bool = False) -> list[SampledStroke]:
        """Polylines for the main and parallel strokes of an object.

        Raises:
            ObjectNotFoundError: If the id is unknown
        """
        return sample_object(
            self.get_object(object_id),
            steps=self._settings.geometry.samples_per_segment,
            closed=closed,
        )

    def export_path(self, obj: BezierObject | str, close: bool = False) -> str:
        """Encode one object's points as SVG path data.

        Raises:
            ObjectNotFoundError: If given an unknown id
        """
        target = self.get_object(obj) if isinstance(obj, str) else obj
        return encode_path(
            target.points,
            close=close,
            closure_tolerance=self._settings.geometry.closure_tolerance,
        )

    def export_svg(self, close_paths: bool = False, include_background: bool = True) -> str:
        """Render the whole collection as an SVG document."""
        config = self._settings.importing
        return export_svg(
            self.objects,
            width=config.canvas_width,
            height=config.canvas_height,
            background=self._context.background_image if include_background else None,
            samples=self._settings.geometry.samples_per_segment,
            close_paths=close_paths,
        )

    def to_design(self) -> DesignData:
        return DesignData(
            objects=[obj.copy() for obj in self.objects],
            groups=self.groups,
            background_image=self._context.background_image,
        )

    def to_json(self, indent: int | None = None) -> str:
        return dump_design(self.to_design(), indent=indent)

    def load_design_json(self, text: str) -> bool:
        """Replace the collection with a serialized design."""
        try:
            design = load_design(text)
        except DesignFormatError as e:
            self.report("Cannot load design", str(e), Severity.ERROR)
            return False
        self._context.groups = {group.id: group for group in design.groups}
        self._context.background_image = design.background_image
        self.set_all_objects(design.objects)
        return True

    def set_background_image(self, image: BackgroundImage | None) -> None:
        self._context.background_image = image

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_design(self, name: str) -> bool:
        """Store the collection (JSON and SVG) under a name."""
        if self._persistence is None:
            self.report("Cannot save design", "No persistence client configured", Severity.ERROR)
            return False
        try:
            self._persistence.store(name, self.to_json(), self.export_svg())
        except PersistenceError as e:
            self.report("Cannot save design", str(e), Severity.ERROR)
            return False
        self.report("Design saved", f"Saved '{name}'", Severity.SUCCESS)
        return True

    def load_design(self, name: str) -> bool:
        """Replace the collection with a stored design."""
        if self._persistence is None:
            self.report("Cannot load design", "No persistence client configured", Severity.ERROR)
            return False
        try:
            stored = self._persistence.retrieve(name)
        except PersistenceError as e:
            self.report("Cannot load design", str(e), Severity.ERROR)
            return False
        if not self.load_design_json(stored.design_json):
            return False
        self.report("Design loaded", f"Loaded '{name}'", Severity.SUCCESS)
        return True

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_paths(
        self,
        source: str,
        max_objects: int | None = None,
        max_points_per_object: int | None = None,
        on_progress: Callable[[float], None] | None = None,
        on_complete: Callable[[ImportResult], None] | None = None,
        on_error: Callable[[BezierForgeError], None] | None = None,
        incremental: bool = False,
        replace: bool | None = None,
    ) -> ImportJob:
        """Prepare a cancellable import of SVG markup or design JSON.

        Nothing runs until the returned job is awaited (``await job.run()``)
        or driven with ``job.run_sync()``. On completion the imported objects
        are applied with a single history commit. A cancelled or failed job
        applies nothing unless incremental, in which case chunks already
        merged are kept and committed.

        Args:
            source: SVG markup or design JSON text
            max_objects: Object cap override
            max_points_per_object: Per-object anchor cap override
            on_progress: Progress callback, fraction in [0, 1]
            on_complete: Called after the result has been applied
            on_error: Called with the failure after it has been reported
            incremental: Merge objects into the collection chunk by chunk
            replace: Replace instead of append (configured default if None)

        Returns:
            The ImportJob acting as cancel token
        """
        overrides: dict[str, object] = {}
        if max_objects is not None:
            overrides["max_objects"] = max_objects
        if max_points_per_object is not None:
            overrides["max_points_per_object"] = max_points_per_object
        config: ImportConfig = self._settings.importing.model_copy(update=overrides)
        replace_existing = config.replace_existing if replace is None else replace
        merged: list[str] = []
        renamed: dict[str, str] = {}

        def handle_chunk(objects: list[BezierObject]) -> None:
            if replace_existing and not merged:
                self._context.objects = {}
                self._context.groups = {}
                self._context.selection.clear()
            for obj in objects:
                self._admit(obj, renamed)
                merged.append(obj.id)

        def handle_complete(result: ImportResult) -> None:
            for warning in result.warnings:
                self.report("Import warning", warning, Severity.WARNING)
            if result.is_empty:
                if merged:
                    self.commit("import")
            else:
                self._apply_import(result, replace_existing and not merged, renamed)
                self.report(
                    "Import complete",
                    f"{len(result.objects)} objects imported",
                    Severity.SUCCESS,
                )
            if on_complete is not None:
                on_complete(result)

        def handle_error(error: BezierForgeError) -> None:
            if isinstance(error, ImportCancelledError):
                self.report("Import cancelled", str(error), Severity.INFO)
            else:
                self.report("Import failed", str(error), Severity.ERROR)
            if merged:
                self.sync_selection_flags()
                self.commit("import_partial")
            if on_error is not None:
                on_error(error)

        return ImportJob(
            source,
            config,
            on_progress=on_progress,
            on_complete=handle_complete,
            on_error=handle_error,
            on_chunk=handle_chunk if incremental else None,
            incremental=incremental,
        )

    def _admit(self, obj: BezierObject, renamed: dict[str, str]) -> None:
        """Insert an imported object, re-identifying it if its id is taken."""
        current = self._context.objects.get(obj.id)
        if current is not None and current is not obj:
            stored_id = obj.id
            obj.id = generate_id()
            obj.points = clone_points(obj.points, new_ids=True)
            renamed.setdefault(stored_id, obj.id)
            logger.debug("Imported object re-identified", stored_id=stored_id, object_id=obj.id)
        self._context.objects[obj.id] = obj

    def _apply_import(
        self, result: ImportResult, clear_first: bool, renamed: dict[str, str]
    ) -> None:
        if clear_first:
            self._context.objects = {}
            self._context.groups = {}
            self._context.selection.clear()
        for obj in result.objects:
            self._admit(obj, renamed)
        for group in result.groups:
            group.object_ids = [renamed.get(oid, oid) for oid in group.object_ids]
            if group.id in self._context.groups:
                group.id = generate_id()
            self._context.groups[group.id] = group
        if result.background_image is not None:
            self._context.background_image = result.background_image
        self.sync_selection_flags()
        self.commit("import")


def engine_from_json(text: str, settings: BezierForgeSettings | None = None) -> BezierEngine:
    """Build an engine preloaded with a serialized design.

    Raises:
        DesignFormatError: If the text is not a valid design
    """
    design = load_design(text)
    engine = BezierEngine(settings=settings)
    engine.context.groups = {group.id: group for group in design.groups}
    engine.context.background_image = design.background_image
    engine.set_all_objects(design.objects, commit=False)
    engine.history.clear()
    engine.history.save(engine.objects)
    return engine
