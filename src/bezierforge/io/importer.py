"""Chunked, cancellable import of SVG documents and design JSON.

An ImportJob turns import text into BezierObjects in bounded chunks,
yielding control to the event loop between chunks. Progress, optional
incremental chunks and a final completion or failure are exposed both as an
async event stream and through callbacks.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

import structlog

from bezierforge.config import ImportConfig
from bezierforge.domain import BackgroundImage, BezierObject, CurveConfig, DesignData, ObjectGroup
from bezierforge.exceptions import BezierForgeError, ImportCancelledError
from bezierforge.io.design_json import load_design
from bezierforge.io.path_codec import decode_path_detailed, fit_to_canvas
from bezierforge.io.svg_reader import SvgPath, looks_like_svg, parse_svg
from bezierforge.utils.logging import ImportLogger, ImportStats

logger = structlog.get_logger("bezierforge.import")

NO_OBJECTS_WARNING = "Import produced no objects"


@dataclass
class ImportResult:
    """Outcome of a completed import.

    Attributes:
        objects: Imported objects in document order
        groups: Groups restored from design JSON
        background_image: Background restored from design JSON
        stats: Counters collected while importing
    """

    objects: list[BezierObject] = field(default_factory=list)
    groups: list[ObjectGroup] = field(default_factory=list)
    background_image: BackgroundImage | None = None
    stats: ImportStats = field(default_factory=ImportStats)

    @property
    def is_empty(self) -> bool:
        return not self.objects

    @property
    def warnings(self) -> list[str]:
        return self.stats.warnings


@dataclass(frozen=True)
class ImportProgress:
    """Fraction of candidates processed, in [0, 1]."""

    fraction: float
    processed: int
    total: int


@dataclass(frozen=True)
class ImportChunk:
    """Objects finished by one chunk, emitted only for incremental jobs."""

    objects: list[BezierObject]


@dataclass(frozen=True)
class ImportCompleted:
    result: ImportResult


@dataclass(frozen=True)
class ImportFailed:
    error: BezierForgeError


ImportEvent = ImportProgress | ImportChunk | ImportCompleted | ImportFailed


@dataclass
class _Candidate:
    name: str
    svg_path: SvgPath | None = None
    stored: BezierObject | None = None


class ImportJob:
    """A cancellable import of one SVG or JSON source.

    Args:
        source: SVG markup or design JSON text
        config: Limits, chunk size and canvas fitting
        on_progress: Called with the fraction processed after each chunk
        on_complete: Called with the final ImportResult
        on_error: Called with the failure, including cancellation
        on_chunk: Called with each chunk's objects when incremental
        incremental: Emit objects as chunks finish so callers can merge
            them before completion
    """

    def __init__(
        self,
        source: str,
        config: ImportConfig | None = None,
        on_progress: Callable[[float], None] | None = None,
        on_complete: Callable[[ImportResult], None] | None = None,
        on_error: Callable[[BezierForgeError], None] | None = None,
        on_chunk: Callable[[list[BezierObject]], None] | None = None,
        incremental: bool = False,
    ) -> None:
        self._source = source
        self._config = config or ImportConfig()
        self._on_progress = on_progress
        self._on_complete = on_complete
        self._on_error = on_error
        self._on_chunk = on_chunk
        self._incremental = incremental
        self._cancelled = False
        self._done = False
        self._result: ImportResult | None = None
        self._error: BezierForgeError | None = None

    @property
    def config(self) -> ImportConfig:
        return self._config

    @property
    def incremental(self) -> bool:
        return self._incremental

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def result(self) -> ImportResult | None:
        return self._result

    @property
    def error(self) -> BezierForgeError | None:
        return self._error

    def cancel(self) -> None:
        """Stop scheduling further chunks."""
        if not self._done:
            self._cancelled = True
            logger.info("Import cancellation requested")

    async def events(self) -> AsyncIterator[ImportEvent]:
        """Run the import, yielding progress and a final event.

        The last event is always ImportCompleted or ImportFailed.
        """
        import_log = ImportLogger(logger)
        stats = import_log.stats
        stats.start_time = time.time()

        try:
            candidates, design, view_box = self._collect_candidates()
        except BezierForgeError as e:
            logger.error("Import source unreadable", error=str(e))
            yield self._fail(e)
            return

        limit = self._config.max_objects
        if len(candidates) > limit:
            import_log.log_limit(len(candidates), limit)
            candidates = candidates[:limit]

        total = len(candidates)
        objects: list[BezierObject] = []
        decoded: list[BezierObject] = []
        chunk_size = self._config.chunk_size

        for chunk_index, start in enumerate(range(0, total, chunk_size)):
            if self._cancelled:
                yield self._fail(ImportCancelledError(start, total - start))
                return

            chunk: list[BezierObject] = []
            for candidate in candidates[start : start + chunk_size]:
                try:
                    obj = self._build_object(candidate, import_log)
                except (BezierForgeError, ValueError, ArithmeticError) as e:
                    import_log.log_object_error(candidate.name, e)
                    continue
                if obj is None:
                    continue
                chunk.append(obj)
                if candidate.svg_path is not None:
                    decoded.append(obj)

            objects.extend(chunk)
            processed = min(start + chunk_size, total)
            import_log.log_chunk(chunk_index, processed, total)
            if self._incremental and chunk:
                yield ImportChunk(list(chunk))
            yield ImportProgress(processed / total, processed, total)

            await asyncio.sleep(0)

        if self._cancelled:
            yield self._fail(ImportCancelledError(total, 0))
            return

        if decoded and self._config.normalize:
            fit_to_canvas(
                [obj.points for obj in decoded],
                canvas_width=self._config.canvas_width,
                canvas_height=self._config.canvas_height,
                fill_ratio=self._config.fill_ratio,
                min_scale=self._config.min_scale,
                max_scale=self._config.max_scale,
                source_box=view_box if self._config.use_view_box else None,
            )

        if stats.truncated_objects:
            import_log.log_warning(
                f"{stats.truncated_objects} objects truncated to "
                f"{self._config.max_points_per_object} points",
                truncated=stats.truncated_objects,
            )
        if not objects:
            import_log.log_warning(NO_OBJECTS_WARNING)
        if total == 0:
            yield ImportProgress(1.0, 0, 0)

        stats.end_time = time.time()
        result = ImportResult(
            objects=objects,
            groups=self._live_groups(design, objects),
            background_image=design.background_image if design else None,
            stats=stats,
        )
        self._result = result
        self._done = True
        logger.info(
            "Import complete",
            objects=stats.imported_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            duration_s=round(stats.duration_seconds, 3),
        )
        yield ImportCompleted(result)

    async def run(self) -> ImportResult | None:
        """Run to completion, dispatching events to the callbacks.

        Returns:
            The ImportResult, or None if the import failed or was cancelled
        """
        async for event in self.events():
            if isinstance(event, ImportProgress):
                if self._on_progress is not None:
                    self._on_progress(event.fraction)
            elif isinstance(event, ImportChunk):
                if self._on_chunk is not None:
                    self._on_chunk(event.objects)
            elif isinstance(event, ImportCompleted):
                if self._on_complete is not None:
                    self._on_complete(event.result)
                return event.result
            elif isinstance(event, ImportFailed):
                if self._on_error is not None:
                    self._on_error(event.error)
                return None
        return None

    def run_sync(self) -> ImportResult | None:
        """Run the job on a fresh event loop."""
        return asyncio.run(self.run())

    def _fail(self, error: BezierForgeError) -> ImportFailed:
        self._error = error
        self._done = True
        if isinstance(error, ImportCancelledError):
            logger.info(
                "Import cancelled",
                processed=error.processed_count,
                pending=error.pending_count,
            )
        return ImportFailed(error)

    def _collect_candidates(
        self,
    ) -> tuple[list[_Candidate], DesignData | None, tuple[float, float, float, float] | None]:
        if looks_like_svg(self._source):
            document = parse_svg(self._source)
            candidates = [
                _Candidate(name=obj.name, stored=obj) for obj in document.stored_objects
            ]
            offset = len(candidates)
            candidates.extend(
                _Candidate(name=path.element_id or f"Curve {offset + i + 1}", svg_path=path)
                for i, path in enumerate(document.paths)
            )
            return candidates, None, document.view_box_bounds

        design = load_design(self._source)
        return [_Candidate(name=obj.name, stored=obj) for obj in design.objects], design, None

    def _build_object(self, candidate: _Candidate, import_log: ImportLogger) -> BezierObject | None:
        max_points = self._config.max_points_per_object

        if candidate.stored is not None:
            obj = candidate.stored
            truncated = len(obj.points) > max_points
            if truncated:
                obj.points = obj.points[:max_points]
            if obj.is_empty:
                import_log.log_object_skipped(candidate.name, "no points")
                return None
            obj.is_selected = False
            import_log.log_object_imported(obj.name, len(obj.points), truncated)
            return obj

        svg_path = candidate.svg_path
        if svg_path is None:
            return None
        decoded = decode_path_detailed(
            svg_path.d,
            max_points=max_points,
            arc_mode=self._config.arc_mode,
        )
        if len(decoded.points) < 2:
            import_log.log_object_skipped(candidate.name, "fewer than two anchors")
            return None
        obj = BezierObject(
            name=candidate.name,
            points=decoded.points,
            curve_config=CurveConfig(styles=[svg_path.style]),
        )
        import_log.log_object_imported(obj.name, len(obj.points), decoded.truncated)
        return obj

    @staticmethod
    def _live_groups(design: DesignData | None, objects: list[BezierObject]) -> list[ObjectGroup]:
        if design is None:
            return []
        ids = {obj.id for obj in objects}
        groups = []
        for group in design.groups:
            group.object_ids = group.live_ids(ids)
            if group.object_ids:
                groups.append(group)
        return groups
