"""End-to-end round trips through import, editing, JSON and SVG export."""

import pytest

from bezierforge.core.engine import BezierEngine, engine_from_json
from bezierforge.core.geometry import evaluate_cubic, iter_segments
from bezierforge.core.interaction import InteractionController
from bezierforge.domain import CurveConfig, CurveStyle, TransformSettings
from bezierforge.ports import MemoryPersistence, RecordingNotifier

SOURCE_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 200">
  <g stroke="#224466" stroke-width="3">
    <path d="M 20 100 C 60 20 120 20 160 100 S 260 180 280 100"/>
    <polyline points="20,180 80,150 140,180"/>
  </g>
  <ellipse cx="150" cy="60" rx="40" ry="20" stroke="#aa0000"/>
</svg>
"""


def _curve_samples(engine: BezierEngine) -> list[tuple[float, float]]:
    samples = []
    for obj in engine.objects:
        for a, b in iter_segments(obj.points):
            for t in (0.0, 0.3, 0.7, 1.0):
                p = evaluate_cubic(a.anchor, a.handle_out, b.handle_in, b.anchor, t)
                samples.append((p.x, p.y))
    return samples


class TestRoundTrip:
    """Import, edit and re-export a design."""

    def test_svg_json_svg(self) -> None:
        """Test geometry survives SVG import, JSON and SVG re-import."""
        engine = BezierEngine(notifier=RecordingNotifier())
        assert engine.import_paths(SOURCE_SVG).run_sync() is not None
        assert len(engine.objects) == 3
        assert engine.objects[0].curve_config.main_style.width == 3.0

        from_json = engine_from_json(engine.to_json())
        assert _curve_samples(from_json) == _curve_samples(engine)

        reimported = BezierEngine(notifier=RecordingNotifier())
        assert reimported.import_paths(engine.export_svg()).run_sync() is not None
        assert [o.to_dict() for o in reimported.objects] == [o.to_dict() for o in engine.objects]

    def test_edit_session(self) -> None:
        """Test a short editing session with undo and persistence."""
        store = MemoryPersistence()
        engine = BezierEngine(notifier=RecordingNotifier(), persistence=store)
        engine.import_paths(SOURCE_SVG).run_sync()
        wave = engine.objects[0]

        controller = InteractionController(engine)
        anchor = wave.points[0].anchor
        controller.pointer_down(anchor.x, anchor.y)
        controller.pointer_move(anchor.x + 15, anchor.y - 5)
        controller.pointer_up(anchor.x + 15, anchor.y - 5)
        assert wave.points[0].x == pytest.approx(anchor.x + 15)

        engine.apply_curve_config(
            wave.id, CurveConfig(styles=[CurveStyle(color="#000000")], parallel_count=2, spacing=4)
        )
        engine.apply_transform(wave.id, TransformSettings(rotation=30))
        assert engine.save_design("session")

        for _ in range(3):
            assert engine.undo()
        assert engine.get_object(wave.id).points[0].x == pytest.approx(anchor.x)

        assert engine.load_design("session")
        restored = engine.get_object(wave.id)
        assert restored.curve_config.parallel_count == 2
        assert restored.transform.rotation == 30
        assert len(engine.sample_object(wave.id)) == 3
