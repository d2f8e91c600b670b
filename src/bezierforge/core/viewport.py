"""Pan/zoom mapping between screen and canvas coordinates."""

from bezierforge.config import ViewportConfig, ZoomMode
from bezierforge.domain import Point


class Viewport:
    """Affine screen/canvas mapping driven by wheel and drag gestures.

    screen = canvas * zoom + pan_offset, with zoom clamped to the configured
    bounds.
    """

    def __init__(self, config: ViewportConfig | None = None) -> None:
        self._config = config or ViewportConfig()
        self.zoom = 1.0
        self.pan_offset = Point(0.0, 0.0)

    @property
    def config(self) -> ViewportConfig:
        return self._config

    def clamp_zoom(self, zoom: float) -> float:
        """Clamp a zoom value to the configured bounds."""
        return max(self._config.min_zoom, min(self._config.max_zoom, zoom))

    def screen_to_canvas(self, sx: float, sy: float) -> Point:
        """Map a screen position to canvas coordinates."""
        return Point((sx - self.pan_offset.x) / self.zoom, (sy - self.pan_offset.y) / self.zoom)

    def canvas_to_screen(self, cx: float, cy: float) -> Point:
        """Map a canvas position to screen coordinates."""
        return Point(cx * self.zoom + self.pan_offset.x, cy * self.zoom + self.pan_offset.y)

    def set_zoom(self, zoom: float, focus: Point | None = None) -> float:
        """Set the zoom, keeping the canvas point under focus fixed.

        Args:
            zoom: Requested zoom (clamped)
            focus: Screen position that must stay over the same canvas
                point; pan is left untouched when omitted

        Returns:
            The applied zoom
        """
        new_zoom = self.clamp_zoom(zoom)
        if focus is not None:
            anchor = self.screen_to_canvas(focus.x, focus.y)
            self.pan_offset = Point(focus.x - anchor.x * new_zoom, focus.y - anchor.y * new_zoom)
        self.zoom = new_zoom
        return new_zoom

    def zoom_in(self, focus: Point | None = None) -> float:
        """Zoom in by one step."""
        return self.set_zoom(self._stepped(1), focus)

    def zoom_out(self, focus: Point | None = None) -> float:
        """Zoom out by one step."""
        return self.set_zoom(self._stepped(-1), focus)

    def wheel(self, delta_y: float, sx: float, sy: float) -> float:
        """Handle a wheel notch at a screen position.

        Negative delta_y (scrolling up) zooms in, positive zooms out.

        Returns:
            The applied zoom
        """
        if delta_y == 0:
            return self.zoom
        direction = -1 if delta_y > 0 else 1
        return self.set_zoom(self._stepped(direction), Point(sx, sy))

    def pan_by(self, dx: float, dy: float) -> None:
        """Shift the pan offset by a screen-space delta."""
        self.pan_offset = Point(self.pan_offset.x + dx, self.pan_offset.y + dy)

    def reset(self) -> None:
        """Restore zoom 1 and zero pan."""
        self.zoom = 1.0
        self.pan_offset = Point(0.0, 0.0)

    def _stepped(self, direction: int) -> float:
        step = self._config.zoom_step
        if self._config.zoom_mode is ZoomMode.ABSOLUTE:
            return self.zoom + direction * step
        return self.zoom * (1 + direction * step)
