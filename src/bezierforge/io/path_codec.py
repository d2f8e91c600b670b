"""SVG path data codec.

Decodes a path ``d`` attribute into the editor's anchor/handle model and
encodes anchors back into path syntax. Every input segment becomes one cubic
segment between consecutive anchors: lines get handles at one third of the
chord, quadratics are degree-elevated, arcs are split into cubic pieces.

Decoding is tolerant: non-finite and unparsable numbers are dropped,
incomplete parameter groups are ignored and the anchor count is capped with
the truncation reported on the result instead of raised.
"""

import math
import re
from dataclasses import dataclass, field

import structlog
from fontTools.pens.recordingPen import RecordingPen
from fontTools.svgLib.path.arc import EllipticalArc

from bezierforge.config import ArcMode
from bezierforge.core.geometry import points_bounding_box
from bezierforge.domain import ControlPoint, Point
from bezierforge.exceptions import PathSyntaxError

logger = structlog.get_logger("bezierforge.codec")

COMMAND_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}

# Fraction of min(rx, ry) the single-segment arc guess pushes the chord midpoint
SINGLE_ARC_BULGE = 0.5

_COMMAND_RE = re.compile(r"([MmLlHhVvCcSsQqTtAaZz])([^MmLlHhVvCcSsQqTtAaZz]*)")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_FLAG_RE = re.compile(r"[01]")
_SEPARATOR_RE = re.compile(r"[\s,]*")


@dataclass
class PathCommand:
    """One path command with a complete parameter group.

    Attributes:
        command: Command letter; lowercase means relative
        params: Numeric parameters, exactly COMMAND_ARITY long
    """

    command: str
    params: list[float] = field(default_factory=list)

    @property
    def is_relative(self) -> bool:
        return self.command.islower()

    @property
    def kind(self) -> str:
        """Uppercase command letter."""
        return self.command.upper()


@dataclass
class DecodedPath:
    """Result of decoding one path string.

    Attributes:
        points: Decoded anchors
        closed: Whether a Z command was seen
        truncated: Whether anchors were dropped by the point cap
        dropped_values: Count of numbers discarded as malformed or surplus
    """

    points: list[ControlPoint] = field(default_factory=list)
    closed: bool = False
    truncated: bool = False
    dropped_values: int = 0


def _to_finite(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _scan_numbers(text: str) -> tuple[list[float], int]:
    values: list[float] = []
    dropped = 0
    for match in _NUMBER_RE.finditer(text):
        value = _to_finite(match.group())
        if value is None:
            dropped += 1
        else:
            values.append(value)
    return values, dropped


def _scan_arc_numbers(text: str) -> tuple[list[float], int]:
    """Scan arc parameters, reading the two flags as single digits.

    Flags may be written without separators (``a1 1 0 011 1``).
    """
    values: list[float] = []
    dropped = 0
    pos = 0
    while pos < len(text):
        pos = _SEPARATOR_RE.match(text, pos).end()
        if pos >= len(text):
            break
        slot = len(values) % 7
        pattern = _FLAG_RE if slot in (3, 4) else _NUMBER_RE
        match = pattern.match(text, pos)
        if match is None:
            dropped += 1
            pos += 1
            continue
        pos = match.end()
        value = _to_finite(match.group())
        if value is None:
            dropped += 1
        else:
            values.append(value)
    return values, dropped


def tokenize_path(path_data: str, strict: bool = False) -> tuple[list[PathCommand], int]:
    """Split path data into commands with complete parameter groups.

    Parameter runs longer than one group repeat the command implicitly; the
    extra pairs after a moveto are linetos. Separators may be missing before
    signs or a second decimal point (``10-5``, ``.5.5``).

    Args:
        path_data: Raw ``d`` attribute
        strict: Raise instead of dropping malformed content

    Returns:
        Commands and the number of dropped values

    Raises:
        PathSyntaxError: In strict mode, for text before the first command
            or an incomplete parameter group
    """
    commands: list[PathCommand] = []
    dropped = 0

    first = _COMMAND_RE.search(path_data)
    leading = path_data[: first.start()] if first else path_data
    if leading.strip(" \t\r\n,"):
        if strict:
            raise PathSyntaxError(path_data, "data before the first command")
        dropped += len(_NUMBER_RE.findall(leading))

    for match in _COMMAND_RE.finditer(path_data):
        letter, body = match.group(1), match.group(2)
        kind = letter.upper()
        arity = COMMAND_ARITY[kind]
        if arity == 0:
            commands.append(PathCommand(letter))
            continue

        values, bad = _scan_arc_numbers(body) if kind == "A" else _scan_numbers(body)
        dropped += bad
        remainder = len(values) % arity
        if remainder or not values:
            if strict:
                raise PathSyntaxError(
                    path_data, f"'{letter}' expects multiples of {arity} values, got {len(values)}"
                )
            dropped += remainder

        for start in range(0, len(values) - remainder, arity):
            group = values[start : start + arity]
            if kind == "M" and start > 0:
                commands.append(PathCommand("l" if letter == "m" else "L", group))
            else:
                commands.append(PathCommand(letter, group))

    return commands, dropped


def arc_to_cubics(
    start: Point,
    rx: float,
    ry: float,
    rotation: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
) -> list[tuple[Point, Point, Point]]:
    """Approximate an SVG elliptical arc with cubic segments.

    Uses fontTools' endpoint-to-center conversion, which splits the arc into
    pieces of at most a quarter turn.

    Returns:
        (control1, control2, end) for each cubic piece; a degenerate arc
        yields a single straight piece
    """
    pen = RecordingPen()
    arc = EllipticalArc(
        complex(start.x, start.y),
        rx,
        ry,
        rotation,
        large_arc,
        sweep,
        complex(end.x, end.y),
    )
    arc.draw(pen)

    pieces: list[tuple[Point, Point, Point]] = []
    cursor = start
    for operator, operands in pen.value:
        if operator == "curveTo":
            c1, c2, target = (Point(*pt) for pt in operands)
            pieces.append((c1, c2, target))
            cursor = target
        elif operator == "lineTo":
            target = Point(*operands[-1])
            pieces.append(_line_controls(cursor, target))
            cursor = target
    return pieces


def single_arc_guess(start: Point, rx: float, ry: float, sweep: bool, end: Point) -> tuple[Point, Point, Point]:
    """One-cubic arc approximation.

    The chord midpoint is pushed perpendicular to the chord by a fraction of
    min(rx, ry), toward the side the sweep flag selects, and used as a
    quadratic control point.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length == 0:
        return (start, end, end)
    nx, ny = -dy / length, dx / length
    bulge = SINGLE_ARC_BULGE * min(abs(rx), abs(ry)) * (-1 if sweep else 1)
    control = Point((start.x + end.x) / 2 + nx * bulge, (start.y + end.y) / 2 + ny * bulge)
    return _quadratic_controls(start, control, end)


def _line_controls(start: Point, end: Point) -> tuple[Point, Point, Point]:
    dx = (end.x - start.x) / 3
    dy = (end.y - start.y) / 3
    return (Point(start.x + dx, start.y + dy), Point(end.x - dx, end.y - dy), end)


def _quadratic_controls(start: Point, control: Point, end: Point) -> tuple[Point, Point, Point]:
    c1 = Point(start.x + 2 / 3 * (control.x - start.x), start.y + 2 / 3 * (control.y - start.y))
    c2 = Point(end.x + 2 / 3 * (control.x - end.x), end.y + 2 / 3 * (control.y - end.y))
    return (c1, c2, end)


class _PathDecoder:
    """Running state of one decode pass."""

    def __init__(self, max_points: int | None, arc_mode: ArcMode) -> None:
        self.max_points = max_points
        self.arc_mode = arc_mode
        self.points: list[ControlPoint] = []
        self.current = Point(0.0, 0.0)
        self.subpath_start = Point(0.0, 0.0)
        self.subpath_index = 0
        self.last_cubic_control: Point | None = None
        self.last_quad_control: Point | None = None
        self.closed = False
        self.truncated = False

    def _has_room(self) -> bool:
        if self.max_points is not None and len(self.points) >= self.max_points:
            self.truncated = True
            return False
        return True

    def _append(self, anchor: Point, handle_in: Point, handle_out: Point) -> bool:
        if not self._has_room():
            return False
        self.points.append(
            ControlPoint(x=anchor.x, y=anchor.y, handle_in=handle_in, handle_out=handle_out)
        )
        self.current = anchor
        return True

    def _ensure_anchor(self) -> bool:
        """Make sure an anchor exists at the current point."""
        if self.points and self.points[-1].anchor == self.current:
            return True
        return self._append(self.current, self.current, self.current)

    def _absolute(self, command: PathCommand, x: float, y: float) -> Point:
        if command.is_relative:
            return Point(self.current.x + x, self.current.y + y)
        return Point(x, y)

    def move_to(self, target: Point) -> bool:
        self.last_cubic_control = None
        self.last_quad_control = None
        if self.points and self.points[-1].anchor == target:
            self.current = target
        elif not self._append(target, target, target):
            return False
        self.subpath_start = target
        self.subpath_index = len(self.points) - 1
        return True

    def cubic_to(self, c1: Point, c2: Point, end: Point) -> bool:
        if c1 == c2 == end == self.current:
            return True
        if not self._ensure_anchor():
            return False
        if not self._has_room():
            return False
        self.points[-1].handle_out = c1
        return self._append(end, c2, c2.reflected_about(end))

    def line_to(self, end: Point) -> bool:
        self.last_cubic_control = None
        self.last_quad_control = None
        if end == self.current:
            return True
        c1, c2, _ = _line_controls(self.current, end)
        return self.cubic_to(c1, c2, end)

    def close(self) -> None:
        self.closed = True
        self.last_cubic_control = None
        self.last_quad_control = None
        if not self.points or self.current == self.subpath_start:
            self.current = self.subpath_start
            return
        c1, c2, _ = _line_controls(self.current, self.subpath_start)
        self.points[-1].handle_out = c1
        self.points[self.subpath_index].handle_in = c2
        self.current = self.subpath_start

    def apply(self, command: PathCommand, previous_kind: str | None) -> bool:
        """Apply one command; returns False once the point cap stops decoding."""
        kind = command.kind
        p = command.params

        if kind == "M":
            return self.move_to(self._absolute(command, p[0], p[1]))
        if kind == "L":
            return self.line_to(self._absolute(command, p[0], p[1]))
        if kind == "H":
            x = self.current.x + p[0] if command.is_relative else p[0]
            return self.line_to(Point(x, self.current.y))
        if kind == "V":
            y = self.current.y + p[0] if command.is_relative else p[0]
            return self.line_to(Point(self.current.x, y))
        if kind == "Z":
            self.close()
            return True

        if kind in ("C", "S"):
            if kind == "C":
                c1 = self._absolute(command, p[0], p[1])
                rest = p[2:]
            else:
                if previous_kind in ("C", "S") and self.last_cubic_control is not None:
                    c1 = self.last_cubic_control.reflected_about(self.current)
                else:
                    c1 = self.current
                rest = p
            c2 = self._absolute(command, rest[0], rest[1])
            end = self._absolute(command, rest[2], rest[3])
            ok = self.cubic_to(c1, c2, end)
            self.last_cubic_control = c2
            self.last_quad_control = None
            return ok

        if kind in ("Q", "T"):
            if kind == "Q":
                control = self._absolute(command, p[0], p[1])
                end = self._absolute(command, p[2], p[3])
            else:
                if previous_kind in ("Q", "T") and self.last_quad_control is not None:
                    control = self.last_quad_control.reflected_about(self.current)
                else:
                    control = self.current
                end = self._absolute(command, p[0], p[1])
            c1, c2, _ = _quadratic_controls(self.current, control, end)
            ok = self.cubic_to(c1, c2, end)
            self.last_quad_control = control
            self.last_cubic_control = None
            return ok

        # Arc
        rx, ry, rotation, large_arc, sweep = abs(p[0]), abs(p[1]), p[2], p[3] != 0, p[4] != 0
        end = self._absolute(command, p[5], p[6])
        if end == self.current:
            return True
        if rx == 0 or ry == 0:
            return self.line_to(end)
        self.last_cubic_control = None
        self.last_quad_control = None
        if self.arc_mode is ArcMode.SINGLE:
            pieces = [single_arc_guess(self.current, rx, ry, sweep, end)]
        else:
            pieces = arc_to_cubics(self.current, rx, ry, rotation, large_arc, sweep, end)
        if not pieces:
            return self.line_to(end)
        # Pin the last piece to the exact endpoint so relative commands stay aligned
        c1, c2, _ = pieces[-1]
        pieces[-1] = (c1, c2, end)
        for c1, c2, target in pieces:
            if not self.cubic_to(c1, c2, target):
                return False
        return True


def decode_path_detailed(
    path_data: str,
    max_points: int | None = 20,
    arc_mode: ArcMode = ArcMode.SUBDIVIDE,
    strict: bool = False,
) -> DecodedPath:
    """Decode path data into anchors, reporting closure and truncation.

    Args:
        path_data: Raw ``d`` attribute
        max_points: Anchor cap, None for unlimited
        arc_mode: Arc conversion strategy
        strict: Raise PathSyntaxError on malformed content

    Returns:
        DecodedPath with the anchors and status flags
    """
    commands, dropped = tokenize_path(path_data, strict=strict)
    decoder = _PathDecoder(max_points, arc_mode)

    previous_kind: str | None = None
    for command in commands:
        if not decoder.apply(command, previous_kind):
            break
        previous_kind = command.kind

    if decoder.truncated:
        logger.warning(
            "Path truncated",
            max_points=max_points,
            kept=len(decoder.points),
        )
    if dropped:
        logger.debug("Malformed path values dropped", count=dropped)

    return DecodedPath(
        points=decoder.points,
        closed=decoder.closed,
        truncated=decoder.truncated,
        dropped_values=dropped,
    )


def decode_path(
    path_data: str,
    max_points: int | None = 20,
    arc_mode: ArcMode = ArcMode.SUBDIVIDE,
) -> list[ControlPoint]:
    """Decode path data into anchors.

    See decode_path_detailed for the status flags.
    """
    return decode_path_detailed(path_data, max_points=max_points, arc_mode=arc_mode).points


def format_number(value: float, precision: int = 4) -> str:
    """Format a coordinate compactly: fixed precision, no trailing zeros.

    Examples:
        >>> format_number(3.0)
        '3'
        >>> format_number(-0.00001)
        '0'
        >>> format_number(6.666666)
        '6.6667'
    """
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _pair(point: Point, precision: int) -> str:
    return f"{format_number(point.x, precision)},{format_number(point.y, precision)}"


def encode_path(
    points: list[ControlPoint],
    close: bool = False,
    precision: int = 4,
    closure_tolerance: float = 0.01,
) -> str:
    """Encode anchors as path data.

    Emits ``M x,y`` for the first anchor and ``C out in anchor`` for each
    following one, using the previous anchor's handle_out and the current
    anchor's handle_in. When closing a path of more than two anchors, a
    final cubic back to the first anchor is added unless the last anchor
    already coincides with it, followed by ``Z``.

    Args:
        points: Anchors in path order
        close: Close the path
        precision: Decimal places kept
        closure_tolerance: Per-axis distance under which last and first
            anchors coincide

    Returns:
        Path data, empty for no anchors
    """
    if not points:
        return ""

    parts = [f"M {_pair(points[0].anchor, precision)}"]
    for prev, curr in zip(points, points[1:]):
        parts.append(
            f"C {_pair(prev.handle_out, precision)} "
            f"{_pair(curr.handle_in, precision)} "
            f"{_pair(curr.anchor, precision)}"
        )

    if close and len(points) > 2:
        last, first = points[-1], points[0]
        if abs(last.x - first.x) > closure_tolerance or abs(last.y - first.y) > closure_tolerance:
            parts.append(
                f"C {_pair(last.handle_out, precision)} "
                f"{_pair(first.handle_in, precision)} "
                f"{_pair(first.anchor, precision)}"
            )
        parts.append("Z")

    return " ".join(parts)


def fit_to_canvas(
    paths: list[list[ControlPoint]],
    canvas_width: float = 800.0,
    canvas_height: float = 600.0,
    fill_ratio: float = 0.7,
    min_scale: float = 0.1,
    max_scale: float = 10.0,
    source_box: tuple[float, float, float, float] | None = None,
) -> float:
    """Center and uniformly scale paths onto a canvas, in place.

    The combined bounding box of anchors and handles (or source_box, given
    as min_x, min_y, max_x, max_y) is scaled to occupy fill_ratio of each
    canvas dimension with the aspect ratio preserved, then centered. The
    scale is clamped to [min_scale, max_scale].

    Returns:
        The applied scale factor
    """
    box = source_box
    if box is None:
        boxes = [b for b in (points_bounding_box(p) for p in paths) if b is not None]
        if not boxes:
            return 1.0
        box = (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    min_x, min_y, max_x, max_y = box
    width = max_x - min_x
    height = max_y - min_y
    candidates = []
    if width > 0:
        candidates.append(canvas_width * fill_ratio / width)
    if height > 0:
        candidates.append(canvas_height * fill_ratio / height)
    scale = min(candidates) if candidates else 1.0
    scale = max(min_scale, min(max_scale, scale))

    cx = (min_x + max_x) / 2
    cy = (min_y + max_y) / 2
    tx = canvas_width / 2
    ty = canvas_height / 2

    def place(q: Point) -> Point:
        return Point((q.x - cx) * scale + tx, (q.y - cy) * scale + ty)

    for path in paths:
        for cp in path:
            anchor = place(cp.anchor)
            cp.x, cp.y = anchor.x, anchor.y
            cp.handle_in = place(cp.handle_in)
            cp.handle_out = place(cp.handle_out)

    logger.debug("Geometry fitted to canvas", scale=round(scale, 4), paths=len(paths))
    return scale
