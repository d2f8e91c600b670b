"""SVG document reader.

Collects drawable geometry from an SVG document as path data plus stroke
style. Basic shapes are converted to equivalent path data. Groups written by
the SVG writer carry the full object as metadata and are restored exactly
instead of being re-decoded.
"""

import json
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from bezierforge.domain import BezierObject, ControlPoint, CurveConfig, CurveStyle, TransformSettings
from bezierforge.exceptions import SvgDocumentError

logger = structlog.get_logger("bezierforge.svg")

SVG_NS = "http://www.w3.org/2000/svg"
METADATA_MARKER = "data-bezierforge"

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_SHAPE_TAGS = {"path", "rect", "circle", "ellipse", "line", "polyline", "polygon"}
_SKIPPED_TAGS = {"defs", "clipPath", "mask", "symbol", "metadata", "title", "desc", "style", "script"}
_STYLE_PROPERTIES = (
    "stroke",
    "stroke-width",
    "fill",
    "opacity",
    "stroke-opacity",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-dasharray",
)


@dataclass
class SvgPath:
    """One drawable element converted to path data.

    Attributes:
        d: Path data
        style: Stroke style resolved from attributes, inline style and groups
        element_id: The element's id attribute, if any
        tag: Source element name
    """

    d: str
    style: CurveStyle
    element_id: str | None = None
    tag: str = "path"


@dataclass
class SvgDocument:
    """Geometry extracted from an SVG document.

    Attributes:
        width: Declared width, if numeric
        height: Declared height, if numeric
        view_box: (min_x, min_y, width, height), if declared
        paths: Drawable elements in document order
        stored_objects: Objects restored from writer metadata
    """

    width: float | None = None
    height: float | None = None
    view_box: tuple[float, float, float, float] | None = None
    paths: list[SvgPath] = field(default_factory=list)
    stored_objects: list[BezierObject] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.paths and not self.stored_objects

    @property
    def view_box_bounds(self) -> tuple[float, float, float, float] | None:
        """The viewBox as (min_x, min_y, max_x, max_y)."""
        if self.view_box is None:
            return None
        x, y, w, h = self.view_box
        return (x, y, x + w, y + h)


def _strip_ns(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _is_svg_root(tag: str) -> bool:
    return tag == "svg" or tag.endswith("}svg")


def _parse_length(value: str | None) -> float | None:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    if match is None or value.strip().endswith("%"):
        return None
    return float(match.group(1))


def _parse_view_box(value: str | None) -> tuple[float, float, float, float] | None:
    if not value:
        return None
    parts = re.split(r"[\s,]+", value.strip())
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return (x, y, w, h)


def _parse_inline_style(value: str | None) -> dict[str, str]:
    properties: dict[str, str] = {}
    if not value:
        return properties
    for declaration in value.split(";"):
        if ":" not in declaration:
            continue
        name, _, raw = declaration.partition(":")
        properties[name.strip()] = raw.strip()
    return properties


def _element_properties(element: ET.Element, inherited: dict[str, str]) -> dict[str, str]:
    properties = dict(inherited)
    for name in _STYLE_PROPERTIES:
        if name in element.attrib:
            properties[name] = element.attrib[name]
    for name, value in _parse_inline_style(element.attrib.get("style")).items():
        if name in _STYLE_PROPERTIES:
            properties[name] = value
    return properties


def style_from_properties(properties: dict[str, str]) -> CurveStyle:
    """Build a CurveStyle from resolved presentation properties.

    A missing or ``none`` stroke falls back to the fill color, since filled
    shapes are imported as outlines.
    """
    stroke = properties.get("stroke")
    fill = properties.get("fill", "none")
    color = stroke if stroke and stroke != "none" else (fill if fill not in ("none", "") else "#000000")
    if color.startswith("url("):
        color = "#000000"

    opacity_text = properties.get("stroke-opacity") or properties.get("opacity")
    opacity = _parse_length(opacity_text)
    width = _parse_length(properties.get("stroke-width"))
    dash = properties.get("stroke-dasharray", "none")

    return CurveStyle(
        color=color,
        width=width if width is not None and width > 0 else 2.0,
        fill="none",
        opacity=max(0.0, min(1.0, opacity)) if opacity is not None else 1.0,
        line_cap=properties.get("stroke-linecap", "round"),
        line_join=properties.get("stroke-linejoin", "round"),
        dash_array=dash if dash != "none" else "",
    )


def _points_attr(value: str | None) -> list[tuple[float, float]]:
    numbers = [float(n) for n in _NUMBER_RE.findall(value or "")]
    return list(zip(numbers[0::2], numbers[1::2]))


def _num(element: ET.Element, name: str) -> float:
    return _parse_length(element.attrib.get(name)) or 0.0


def _ellipse_path(cx: float, cy: float, rx: float, ry: float) -> str:
    return (
        f"M {cx + rx},{cy} "
        f"A {rx},{ry} 0 0 1 {cx},{cy + ry} "
        f"A {rx},{ry} 0 0 1 {cx - rx},{cy} "
        f"A {rx},{ry} 0 0 1 {cx},{cy - ry} "
        f"A {rx},{ry} 0 0 1 {cx + rx},{cy} Z"
    )


def shape_to_path(element: ET.Element) -> str | None:
    """Convert a basic shape element to equivalent path data.

    Returns:
        Path data, or None for degenerate or unsupported shapes
    """
    tag = _strip_ns(element.tag)
    if tag == "path":
        return element.attrib.get("d") or None
    if tag == "rect":
        x, y = _num(element, "x"), _num(element, "y")
        w, h = _num(element, "width"), _num(element, "height")
        if w <= 0 or h <= 0:
            return None
        return f"M {x},{y} H {x + w} V {y + h} H {x} Z"
    if tag == "circle":
        r = _num(element, "r")
        if r <= 0:
            return None
        return _ellipse_path(_num(element, "cx"), _num(element, "cy"), r, r)
    if tag == "ellipse":
        rx, ry = _num(element, "rx"), _num(element, "ry")
        if rx <= 0 or ry <= 0:
            return None
        return _ellipse_path(_num(element, "cx"), _num(element, "cy"), rx, ry)
    if tag == "line":
        return (
            f"M {_num(element, 'x1')},{_num(element, 'y1')} "
            f"L {_num(element, 'x2')},{_num(element, 'y2')}"
        )
    if tag in ("polyline", "polygon"):
        pairs = _points_attr(element.attrib.get("points"))
        if len(pairs) < 2:
            return None
        d = "M " + " L ".join(f"{x},{y}" for x, y in pairs)
        return d + " Z" if tag == "polygon" else d
    return None


def _stored_object(group: ET.Element) -> BezierObject | None:
    """Rebuild an object from a group written by the SVG writer."""
    marker = None
    for child in group:
        if _strip_ns(child.tag) == "metadata" and child.attrib.get(METADATA_MARKER) == "points":
            marker = child
            break
    if marker is None:
        return None

    try:
        points_data = json.loads(marker.text or "[]")
        config_data = json.loads(group.attrib.get("data-curve-config", "{}"))
        transform_data = json.loads(group.attrib.get("data-transform", "{}"))
    except json.JSONDecodeError as e:
        logger.warning("Stored object metadata unreadable", group=group.attrib.get("id"), error=str(e))
        return None
    if not isinstance(points_data, list):
        return None

    obj = BezierObject(
        name=group.attrib.get("data-name") or "Curve",
        points=[ControlPoint.from_dict(p) for p in points_data],
        curve_config=CurveConfig.from_dict(config_data) if isinstance(config_data, dict) else CurveConfig(),
        transform=(
            TransformSettings.from_dict(transform_data)
            if isinstance(transform_data, dict)
            else TransformSettings()
        ),
    )
    if group.attrib.get("id"):
        obj.id = group.attrib["id"]
    return obj


def _walk(element: ET.Element, inherited: dict[str, str], document: SvgDocument) -> None:
    for child in element:
        tag = _strip_ns(child.tag)
        if tag in _SKIPPED_TAGS:
            continue
        if tag == "g" and "data-curve-config" in child.attrib:
            stored = _stored_object(child)
            if stored is not None:
                document.stored_objects.append(stored)
                continue
        properties = _element_properties(child, inherited)
        if tag in _SHAPE_TAGS:
            d = shape_to_path(child)
            if d:
                document.paths.append(
                    SvgPath(
                        d=d,
                        style=style_from_properties(properties),
                        element_id=child.attrib.get("id"),
                        tag=tag,
                    )
                )
            continue
        _walk(child, properties, document)


def parse_svg(text: str, source: str = "<string>") -> SvgDocument:
    """Parse SVG markup.

    Args:
        text: SVG document text
        source: Name used in error messages

    Returns:
        SvgDocument with paths in document order

    Raises:
        SvgDocumentError: If the text is not well-formed XML with an svg root
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise SvgDocumentError(source, f"malformed XML ({e})") from e

    if not _is_svg_root(root.tag):
        raise SvgDocumentError(source, f"root element is {_strip_ns(root.tag)!r}, not svg")

    document = SvgDocument(
        width=_parse_length(root.attrib.get("width")),
        height=_parse_length(root.attrib.get("height")),
        view_box=_parse_view_box(root.attrib.get("viewBox")),
    )
    _walk(root, _element_properties(root, {}), document)

    logger.debug(
        "SVG parsed",
        source=source,
        paths=len(document.paths),
        stored_objects=len(document.stored_objects),
    )
    return document


def load_svg(path: str | Path) -> SvgDocument:
    """Read and parse an SVG file.

    Raises:
        SvgDocumentError: If the file cannot be read or parsed
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise SvgDocumentError(str(p), f"cannot read file ({e})") from e
    return parse_svg(raw, source=str(p))


def looks_like_svg(text: str) -> bool:
    """Cheap check whether import text is SVG markup rather than JSON."""
    stripped = text.lstrip()
    return stripped.startswith("<")
