"""SVG document writer.

Each object becomes a ``<g>`` holding its parallel strokes (sampled
polylines, drawn first so they sit behind), its main path and a metadata
element with the exact control points. The group attributes carry the name,
curve config and transform so the reader can restore the object unchanged.
"""

import json
import xml.etree.ElementTree as ET

from bezierforge.core.geometry import sample_path
from bezierforge.domain import BackgroundImage, BezierObject, CurveStyle
from bezierforge.io.path_codec import encode_path, format_number
from bezierforge.io.svg_reader import METADATA_MARKER, SVG_NS

ET.register_namespace("", SVG_NS)


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def _stroke_attributes(style: CurveStyle) -> dict[str, str]:
    attributes = {
        "fill": style.fill or "none",
        "stroke": style.color,
        "stroke-width": format_number(style.width),
        "stroke-opacity": format_number(style.opacity),
        "stroke-linecap": style.line_cap,
        "stroke-linejoin": style.line_join,
    }
    if style.dash_array:
        attributes["stroke-dasharray"] = style.dash_array
    return attributes


def _object_group(
    parent: ET.Element,
    obj: BezierObject,
    samples: int,
    close_paths: bool,
    include_metadata: bool,
) -> None:
    group = ET.SubElement(parent, _q("g"), {"id": obj.id, "data-name": obj.name})
    if include_metadata:
        group.set("data-curve-config", json.dumps(obj.curve_config.to_dict(), separators=(",", ":")))
        group.set("data-transform", json.dumps(obj.transform.to_dict(), separators=(",", ":")))

    for offset, style in reversed(obj.curve_config.parallel_offsets()):
        polyline = sample_path(obj.points, samples, offset, closed=close_paths)
        if len(polyline) < 2:
            continue
        points_text = " ".join(f"{format_number(p.x, 2)},{format_number(p.y, 2)}" for p in polyline)
        ET.SubElement(
            group,
            _q("polyline"),
            {"points": points_text, **_stroke_attributes(style), "fill": "none"},
        )

    d = encode_path(obj.points, close=close_paths)
    if d:
        ET.SubElement(group, _q("path"), {"d": d, **_stroke_attributes(obj.curve_config.main_style)})

    if include_metadata:
        metadata = ET.SubElement(group, _q("metadata"), {METADATA_MARKER: "points"})
        metadata.text = json.dumps([p.to_dict() for p in obj.points], separators=(",", ":"))


def export_svg(
    objects: list[BezierObject],
    width: float = 800,
    height: float = 600,
    background: BackgroundImage | None = None,
    samples: int = 30,
    close_paths: bool = False,
    include_metadata: bool = True,
) -> str:
    """Render objects as a standalone SVG document.

    Args:
        objects: Objects in drawing order
        width: Document width and viewBox width
        height: Document height and viewBox height
        background: Optional reference image placed first
        samples: Evaluations per segment for parallel strokes
        close_paths: Close every path back to its first anchor
        include_metadata: Embed data for exact re-import

    Returns:
        SVG markup with an XML declaration
    """
    w, h = format_number(width), format_number(height)
    root = ET.Element(_q("svg"), {"width": w, "height": h, "viewBox": f"0 0 {w} {h}"})

    if background is not None:
        ET.SubElement(
            root,
            _q("image"),
            {
                "href": background.url,
                "x": "0",
                "y": "0",
                "width": w,
                "height": h,
                "opacity": format_number(background.opacity),
                "preserveAspectRatio": "xMidYMid meet",
            },
        )

    for obj in objects:
        _object_group(root, obj, samples, close_paths, include_metadata)

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n' + body + "\n"
