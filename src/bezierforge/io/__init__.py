"""Import/export layer for bezierforge.

This module handles converting between the object collection and external
formats: SVG path data, full SVG documents and design JSON. Large imports run
as cancellable chunked jobs.

Key responsibilities:
- Decode and encode SVG path data
- Fit imported geometry onto the working canvas
- Read SVG documents (paths, basic shapes, styles, stored objects)
- Write SVG documents that re-import exactly
- Load and dump design JSON, including legacy shapes

Key classes:
- ImportJob: Chunked, cancellable import
- SvgDocument: Geometry extracted from an SVG document
"""

from bezierforge.io.design_json import dump_design, load_design, read_design_file, write_design_file
from bezierforge.io.importer import (
    ImportChunk,
    ImportCompleted,
    ImportFailed,
    ImportJob,
    ImportProgress,
    ImportResult,
)
from bezierforge.io.path_codec import (
    DecodedPath,
    PathCommand,
    decode_path,
    decode_path_detailed,
    encode_path,
    fit_to_canvas,
    format_number,
    tokenize_path,
)
from bezierforge.io.svg_reader import SvgDocument, SvgPath, load_svg, parse_svg
from bezierforge.io.svg_writer import export_svg

__all__ = [
    "DecodedPath",
    "ImportChunk",
    "ImportCompleted",
    "ImportFailed",
    "ImportJob",
    "ImportProgress",
    "ImportResult",
    "PathCommand",
    "SvgDocument",
    "SvgPath",
    "decode_path",
    "decode_path_detailed",
    "dump_design",
    "encode_path",
    "export_svg",
    "fit_to_canvas",
    "format_number",
    "load_design",
    "load_svg",
    "parse_svg",
    "read_design_file",
    "tokenize_path",
    "write_design_file",
]
