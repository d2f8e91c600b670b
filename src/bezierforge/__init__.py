"""Bezierforge - interactive cubic Bezier path engine.

Bezierforge models compound cubic Bezier paths ("objects") built from anchors
with in/out handles, derives sampled parallel offset strokes, drives pointer
and keyboard interaction through a small state machine, keeps an undo/redo
history and round-trips everything through SVG path syntax.

Example:
    $ bezierforge import drawing.svg -o design.json
    $ bezierforge export design.json -o design.svg
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
