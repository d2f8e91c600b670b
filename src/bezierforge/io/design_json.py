"""JSON codec for saved designs."""

import json
from pathlib import Path

from bezierforge.domain import DesignData
from bezierforge.exceptions import DesignFormatError


def dump_design(design: DesignData, indent: int | None = 2) -> str:
    """Serialize a design to the exchanged JSON shape."""
    return json.dumps(design.to_dict(), indent=indent, ensure_ascii=False)


def load_design(text: str) -> DesignData:
    """Parse design JSON in any accepted shape.

    Accepts ``{objects, backgroundImage?}``, a bare list of objects and the
    legacy ``{points}`` single-object shape.

    Raises:
        DesignFormatError: If the text is not JSON or matches no shape
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise DesignFormatError(f"not valid JSON ({e.msg} at line {e.lineno})") from e
    return DesignData.from_dict(value)


def read_design_file(path: str | Path) -> DesignData:
    """Read a design JSON file.

    Raises:
        DesignFormatError: If the file cannot be read or parsed
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise DesignFormatError(f"cannot read '{p}' ({e})") from e
    return load_design(text)


def write_design_file(design: DesignData, path: str | Path) -> None:
    """Write a design as indented JSON."""
    Path(path).write_text(dump_design(design) + "\n", encoding="utf-8")
