"""Narrow interfaces to external collaborators.

The engine reaches the outside world only through a notification sink
(fire-and-forget user-visible status) and a persistence client (opaque JSON
and SVG strings stored under a name). Implementations for logging, tests
and a plain directory are provided here.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

import structlog

from bezierforge.exceptions import PersistenceError

logger = structlog.get_logger("bezierforge.ports")


class Severity(str, Enum):
    """Notification severity."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """One user-visible status message."""

    title: str
    description: str
    severity: Severity


@dataclass
class StoredDesign:
    """A design as returned by a persistence client.

    Attributes:
        name: Name the design was stored under
        design_json: Serialized object collection
        svg: SVG rendition, if one was stored
    """

    name: str
    design_json: str
    svg: str | None = None


class NotificationSink(Protocol):
    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        ...


class PersistenceClient(Protocol):
    def store(self, name: str, design_json: str, svg: str | None = None) -> None:
        ...

    def retrieve(self, name: str) -> StoredDesign:
        ...


_LOG_METHODS = {
    Severity.INFO: "info",
    Severity.SUCCESS: "info",
    Severity.WARNING: "warning",
    Severity.ERROR: "error",
}


class LoggingNotifier:
    """Notification sink that writes to the structured log."""

    def __init__(self, logger_name: str = "bezierforge.notify") -> None:
        self._logger = structlog.get_logger(logger_name)

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        log = getattr(self._logger, _LOG_METHODS[severity])
        log(title, description=description, severity=severity.value)


@dataclass
class RecordingNotifier:
    """Notification sink that keeps every message in memory."""

    notifications: list[Notification] = field(default_factory=list)

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        self.notifications.append(Notification(title, description, severity))

    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def titles(self, severity: Severity | None = None) -> list[str]:
        """Titles of recorded notifications, optionally filtered by severity."""
        return [n.title for n in self.notifications if severity is None or n.severity is severity]

    def clear(self) -> None:
        self.notifications.clear()


class MemoryPersistence:
    """Persistence client backed by a dictionary."""

    def __init__(self) -> None:
        self._designs: dict[str, StoredDesign] = {}

    def store(self, name: str, design_json: str, svg: str | None = None) -> None:
        self._designs[name] = StoredDesign(name=name, design_json=design_json, svg=svg)

    def retrieve(self, name: str) -> StoredDesign:
        try:
            return self._designs[name]
        except KeyError:
            raise PersistenceError(name, "no design stored under this name") from None

    def names(self) -> list[str]:
        return sorted(self._designs)


class DirectoryPersistence:
    """Persistence client storing ``<name>.json`` and ``<name>.svg`` files.

    Args:
        root: Directory holding the designs, created on first store
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _paths(self, name: str) -> tuple[Path, Path]:
        safe = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._") or "design"
        return self._root / f"{safe}.json", self._root / f"{safe}.svg"

    def store(self, name: str, design_json: str, svg: str | None = None) -> None:
        json_path, svg_path = self._paths(name)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            json_path.write_text(design_json, encoding="utf-8")
            if svg is not None:
                svg_path.write_text(svg, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(name, str(e)) from e
        logger.debug("Design stored", name=name, path=str(json_path))

    def retrieve(self, name: str) -> StoredDesign:
        json_path, svg_path = self._paths(name)
        try:
            design_json = json_path.read_text(encoding="utf-8")
            svg = svg_path.read_text(encoding="utf-8") if svg_path.exists() else None
        except OSError as e:
            raise PersistenceError(name, str(e)) from e
        return StoredDesign(name=name, design_json=design_json, svg=svg)

    def names(self) -> list[str]:
        if not self._root.exists():
            return []
        return sorted(p.stem for p in self._root.glob("*.json"))

