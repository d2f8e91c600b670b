"""Exception hierarchy for Bezierforge."""


class BezierForgeError(Exception):
    """Base exception for all Bezierforge errors."""

    pass


class CodecError(BezierForgeError):
    """Errors related to reading or writing path and document formats."""

    pass


class PathSyntaxError(CodecError):
    """An SVG path string could not be tokenized."""

    def __init__(self, path_data: str, reason: str) -> None:
        self.path_data = path_data
        self.reason = reason
        preview = path_data if len(path_data) <= 40 else path_data[:37] + "..."
        super().__init__(f"Invalid path data '{preview}': {reason}")


class SvgDocumentError(CodecError):
    """An SVG document could not be parsed."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid SVG document '{source}': {reason}")


class DesignFormatError(CodecError):
    """Design JSON does not match any accepted shape."""

    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"Invalid design data: {details}")


class ModelError(BezierForgeError):
    """Errors related to the object collection."""

    pass


class ObjectNotFoundError(ModelError):
    """Requested object id is not in the collection."""

    def __init__(self, object_id: str) -> None:
        self.object_id = object_id
        super().__init__(f"Object '{object_id}' not found")


class GroupNotFoundError(ModelError):
    """Requested group id is not known."""

    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Group '{group_id}' not found")


class PointIndexError(ModelError):
    """A point index no longer exists on its object."""

    def __init__(self, object_id: str, point_index: int) -> None:
        self.object_id = object_id
        self.point_index = point_index
        super().__init__(f"Point {point_index} out of range for object '{object_id}'")


class InvalidTransformError(ModelError):
    """Transform settings cannot be applied or inverted."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid transform: {reason}")


class ImportCancelledError(BezierForgeError):
    """Import was cancelled before completion."""

    def __init__(self, processed_count: int, pending_count: int) -> None:
        self.processed_count = processed_count
        self.pending_count = pending_count
        super().__init__(
            f"Import cancelled: {processed_count} completed, {pending_count} pending"
        )


class PersistenceError(BezierForgeError):
    """A persistence client failed to store or retrieve a design."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Persistence failed for '{name}': {reason}")
