"""
Error taxonomy for the statistical sectors conversion.

Recoverable errors (missing attributes, invalid identifiers) are caught by the
feature mapper and counted; the others abort the run and are mapped to exit
codes by the CLI.
"""

from pathlib import Path


class StatSectorsError(Exception):
    """Base class for all conversion errors."""


class MissingAttributeError(StatSectorsError):
    """Raised when a feature lacks an attribute the mapping needs."""

    def __init__(self, attribute: str, feature_index: int | None = None):
        self.attribute = attribute
        self.feature_index = feature_index
        where = f" on feature {feature_index}" if feature_index is not None else ""
        super().__init__(f"Missing attribute '{attribute}'{where}")


class InvalidIdentifierError(StatSectorsError):
    """Raised when an identifier does not form a valid absolute IRI."""

    def __init__(self, candidate: str, reason: str):
        self.candidate = candidate
        self.reason = reason
        super().__init__(f"Invalid IRI <{candidate}>: {reason}")


class GeometrySerializationError(StatSectorsError):
    """
    Raised when a feature geometry cannot be written as WKT.

    This is fatal: a geometry that cannot be serialized means the input
    file is corrupt.
    """

    def __init__(self, message: str, feature_index: int | None = None):
        self.feature_index = feature_index
        if feature_index is not None:
            message = f"Feature {feature_index}: {message}"
        super().__init__(message)


class InputOpenError(StatSectorsError):
    """Raised when the input dataset cannot be opened or has no geometry."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        super().__init__(f"Cannot open input {self.path}: {reason}")


class OutputWriteError(StatSectorsError):
    """Raised when the serialized graph cannot be written."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        super().__init__(f"Cannot write output {self.path}: {reason}")


class GraphValidationError(StatSectorsError):
    """Raised in strict mode when the generated graph fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Graph validation failed with {len(errors)} errors")
