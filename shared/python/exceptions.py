"""
HK80 GeoJSON Converter — Custom Exception Hierarchy
====================================================
Every module in the converter raises exceptions from this module so callers
can catch them at the right level of granularity.

Hierarchy::

    HK80GeoJSONError                     ← catch-all base
    ├── InputValidationError             ← missing input directory, bad paths
    ├── ConfigurationError               ← inconsistent CRS descriptor
    ├── OutOfDomainError                 ← point outside the projection domain
    ├── GmlParseError                    ← malformed GML document
    └── OutputWriteError                 ← cannot write to output path

Usage::

    from shared.python.exceptions import OutOfDomainError

    raise OutOfDomainError(easting, northing, "beyond the pole")
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class HK80GeoJSONError(Exception):
    """Base exception for the converter.

    Catch this to handle any converter error without caring about the
    exact subtype.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InputValidationError(HK80GeoJSONError):
    """Raised when the converter's inputs fail pre-processing validation."""


# ---------------------------------------------------------------------------
# CRS
# ---------------------------------------------------------------------------


class ConfigurationError(HK80GeoJSONError):
    """Raised when a coordinate reference system descriptor is internally
    inconsistent or cannot be understood by PROJ.

    Detected when the descriptor is built, before any point is transformed.

    Example::

        raise ConfigurationError("Ellipsoid 'bad': inverse flattening must be > 1")
    """


class OutOfDomainError(HK80GeoJSONError):
    """Raised when a projected point cannot be inverse-projected or its
    result cannot be normalised into valid geodetic bounds.

    Args:
        easting: Easting of the offending point, in metres.
        northing: Northing of the offending point, in metres.
        reason: Short explanation of what went wrong.

    Example::

        raise OutOfDomainError(1e15, 820_000.0, "inverse projection overflowed")
    """

    def __init__(self, easting: float, northing: float, reason: str) -> None:
        super().__init__(
            f"Point (E={easting!r}, N={northing!r}) is outside the projection "
            f"domain: {reason}"
        )
        self.easting: float = easting
        self.northing: float = northing
        self.reason: str = reason


# ---------------------------------------------------------------------------
# GML
# ---------------------------------------------------------------------------


class GmlParseError(HK80GeoJSONError):
    """Raised when a GML document is not well-formed XML or has invalid structure.

    Args:
        file_path: String representation of the file being read.
        reason: Parser error message, including the position if known.
    """

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"Failed to parse GML file '{file_path}': {reason}")
        self.file_path: str = file_path
        self.reason: str = reason


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class OutputWriteError(HK80GeoJSONError):
    """Raised when the converter cannot write its output to disk.

    Args:
        output_path: String representation of the path that failed.
        reason: Underlying OS error message.

    Example::

        raise OutputWriteError("/read-only/dir/R1.json", "Permission denied")
    """

    def __init__(self, output_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to write output to '{output_path}': {reason}"
        )
        self.output_path: str = output_path
        self.reason: str = reason
