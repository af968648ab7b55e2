"""
HK80 GeoJSON Converter — Shared Python Package
===============================================
Re-exports the shared base class, exception hierarchy, and validator
utilities so the converter modules can import from a single location::

    from shared.python import GeoTool, Validators
    from shared.python.exceptions import OutOfDomainError
"""

from shared.python.base_tool import GeoTool
from shared.python.exceptions import (
    ConfigurationError,
    GmlParseError,
    HK80GeoJSONError,
    InputValidationError,
    OutOfDomainError,
    OutputWriteError,
)
from shared.python.validators import Validators

__all__ = [
    "GeoTool",
    "Validators",
    "HK80GeoJSONError",
    "InputValidationError",
    "ConfigurationError",
    "OutOfDomainError",
    "GmlParseError",
    "OutputWriteError",
]
