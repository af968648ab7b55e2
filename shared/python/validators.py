"""
HK80 GeoJSON Converter — Shared Input Validators
=================================================
Static utility methods used to validate common preconditions before
processing begins.

All methods raise an appropriate exception from
:mod:`shared.python.exceptions` rather than returning booleans, which
makes ``validate_inputs`` implementations simple and readable::

    class MyTool(GeoTool):
        def validate_inputs(self) -> None:
            Validators.assert_directory_exists(self.input_path)
            Validators.assert_directory_writable(self.output_path)
            Validators.assert_crs_valid(HK80_GRID.to_proj_string())
"""

from __future__ import annotations

from pathlib import Path

# Lazy import for pyproj (assert_crs_valid) so modules that only read
# files avoid the import cost at startup.

from shared.python.exceptions import (
    ConfigurationError,
    InputValidationError,
    OutputWriteError,
)


class Validators:
    """Collection of static precondition checks.

    All methods are ``@staticmethod``; the class is never instantiated.
    It exists purely as a logical namespace.
    """

    # ------------------------------------------------------------------
    # File-system checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_file_exists(path: Path) -> None:
        """Assert that *path* points to an existing regular file.

        Args:
            path: Path object to check.

        Raises:
            InputValidationError: If *path* does not exist or is a
                directory rather than a file.

        Example::

            Validators.assert_file_exists(Path("input/CENTERLINE.gml"))
        """
        path = Path(path)
        if not path.exists():
            raise InputValidationError(
                f"Input file not found: '{path}'. "
                "Check that the path is correct and the file exists."
            )
        if path.is_dir():
            raise InputValidationError(
                f"Expected a file but got a directory: '{path}'."
            )

    @staticmethod
    def assert_directory_exists(path: Path) -> None:
        """Assert that *path* is an existing directory.

        Args:
            path: Path object to check.

        Raises:
            InputValidationError: If *path* does not exist or is not a
                directory.
        """
        path = Path(path)
        if not path.exists():
            raise InputValidationError(
                f"Input directory not found: '{path}'."
            )
        if not path.is_dir():
            raise InputValidationError(
                f"Expected a directory but got a file: '{path}'."
            )

    @staticmethod
    def assert_directory_writable(path: Path) -> None:
        """Assert that *path* is a directory the converter can write into.

        Creates the directory (and any missing parents) if it does not yet
        exist, so callers never have to pre-create output trees.

        Args:
            path: Intended output directory.

        Raises:
            OutputWriteError: If the directory cannot be created, or a
                regular file already occupies the path.
        """
        path = Path(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(str(path), str(exc)) from exc

    # ------------------------------------------------------------------
    # CRS / projection checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_crs_valid(crs_string: str) -> None:
        """Assert that *crs_string* can be parsed as a valid CRS.

        Uses :mod:`pyproj` to attempt parsing.  Accepts EPSG codes
        (``"EPSG:4326"``), PROJ strings, and WKT strings.

        Args:
            crs_string: The CRS definition to validate.

        Raises:
            ConfigurationError: If *crs_string* is not recognised by pyproj.

        Example::

            Validators.assert_crs_valid("+proj=longlat +datum=WGS84 +no_defs")
        """
        from pyproj import CRS  # noqa: PLC0415
        from pyproj.exceptions import CRSError  # noqa: PLC0415

        try:
            CRS.from_user_input(crs_string)
        except CRSError as exc:
            raise ConfigurationError(
                f"Invalid or unrecognised CRS: '{crs_string}'. {exc}"
            ) from exc
