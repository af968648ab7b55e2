"""
HK80 GeoJSON Converter — Shared Base Tool
==========================================
Abstract base class for runnable conversion jobs.

``run()`` fixes the order of a job: check preconditions, convert,
then log how long the conversion took and where the files went.
Concrete jobs supply :meth:`GeoTool.validate_inputs` and
:meth:`GeoTool.process`::

    from shared.python.base_tool import GeoTool

    class LayerJob(GeoTool):
        def validate_inputs(self) -> None:
            ...
        def process(self) -> None:
            ...
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path

# Modules log through children of this logger ("hk80geojson.<module>").
logger = logging.getLogger("hk80geojson")

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


class GeoTool(ABC):
    """Base class for jobs that read an input directory and write an output one.

    Attributes:
        input_path: Directory (or file) the job reads.
        output_path: Directory the job writes into.
        verbose: Log DEBUG messages when ``True``.
        elapsed: Wall-clock seconds of the last successful :meth:`run`,
            ``None`` until one completes.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        *,
        verbose: bool = False,
    ) -> None:
        self.input_path: Path = Path(input_path)
        self.output_path: Path = Path(output_path)
        self.verbose: bool = verbose
        self.elapsed: float | None = None

        configure_logging(verbose)

    @abstractmethod
    def validate_inputs(self) -> None:
        """Raise a :class:`~shared.python.exceptions.HK80GeoJSONError`
        subclass if the job cannot start."""

    @abstractmethod
    def process(self) -> None:
        """Do the work. Only called after :meth:`validate_inputs` passed."""

    def run(self) -> None:
        """Validate, process, then report.

        Exceptions from either step propagate unchanged; nothing is
        reported for a failed run.
        """
        logger.info("Starting %s", self.__class__.__name__)
        start = time.perf_counter()

        self.validate_inputs()
        self.process()

        self.elapsed = time.perf_counter() - start
        self._report_success(self.elapsed)

    def _report_success(self, elapsed: float) -> None:
        logger.info(
            "%s completed in %.2fs → %s",
            self.__class__.__name__,
            elapsed,
            self.output_path,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"input_path={self.input_path!r}, "
            f"output_path={self.output_path!r})"
        )


def configure_logging(verbose: bool = False) -> None:
    """Attach one console handler to the package logger and set its level.

    Safe to call repeatedly; the handler is only added once.
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
