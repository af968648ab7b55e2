"""
HK80 GeoJSON Converter — Conversion Pipeline
=============================================
Provides :class:`GmlToGeoJsonConverter`, which reads the road centerline and
pedestrian zone GML files from an input directory, reprojects every feature's
vertices from HK80 Grid to WGS84 and writes one GeoJSON file per feature.

Classes:
    LayerSpec               Which GML file maps to which id field and folder.
    ConverterConfig         Tunables for a conversion run.
    LayerResult             Per-layer counts.
    ConversionResult        Summary of a whole run.
    GmlToGeoJsonConverter   Primary tool class (inherits GeoTool).

Output layout::

    output/
    ├── centerlines/<ROUTE_ID>.json
    └── pedestrian_zones/<PED_ZONE_ID>.json

Typical usage::

    from pathlib import Path
    from src.hk80_geojson.converter import ConverterConfig, GmlToGeoJsonConverter

    tool = GmlToGeoJsonConverter(
        input_path=Path("input"),
        output_path=Path("output"),
        config=ConverterConfig(max_workers=8),
    )
    tool.run()
    print(tool.result.summary())
"""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from shared.python.base_tool import GeoTool
from shared.python.exceptions import InputValidationError, OutOfDomainError
from shared.python.validators import Validators

from src.hk80_geojson.crs import HK80_GRID, WGS84, CRSDescriptor
from src.hk80_geojson.geojson_writer import build_feature, feature_filename, write_feature
from src.hk80_geojson.gml_reader import GmlFeature, iter_features
from src.hk80_geojson.transformer import CoordinateTransformer

logger = logging.getLogger("hk80geojson.converter")


def _unclaimed_name(name: str, index: int, claimed: set[str]) -> str:
    """Suffix *name* with ``_<index>`` (then ``_<index>_<n>``) until it is unused."""
    stem = name[: -len(".json")]
    candidate = f"{stem}_{index}.json"
    n = 1
    while candidate in claimed:
        candidate = f"{stem}_{index}_{n}.json"
        n += 1
    return candidate


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerSpec:
    """One input layer.

    Attributes:
        file_name: GML file name inside the input directory.
        id_field: Attribute whose value names each output file.
        output_subdir: Folder inside the output directory.
    """

    file_name: str
    id_field: str
    output_subdir: str


DEFAULT_LAYERS: tuple[LayerSpec, ...] = (
    LayerSpec("CENTERLINE.gml", "ROUTE_ID", "centerlines"),
    LayerSpec("PEDESTRIAN_ZONE.gml", "PED_ZONE_ID", "pedestrian_zones"),
)


@dataclass
class ConverterConfig:
    """Configuration bundle for :class:`GmlToGeoJsonConverter`.

    Attributes:
        layers: Layers to convert, in order.
        max_workers: Worker threads transforming and writing features.
        progress_every: Log a progress line every this many features.
        on_domain_error: ``"skip"`` logs and skips a feature whose geometry
                         cannot be transformed; ``"abort"`` stops the run.
        source: Source CRS descriptor.
        target: Target CRS descriptor.
    """

    layers: tuple[LayerSpec, ...] = DEFAULT_LAYERS
    max_workers: int = 4
    progress_every: int = 100
    on_domain_error: Literal["skip", "abort"] = "skip"
    source: CRSDescriptor = HK80_GRID
    target: CRSDescriptor = WGS84


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerResult:
    """Counts for one converted layer.

    Attributes:
        layer: The :class:`LayerSpec` that was processed.
        found: ``False`` when the layer's GML file was missing.
        features_written: Features written to disk.
        features_skipped: Features skipped because of a domain error.
        features_without_id: Features not written because they carry no
            id attribute at all.
        vertices_written: Vertices across all written features.
    """

    layer: LayerSpec
    found: bool
    features_written: int = 0
    features_skipped: int = 0
    features_without_id: int = 0
    vertices_written: int = 0


@dataclass(frozen=True)
class ConversionResult:
    """Immutable summary of a completed conversion run."""

    output_path: Path
    layers: tuple[LayerResult, ...] = field(default_factory=tuple)

    @property
    def features_written(self) -> int:
        return sum(r.features_written for r in self.layers)

    @property
    def features_skipped(self) -> int:
        return sum(r.features_skipped for r in self.layers)

    @property
    def features_without_id(self) -> int:
        return sum(r.features_without_id for r in self.layers)

    @property
    def vertices_written(self) -> int:
        return sum(r.vertices_written for r in self.layers)

    def summary(self) -> str:
        """Return a human-readable summary string for logging or display."""
        return (
            f"Wrote {self.features_written} feature(s) "
            f"({self.features_skipped} skipped, {self.features_without_id} without id) | "
            f"HK80 Grid → WGS84 | Output: {self.output_path}"
        )


# ---------------------------------------------------------------------------
# Main tool class
# ---------------------------------------------------------------------------


class GmlToGeoJsonConverter(GeoTool):
    """Convert HK80 GML layers into per-feature WGS84 GeoJSON files.

    Inherits the Template Method pipeline from :class:`~shared.python.GeoTool`:
    ``validate_inputs`` → ``process`` → ``_report_success``.

    Features are handed to a thread pool as they are read.  Each worker
    transforms one feature's whole vertex sequence and writes its file, so
    vertex order inside a feature is preserved while features complete in
    any order.

    Args:
        input_path: Directory holding the GML files.
        output_path: Directory that receives one folder per layer.
        config: A :class:`ConverterConfig`.  Defaults are used if omitted.
        verbose: Enable DEBUG-level logging.  Defaults to ``False``.
    """

    def __init__(
        self,
        input_path: Path,
        output_path: Path,
        config: ConverterConfig | None = None,
        *,
        verbose: bool = False,
    ) -> None:
        super().__init__(input_path, output_path, verbose=verbose)
        self.config: ConverterConfig = config or ConverterConfig()

        # Populated in process()
        self._result: ConversionResult | None = None

    # ------------------------------------------------------------------
    # GeoTool abstract method implementations
    # ------------------------------------------------------------------

    def validate_inputs(self) -> None:
        """Validate the directories, config values and CRS descriptors.

        Raises:
            InputValidationError: If the input directory is missing or a
                config value is out of range.
            OutputWriteError: If the output directory cannot be created.
            ConfigurationError: If PROJ rejects either CRS descriptor.
        """
        cfg = self.config
        if cfg.max_workers < 1:
            raise InputValidationError(f"max_workers must be >= 1, got {cfg.max_workers}")
        if cfg.progress_every < 1:
            raise InputValidationError(
                f"progress_every must be >= 1, got {cfg.progress_every}"
            )
        if cfg.on_domain_error not in ("skip", "abort"):
            raise InputValidationError(
                f"on_domain_error must be 'skip' or 'abort', got {cfg.on_domain_error!r}"
            )

        Validators.assert_directory_exists(self.input_path)
        Validators.assert_directory_writable(self.output_path)
        Validators.assert_crs_valid(cfg.source.to_proj_string())
        Validators.assert_crs_valid(cfg.target.to_proj_string())

        logger.debug("Inputs validated successfully.")

    def process(self) -> None:
        """Convert every configured layer and record a :class:`ConversionResult`."""
        transformer = CoordinateTransformer(self.config.source, self.config.target)

        for layer in self.config.layers:
            Validators.assert_directory_writable(self.output_path / layer.output_subdir)

        results = []
        for layer in self.config.layers:
            gml_path = self.input_path / layer.file_name
            if not gml_path.is_file():
                logger.warning("%s not found; skipping layer.", gml_path)
                results.append(LayerResult(layer=layer, found=False))
                continue
            logger.info("Processing %s...", layer.file_name)
            results.append(self._convert_layer(gml_path, layer, transformer))

        self._result = ConversionResult(output_path=self.output_path, layers=tuple(results))
        logger.info(self._result.summary())

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _convert_layer(
        self,
        gml_path: Path,
        layer: LayerSpec,
        transformer: CoordinateTransformer,
    ) -> LayerResult:
        """Stream one GML file through the worker pool.

        At most ``4 * max_workers`` features are in flight at once, so the
        whole document is never held in memory.
        """
        out_dir = self.output_path / layer.output_subdir
        window = 4 * self.config.max_workers
        claimed: set[str] = set()
        pending: set[Future[int]] = set()
        written = skipped = without_id = vertices = 0

        def drain(return_when: str) -> None:
            nonlocal pending, written, skipped, vertices
            done, pending = wait(pending, return_when=return_when)
            for future in done:
                try:
                    vertices += future.result()
                except OutOfDomainError as exc:
                    if self.config.on_domain_error == "abort":
                        for other in pending:
                            other.cancel()
                        raise
                    logger.warning("Skipping feature in %s: %s", layer.file_name, exc.message)
                    skipped += 1
                    continue
                written += 1
                if written % self.config.progress_every == 0:
                    logger.info("  Processed %d features...", written)

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            for index, feature in enumerate(iter_features(gml_path)):
                if layer.id_field not in feature.properties:
                    logger.warning(
                        "Feature %d in %s has no %s attribute; not written.",
                        index, layer.file_name, layer.id_field,
                    )
                    without_id += 1
                    continue

                name = feature_filename(feature.properties, layer.id_field, index)
                if name in claimed:
                    logger.warning(
                        "Duplicate %s %r; writing feature %d as a separate file.",
                        layer.id_field, feature.properties[layer.id_field], index,
                    )
                    name = _unclaimed_name(name, index, claimed)
                claimed.add(name)

                pending.add(
                    pool.submit(self._convert_feature, feature, out_dir / name, transformer)
                )
                if len(pending) >= window:
                    drain(FIRST_COMPLETED)
            drain(ALL_COMPLETED)

        logger.info("  Total features processed: %d", written)
        return LayerResult(
            layer=layer,
            found=True,
            features_written=written,
            features_skipped=skipped,
            features_without_id=without_id,
            vertices_written=vertices,
        )

    @staticmethod
    def _convert_feature(
        feature: GmlFeature,
        output_file: Path,
        transformer: CoordinateTransformer,
    ) -> int:
        """Transform and write one feature.  Returns the vertex count."""
        coordinates = transformer.transform_sequence(feature.vertices)
        if not coordinates:
            logger.debug("%s has no vertices.", output_file.name)
        write_feature(output_file, build_feature(feature.properties, coordinates))
        return len(coordinates)

    @property
    def result(self) -> ConversionResult | None:
        """The :class:`ConversionResult` from the last :meth:`run` call.

        Returns ``None`` if :meth:`run` has not been called yet.
        """
        return self._result
