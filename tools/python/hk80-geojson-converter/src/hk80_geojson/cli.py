"""
HK80 GeoJSON Converter — CLI Entry Point
=========================================
Command-line interface built with Click.  Installed as the ``hk80-geojson``
command via ``pyproject.toml``.

Usage:
    hk80-geojson --input-dir ./input --output-dir ./output --workers 8

Run ``hk80-geojson --help`` for a full list of options.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from shared.python.exceptions import HK80GeoJSONError

from src.hk80_geojson.converter import ConverterConfig, GmlToGeoJsonConverter


@click.command(
    name="hk80-geojson",
    help=(
        "Convert HK80 GML road centerlines and pedestrian zones into one "
        "WGS84 GeoJSON file per feature.\n\n"
        "Reads CENTERLINE.gml and PEDESTRIAN_ZONE.gml from INPUT_DIR and writes "
        "OUTPUT_DIR/centerlines/<ROUTE_ID>.json and "
        "OUTPUT_DIR/pedestrian_zones/<PED_ZONE_ID>.json."
    ),
)
@click.option(
    "--input-dir", "-i",
    "input_path",
    default="./input",
    show_default=True,
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    help="Directory containing the GML files.",
)
@click.option(
    "--output-dir", "-o",
    "output_path",
    default="./output",
    show_default=True,
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    help="Directory for the GeoJSON output. Created if absent.",
)
@click.option(
    "--workers", "-w",
    "max_workers",
    type=click.IntRange(min=1),
    default=4,
    show_default=True,
    help="Number of worker threads converting features in parallel.",
)
@click.option(
    "--on-domain-error",
    type=click.Choice(["skip", "abort"], case_sensitive=False),
    default="skip",
    show_default=True,
    help="What to do with a feature whose coordinates fall outside the "
         "HK80 grid's valid domain.",
)
@click.option(
    "--progress-every",
    type=click.IntRange(min=1),
    default=100,
    show_default=True,
    help="Log a progress line every N features.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug-level logging output.",
)
def main(
    input_path: Path,
    output_path: Path,
    max_workers: int,
    on_domain_error: str,
    progress_every: int,
    verbose: bool,
) -> None:
    """CLI entry point — wires Click options into GmlToGeoJsonConverter."""
    config = ConverterConfig(
        max_workers=max_workers,
        progress_every=progress_every,
        on_domain_error=on_domain_error.lower(),  # type: ignore[arg-type]
    )

    tool = GmlToGeoJsonConverter(
        input_path=input_path,
        output_path=output_path,
        config=config,
        verbose=verbose,
    )

    try:
        tool.run()
    except HK80GeoJSONError as exc:
        # User-facing errors: print a clean message, no stack trace
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    click.echo(f"Done! JSON files have been written to {output_path}/")


if __name__ == "__main__":
    main()
