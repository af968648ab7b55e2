"""Shared fixtures — input directories holding small HK80 GML layers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from gml_samples import city_object, gml_document


@pytest.fixture()
def write_gml() -> Callable[[Path, list[str]], Path]:
    """Return a helper that writes a GML document made of *objects* to *path*."""

    def _write(path: Path, objects: list[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(gml_document(objects), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def input_dir(tmp_path: Path, write_gml) -> Path:
    """An input directory with both layers: two centerlines and one zone."""
    directory = tmp_path / "input"
    write_gml(
        directory / "CENTERLINE.gml",
        [
            city_object(
                [("string", "ROUTE_ID", "R1"), ("int", "LANES", "2")],
                ["836000 819000 836100 819050 836200 819120"],
            ),
            city_object(
                [("string", "ROUTE_ID", "R2"), ("double", "LENGTH", "141.42")],
                ["835000 818000 835100 818100"],
            ),
        ],
    )
    write_gml(
        directory / "PEDESTRIAN_ZONE.gml",
        [
            city_object(
                [("int", "PED_ZONE_ID", "7"), ("string", "NAME", "Queen's Road")],
                ["833900 816200 833950 816230"],
            ),
        ],
    )
    return directory
