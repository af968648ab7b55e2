"""
HK80 GeoJSON Converter — GeoJSON Writer
========================================
Serialises one converted feature per file as a GeoJSON ``Feature`` with a
``LineString`` geometry.  Coordinates are written ``[longitude, latitude]``
exactly as the transformer returns them.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from shared.python.exceptions import OutputWriteError

_UNSAFE_FILENAME_CHARS = re.compile(r"[\\/:*?\"<>|\x00-\x1f]")


def build_feature(
    properties: Mapping[str, Any],
    coordinates: Sequence[tuple[float, float]],
) -> dict[str, Any]:
    """Assemble a GeoJSON ``Feature`` dictionary.

    Args:
        properties: Attribute values to copy into ``properties``.
        coordinates: Ordered ``(longitude, latitude)`` pairs.

    Returns:
        A JSON-serialisable ``Feature`` mapping.
    """
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [[lon, lat] for lon, lat in coordinates],
        },
        "properties": dict(properties),
    }


def feature_filename(properties: Mapping[str, Any], id_field: str, index: int) -> str:
    """Choose the output file name for a feature.

    Uses the value of *id_field* when it is a string or an integer, and
    ``object_<index>`` otherwise.  Characters that are not valid in a file
    name are replaced with ``_``.

    Example::

        feature_filename({"ROUTE_ID": "R/12"}, "ROUTE_ID", 0)   # 'R_12.json'
        feature_filename({}, "ROUTE_ID", 7)                     # 'object_7.json'
    """
    value = properties.get(id_field)
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
        stem = f"object_{index}"
    else:
        stem = _UNSAFE_FILENAME_CHARS.sub("_", str(value))
        if stem in (".", ".."):
            stem = f"object_{index}"
    return f"{stem}.json"


def write_feature(path: Path, feature: Mapping[str, Any]) -> None:
    """Write *feature* to *path* as indented UTF-8 JSON.

    Raises:
        OutputWriteError: If the file cannot be written.
    """
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(feature, fh, indent=2, ensure_ascii=False)
    except OSError as exc:
        raise OutputWriteError(str(path), str(exc)) from exc
