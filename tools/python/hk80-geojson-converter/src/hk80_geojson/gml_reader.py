"""
HK80 GeoJSON Converter — GML Feature Reader
============================================
Streams ``GenericCityObject`` features out of a (potentially very large)
CityGML-style document, yielding their typed attributes and raw HK80 Grid
vertex sequences.

Only local element names are matched, so any namespace prefix works::

    <gen:GenericCityObject>
        <gen:stringAttribute name="ROUTE_ID"><gen:value>R1</gen:value></gen:stringAttribute>
        <gen:intAttribute name="LANES"><gen:value>2</gen:value></gen:intAttribute>
        ...
        <gml:posList srsDimension="2">836000 819000 836100 819050</gml:posList>
    </gen:GenericCityObject>

Typical usage::

    from src.hk80_geojson.gml_reader import iter_features

    for feature in iter_features(Path("input/CENTERLINE.gml")):
        print(feature.properties, len(feature.vertices))
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np

from shared.python.exceptions import GmlParseError
from shared.python.validators import Validators

logger = logging.getLogger("hk80geojson.gml_reader")

PropertyValue = Union[str, int, float]

FEATURE_TAG = "GenericCityObject"
POS_LIST_TAG = "posList"


@dataclass
class GmlFeature:
    """One feature read from a GML document.

    Attributes:
        properties: Attribute name → typed value.
        vertices: Ordered ``(easting, northing)`` pairs in document order.
    """

    properties: dict[str, PropertyValue] = field(default_factory=dict)
    vertices: list[tuple[float, float]] = field(default_factory=list)


def local_name(tag: str) -> str:
    """Strip any ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def parse_pos_list(text: str | None, dimension: int = 2) -> np.ndarray:
    """Parse a ``gml:posList`` body into an ``(N, 2)`` easting/northing array.

    Tokens that are not numbers are dropped.  A trailing incomplete tuple is
    ignored.  For ``dimension > 2`` only the first two ordinates are kept.

    Args:
        text: Whitespace-separated ordinates.
        dimension: Ordinates per position (``srsDimension``).

    Returns:
        A float64 array of shape ``(N, 2)``; ``(0, 2)`` for empty input.
    """
    tokens = (text or "").split()
    try:
        values = np.asarray(tokens, dtype=np.float64)
    except ValueError:
        values = np.asarray([t for t in tokens if _is_number(t)], dtype=np.float64)
        logger.debug("Dropped %d non-numeric posList token(s).", len(tokens) - values.size)

    dimension = max(dimension, 2)
    usable = values.size - values.size % dimension
    return values[:usable].reshape(-1, dimension)[:, :2]


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _attribute_value(kind: str, raw: str) -> PropertyValue | None:
    if kind == "stringAttribute":
        return raw
    try:
        return int(raw) if kind == "intAttribute" else float(raw)
    except ValueError:
        return None


def _srs_dimension(element: ET.Element, source: str) -> int:
    raw = element.get("srsDimension", "2")
    try:
        dimension = int(raw)
    except ValueError:
        raise GmlParseError(source, f"posList srsDimension {raw!r} is not an integer") from None
    if dimension < 2:
        raise GmlParseError(source, f"posList srsDimension must be >= 2, got {dimension}")
    return dimension


def parse_feature(element: ET.Element, source: str = "<element>") -> GmlFeature:
    """Extract properties and vertices from one ``GenericCityObject``.

    Raises:
        GmlParseError: If a ``posList`` carries an invalid ``srsDimension``.
            *source* names the document in the message.
    """
    feature = GmlFeature()
    arrays: list[np.ndarray] = []

    for child in element.iter():
        tag = local_name(child.tag)
        if tag in ("stringAttribute", "intAttribute", "doubleAttribute"):
            name = child.get("name")
            if name is None:
                continue
            value = _attribute_value(tag, "".join(child.itertext()).strip())
            if value is not None:
                feature.properties[name] = value
        elif tag == POS_LIST_TAG:
            arrays.append(parse_pos_list(child.text, _srs_dimension(child, source)))

    if arrays:
        feature.vertices = [(e, n) for e, n in np.concatenate(arrays).tolist()]
    return feature


def iter_features(path: Path) -> Iterator[GmlFeature]:
    """Yield every ``GenericCityObject`` in *path*, in document order.

    The document is read incrementally.  After each feature the root's
    children are dropped, so neither the feature nor its member wrapper
    stays in memory.

    Raises:
        InputValidationError: If *path* is not an existing file.
        GmlParseError: If the document is not well-formed XML or a
            ``posList`` has an invalid ``srsDimension``.
    """
    path = Path(path)
    Validators.assert_file_exists(path)

    root: ET.Element | None = None
    try:
        for event, element in ET.iterparse(path, events=("start", "end")):
            if root is None:
                root = element
            if event != "end" or local_name(element.tag) != FEATURE_TAG:
                continue
            yield parse_feature(element, str(path))
            element.clear()
            root.clear()
    except ET.ParseError as exc:
        line, column = exc.position
        raise GmlParseError(str(path), f"{exc} (line {line}, column {column})") from exc
