"""
HK80 GeoJSON Converter
=======================
Converts HK80 Grid GML road centerlines and pedestrian zones into per-feature
WGS84 GeoJSON documents.

Public API::

    from src.hk80_geojson import CoordinateTransformer, GmlToGeoJsonConverter
    from src.hk80_geojson import transform_point, transform_sequence
"""

from src.hk80_geojson.converter import ConverterConfig, GmlToGeoJsonConverter
from src.hk80_geojson.crs import HK80_GRID, WGS84, CRSDescriptor
from src.hk80_geojson.transformer import (
    CoordinateTransformer,
    transform_point,
    transform_sequence,
)

__all__ = [
    "CoordinateTransformer",
    "ConverterConfig",
    "CRSDescriptor",
    "GmlToGeoJsonConverter",
    "HK80_GRID",
    "WGS84",
    "transform_point",
    "transform_sequence",
]
__version__ = "1.0.0"
