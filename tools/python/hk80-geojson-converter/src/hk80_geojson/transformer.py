"""
HK80 GeoJSON Converter — Coordinate Transformer
================================================
Converts HK80 Grid (easting, northing) pairs into WGS84 (longitude,
latitude) pairs in two composed steps:

1. Inverse Transverse Mercator on the source ellipsoid (Krüger series to
   sixth order in the third flattening, with a bounded Newton solve for
   the geodetic latitude).
2. Datum shift: geodetic → geocentric Cartesian on the source ellipsoid,
   seven-parameter Helmert transform, Cartesian → geodetic on the target
   ellipsoid.  Ellipsoidal height is taken as zero throughout because the
   source data is 2D.

Everything in this module is a pure function of its arguments.  Descriptors
are passed explicitly, so a single :class:`CoordinateTransformer` can be
shared by any number of worker threads.

Functions:
    inverse_transverse_mercator   Grid → geodetic on the grid's ellipsoid.
    geodetic_to_cartesian         Geodetic (h = 0) → geocentric XYZ.
    helmert_transform             Position-vector similarity transform.
    cartesian_to_geodetic         Geocentric XYZ → geodetic (Bowring).
    normalize_geodetic            Wrap longitude, reject bad latitude.
    transform_point               Full HK80 Grid → WGS84 pipeline for one point.
    transform_sequence            Order-preserving, all-or-nothing batch form.

Typical usage::

    from src.hk80_geojson.transformer import transform_point

    lon, lat = transform_point(833_800.0, 816_000.0)
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable

from shared.python.exceptions import ConfigurationError, OutOfDomainError

from src.hk80_geojson.crs import HK80_GRID, WGS84, CRSDescriptor, Ellipsoid, HelmertParameters

ProjectedPoint = tuple[float, float]
GeodeticPoint = tuple[float, float]

MAX_LATITUDE_ITERATIONS = 10
_LATITUDE_TOLERANCE = math.sqrt(sys.float_info.epsilon) / 10.0


# ---------------------------------------------------------------------------
# Step 1 — inverse Transverse Mercator
# ---------------------------------------------------------------------------


def _conformal_tan(tau: float, e: float) -> float:
    """tan(χ) for a geodetic latitude with tan(φ) = *tau*."""
    tau1 = math.hypot(1.0, tau)
    sig = math.sinh(e * math.atanh(e * tau / tau1))
    return math.hypot(1.0, sig) * tau - sig * tau1


def _geodetic_tan(taup: float, e: float) -> float | None:
    """Invert :func:`_conformal_tan` by Newton's method.

    Returns ``None`` if the iteration does not settle within
    :data:`MAX_LATITUDE_ITERATIONS` steps.
    """
    e2m = 1.0 - e * e
    tau = taup / e2m
    stol = _LATITUDE_TOLERANCE * max(1.0, abs(taup))
    for _ in range(MAX_LATITUDE_ITERATIONS):
        taupa = _conformal_tan(tau, e)
        dtau = (
            (taup - taupa) * (1.0 + e2m * tau * tau)
            / (e2m * math.hypot(1.0, tau) * math.hypot(1.0, taupa))
        )
        tau += dtau
        if not math.isfinite(tau):
            return None
        if abs(dtau) < stol:
            return tau
    return None


def inverse_transverse_mercator(
    easting: float, northing: float, crs: CRSDescriptor
) -> GeodeticPoint:
    """Convert grid coordinates to geodetic coordinates on *crs*'s ellipsoid.

    Args:
        easting: Grid easting in metres.
        northing: Grid northing in metres.
        crs: A projected descriptor.

    Returns:
        ``(longitude, latitude)`` in radians, longitude not yet wrapped.

    Raises:
        OutOfDomainError: For non-finite input, points beyond the pole of the
            conformal mapping, numeric overflow, or a latitude solve that
            does not converge.
    """
    tm = crs.projection
    if tm is None:
        raise ConfigurationError(f"CRS '{crs.name}' is not a projected system")
    if not (math.isfinite(easting) and math.isfinite(northing)):
        raise OutOfDomainError(easting, northing, "coordinates must be finite")

    ell = crs.ellipsoid
    scale = tm.k_0 * ell.rectifying_radius
    xi = (northing - tm.y_0 + crs.origin_arc) / scale
    eta = (easting - tm.x_0) / scale

    if abs(xi) >= math.pi / 2:
        raise OutOfDomainError(easting, northing, "northing lies beyond the pole")

    try:
        xi_p, eta_p = xi, eta
        for j, beta in enumerate(ell.kruger_beta, start=1):
            xi_p -= beta * math.sin(2 * j * xi) * math.cosh(2 * j * eta)
            eta_p -= beta * math.cos(2 * j * xi) * math.sinh(2 * j * eta)

        sinh_eta = math.sinh(eta_p)
        cos_xi = math.cos(xi_p)
        taup = math.sin(xi_p) / math.hypot(sinh_eta, cos_xi)
        dlam = math.atan2(sinh_eta, cos_xi)
    except OverflowError as exc:
        raise OutOfDomainError(easting, northing, "inverse projection overflowed") from exc

    if not math.isfinite(taup):
        raise OutOfDomainError(easting, northing, "point falls on a pole singularity")

    tau = _geodetic_tan(taup, ell.e)
    if tau is None:
        raise OutOfDomainError(easting, northing, "latitude did not converge")

    return math.radians(tm.lon_0) + dlam, math.atan(tau)


# ---------------------------------------------------------------------------
# Step 2 — datum shift
# ---------------------------------------------------------------------------


def geodetic_to_cartesian(
    lon: float, lat: float, ellipsoid: Ellipsoid, height: float = 0.0
) -> tuple[float, float, float]:
    """Geodetic radians → geocentric Cartesian metres."""
    nu = ellipsoid.prime_vertical_radius(lat)
    cos_lat = math.cos(lat)
    return (
        (nu + height) * cos_lat * math.cos(lon),
        (nu + height) * cos_lat * math.sin(lon),
        (nu * (1.0 - ellipsoid.e2) + height) * math.sin(lat),
    )


def helmert_transform(
    xyz: tuple[float, float, float], params: HelmertParameters
) -> tuple[float, float, float]:
    """Apply a small-angle position-vector similarity transform."""
    x, y, z = xyz
    rx, ry, rz = params.rotations_rad
    s = params.scale
    return (
        params.tx + s * (x - rz * y + ry * z),
        params.ty + s * (rz * x + y - rx * z),
        params.tz + s * (-ry * x + rx * y + z),
    )


def cartesian_to_geodetic(
    xyz: tuple[float, float, float], ellipsoid: Ellipsoid
) -> GeodeticPoint:
    """Geocentric Cartesian metres → geodetic ``(lon, lat)`` radians.

    Bowring's closed form, accurate well below a millimetre near the
    ellipsoid surface.
    """
    x, y, z = xyz
    a, b = ellipsoid.a, ellipsoid.b
    p = math.hypot(x, y)
    theta = math.atan2(z * a, p * b)
    lat = math.atan2(
        z + ellipsoid.ep2 * b * math.sin(theta) ** 3,
        p - ellipsoid.e2 * a * math.cos(theta) ** 3,
    )
    return math.atan2(y, x), lat


def normalize_geodetic(
    lon_deg: float, lat_deg: float, easting: float, northing: float
) -> GeodeticPoint:
    """Wrap longitude into [-180, 180] and reject latitudes outside [-90, 90].

    Raises:
        OutOfDomainError: If either value is NaN or the latitude is out of
            range.  Latitudes are never clamped.
    """
    if not (math.isfinite(lon_deg) and math.isfinite(lat_deg)):
        raise OutOfDomainError(easting, northing, "result is not a finite number")
    if not -90.0 <= lat_deg <= 90.0:
        raise OutOfDomainError(easting, northing, f"latitude {lat_deg!r} out of range")
    if not -180.0 <= lon_deg <= 180.0:
        lon_deg = math.remainder(lon_deg, 360.0)
    return lon_deg, lat_deg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _check_pair(source: CRSDescriptor, target: CRSDescriptor) -> None:
    if not source.is_projected:
        raise ConfigurationError(f"Source CRS '{source.name}' must be a projected grid")
    if target.is_projected:
        raise ConfigurationError(f"Target CRS '{target.name}' must be geographic")
    if not target.is_wgs84_datum:
        raise ConfigurationError(f"Target CRS '{target.name}' must use the WGS84 datum")


def transform_point(
    easting: float,
    northing: float,
    source: CRSDescriptor = HK80_GRID,
    target: CRSDescriptor = WGS84,
) -> GeodeticPoint:
    """Transform one grid point into ``(longitude, latitude)`` degrees.

    Args:
        easting: Source grid easting in metres.
        northing: Source grid northing in metres.
        source: Projected source descriptor.  Defaults to HK80 Grid.
        target: Geographic target descriptor.  Defaults to WGS84.

    Returns:
        ``(longitude, latitude)`` in decimal degrees, longitude first.

    Raises:
        OutOfDomainError: If the point cannot be transformed.
        ConfigurationError: If the descriptor pair is unsupported.
    """
    _check_pair(source, target)
    easting, northing = float(easting), float(northing)

    lon, lat = inverse_transverse_mercator(easting, northing, source)

    if not source.is_wgs84_datum or source.ellipsoid != target.ellipsoid:
        xyz = geodetic_to_cartesian(lon, lat, source.ellipsoid)
        if source.to_wgs84 is not None:
            xyz = helmert_transform(xyz, source.to_wgs84)
        lon, lat = cartesian_to_geodetic(xyz, target.ellipsoid)

    return normalize_geodetic(math.degrees(lon), math.degrees(lat), easting, northing)


def transform_sequence(
    points: Iterable[ProjectedPoint],
    source: CRSDescriptor = HK80_GRID,
    target: CRSDescriptor = WGS84,
) -> list[GeodeticPoint]:
    """Transform an ordered vertex sequence.

    Output element *i* is ``transform_point(*points[i])``.  The empty
    sequence maps to an empty list.

    Raises:
        OutOfDomainError: From the first point that fails; no partial
            result is returned.
    """
    return [transform_point(e, n, source, target) for e, n in points]


class CoordinateTransformer:
    """A source/target descriptor pair bound to the transform functions.

    Holds no mutable state, so one instance can be shared between threads.

    Args:
        source: Projected source descriptor.
        target: Geographic target descriptor.

    Raises:
        ConfigurationError: If the pair is not a projected grid → WGS84
            geographic combination.

    Example::

        transformer = CoordinateTransformer()
        transformer.transform_sequence([(833_800.0, 816_000.0)])
    """

    def __init__(
        self,
        source: CRSDescriptor = HK80_GRID,
        target: CRSDescriptor = WGS84,
    ) -> None:
        _check_pair(source, target)
        self.source: CRSDescriptor = source
        self.target: CRSDescriptor = target

    def transform_point(self, easting: float, northing: float) -> GeodeticPoint:
        return transform_point(easting, northing, self.source, self.target)

    def transform_sequence(self, points: Iterable[ProjectedPoint]) -> list[GeodeticPoint]:
        return transform_sequence(points, self.source, self.target)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"source={self.source.name!r}, target={self.target.name!r})"
        )
