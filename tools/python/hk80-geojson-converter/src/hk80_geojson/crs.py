"""
HK80 GeoJSON Converter — Coordinate Reference System Descriptors
=================================================================
Immutable descriptions of the ellipsoids, the Transverse Mercator grid and
the seven-parameter datum shift needed to move HK80 Grid coordinates onto
WGS84.

Classes:
    Ellipsoid            Reference ellipsoid (semi-major axis + flattening).
    TransverseMercator   Projection parameters of a TM grid.
    HelmertParameters    Position-vector similarity transform to WGS84.
    CRSDescriptor        A complete source or target reference system.

Constants:
    INTERNATIONAL_1924, WGS84_ELLIPSOID, HK80_TO_WGS84, HK80_GRID, WGS84

Every class validates itself on construction and raises
:class:`~shared.python.exceptions.ConfigurationError` for non-physical
values, so a bad descriptor stops the program before a single point is
transformed.

Usage::

    from src.hk80_geojson.crs import HK80_GRID, WGS84

    HK80_GRID.to_proj_string()
    # '+proj=tmerc +lat_0=22.312133333333332 +lon_0=114.17855555555556 ...'
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

from shared.python.exceptions import ConfigurationError

ARCSEC_TO_RAD = math.pi / (180.0 * 3600.0)


def _dms(degrees: int, minutes: int, seconds: float) -> float:
    return degrees + minutes / 60.0 + seconds / 3600.0


def _require_finite(owner: str, **values: float) -> None:
    for name, value in values.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ConfigurationError(
                f"{owner}: parameter '{name}' must be a finite number, got {value!r}"
            )


# ---------------------------------------------------------------------------
# Ellipsoid
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ellipsoid:
    """A reference ellipsoid.

    Attributes:
        name: Human-readable name, e.g. ``"International 1924"``.
        a: Semi-major axis in metres.
        inverse_flattening: ``1 / f``.
        proj_id: PROJ ``+ellps`` identifier, if PROJ knows this ellipsoid
                 by name.  Otherwise ``+a``/``+rf`` are emitted.
    """

    name: str
    a: float
    inverse_flattening: float
    proj_id: str | None = None

    def __post_init__(self) -> None:
        owner = f"Ellipsoid '{self.name}'"
        _require_finite(owner, a=self.a, inverse_flattening=self.inverse_flattening)
        if self.a <= 0:
            raise ConfigurationError(f"{owner}: semi-major axis must be positive")
        if self.inverse_flattening <= 1:
            raise ConfigurationError(f"{owner}: inverse flattening must be > 1")

    @property
    def f(self) -> float:
        """Flattening."""
        return 1.0 / self.inverse_flattening

    @property
    def b(self) -> float:
        """Semi-minor axis in metres."""
        return self.a * (1.0 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2.0 - self.f)

    @property
    def e(self) -> float:
        """First eccentricity."""
        return math.sqrt(self.e2)

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (1.0 - self.e2)

    @property
    def n(self) -> float:
        """Third flattening, ``(a - b) / (a + b)``."""
        return self.f / (2.0 - self.f)

    @cached_property
    def rectifying_radius(self) -> float:
        """Radius of the sphere with the ellipsoid's meridian length."""
        n2 = self.n ** 2
        return self.a / (1.0 + self.n) * (1.0 + n2 / 4.0 + n2 ** 2 / 64.0 + n2 ** 3 / 256.0)

    @cached_property
    def kruger_beta(self) -> tuple[float, ...]:
        """Coefficients β1…β6 of the inverse Krüger series."""
        n = self.n
        n2, n3, n4, n5, n6 = n ** 2, n ** 3, n ** 4, n ** 5, n ** 6
        return (
            n / 2 - 2 * n2 / 3 + 37 * n3 / 96 - n4 / 360
            - 81 * n5 / 512 + 96199 * n6 / 604800,
            n2 / 48 + n3 / 15 - 437 * n4 / 1440 + 46 * n5 / 105
            - 1118711 * n6 / 3870720,
            17 * n3 / 480 - 37 * n4 / 840 - 209 * n5 / 4480 + 5569 * n6 / 90720,
            4397 * n4 / 161280 - 11 * n5 / 504 - 830251 * n6 / 7257600,
            4583 * n5 / 161280 - 108847 * n6 / 3991680,
            20648693 * n6 / 638668800,
        )

    def meridian_arc(self, phi: float) -> float:
        """Distance along the meridian from the equator to latitude *phi*.

        Args:
            phi: Geodetic latitude in radians.

        Returns:
            Arc length in metres (Helmert's series in ``n``).
        """
        n = self.n
        n2, n3, n4 = n ** 2, n ** 3, n ** 4
        return self.a / (1.0 + n) * (
            (1.0 + n2 / 4.0 + n4 / 64.0) * phi
            - 1.5 * (n - n3 / 8.0) * math.sin(2.0 * phi)
            + 15.0 / 16.0 * (n2 - n4 / 4.0) * math.sin(4.0 * phi)
            - 35.0 / 48.0 * n3 * math.sin(6.0 * phi)
            + 315.0 / 512.0 * n4 * math.sin(8.0 * phi)
        )

    def prime_vertical_radius(self, phi: float) -> float:
        """Radius of curvature in the prime vertical at latitude *phi*."""
        return self.a / math.sqrt(1.0 - self.e2 * math.sin(phi) ** 2)

    def proj_terms(self) -> str:
        if self.proj_id:
            return f"+ellps={self.proj_id}"
        return f"+a={self.a!r} +rf={self.inverse_flattening!r}"


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransverseMercator:
    """Parameters of a Transverse Mercator grid.

    Attributes:
        lat_0: Latitude of natural origin, decimal degrees.
        lon_0: Central meridian, decimal degrees.
        k_0: Scale factor on the central meridian.
        x_0: False easting in metres.
        y_0: False northing in metres.
    """

    lat_0: float
    lon_0: float
    k_0: float
    x_0: float
    y_0: float

    def __post_init__(self) -> None:
        owner = "TransverseMercator"
        _require_finite(
            owner, lat_0=self.lat_0, lon_0=self.lon_0, k_0=self.k_0,
            x_0=self.x_0, y_0=self.y_0,
        )
        if not -90.0 <= self.lat_0 <= 90.0:
            raise ConfigurationError(f"{owner}: lat_0 must lie in [-90, 90]")
        if not -180.0 <= self.lon_0 <= 180.0:
            raise ConfigurationError(f"{owner}: lon_0 must lie in [-180, 180]")
        if self.k_0 <= 0:
            raise ConfigurationError(f"{owner}: scale factor must be positive")

    def proj_terms(self) -> str:
        return (
            f"+proj=tmerc +lat_0={self.lat_0!r} +lon_0={self.lon_0!r} "
            f"+k={self.k_0!r} +x_0={self.x_0!r} +y_0={self.y_0!r}"
        )


# ---------------------------------------------------------------------------
# Datum shift
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HelmertParameters:
    """Seven-parameter similarity transform into WGS84.

    Position-vector convention, i.e. the same sign convention as PROJ's
    ``+towgs84``.

    Attributes:
        tx, ty, tz: Translations in metres.
        rx, ry, rz: Rotations in arc-seconds.
        ds_ppm: Scale difference in parts per million.
    """

    tx: float
    ty: float
    tz: float
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0
    ds_ppm: float = 0.0

    def __post_init__(self) -> None:
        _require_finite(
            "HelmertParameters", tx=self.tx, ty=self.ty, tz=self.tz,
            rx=self.rx, ry=self.ry, rz=self.rz, ds_ppm=self.ds_ppm,
        )

    @property
    def rotations_rad(self) -> tuple[float, float, float]:
        return (
            self.rx * ARCSEC_TO_RAD,
            self.ry * ARCSEC_TO_RAD,
            self.rz * ARCSEC_TO_RAD,
        )

    @property
    def scale(self) -> float:
        """Multiplier ``1 + ds``."""
        return 1.0 + self.ds_ppm * 1e-6

    @property
    def is_identity(self) -> bool:
        return not any(
            (self.tx, self.ty, self.tz, self.rx, self.ry, self.rz, self.ds_ppm)
        )

    def proj_terms(self) -> str:
        values = (self.tx, self.ty, self.tz, self.rx, self.ry, self.rz, self.ds_ppm)
        return "+towgs84=" + ",".join(repr(v) for v in values)


# ---------------------------------------------------------------------------
# Reference system
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CRSDescriptor:
    """A complete coordinate reference system.

    Attributes:
        name: Human-readable name.
        epsg: EPSG code for reference; not used in any computation.
        ellipsoid: The datum's reference ellipsoid.
        projection: Grid parameters for a projected CRS, ``None`` for a
                    geographic (longitude/latitude) CRS.
        to_wgs84: Datum shift into WGS84.  ``None`` means the datum is
                  WGS84 itself.
    """

    name: str
    epsg: int
    ellipsoid: Ellipsoid
    projection: TransverseMercator | None = None
    to_wgs84: HelmertParameters | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.ellipsoid, Ellipsoid):
            raise ConfigurationError(f"CRS '{self.name}': ellipsoid is missing")
        if self.projection is not None and not isinstance(
            self.projection, TransverseMercator
        ):
            raise ConfigurationError(
                f"CRS '{self.name}': only Transverse Mercator grids are supported"
            )

    @property
    def is_projected(self) -> bool:
        return self.projection is not None

    @property
    def is_wgs84_datum(self) -> bool:
        return self.to_wgs84 is None or self.to_wgs84.is_identity

    @cached_property
    def origin_arc(self) -> float:
        """Scaled meridian arc from the equator to the grid's latitude of origin."""
        if self.projection is None:
            raise ConfigurationError(f"CRS '{self.name}' has no projection")
        return self.projection.k_0 * self.ellipsoid.meridian_arc(
            math.radians(self.projection.lat_0)
        )

    def to_proj_string(self) -> str:
        """Render this descriptor as a PROJ string.

        Returns:
            e.g. ``"+proj=longlat +datum=WGS84 +no_defs"``.
        """
        if self.projection is None and self.is_wgs84_datum and self.ellipsoid.proj_id == "WGS84":
            return "+proj=longlat +datum=WGS84 +no_defs"

        parts = [
            self.projection.proj_terms() if self.projection else "+proj=longlat",
            self.ellipsoid.proj_terms(),
            self.to_wgs84.proj_terms() if self.to_wgs84 else "+towgs84=0,0,0",
        ]
        if self.projection is not None:
            parts.append("+units=m")
        parts.append("+no_defs")
        return " ".join(parts)


# ---------------------------------------------------------------------------
# HK80 / WGS84 constants
# ---------------------------------------------------------------------------

INTERNATIONAL_1924 = Ellipsoid("International 1924", 6_378_388.0, 297.0, proj_id="intl")
WGS84_ELLIPSOID = Ellipsoid("WGS 84", 6_378_137.0, 298.257223563, proj_id="WGS84")

# Survey and Mapping Office, Lands Department, HKSAR.
HK80_TO_WGS84 = HelmertParameters(
    tx=-162.619,
    ty=-276.959,
    tz=-161.764,
    rx=0.067753,
    ry=-2.243649,
    rz=-1.158827,
    ds_ppm=-1.094246,
)

HK80_GRID = CRSDescriptor(
    name="Hong Kong 1980 Grid System",
    epsg=2326,
    ellipsoid=INTERNATIONAL_1924,
    projection=TransverseMercator(
        lat_0=_dms(22, 18, 43.68),
        lon_0=_dms(114, 10, 42.80),
        k_0=1.0,
        x_0=836_694.05,
        y_0=819_069.80,
    ),
    to_wgs84=HK80_TO_WGS84,
)

WGS84 = CRSDescriptor(name="WGS 84", epsg=4326, ellipsoid=WGS84_ELLIPSOID)
