import math
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol, Tuple

from appdirs import user_cache_dir
import astropy.units as u
from astropy.coordinates import AltAz, EarthLocation, SkyCoord, TETE
from astropy.time import Time
from skyfield.api import Loader, wgs84

from .errors import UnknownBodyError
from .paths import (
    APP_AUTHOR,
    APP_ID,
    EPHEMERIS_FILE,
    HORIZON_INSET_PX,
    MOON_BODY,
    PLANET_BODIES,
    SUN_BODY,
)
from .types import HorizontalPosition, Observer, ScreenGeometry, ScreenPoint


SUPPORTED_BODIES = tuple(PLANET_BODIES.values()) + (MOON_BODY[1], SUN_BODY[1])


def get_screen_geometry(width: float, height: float) -> ScreenGeometry:
    """Canvas center and horizon radius, inset so labels and cardinal markers fit."""
    radius = min(width, height) / 2 - HORIZON_INSET_PX
    return ScreenGeometry(center=(width / 2, height / 2), radius=radius)


def altitude_to_radius(alt: float, radius: float) -> float:
    """Linear zenith-distance mapping: zenith -> 0, horizon -> radius."""
    return radius * (90 - alt) / 90


def project_horizontal(alt: float, az: float, width: float, height: float) -> Optional[ScreenPoint]:
    """Project horizontal coordinates to canvas pixels.

    Returns None for objects below the horizon. North is up and azimuth grows
    clockwise, so East lands at screen right.
    """
    if alt < 0:
        return None
    geometry = get_screen_geometry(width, height)
    r = altitude_to_radius(alt, geometry.radius)
    az_rad = (az - 90) * (math.pi / 180)
    cx, cy = geometry.center
    return ScreenPoint(cx + r * math.cos(az_rad), cy + r * math.sin(az_rad))


class EphemerisProvider(Protocol):
    """Source of apparent positions for solar system bodies and fixed stars."""

    def equatorial(self, body: str, instant: datetime, observer: Observer) -> Tuple[float, float]:
        """Apparent topocentric (RA hours, Dec degrees) of date for a body."""
        ...

    def horizontal(
        self,
        ra_hours: float,
        dec_deg: float,
        instant: datetime,
        observer: Observer,
        of_date: bool = False,
    ) -> HorizontalPosition:
        """Convert equatorial coordinates to altitude/azimuth.

        of_date selects apparent coordinates of date instead of catalog (ICRS) ones.
        """
        ...


# Skyfield ephemeris cache directory (separate from UI)
_cache_path = Path(user_cache_dir(appname=APP_ID, appauthor=APP_AUTHOR))


class SkyfieldEphemeris:
    """Ephemeris provider backed by skyfield (bodies) and astropy (frame conversion).

    The JPL kernel is loaded on first use, so constructing the provider never
    touches the network.
    """

    def __init__(self, cache_dir: Optional[Path] = None, ephemeris_file: str = EPHEMERIS_FILE):
        self.cache_dir = Path(cache_dir) if cache_dir is not None else _cache_path
        self.ephemeris_file = ephemeris_file
        self._timescale: Any = None
        self._planets: Any = None

    def _load(self) -> Any:
        if self._planets is None:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            loader = Loader(str(self.cache_dir))
            self._timescale = loader.timescale()
            self._planets = loader(self.ephemeris_file)
        return self._planets

    def equatorial(self, body: str, instant: datetime, observer: Observer) -> Tuple[float, float]:
        if body not in SUPPORTED_BODIES:
            raise UnknownBodyError(body, list(SUPPORTED_BODIES))
        planets = self._load()
        t = self._timescale.from_datetime(instant)
        site = planets["earth"] + wgs84.latlon(
            latitude_degrees=observer.latitude,
            longitude_degrees=observer.longitude,
            elevation_m=observer.elevation,
        )
        apparent = site.at(t).observe(planets[body]).apparent()
        ra, dec, _ = apparent.radec(epoch="date")
        return float(ra.hours), float(dec.degrees)

    def horizontal(
        self,
        ra_hours: float,
        dec_deg: float,
        instant: datetime,
        observer: Observer,
        of_date: bool = False,
    ) -> HorizontalPosition:
        time_obj = Time(instant)
        location = EarthLocation(
            lat=observer.latitude * u.deg,
            lon=observer.longitude * u.deg,
            height=observer.elevation * u.m,
        )
        if of_date:
            frame = TETE(obstime=time_obj, location=location)
            coord = SkyCoord(ra=(ra_hours * 15.0) * u.deg, dec=dec_deg * u.deg, frame=frame)
        else:
            coord = SkyCoord(ra=(ra_hours * 15.0) * u.deg, dec=dec_deg * u.deg, frame="icrs")
        altaz = coord.transform_to(AltAz(obstime=time_obj, location=location))
        return HorizontalPosition(alt=float(altaz.alt.deg), az=float(altaz.az.deg) % 360.0)
