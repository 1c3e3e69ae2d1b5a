"""Shared fixtures: offscreen Qt application, offline astropy, fake ephemeris."""

import os
from datetime import datetime, timezone

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from astropy.utils import iers
from PyQt5.QtWidgets import QApplication

from skychart.errors import UnknownBodyError
from skychart.paths import MOON_BODY, PLANET_BODIES, SUN_BODY
from skychart.types import HorizontalPosition, Observer, StarRecord

iers.conf.auto_download = False


class FakeEphemeris:
    """Deterministic provider where equatorial and horizontal frames coincide.

    A star's declination is its altitude and its right ascension (in hours,
    times 15) is its azimuth. Solar system bodies are configured directly as
    (alt, az); unconfigured bodies sit below the horizon.
    """

    def __init__(self, bodies=None, fail=()):
        self.bodies = dict(bodies or {})
        self.fail = set(fail)
        self.equatorial_calls = 0
        self.horizontal_calls = 0

    def equatorial(self, body, instant, observer):
        self.equatorial_calls += 1
        if body in self.fail:
            raise RuntimeError(f"no ephemeris for {body}")
        valid = tuple(PLANET_BODIES.values()) + (MOON_BODY[1], SUN_BODY[1])
        if body not in valid:
            raise UnknownBodyError(body, list(valid))
        alt, az = self.bodies.get(body, (-45.0, 0.0))
        return az / 15.0, alt

    def horizontal(self, ra_hours, dec_deg, instant, observer, of_date=False):
        self.horizontal_calls += 1
        return HorizontalPosition(alt=dec_deg, az=(ra_hours * 15.0) % 360.0)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def instant():
    return datetime(2024, 3, 1, 21, 30, tzinfo=timezone.utc)


@pytest.fixture
def observer():
    return Observer(latitude=51.5074, longitude=-0.1278)


@pytest.fixture
def catalog():
    return [
        StarRecord("Zenith", ra_hours=0.0, dec_deg=90.0, vmag=0.5, constellation="Test"),
        StarRecord("East", ra_hours=6.0, dec_deg=10.0, vmag=1.0, constellation="Test"),
        StarRecord("South", ra_hours=12.0, dec_deg=45.0, vmag=3.5, constellation="Test"),
        StarRecord("Below", ra_hours=18.0, dec_deg=-5.0, vmag=0.0, constellation="Test"),
    ]


@pytest.fixture
def all_bodies_up():
    """Every planet, the Moon and the Sun at distinct azimuths above the horizon."""
    keys = list(PLANET_BODIES.values()) + [MOON_BODY[1], SUN_BODY[1]]
    return {key: (20.0 + 5 * i, 40.0 * i) for i, key in enumerate(keys)}


@pytest.fixture
def make_ephemeris():
    return FakeEphemeris
