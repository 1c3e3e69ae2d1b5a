"""Tests for the horizontal projector and the ephemeris provider."""

from datetime import datetime, timezone
import math

import pytest

from skychart.astro import (
    SkyfieldEphemeris,
    altitude_to_radius,
    get_screen_geometry,
    project_horizontal,
)
from skychart.catalog import load_constellation_lines, load_star_catalog
from skychart.errors import UnknownBodyError
from skychart.paths import CONSTELLATION_LINES_FILE, STARS_CSV_FILE
from skychart.sky import compute_frame
from skychart.types import Observer
from skychart.view import selectable_bodies


class TestScreenGeometry:
    def test_radius_uses_smaller_side(self):
        geometry = get_screen_geometry(800, 600)
        assert geometry.center == (400, 300)
        assert geometry.radius == 280

    def test_altitude_to_radius_endpoints(self):
        assert altitude_to_radius(90, 280) == 0
        assert altitude_to_radius(0, 280) == 280
        assert altitude_to_radius(45, 280) == pytest.approx(140)


class TestProjectHorizontal:
    """Linear zenith-distance projection with North up."""

    @pytest.mark.parametrize("az", [0, 45, 123.4, 359.9])
    def test_zenith_maps_to_center(self, az):
        point = project_horizontal(90, az, 600, 400)
        assert point.x == pytest.approx(300)
        assert point.y == pytest.approx(200)

    @pytest.mark.parametrize("az", [0, 90, 200, 315])
    def test_horizon_lies_on_radius(self, az):
        point = project_horizontal(0, az, 600, 400)
        radius = min(600, 400) / 2 - 20
        assert math.hypot(point.x - 300, point.y - 200) == pytest.approx(radius)

    def test_below_horizon_is_absent(self):
        assert project_horizontal(-0.01, 180, 600, 600) is None
        assert project_horizontal(-45, 0, 600, 600) is None

    def test_north_is_up(self):
        point = project_horizontal(30, 0, 600, 600)
        assert point.x == pytest.approx(300)
        assert point.y < 300

    def test_east_is_right_and_south_is_down(self):
        east = project_horizontal(30, 90, 600, 600)
        south = project_horizontal(30, 180, 600, 600)
        west = project_horizontal(30, 270, 600, 600)
        assert east.x > 300 and east.y == pytest.approx(300)
        assert south.y > 300 and south.x == pytest.approx(300)
        assert west.x < 300

    def test_radius_is_linear_in_zenith_distance(self):
        point = project_horizontal(45, 90, 600, 600)
        assert point.x - 300 == pytest.approx(140)

    def test_is_stable(self):
        assert project_horizontal(12.5, 77.7, 640, 480) == project_horizontal(12.5, 77.7, 640, 480)


class TestObserver:
    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Observer(latitude=91, longitude=0)
        with pytest.raises(ValueError):
            Observer(latitude=0, longitude=-181)

    def test_elevation_defaults_to_zero(self):
        assert Observer(10, 20).elevation == 0.0


class TestSkyfieldEphemeris:
    def test_construction_does_not_load_kernel(self, tmp_path):
        provider = SkyfieldEphemeris(cache_dir=tmp_path)
        assert provider._planets is None
        assert not any(tmp_path.iterdir())

    def test_unknown_body_raises(self, tmp_path, observer):
        provider = SkyfieldEphemeris(cache_dir=tmp_path)
        with pytest.raises(UnknownBodyError, match="pluto"):
            provider.equatorial("pluto", datetime(2020, 1, 1, tzinfo=timezone.utc), observer)

    def test_polaris_altitude_matches_latitude(self, tmp_path):
        """From London, Polaris stays within about a degree of the latitude."""
        provider = SkyfieldEphemeris(cache_dir=tmp_path)
        london = Observer(latitude=51.5074, longitude=-0.1278)
        instant = datetime(2020, 6, 1, 22, 0, tzinfo=timezone.utc)
        position = provider.horizontal(2.530, 89.264, instant, london)
        assert position.alt == pytest.approx(51.5, abs=1.5)
        assert position.alt >= 0
        assert 0 <= position.az < 360

    def test_southern_star_below_horizon_from_london(self, tmp_path):
        provider = SkyfieldEphemeris(cache_dir=tmp_path)
        london = Observer(latitude=51.5074, longitude=-0.1278)
        instant = datetime(2020, 6, 1, 22, 0, tzinfo=timezone.utc)
        # Acrux never rises above the London horizon
        position = provider.horizontal(12.443, -63.099, instant, london)
        assert position.alt < 0


class TestBundledCatalogFrame:
    class StarsOnlyEphemeris(SkyfieldEphemeris):
        """Real astropy star transforms; solar system lookups fail without the kernel."""

        def equatorial(self, body, instant, observer):
            raise RuntimeError("no kernel in tests")

    def test_polaris_in_london_frame(self, tmp_path):
        catalog = load_star_catalog(STARS_CSV_FILE)
        lines = load_constellation_lines(CONSTELLATION_LINES_FILE)
        london = Observer(latitude=51.5074, longitude=-0.1278)
        instant = datetime(2020, 6, 1, 22, 0, tzinfo=timezone.utc)

        frame = compute_frame(catalog, lines, self.StarsOnlyEphemeris(cache_dir=tmp_path), london, instant, (800, 800))

        stars = frame.star_index()
        polaris = stars["Polaris"]
        assert polaris.alt == pytest.approx(51.5, abs=1.5)
        assert polaris.constellation == "Ursa Minor"
        assert polaris in selectable_bodies(frame, 6.0)
        assert "Acrux" not in stars
        assert all(star.alt >= 0 for star in frame.stars)
        assert frame.planets == () and frame.moon is None
