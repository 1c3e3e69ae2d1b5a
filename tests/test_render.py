"""Tests for the QPainter renderer."""

from unittest.mock import MagicMock

import pytest
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QImage, QPainter

from skychart.paths import DEFAULT_PLANET_COLOR, PLANET_COLORS
from skychart.render.draw import draw_sky, planet_color, star_sizes, visible_stars
from skychart.types import (
    CelestialPosition,
    ConstellationSegment,
    DisplayOptions,
    FrameModel,
    ScreenPoint,
)
from skychart.view import ViewTransform


def make_frame(instant, stars=(), planets=(), moon=None, sun=None, segments=()):
    return FrameModel(
        instant=instant,
        width=600,
        height=600,
        stars=tuple(stars),
        planets=tuple(planets),
        moon=moon,
        sun=sun,
        constellation_segments=tuple(segments),
    )


def star(name, x, y, vmag):
    return CelestialPosition(name, "star", 45.0, 0.0, x, y, vmag=vmag, constellation="Test")


def planet(name, x, y):
    return CelestialPosition(name, "planet", 45.0, 0.0, x, y)


def quiet_options(**kwargs):
    defaults = dict(show_constellations=False, show_labels=False, show_sun=False)
    defaults.update(kwargs)
    return DisplayOptions(**defaults)


def render_image(frame, view, options, selection=None):
    image = QImage(600, 600, QImage.Format_ARGB32)
    image.fill(Qt.GlobalColor.black)
    painter = QPainter(image)
    try:
        drawn = draw_sky(painter, 600, 600, frame, view, options, selection)
    finally:
        painter.end()
    return image, drawn


def pixel(image, x, y):
    return QColor(image.pixel(x, y))


def drawn_texts(painter):
    texts = []
    for call in painter.drawText.call_args_list:
        args = call[0]
        if args and isinstance(args[-1], str):
            texts.append(args[-1])
    return texts


class TestHelpers:
    def test_star_sizes(self):
        sizes = star_sizes([-1.46, 2.0, 6.0, None], 1.0)
        assert sizes[0] == pytest.approx(4.73)
        assert sizes[1] == pytest.approx(3.0)
        assert sizes[2] == pytest.approx(1.0)
        assert sizes[3] == pytest.approx(3.0)
        assert star_sizes([2.0], 2.0)[0] == pytest.approx(1.5)

    def test_planet_colors(self):
        assert planet_color("Mars") == PLANET_COLORS["Mars"]
        assert planet_color("Vulcan") == DEFAULT_PLANET_COLOR

    def test_visible_stars_respect_limit(self, instant):
        frame = make_frame(instant, stars=[star("a", 0, 0, 1.0), star("b", 0, 0, 5.0), star("c", 0, 0, 5.5)])
        assert [s.name for s in visible_stars(frame, 5.0)] == ["a", "b"]


class TestSurface:
    def test_missing_surface_is_noop(self, instant):
        assert draw_sky(None, 600, 600, make_frame(instant), ViewTransform(), DisplayOptions()) is False

    def test_inactive_painter_is_noop(self, instant):
        assert draw_sky(QPainter(), 600, 600, make_frame(instant), ViewTransform(), DisplayOptions()) is False

    def test_draws_without_frame(self):
        _, drawn = render_image(None, ViewTransform(), DisplayOptions())
        assert drawn is True


class TestPixels:
    def test_planet_drawn_at_projected_position(self, instant):
        frame = make_frame(instant, planets=[planet("Mars", 300, 300)])
        image, drawn = render_image(frame, ViewTransform(), quiet_options())
        assert drawn
        center = pixel(image, 300, 300)
        assert center.red() > 180
        assert center.red() > center.blue() + 80

    def test_background_is_dark(self, instant):
        image, _ = render_image(make_frame(instant), ViewTransform(), quiet_options())
        corner = pixel(image, 3, 590)
        assert max(corner.red(), corner.green(), corner.blue()) < 40
        center = pixel(image, 300, 300)
        assert center.blue() > center.red()

    def test_pan_moves_bodies_but_not_the_model(self, instant):
        mars = planet("Mars", 300, 300)
        frame = make_frame(instant, planets=[mars])
        view = ViewTransform()
        view.set_pan(50, 0)
        image, _ = render_image(frame, view, quiet_options())
        assert pixel(image, 350, 300).red() > 180
        assert pixel(image, 300, 300).red() < 60
        assert frame.planets[0].x == 300

    def test_zoom_scales_about_center(self, instant):
        frame = make_frame(instant, planets=[planet("Mars", 330, 300)])
        image, _ = render_image(frame, ViewTransform(2.0), quiet_options())
        assert pixel(image, 360, 300).red() > 180

    def test_moon_is_light_gray(self, instant):
        moon = CelestialPosition("Moon", "moon", 80.0, 0.0, 300, 250)
        image, _ = render_image(make_frame(instant, moon=moon), ViewTransform(), quiet_options())
        color = pixel(image, 300, 250)
        assert min(color.red(), color.green(), color.blue()) > 180


class TestDrawCalls:
    def _painter(self):
        painter = MagicMock()
        painter.isActive.return_value = True
        return painter

    def test_view_transform_wraps_body_drawing(self, instant):
        painter = self._painter()
        view = ViewTransform(2.0)
        view.set_pan(10, -20)
        draw_sky(painter, 600, 600, make_frame(instant), view, DisplayOptions())

        names = [c[0] for c in painter.method_calls if c[0] in ("save", "translate", "scale", "restore")]
        assert names == ["save", "translate", "scale", "translate", "restore"]
        painter.translate.assert_any_call(300.0, 300.0)
        painter.scale.assert_called_once_with(2.0, 2.0)
        painter.translate.assert_any_call(-290.0, -320.0)

    def test_star_labels_only_for_bright_stars(self, instant):
        painter = self._painter()
        frame = make_frame(instant, stars=[star("Sirius", 100, 100, -1.46), star("Polaris", 300, 200, 1.98)])
        draw_sky(painter, 600, 600, frame, ViewTransform(), DisplayOptions(show_sun=False))
        texts = drawn_texts(painter)
        assert "Sirius" in texts
        assert "Polaris" not in texts

    def test_labels_toggle(self, instant):
        painter = self._painter()
        frame = make_frame(
            instant,
            stars=[star("Sirius", 100, 100, -1.46)],
            planets=[planet("Venus", 200, 200)],
            moon=CelestialPosition("Moon", "moon", 40.0, 0.0, 250, 250),
        )
        draw_sky(painter, 600, 600, frame, ViewTransform(), DisplayOptions(show_labels=False))
        texts = drawn_texts(painter)
        assert not {"Sirius", "Venus", "Moon"} & set(texts)

        painter = self._painter()
        draw_sky(painter, 600, 600, frame, ViewTransform(), DisplayOptions(show_labels=True))
        assert {"Sirius", "Venus", "Moon"} <= set(drawn_texts(painter))

    def test_stars_above_magnitude_limit_are_skipped(self, instant):
        painter = self._painter()
        frame = make_frame(instant, stars=[star("Faint", 100, 100, 4.0)])
        draw_sky(painter, 600, 600, frame, ViewTransform(), quiet_options(magnitude_limit=3.0))
        assert painter.drawEllipse.call_count == 3  # horizon + two basic altitude circles

    def test_constellation_lines_toggle(self, instant):
        segment = ConstellationSegment("Test", ScreenPoint(10, 10), ScreenPoint(20, 20))
        frame = make_frame(instant, segments=[segment])

        painter = self._painter()
        draw_sky(painter, 600, 600, frame, ViewTransform(), quiet_options(show_constellations=True))
        with_lines = painter.drawLine.call_count

        painter = self._painter()
        draw_sky(painter, 600, 600, frame, ViewTransform(), quiet_options(show_constellations=False))
        assert with_lines - painter.drawLine.call_count == 1

    def test_alt_az_grid_labels_and_spokes(self, instant):
        painter = self._painter()
        draw_sky(painter, 600, 600, make_frame(instant), ViewTransform(), quiet_options(show_alt_az_grid=True))
        texts = drawn_texts(painter)
        for alt in (15, 30, 45, 60, 75):
            assert f"{alt}°" in texts
        assert painter.drawLine.call_count == 12
        assert painter.drawEllipse.call_count == 1 + 5

    def test_eq_grid_adds_dashed_circles(self, instant):
        painter = self._painter()
        draw_sky(painter, 600, 600, make_frame(instant), ViewTransform(), quiet_options(show_eq_grid=True))
        assert painter.drawEllipse.call_count == 1 + 2 + 5

    def test_cardinals_and_overlay(self, instant):
        painter = self._painter()
        draw_sky(painter, 600, 600, make_frame(instant), ViewTransform(1.5), quiet_options())
        texts = drawn_texts(painter)
        for label in ("N", "E", "S", "W"):
            assert label in texts
        assert "1.5x" in texts

    def test_selection_info_in_overlay(self, instant):
        painter = self._painter()
        vega = star("Vega", 300, 200, 0.03)
        draw_sky(painter, 600, 600, make_frame(instant, stars=[vega]), ViewTransform(), quiet_options(), vega)
        texts = drawn_texts(painter)
        assert "Constellation: Test" in texts
        assert "Excellent visibility - high in the sky" in texts
