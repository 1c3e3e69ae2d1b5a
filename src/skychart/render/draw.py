import math
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QBrush, QColor, QFont, QPainter, QPen, QRadialGradient

from ..paths import (
    ALT_BASIC_DEGREES,
    ALT_GRID_DEGREES,
    AZ_SPOKE_STEP_DEG,
    BACKGROUND_INNER,
    BACKGROUND_OUTER,
    CARDINALS,
    DEFAULT_PLANET_COLOR,
    EQ_GRID_COLOR,
    EQ_GRID_DECLINATIONS,
    GRID_COLOR,
    MOON_COLOR,
    MOON_GLOW_COLOR,
    PLANET_COLORS,
    SELECTION_COLOR,
    STAR_COLOR,
    SUN_COLOR,
    TEXT_COLOR,
    TEXT_FONT_FAMILY,
)
from ..astro import altitude_to_radius, get_screen_geometry
from ..sky import format_object_info
from ..types import CelestialPosition, ConstellationSegment, DisplayOptions, FrameModel, ScreenGeometry
from ..view import ViewTransform


def with_alpha(color: QColor, alpha: float) -> QColor:
    c = QColor(color)
    c.setAlphaF(alpha)
    return c


def make_font(size: float, bold: bool = False) -> QFont:
    font = QFont(TEXT_FONT_FAMILY)
    font.setStyleHint(QFont.Monospace)
    font.setPointSizeF(max(0.5, size))
    font.setBold(bold)
    return font


def planet_color(name: str) -> QColor:
    return PLANET_COLORS.get(name, DEFAULT_PLANET_COLOR)


def star_sizes(vmags: Sequence[Optional[float]], zoom: float) -> np.ndarray:
    """Point radius per star: brighter stars are larger, constant on screen under zoom."""
    mags = np.array([2.0 if v is None else v for v in vmags], dtype=np.float64)
    return np.maximum(1.0, 4.0 - mags * 0.5) / zoom


def visible_stars(frame: FrameModel, magnitude_limit: float) -> List[CelestialPosition]:
    return [s for s in frame.stars if (s.vmag if s.vmag is not None else 2.0) <= magnitude_limit]


def _draw_text_centered(painter: QPainter, x: float, y: float, text: str, zoom: float):
    w, h = 100 / zoom, 24 / zoom
    painter.drawText(QRectF(x - w / 2, y - h / 2, w, h), Qt.AlignmentFlag.AlignCenter, text)


def _draw_glow(painter: QPainter, x: float, y: float, radius: float, inner: QColor):
    gradient = QRadialGradient(QPointF(x, y), radius)
    gradient.setColorAt(0, inner)
    gradient.setColorAt(1, with_alpha(inner, 0.0))
    painter.fillRect(QRectF(x - radius, y - radius, radius * 2, radius * 2), QBrush(gradient))


def _draw_disk(painter: QPainter, x: float, y: float, radius: float, color: QColor):
    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(color)
    painter.drawEllipse(QPointF(x, y), radius, radius)


def draw_radial_background(painter: QPainter, rect: QRectF, geometry: ScreenGeometry, zoom: float):
    c = geometry.center
    g = QRadialGradient(QPointF(c[0], c[1]), max(1.0, geometry.radius * zoom))
    g.setColorAt(0, BACKGROUND_INNER)
    g.setColorAt(1, BACKGROUND_OUTER)
    painter.fillRect(rect, QBrush(g))


def apply_view_transform(painter: QPainter, geometry: ScreenGeometry, view: ViewTransform):
    """translate(center) -> scale(zoom) -> translate(-center + pan)."""
    cx, cy = geometry.center
    px, py = view.pan
    painter.translate(cx, cy)
    painter.scale(view.zoom, view.zoom)
    painter.translate(-cx + px, -cy + py)


def draw_horizon(painter: QPainter, geometry: ScreenGeometry, zoom: float):
    painter.setPen(QPen(GRID_COLOR, 2 / zoom))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(QPointF(*geometry.center), geometry.radius, geometry.radius)


def draw_alt_az_grid(painter: QPainter, geometry: ScreenGeometry, zoom: float, full: bool):
    """Labeled altitude circles and azimuth spokes, or just the 30/60 degree circles."""
    cx, cy = geometry.center
    painter.setBrush(Qt.BrushStyle.NoBrush)
    if not full:
        painter.setPen(QPen(with_alpha(GRID_COLOR, 0.2), 1 / zoom))
        for alt in ALT_BASIC_DEGREES:
            r = altitude_to_radius(alt, geometry.radius)
            painter.drawEllipse(QPointF(cx, cy), r, r)
        return

    line_pen = QPen(with_alpha(GRID_COLOR, 0.3), 1 / zoom)
    label_pen = QPen(with_alpha(GRID_COLOR, 0.5))
    painter.setFont(make_font(10 / zoom))
    for alt in ALT_GRID_DEGREES:
        r = altitude_to_radius(alt, geometry.radius)
        painter.setPen(line_pen)
        painter.drawEllipse(QPointF(cx, cy), r, r)
        painter.setPen(label_pen)
        _draw_text_centered(painter, cx, cy - r - 9 / zoom, f"{alt}°", zoom)

    painter.setPen(line_pen)
    for az in range(0, 360, AZ_SPOKE_STEP_DEG):
        rad = math.radians(az - 90)
        end = QPointF(cx + geometry.radius * math.cos(rad), cy + geometry.radius * math.sin(rad))
        painter.drawLine(QPointF(cx, cy), end)


def draw_eq_grid(painter: QPainter, geometry: ScreenGeometry, zoom: float):
    """Dashed declination bands.

    This is a schematic overlay, not a projection of the celestial equator
    for the observer's latitude.
    """
    pen = QPen(EQ_GRID_COLOR, 1 / zoom)
    pen.setDashPattern([3, 3])
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    for dec in EQ_GRID_DECLINATIONS:
        r = geometry.radius * (1 - (dec + 90) / 180) * 0.8
        if 0 < r < geometry.radius:
            painter.drawEllipse(QPointF(*geometry.center), r, r)


def draw_cardinal_labels(painter: QPainter, geometry: ScreenGeometry, zoom: float):
    cx, cy = geometry.center
    painter.setPen(GRID_COLOR)
    painter.setFont(make_font(14 / zoom, bold=True))
    r = geometry.radius + 12 / zoom
    for label, angle in CARDINALS.items():
        rad = math.radians(angle)
        _draw_text_centered(painter, cx + r * math.cos(rad), cy + r * math.sin(rad), label, zoom)


def draw_constellation_lines(painter: QPainter, segments: Sequence[ConstellationSegment], zoom: float):
    painter.setPen(QPen(with_alpha(GRID_COLOR, 0.3), 1 / zoom))
    for segment in segments:
        painter.drawLine(QPointF(segment.start.x, segment.start.y), QPointF(segment.end.x, segment.end.y))


def draw_stars(painter: QPainter, stars: Sequence[CelestialPosition], zoom: float, show_labels: bool):
    """Draw stars as glowing points; label only the brightest ones."""
    if not stars:
        return
    sizes = star_sizes([s.vmag for s in stars], zoom)
    glow = with_alpha(STAR_COLOR, 0.8)
    label_color = with_alpha(STAR_COLOR, 0.7)
    font = make_font(10 / zoom)
    for star, size in zip(stars, sizes):
        size = float(size)
        _draw_glow(painter, star.x, star.y, size * 3, glow)
        _draw_disk(painter, star.x, star.y, size, STAR_COLOR)

        vmag = star.vmag if star.vmag is not None else 2.0
        if show_labels and vmag < 1.5:
            painter.setPen(label_color)
            painter.setFont(font)
            painter.drawText(QPointF(star.x + size + 4 / zoom, star.y + 3 / zoom), star.name)


def draw_planets(painter: QPainter, planets: Sequence[CelestialPosition], zoom: float, show_labels: bool):
    font = make_font(11 / zoom, bold=True)
    for planet in planets:
        color = planet_color(planet.name)
        _draw_glow(painter, planet.x, planet.y, 12 / zoom, color)
        _draw_disk(painter, planet.x, planet.y, 5 / zoom, color)
        if show_labels:
            painter.setPen(color)
            painter.setFont(font)
            painter.drawText(QPointF(planet.x + 8 / zoom, planet.y + 4 / zoom), planet.name)


def draw_moon(painter: QPainter, moon: CelestialPosition, zoom: float, show_labels: bool):
    _draw_glow(painter, moon.x, moon.y, 20 / zoom, MOON_GLOW_COLOR)
    _draw_disk(painter, moon.x, moon.y, 8 / zoom, MOON_COLOR)
    if show_labels:
        painter.setPen(MOON_COLOR)
        painter.setFont(make_font(11 / zoom, bold=True))
        painter.drawText(QPointF(moon.x + 12 / zoom, moon.y + 4 / zoom), "Moon")


def draw_gauge_cross(painter: QPainter, color: QColor, center: QPointF, zoom: float):
    cross_outer_len, cross_inner_len = 15 / zoom, 4 / zoom
    x, y = center.x(), center.y()
    painter.setPen(QPen(color, 1 / zoom))
    painter.drawLine(QPointF(x - cross_outer_len, y), QPointF(x - cross_inner_len, y))
    painter.drawLine(QPointF(x + cross_inner_len, y), QPointF(x + cross_outer_len, y))
    painter.drawLine(QPointF(x, y - cross_outer_len), QPointF(x, y - cross_inner_len))
    painter.drawLine(QPointF(x, y + cross_inner_len), QPointF(x, y + cross_outer_len))


def draw_sun(painter: QPainter, sun: CelestialPosition, zoom: float, show_labels: bool):
    pos = QPointF(sun.x, sun.y)
    draw_gauge_cross(painter, SUN_COLOR, pos, zoom)
    if show_labels:
        painter.setFont(make_font(11 / zoom, bold=True))
        painter.drawText(QPointF(sun.x + 8 / zoom, sun.y - 8 / zoom), sun.name)


def draw_selection_marker(painter: QPainter, body: CelestialPosition, zoom: float):
    painter.setPen(QPen(SELECTION_COLOR, 2 / zoom))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(QPointF(body.x, body.y), 10 / zoom, 10 / zoom)


def format_time(instant: datetime) -> str:
    return instant.astimezone().strftime("%H:%M")


def draw_overlay_info(
    painter: QPainter,
    width: float,
    height: float,
    instant: Optional[datetime],
    zoom: float,
    selection: Optional[CelestialPosition],
):
    """Time, zoom factor and selected-object details, drawn in screen space."""
    painter.setPen(TEXT_COLOR)
    painter.setFont(make_font(12))
    if instant is not None:
        painter.drawText(QRectF(10, 10, 200, 20), Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, format_time(instant))

    painter.setPen(with_alpha(TEXT_COLOR, 0.6))
    painter.setFont(make_font(10))
    painter.drawText(QRectF(width - 110, 10, 100, 20), Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignTop, f"{zoom:.1f}x")

    if selection is not None:
        lines = format_object_info(selection)
        line_height = 16
        painter.setPen(TEXT_COLOR)
        y = height - 10 - line_height * len(lines)
        for i, line in enumerate(lines):
            painter.setFont(make_font(11, bold=(i == 0)))
            painter.drawText(QPointF(10, y + line_height * (i + 1)), line)


def draw_sky(
    painter: Optional[QPainter],
    width: float,
    height: float,
    frame: Optional[FrameModel],
    view: ViewTransform,
    options: DisplayOptions,
    selection: Optional[CelestialPosition] = None,
) -> bool:
    """Draw one frame. Returns False, drawing nothing, when there is no usable surface."""
    if painter is None or not painter.isActive():
        return False

    geometry = get_screen_geometry(width, height)
    zoom = view.zoom

    draw_radial_background(painter, QRectF(0, 0, width, height), geometry, zoom)

    painter.save()
    apply_view_transform(painter, geometry, view)
    draw_horizon(painter, geometry, zoom)
    draw_alt_az_grid(painter, geometry, zoom, options.show_alt_az_grid)
    if options.show_eq_grid:
        draw_eq_grid(painter, geometry, zoom)
    draw_cardinal_labels(painter, geometry, zoom)

    if frame is not None:
        if options.show_constellations:
            draw_constellation_lines(painter, frame.constellation_segments, zoom)
        draw_stars(painter, visible_stars(frame, options.magnitude_limit), zoom, options.show_labels)
        draw_planets(painter, frame.planets, zoom, options.show_labels)
        if frame.moon is not None:
            draw_moon(painter, frame.moon, zoom, options.show_labels)
        if options.show_sun and frame.sun is not None:
            draw_sun(painter, frame.sun, zoom, options.show_labels)
        if selection is not None:
            draw_selection_marker(painter, selection, zoom)
    painter.restore()

    draw_overlay_info(painter, width, height, frame.instant if frame is not None else None, zoom, selection)
    return True
