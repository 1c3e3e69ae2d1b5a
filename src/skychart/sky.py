"""Sky model: per-frame positions of stars, planets and the Moon for one observer."""

from datetime import datetime
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from .astro import EphemerisProvider, project_horizontal
from .clock import TimeSource
from .paths import MOON_BODY, PLANET_BODIES, SUN_BODY
from .types import (
    BodyKind,
    BodyPosition,
    CelestialPosition,
    ConstellationLines,
    ConstellationSegment,
    FrameModel,
    Observer,
    ScreenPoint,
    SkyPositions,
    StarRecord,
)


logger = logging.getLogger(__name__)


def _solar_system_body(
    ephemeris: EphemerisProvider,
    name: str,
    key: str,
    kind: BodyKind,
    instant: datetime,
    observer: Observer,
) -> Optional[BodyPosition]:
    try:
        ra_hours, dec_deg = ephemeris.equatorial(key, instant, observer)
        position = ephemeris.horizontal(ra_hours, dec_deg, instant, observer, of_date=True)
    except Exception:
        logger.warning("Error calculating %s position", name, exc_info=True)
        return None
    if position.alt < 0:
        return None
    return BodyPosition(name=name, kind=kind, position=position)


def compute_positions(
    catalog: Sequence[StarRecord],
    ephemeris: EphemerisProvider,
    instant: datetime,
    observer: Observer,
) -> SkyPositions:
    """Query the ephemeris for every body and keep those above the horizon.

    A failure for one body is logged and only that body is left out.
    """
    stars: List[BodyPosition] = []
    for star in catalog:
        try:
            position = ephemeris.horizontal(star.ra_hours, star.dec_deg, instant, observer)
        except Exception:
            logger.warning("Error calculating %s position", star.name, exc_info=True)
            continue
        if position.alt >= 0:
            stars.append(
                BodyPosition(
                    name=star.name,
                    kind="star",
                    position=position,
                    vmag=star.vmag,
                    constellation=star.constellation,
                )
            )

    planets: List[BodyPosition] = []
    for name, key in PLANET_BODIES.items():
        body = _solar_system_body(ephemeris, name, key, "planet", instant, observer)
        if body is not None:
            planets.append(body)

    moon = _solar_system_body(ephemeris, MOON_BODY[0], MOON_BODY[1], "moon", instant, observer)
    sun = _solar_system_body(ephemeris, SUN_BODY[0], SUN_BODY[1], "sun", instant, observer)

    return SkyPositions(
        instant=instant,
        observer=observer,
        stars=tuple(stars),
        planets=tuple(planets),
        moon=moon,
        sun=sun,
    )


def _project(body: Optional[BodyPosition], width: int, height: int) -> Optional[CelestialPosition]:
    if body is None:
        return None
    point = project_horizontal(body.position.alt, body.position.az, width, height)
    if point is None:
        return None
    return CelestialPosition(
        name=body.name,
        kind=body.kind,
        alt=body.position.alt,
        az=body.position.az,
        x=point.x,
        y=point.y,
        vmag=body.vmag,
        constellation=body.constellation,
    )


def build_constellation_segments(
    stars: Iterable[CelestialPosition],
    constellation_lines: Iterable[ConstellationLines],
) -> Tuple[ConstellationSegment, ...]:
    """Segments whose two endpoint stars are both in the given visible stars."""
    by_name: Dict[str, CelestialPosition] = {}
    for star in stars:
        by_name.setdefault(star.name, star)

    segments: List[ConstellationSegment] = []
    for constellation in constellation_lines:
        for star_a, star_b in constellation.lines:
            start = by_name.get(star_a)
            end = by_name.get(star_b)
            if start is None or end is None:
                continue
            segments.append(
                ConstellationSegment(
                    name=constellation.name,
                    start=ScreenPoint(start.x, start.y),
                    end=ScreenPoint(end.x, end.y),
                )
            )
    return tuple(segments)


def project_positions(
    positions: SkyPositions,
    constellation_lines: Iterable[ConstellationLines],
    width: int,
    height: int,
) -> FrameModel:
    stars = tuple(p for p in (_project(b, width, height) for b in positions.stars) if p is not None)
    planets = tuple(p for p in (_project(b, width, height) for b in positions.planets) if p is not None)
    return FrameModel(
        instant=positions.instant,
        width=width,
        height=height,
        stars=stars,
        planets=planets,
        moon=_project(positions.moon, width, height),
        sun=_project(positions.sun, width, height),
        constellation_segments=build_constellation_segments(stars, constellation_lines),
    )


def compute_frame(
    catalog: Sequence[StarRecord],
    constellation_lines: Iterable[ConstellationLines],
    ephemeris: EphemerisProvider,
    observer: Observer,
    instant: datetime,
    canvas_size: Tuple[int, int],
) -> FrameModel:
    """Compute one complete frame from scratch."""
    width, height = canvas_size
    positions = compute_positions(catalog, ephemeris, instant, observer)
    return project_positions(positions, constellation_lines, width, height)


def describe_visibility(alt: float) -> str:
    if alt > 30:
        return "Excellent visibility - high in the sky"
    elif alt > 10:
        return "Good visibility - may be affected by horizon haze"
    else:
        return "Low on horizon - may be difficult to observe"


def format_object_info(body: CelestialPosition) -> List[str]:
    """Text lines describing a selected body."""
    lines = [body.name, f"Type: {body.kind.capitalize()}"]
    if body.constellation:
        lines.append(f"Constellation: {body.constellation}")
    lines.append(f"Altitude: {body.alt:.1f}°")
    lines.append(f"Azimuth: {body.az:.1f}°")
    if body.vmag is not None:
        lines.append(f"Magnitude: {body.vmag:.2f}")
    lines.append(describe_visibility(body.alt))
    return lines


class SkyModel(QObject):
    """Owns the observer, canvas size, current frame and selection of one view.

    The model subscribes to its time source on construction and recomputes the
    frame on every tick; dispose() ends the subscription.
    """

    # Using Qt signal objects requires attribute creation at runtime; avoid type hints here
    frame_updated = pyqtSignal(object)
    selection_changed = pyqtSignal(object)

    def __init__(
        self,
        catalog: Sequence[StarRecord],
        constellation_lines: Sequence[ConstellationLines],
        ephemeris: EphemerisProvider,
        time_source: TimeSource,
        observer: Observer,
        canvas_size: Tuple[int, int] = (600, 600),
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.catalog = list(catalog)
        self.constellation_lines = list(constellation_lines)
        self.ephemeris = ephemeris
        self.time_source = time_source
        self.observer = observer
        self.canvas_size = canvas_size
        self.selection: Optional[CelestialPosition] = None
        self.frame: Optional[FrameModel] = None
        self._positions: Optional[SkyPositions] = None

        self._unsubscribe = time_source.subscribe(self._on_tick)
        self.refresh()

    @property
    def disposed(self) -> bool:
        return self._unsubscribe is None

    def set_observer(self, observer: Observer) -> None:
        if observer == self.observer:
            return
        self.observer = observer
        self.refresh()

    def set_canvas_size(self, width: int, height: int) -> None:
        if (width, height) == self.canvas_size:
            return
        self.canvas_size = (width, height)
        if self._positions is None:
            self.refresh()
            return
        self._publish(project_positions(self._positions, self.constellation_lines, width, height))

    def refresh(self, instant: Optional[datetime] = None) -> FrameModel:
        if instant is None:
            instant = self.time_source.now()
        self._positions = compute_positions(self.catalog, self.ephemeris, instant, self.observer)
        width, height = self.canvas_size
        frame = project_positions(self._positions, self.constellation_lines, width, height)
        self._publish(frame)
        return frame

    def select(self, body: Optional[CelestialPosition]) -> None:
        if body == self.selection:
            return
        self.selection = body
        self.selection_changed.emit(body)

    def clear_selection(self) -> None:
        self.select(None)

    def dispose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_tick(self, instant: datetime) -> None:
        logger.debug("Updating sky data for %s", instant.isoformat())
        self.refresh(instant)

    def _publish(self, frame: FrameModel) -> None:
        self.frame = frame
        if self.selection is not None:
            current = self.selection
            match = next(
                (b for b in frame.bodies() if b.name == current.name and b.kind == current.kind),
                None,
            )
            self.select(match)
        self.frame_updated.emit(frame)
