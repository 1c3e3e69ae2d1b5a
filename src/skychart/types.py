from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

from .paths import MAGNITUDE_LIMIT_MAX, MAGNITUDE_LIMIT_MIN


BodyKind = Literal["star", "planet", "moon", "sun"]


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class Observer:
    """Geographic location of the observer."""

    latitude: float
    longitude: float
    elevation: float = 0.0

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class StarRecord:
    name: str
    ra_hours: float
    dec_deg: float
    vmag: float
    constellation: str


@dataclass(frozen=True)
class ConstellationLines:
    """Line definitions of one constellation, as pairs of star names."""

    name: str
    lines: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class HorizontalPosition:
    alt: float  # degrees above the horizon
    az: float  # degrees, 0 = North, clockwise


@dataclass(frozen=True)
class ScreenPoint:
    x: float
    y: float


@dataclass(frozen=True)
class ScreenGeometry:
    """Screen geometry for drawing."""

    center: Tuple[float, float]
    radius: float


@dataclass(frozen=True)
class BodyPosition:
    """Horizontal position of one body, before projection."""

    name: str
    kind: BodyKind
    position: HorizontalPosition
    vmag: Optional[float] = None
    constellation: Optional[str] = None


@dataclass(frozen=True)
class CelestialPosition:
    """A body as it appears in one frame."""

    name: str
    kind: BodyKind
    alt: float
    az: float
    x: float
    y: float
    vmag: Optional[float] = None
    constellation: Optional[str] = None


@dataclass(frozen=True)
class ConstellationSegment:
    name: str
    start: ScreenPoint
    end: ScreenPoint


@dataclass(frozen=True)
class SkyPositions:
    """Horizontal positions of everything above the horizon for one observer and instant."""

    instant: datetime
    observer: Observer
    stars: Tuple[BodyPosition, ...]
    planets: Tuple[BodyPosition, ...]
    moon: Optional[BodyPosition]
    sun: Optional[BodyPosition]


@dataclass(frozen=True)
class FrameModel:
    """Container for all calculated sky data for one frame."""

    instant: datetime
    width: int
    height: int
    stars: Tuple[CelestialPosition, ...]
    planets: Tuple[CelestialPosition, ...]
    moon: Optional[CelestialPosition]
    sun: Optional[CelestialPosition]
    constellation_segments: Tuple[ConstellationSegment, ...]

    def star_index(self) -> Dict[str, CelestialPosition]:
        return {s.name: s for s in self.stars}

    def bodies(self) -> List[CelestialPosition]:
        result = list(self.stars) + list(self.planets)
        if self.moon is not None:
            result.append(self.moon)
        return result


@dataclass
class DisplayOptions:
    """Display toggles supplied by the host."""

    show_constellations: bool = True
    show_labels: bool = True
    show_alt_az_grid: bool = False
    show_eq_grid: bool = False
    magnitude_limit: float = 5.0
    show_sun: bool = True

    def __post_init__(self):
        self.magnitude_limit = clamp(self.magnitude_limit, MAGNITUDE_LIMIT_MIN, MAGNITUDE_LIMIT_MAX)

    def set_magnitude_limit(self, value: float) -> float:
        self.magnitude_limit = clamp(value, MAGNITUDE_LIMIT_MIN, MAGNITUDE_LIMIT_MAX)
        return self.magnitude_limit
