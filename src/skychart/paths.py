import os
import os.path
from PyQt5.QtGui import QColor


# Application identifiers
APP_ID = "skychart"
APP_AUTHOR = "skychart"


# Base directory of this package
_dir = os.path.dirname(os.path.abspath(__file__))

# Data file paths
STARS_CSV_FILE = os.path.join(_dir, "data", "bright_stars.csv")
CONSTELLATION_LINES_FILE = os.path.join(_dir, "data", "constellation_lines.csv")
EPHEMERIS_FILE = "de421.bsp"


# Projection
HORIZON_INSET_PX = 20


# View limits
ZOOM_MIN = 0.5
ZOOM_MAX = 3.0
ZOOM_WHEEL_STEP = 0.1
ZOOM_BUTTON_STEP = 0.2
PAN_LIMIT_PX = 200.0
MAGNITUDE_LIMIT_MIN = 1.0
MAGNITUDE_LIMIT_MAX = 6.0
MAGNITUDE_LIMIT_STEP = 0.5
TIME_OFFSET_LIMIT_HOURS = 12

# Hit testing
HIT_RADIUS_PX = 20.0
CLICK_SLOP_PX = 3.0

# Time source
TICK_INTERVAL_MS = 60 * 1000


# UI constants
TEXT_FONT_FAMILY = "Monospace"
BACKGROUND_INNER = QColor.fromHslF(222 / 360, 0.47, 0.08)
BACKGROUND_OUTER = QColor.fromHslF(222 / 360, 0.47, 0.04)

GRID_COLOR = QColor.fromHslF(217 / 360, 0.91, 0.60)
EQ_GRID_COLOR = QColor.fromHslF(45 / 360, 0.70, 0.50, 0.25)
STAR_COLOR = QColor.fromHslF(210 / 360, 0.40, 0.98)
MOON_COLOR = QColor.fromHslF(45 / 360, 0.15, 0.85)
MOON_GLOW_COLOR = QColor.fromHslF(45 / 360, 0.20, 0.90, 0.5)
SUN_COLOR = QColor(255, 210, 90)
SELECTION_COLOR = QColor(120, 200, 255)
TEXT_COLOR = QColor.fromHslF(210 / 360, 0.40, 0.98, 0.8)
DEFAULT_PLANET_COLOR = QColor.fromHslF(45 / 360, 0.70, 0.70)

PLANET_COLORS = {
    "Mercury": QColor.fromHslF(30 / 360, 0.40, 0.60),
    "Venus": QColor.fromHslF(45 / 360, 0.80, 0.70),
    "Mars": QColor.fromHslF(10 / 360, 0.70, 0.55),
    "Jupiter": QColor.fromHslF(35 / 360, 0.50, 0.65),
    "Saturn": QColor.fromHslF(45 / 360, 0.40, 0.60),
}


# Grids
ALT_GRID_DEGREES = (15, 30, 45, 60, 75)
ALT_BASIC_DEGREES = (30, 60)
AZ_SPOKE_STEP_DEG = 30
EQ_GRID_DECLINATIONS = (-60, -30, 0, 30, 60)


# Cardinal labels, as screen angles in degrees (0 = screen right)
CARDINALS = {
    "N": -90.0,
    "E": 0.0,
    "S": 90.0,
    "W": 180.0,
}


# Tracked solar system bodies: display name -> ephemeris key
PLANET_BODIES = {
    "Mercury": "mercury",
    "Venus": "venus",
    "Mars": "mars barycenter",
    "Jupiter": "jupiter barycenter",
    "Saturn": "saturn barycenter",
}
MOON_BODY = ("Moon", "moon")
SUN_BODY = ("Sun", "sun")
