# -*- coding: utf-8 -*-
import argparse
from datetime import timedelta
import logging
import sys
from typing import List, Optional

from PyQt5.QtWidgets import QApplication, QSplashScreen
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QPixmap

from .astro import SkyfieldEphemeris
from .catalog import load_constellation_lines, load_star_catalog
from .clock import SystemTimeSource
from .config import load_display_options, load_last_location, save_last_location
from .errors import CatalogError
from .paths import CONSTELLATION_LINES_FILE, STARS_CSV_FILE
from .types import Observer
from .ui.window import SkyWindow


DEFAULT_LOCATION = (51.5074, -0.1278)  # London


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses command-line arguments."""
    parser = argparse.ArgumentParser(description="Real-time interactive star chart")
    parser.add_argument("--lat", type=float, default=None, help="Observer latitude in degrees (default: same as the last run)")
    parser.add_argument("--lon", type=float, default=None, help="Observer longitude in degrees (default: same as the last run)")
    parser.add_argument("-H", "--hours", type=float, default=0, help="Number of hours to add to current time (default: 0)")
    parser.add_argument("-D", "--days", type=float, default=0, help="Number of days to add to current time (default: 0)")
    parser.add_argument(
        "-V", "--mag-limit",
        type=float,
        default=None,
        help="Show stars with magnitude <= this value, 1 to 6 (default: last used, or 5)",
    )
    parser.add_argument("-z", "--zoom", type=float, default=1.0, help="Initial zoom factor, 0.5 to 3 (default: 1)")
    parser.add_argument("--no-constellations", action="store_true", help="Hide constellation lines")
    parser.add_argument("--no-labels", action="store_true", help="Hide object labels")
    parser.add_argument("--alt-az-grid", action="store_true", help="Show the altitude/azimuth grid")
    parser.add_argument("--eq-grid", action="store_true", help="Show the simplified equatorial grid")
    parser.add_argument(
        "--coalesce-redraws",
        action="store_true",
        help="Batch redraws to the next paint event instead of repainting on every change",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def resolve_observer(args: argparse.Namespace) -> Observer:
    last = load_last_location()
    lat, lon = last if last is not None else DEFAULT_LOCATION
    if args.lat is not None:
        lat = args.lat
    if args.lon is not None:
        lon = args.lon
    return Observer(latitude=lat, longitude=lon)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the star chart viewer."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        observer = resolve_observer(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        star_catalog = load_star_catalog(STARS_CSV_FILE)
        constellation_lines = load_constellation_lines(CONSTELLATION_LINES_FILE)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {len(star_catalog)} stars, {len(constellation_lines)} constellations")
    print(f"Observer: {observer.latitude:.4f}, {observer.longitude:.4f}")

    options = load_display_options()
    if args.mag_limit is not None:
        options.set_magnitude_limit(args.mag_limit)
    if args.no_constellations:
        options.show_constellations = False
    if args.no_labels:
        options.show_labels = False
    if args.alt_az_grid:
        options.show_alt_az_grid = True
    if args.eq_grid:
        options.show_eq_grid = True

    app = QApplication(sys.argv[:1])

    # Show a splash screen while the ephemeris is loaded and the first frame is computed
    pixmap = QPixmap(400, 200)
    pixmap.fill(Qt.GlobalColor.black)
    splash = QSplashScreen(pixmap, Qt.WindowType.WindowStaysOnTopHint)
    splash.show()
    splash.showMessage("Calculating sky...", Qt.AlignmentFlag.AlignCenter, QColor(Qt.GlobalColor.white))
    app.processEvents()

    time_source = SystemTimeSource(offset=timedelta(days=args.days, hours=args.hours))
    main_win = SkyWindow(
        observer,
        star_catalog,
        constellation_lines,
        SkyfieldEphemeris(),
        time_source,
        options,
        zoom=args.zoom,
        coalesce_redraws=args.coalesce_redraws,
    )
    main_win.show()
    splash.finish(main_win)

    try:
        save_last_location(observer.latitude, observer.longitude)
    except OSError as e:
        logging.getLogger(__name__).warning("Could not save location: %s", e)

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
