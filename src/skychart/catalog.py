import csv
import logging
from typing import Dict, List, Tuple

from .errors import CatalogError
from .types import ConstellationLines, StarRecord


logger = logging.getLogger(__name__)


def load_star_catalog(filename: str) -> List[StarRecord]:
    """Loads the star catalog from a CSV file.

    Each row contains: Name, RAh (hours), Dec (degrees), Vmag, Constellation.
    Rows that cannot be parsed are skipped. Order of the file is preserved.
    """
    result: List[StarRecord] = []
    try:
        csvfile = open(filename, newline="", encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read star catalog: {filename}") from e
    with csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            try:
                name = (row.get("Name") or "").strip()
                if not name:
                    continue
                result.append(
                    StarRecord(
                        name=name,
                        ra_hours=float(row["RAh"]),
                        dec_deg=float(row["Dec"]),
                        vmag=float(row["Vmag"]),
                        constellation=(row.get("Constellation") or "").strip(),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed star row: %r", row)
                continue
    return result


def load_constellation_lines(filename: str) -> List[ConstellationLines]:
    """Loads constellation line definitions from a CSV file.

    Rows are ``Constellation,StarA,StarB``; rows of the same constellation are
    grouped together, keeping first-seen order of constellations and lines.
    """
    grouped: Dict[str, List[Tuple[str, str]]] = {}
    try:
        csvfile = open(filename, newline="", encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read constellation lines: {filename}") from e
    with csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            name = (row.get("Constellation") or "").strip()
            star_a = (row.get("StarA") or "").strip()
            star_b = (row.get("StarB") or "").strip()
            if not (name and star_a and star_b):
                logger.debug("Skipping malformed constellation row: %r", row)
                continue
            grouped.setdefault(name, []).append((star_a, star_b))
    return [ConstellationLines(name=name, lines=tuple(lines)) for name, lines in grouped.items()]
