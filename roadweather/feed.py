from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List, Optional
from lxml import etree
from .records import Reading, Station

logger = logging.getLogger(__name__)

# Tags are matched on their local name; the feed's namespace prefix is ignored.
STATION_TRIGGER = "measurementSiteRecord"
STATION_FIELDS = {
    "value": "name",
    "roadNumber": "road_number",
    "countyNumber": "county_number",
    "latitude": "latitude",
    "longitude": "longitude",
}
# The station feed emits each coordinate twice per site.
STATION_REPEATED = ("latitude", "longitude")

READING_TRIGGER = "measurementSiteReference"
READING_FIELDS = {
    "measurementTimeDefault": "timestamp",
    "windSpeed": "wind_speed",
    "directionCompass": "wind_direction",
    "airTemperature": "air_temperature",
    "roadSurfaceTemperature": "road_temperature",
    "humidity": "air_humidity",
}

class FeedError(ValueError):
    pass

class FeedSyntaxError(FeedError):
    def __init__(self, path, line: int, column: int, offset: int, reason: str):
        super().__init__(f"Malformed XML in {path} at line {line}, column {column} (byte {offset}): {reason}")
        self.path = path
        self.line = line
        self.column = column
        self.offset = offset
        self.reason = reason

class OrphanFieldError(FeedError):
    """A detail element appeared before any record was opened."""
    def __init__(self, tag: str, line: Optional[int]):
        super().__init__(f"<{tag}> at line {line} has no open record to attach to")
        self.tag = tag
        self.line = line

def byte_offset(path, line: int, column: int) -> int:
    """Translate a 1-based parser (line, column) into a byte offset in the file."""
    offset = 0
    with open(path, "rb") as fh:
        for lineno, raw in enumerate(fh, start=1):
            if lineno == line:
                return offset + min(max(column - 1, 0), len(raw))
            offset += len(raw)
    return offset

def _local_name(elem) -> str:
    return etree.QName(elem).localname

def _text(elem) -> str:
    return "".join(elem.itertext()).strip()

def _prune(elem):
    # drop everything already parsed before elem; those subtrees are complete
    node = elem
    while node is not None:
        parent = node.getparent()
        while parent is not None and node.getprevious() is not None:
            del parent[0]
        node = parent

def _extract(
    path,
    trigger: str,
    make_record: Callable[[str], object],
    fields: Dict[str, str],
    repeated: Iterable[str] = (),
) -> list:
    records: List[object] = []
    current: Optional[object] = None
    # flipped on the first sighting of a repeated tag, back off on the second
    seen_once = {tag: False for tag in repeated}

    with open(path, "rb") as fh:
        try:
            for event, elem in etree.iterparse(fh, events=("start", "end")):
                tag = _local_name(elem)
                if tag == trigger:
                    if event == "start":
                        _prune(elem)
                        current = make_record(elem.get("id", ""))
                        records.append(current)
                    else:
                        elem.clear()
                    continue
                if event != "end" or tag not in fields:
                    continue
                if current is None:
                    raise OrphanFieldError(tag, elem.sourceline)
                if tag in seen_once:
                    seen_once[tag] = not seen_once[tag]
                    if not seen_once[tag]:
                        continue
                setattr(current, fields[tag], _text(elem))
        except etree.XMLSyntaxError as exc:
            line, column = exc.position
            raise FeedSyntaxError(path, line, column, byte_offset(path, line, column), str(exc)) from exc

    logger.info("Extracted %d <%s> records from %s", len(records), trigger, path)
    return records

def read_stations(path) -> List[Station]:
    return _extract(
        path,
        STATION_TRIGGER,
        lambda site_id: Station(id=site_id),
        STATION_FIELDS,
        STATION_REPEATED,
    )

def read_readings(path) -> List[Reading]:
    return _extract(
        path,
        READING_TRIGGER,
        lambda site_id: Reading(station_id=site_id),
        READING_FIELDS,
    )
