from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from dateutil import parser as dtparser
from sqlalchemy import DateTime, bindparam, text
from .records import Reading, Station

logger = logging.getLogger(__name__)

STATION_INSERT = """
    INSERT INTO station_data (id, lat, lon, name, road_number, county_number)
    VALUES (:id, :latitude, :longitude, :name, :road_number, :county_number)
"""

STATION_UPSERT = {
    "mysql": STATION_INSERT + """
    ON DUPLICATE KEY UPDATE
        lat = :latitude,
        lon = :longitude,
        name = :name,
        road_number = :road_number,
        county_number = :county_number
    """,
    # SQLite and PostgreSQL share the ON CONFLICT form
    "default": STATION_INSERT + """
    ON CONFLICT(id) DO UPDATE SET
        lat = excluded.lat,
        lon = excluded.lon,
        name = excluded.name,
        road_number = excluded.road_number,
        county_number = excluded.county_number
    """,
}

READING_INSERT = """
    INSERT INTO weather_data (station_id, timestamp, road_temperature, air_temperature,
                              air_humidity, wind_speed, wind_direction)
    VALUES (:station_id, :timestamp, :road_temperature, :air_temperature,
            :air_humidity, :wind_speed, :wind_direction)
"""

def _value(raw: str) -> Optional[str]:
    # empty feed fields become NULL rather than '' in numeric columns
    return raw if raw != "" else None

def parse_timestamp(raw: str) -> Optional[datetime]:
    """Parse a feed timestamp into a naive UTC datetime."""
    if not raw:
        return None
    try:
        dt = dtparser.isoparse(raw)
    except ValueError as exc:
        raise ValueError(f"Unparseable timestamp {raw!r}") from exc
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

def station_upsert_statement(dialect_name: str):
    return text(STATION_UPSERT.get(dialect_name, STATION_UPSERT["default"]))

def insert_station_data(Session, stations: Iterable[Station]) -> int:
    written = 0
    with Session() as session:
        stmt = station_upsert_statement(session.get_bind().dialect.name)
        for station in stations:
            session.execute(
                stmt,
                {
                    "id": station.id,
                    "latitude": _value(station.latitude),
                    "longitude": _value(station.longitude),
                    "name": _value(station.name),
                    "road_number": _value(station.road_number),
                    "county_number": _value(station.county_number),
                },
            )
            # each row is durable on its own; there is no batch transaction
            session.commit()
            written += 1
            logger.debug("Upserted station %s", station.id)
    logger.info("Upserted %d stations", written)
    return written

def insert_weather_data(Session, readings: Iterable[Reading]) -> int:
    written = 0
    stmt = text(READING_INSERT).bindparams(bindparam("timestamp", type_=DateTime))
    with Session() as session:
        for reading in readings:
            session.execute(
                stmt,
                {
                    "station_id": reading.station_id,
                    "timestamp": parse_timestamp(reading.timestamp),
                    "road_temperature": _value(reading.road_temperature),
                    "air_temperature": _value(reading.air_temperature),
                    "air_humidity": _value(reading.air_humidity),
                    "wind_speed": _value(reading.wind_speed),
                    "wind_direction": _value(reading.wind_direction),
                },
            )
            session.commit()
            written += 1
            logger.debug("Inserted reading for %s at %s", reading.station_id, reading.timestamp)
    logger.info("Inserted %d weather readings", written)
    return written
