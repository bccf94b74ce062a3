from __future__ import annotations
from dataclasses import dataclass

# Field values are kept exactly as extracted from the feed; the writer
# coerces them when binding to the store.


@dataclass
class Station:
    id: str = ""
    name: str = ""
    road_number: str = ""
    county_number: str = ""
    latitude: str = ""
    longitude: str = ""


@dataclass
class Reading:
    station_id: str = ""
    timestamp: str = ""
    road_temperature: str = ""
    air_temperature: str = ""
    air_humidity: str = ""
    wind_speed: str = ""
    wind_direction: str = ""
