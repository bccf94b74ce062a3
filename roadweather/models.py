from __future__ import annotations
from sqlalchemy import Column, String, Integer, Float, DateTime, CHAR, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

class StationData(Base):
    __tablename__ = "station_data"
    id = Column(CHAR(20), primary_key=True)  # site record id from the feed
    lat = Column(Float, nullable=True)
    lon = Column(Float, nullable=True)
    name = Column(String(30), nullable=True)
    road_number = Column(Integer, nullable=True)
    county_number = Column(Integer, nullable=True)

    readings = relationship("WeatherData", back_populates="station")

class WeatherData(Base):
    __tablename__ = "weather_data"
    id = Column(Integer, primary_key=True, autoincrement=True)
    station_id = Column(CHAR(20), ForeignKey("station_data.id"), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=True)
    road_temperature = Column(Float, nullable=True)
    air_temperature = Column(Float, nullable=True)
    air_humidity = Column(Float, nullable=True)
    wind_speed = Column(Float, nullable=True)
    wind_direction = Column(String(20), nullable=True)

    station = relationship("StationData", back_populates="readings")
