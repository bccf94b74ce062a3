from __future__ import annotations
import argparse
import logging
import os
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from roadweather.db import create_tables, get_opts, make_engine, make_session_factory
from roadweather.feed import read_readings, read_stations
from roadweather.writer import insert_station_data, insert_weather_data

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("ingest")

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Load road weather station feeds into the database.")
    ap.add_argument("--user", default="root", help="Database user")
    ap.add_argument("--password", default="", help="Password, or the name of an environment variable holding it")
    ap.add_argument("--host", default="localhost", help="Database host")
    ap.add_argument("--db-name", default="roadweather", help="Database name")
    ap.add_argument("--database", help="Full database URL (e.g., sqlite:///roadweather.db); overrides the options above")
    ap.add_argument("--verbose", action="store_true", help="Log every record written")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("create-tables", help="Create the station_data and weather_data tables")
    st = sub.add_parser("stations", help="Upsert station metadata from an XML feed")
    st.add_argument("xmlfile", help="Path to the station metadata feed")
    rd = sub.add_parser("readings", help="Append weather readings from an XML feed")
    rd.add_argument("xmlfile", help="Path to the weather data feed")
    return ap

def database_url(args, environ):
    if args.database:
        return args.database
    return get_opts(args.user, args.password, args.host, args.db_name, environ)

def run(args, environ) -> int:
    engine = make_engine(database_url(args, environ))
    try:
        if args.command == "create-tables":
            create_tables(engine)
            return 0
        Session = make_session_factory(engine)
        if args.command == "stations":
            stations = read_stations(args.xmlfile)
            return insert_station_data(Session, stations)
        readings = read_readings(args.xmlfile)
        return insert_weather_data(Session, readings)
    finally:
        engine.dispose()

def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    start = datetime.utcnow()
    try:
        total = run(args, os.environ)
    except (OSError, ValueError, SQLAlchemyError) as exc:
        log.error("%s failed: %s", args.command, exc)
        raise SystemExit(1) from exc
    end = datetime.utcnow()
    if args.command != "create-tables":
        log.info("Ingestion complete. Records processed: %d. Start: %s End: %s", total, start.isoformat(), end.isoformat())
    else:
        log.info("Tables created. Start: %s End: %s", start.isoformat(), end.isoformat())

if __name__ == "__main__":
    main()
