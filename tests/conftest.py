from pathlib import Path

import pytest

from roadweather.db import create_tables, make_engine, make_session_factory

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path}/t.db"


@pytest.fixture
def engine(db_url):
    engine = make_engine(db_url)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def Session(engine):
    return make_session_factory(engine)


@pytest.fixture
def stations_xml():
    return DATA_DIR / "stations.xml"


@pytest.fixture
def weather_xml():
    return DATA_DIR / "weather.xml"
