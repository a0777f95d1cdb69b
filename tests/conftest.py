import pytest
from pathlib import Path

from aptdb import AptDB

AIRPORTS_HEADER = (
    '"id","ident","type","name","latitude_deg","longitude_deg","elevation_ft","continent",'
    '"iso_country","iso_region","municipality","scheduled_service","gps_code","iata_code",'
    '"local_code","home_link","wikipedia_link","keywords"'
)
AIRPORTS_ROWS = [
    '3622,"KSEA","large_airport","Seattle Tacoma International Airport",47.449001,-122.308998,433,'
    '"NA","US","US-WA","Seattle","yes","KSEA","SEA","SEA","https://www.portseattle.org/sea-tac","",',
    '2513,"EBOS","medium_airport","Oostende-Brugge International Airport",51.1998,2.874673,13,'
    '"EU","BE","BE-VWV","Oostende","yes","EBOS","OST","","","","Ostend"',
]

RUNWAYS_HEADER = (
    '"id","airport_ref","airport_ident","length_ft","width_ft","surface","lighted","closed",'
    '"le_ident","le_latitude_deg","le_longitude_deg","le_elevation_ft","le_heading_degT",'
    '"le_displaced_threshold_ft","he_ident","he_latitude_deg","he_longitude_deg","he_elevation_ft",'
    '"he_heading_degT","he_displaced_threshold_ft"'
)
RUNWAYS_ROWS = [
    '240963,3622,"KSEA",11901,150,"CON",1,0,"16L",47.4638,-122.308,363,180,,"34R",47.4312,-122.308,347,360,',
    '240964,3622,"KSEA",9426,150,"CON",1,0,"16C",47.4638,-122.311,363,180,,"34C",47.4378,-122.311,353,360,970',
    '232451,2513,"EBOS",10499,148,"ASP",1,0,"08",51.1928,2.84416,14,81,,"26",51.2068,2.89893,11,261,',
]

COUNTRIES_HEADER = '"id","code","name","continent","wikipedia_link","keywords"'
COUNTRIES_ROWS = [
    '302755,"US","United States","NA","https://en.wikipedia.org/wiki/United_States","America"',
    '302608,"BE","Belgium","EU","https://en.wikipedia.org/wiki/Belgium",',
]

REGIONS_HEADER = '"id","code","local_code","name","continent","iso_country","wikipedia_link","keywords"'
REGIONS_ROWS = [
    '306123,"US-WA","WA","Washington","NA","US","https://en.wikipedia.org/wiki/Washington_(state)",',
    '303310,"BE-VWV","VWV","West Flanders","EU","BE","https://en.wikipedia.org/wiki/West_Flanders",',
]

SOURCES = {
    'airports.csv': (AIRPORTS_HEADER, AIRPORTS_ROWS),
    'runways.csv': (RUNWAYS_HEADER, RUNWAYS_ROWS),
    'countries.csv': (COUNTRIES_HEADER, COUNTRIES_ROWS),
    'regions.csv': (REGIONS_HEADER, REGIONS_ROWS),
}


@pytest.fixture
def write_csv():
    """Return a function writing a header and rows to a CSV file."""
    def _write(path: Path, header: str, rows) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text('\n'.join([header] + list(rows)) + '\n', encoding='utf-8')
        return path
    return _write


@pytest.fixture
def data_dir(tmp_path, write_csv) -> Path:
    """Return a directory holding the four sample source files."""
    directory = tmp_path / 'data'
    for name, (header, rows) in SOURCES.items():
        write_csv(directory / name, header, rows)
    return directory


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / 'airports.db'


@pytest.fixture
def db(db_path):
    """Create a fresh AptDB instance."""
    database = AptDB.open(db_path)
    yield database
    database.close()


@pytest.fixture
def snapshot():
    """Return a function dumping every (bucket path, key) -> value in a store."""
    def _walk(bucket, path, out):
        for key, value in bucket.items():
            out[path + (key,)] = value
        for name in bucket.buckets():
            _walk(bucket.bucket(name), path + (name,), out)

    def _snapshot(store) -> dict:
        out = {}
        with store.view() as tx:
            for name in tx.buckets():
                _walk(tx.bucket(name), (name,), out)
        return out
    return _snapshot


@pytest.fixture
def sources() -> dict:
    """Return the sample source files as name -> (header, rows)."""
    return {name: (header, list(rows)) for name, (header, rows) in SOURCES.items()}
