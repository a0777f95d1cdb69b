import pytest

from aptdb.codec import decode
from aptdb.config import ParseMode
from aptdb.exceptions import SourceFileError, RowParseError
from aptdb.models import Airport, Runway, Country, Region
from aptdb.sources import (
    AirportsLoader, RunwaysLoader, CountriesLoader, RegionsLoader, SourceRow, read_source,
)
from aptdb.storage import BucketStore


@pytest.fixture
def store(tmp_path):
    store = BucketStore(tmp_path / 'loader.db')
    yield store
    store.close()


def stored(store, bucket_name, key, record_cls, airport=None):
    with store.view() as tx:
        bucket = tx.bucket(bucket_name)
        if airport is not None:
            bucket = bucket.bucket(airport)
        return decode(bucket.get(key), record_cls)


class TestAirportsLoader:

    def test_load(self, store, data_dir):
        count = AirportsLoader(store).load(data_dir / 'airports.csv')
        assert count == 2

        airport = stored(store, 'Airports', 'KSEA', Airport)
        assert airport == Airport(
            code='KSEA', name='Seattle Tacoma International Airport', latitude=47.449001,
            longitude=-122.308998, elevation=433, city='Seattle', region='US-WA', country='US',
            continent='NA', iata='SEA',
        )

    def test_na_is_a_continent_not_a_missing_value(self, store, data_dir):
        AirportsLoader(store).load(data_dir / 'airports.csv')
        assert stored(store, 'Airports', 'KSEA', Airport).continent == 'NA'

    def test_missing_file(self, store, tmp_path):
        with pytest.raises(SourceFileError):
            AirportsLoader(store).load(tmp_path / 'nope.csv')

    def test_empty_file(self, store, tmp_path):
        path = tmp_path / 'airports.csv'
        path.write_text('')
        with pytest.raises(SourceFileError):
            AirportsLoader(store).load(path)

    def test_header_only(self, store, tmp_path, write_csv, sources):
        header, _ = sources['airports.csv']
        path = write_csv(tmp_path / 'airports.csv', header, [])
        assert AirportsLoader(store).load(path) == 0
        with store.view() as tx:
            assert len(tx.bucket('Airports')) == 0

    def test_header_too_narrow(self, store, tmp_path, write_csv):
        path = write_csv(tmp_path / 'airports.csv', 'id,ident,type,name', ['1,KSEA,large_airport,Seattle'])
        with pytest.raises(RowParseError):
            AirportsLoader(store).load(path)


class TestRunwaysLoader:

    def test_nested_layout(self, store, data_dir):
        assert RunwaysLoader(store).load(data_dir / 'runways.csv') == 3

        with store.view() as tx:
            runways = tx.bucket('Runways')
            assert runways.buckets() == [b'EBOS', b'KSEA']
            assert runways.bucket('KSEA').keys() == [b'16C/34C', b'16L/34R']
            assert runways.bucket('EBOS').keys() == [b'08/26']

    def test_fields(self, store, data_dir):
        RunwaysLoader(store).load(data_dir / 'runways.csv')
        runway = stored(store, 'Runways', '16C/34C', Runway, airport='KSEA')
        assert runway == Runway(
            airport='KSEA', length=9426, width=150, surface='CON', lighted=True, closed=False,
            le_ident='16C', le_latitude=47.4638, le_longitude=-122.311, le_elevation=363,
            le_heading=180, le_displaced_threshold=0,
            he_ident='34C', he_latitude=47.4378, he_longitude=-122.311, he_elevation=353,
            he_heading=360, he_displaced_threshold=970,
        )

    def test_leading_zero_idents_kept(self, store, data_dir):
        RunwaysLoader(store).load(data_dir / 'runways.csv')
        runway = stored(store, 'Runways', '08/26', Runway, airport='EBOS')
        assert runway.le_ident == '08'


class TestCountriesAndRegions:

    def test_single_country(self, store, tmp_path, write_csv):
        path = write_csv(tmp_path / 'countries.csv', 'id,code,name', ['1,US,United States'])
        assert CountriesLoader(store).load(path) == 1
        assert stored(store, 'Countries', 'US', Country) == Country(code='US', name='United States')

    def test_regions(self, store, data_dir):
        assert RegionsLoader(store).load(data_dir / 'regions.csv') == 2
        assert stored(store, 'Regions', 'BE-VWV', Region) == Region(
            code='BE-VWV', local_code='VWV', name='West Flanders', country='BE'
        )


class TestParseModes:
    """Malformed numeric fields default to zero unless parsing is strict."""

    BAD_ELEVATION = (
        '1,"KBAD","small_airport","Bad Field",12.5,-45.25,abc,"NA","US","US-WA","Nowhere","no",'
        '"","","","","",'
    )

    def test_lenient_defaults_to_zero(self, store, tmp_path, write_csv, sources):
        header, _ = sources['airports.csv']
        path = write_csv(tmp_path / 'airports.csv', header, [self.BAD_ELEVATION])
        AirportsLoader(store, ParseMode.LENIENT).load(path)
        airport = stored(store, 'Airports', 'KBAD', Airport)
        assert airport.elevation == 0
        assert airport.latitude == 12.5

    def test_strict_rejects(self, store, tmp_path, write_csv, sources):
        header, rows = sources['airports.csv']
        path = write_csv(tmp_path / 'airports.csv', header, rows + [self.BAD_ELEVATION])
        with pytest.raises(RowParseError) as excinfo:
            AirportsLoader(store, ParseMode.STRICT).load(path)
        assert excinfo.value.line == 4
        # the rows before the bad one were rolled back
        with store.view() as tx:
            assert tx.bucket('Airports') is None

    def test_empty_numbers_are_zero_in_strict_mode(self, store, data_dir):
        RunwaysLoader(store, ParseMode.STRICT).load(data_dir / 'runways.csv')
        runway = stored(store, 'Runways', '16L/34R', Runway, airport='KSEA')
        assert runway.le_displaced_threshold == 0
        assert runway.he_displaced_threshold == 0

    @pytest.mark.parametrize('value, expected', [
        ('1', True), ('0', False), ('', False), ('true', True), ('No', False), ('maybe', False),
    ])
    def test_lenient_flags(self, value, expected):
        row = SourceRow([value], line=2)
        assert row.flag(0) is expected

    def test_strict_flag(self):
        with pytest.raises(RowParseError):
            SourceRow(['maybe'], line=2, parse_mode=ParseMode.STRICT).flag(0)

    @pytest.mark.parametrize('value, expected', [
        ('433', 433), ('-11', -11), ('+7', 7), ('', 0), ('163.3', 0), ('1e3', 0), ('x', 0),
        ('99999999999999999999', 0),
    ])
    def test_lenient_integers(self, value, expected):
        assert SourceRow([value], line=2).integer(0) == expected

    @pytest.mark.parametrize('value, expected', [
        ('47.449001', 47.449001), ('-122.3', -122.3), ('', 0.0), ('north', 0.0),
        ('1e3', 1000.0), ('.5', 0.5), ('1_000', 0.0), (' 12.5 ', 0.0), ('12.5\n', 0.0), ('1e400', 0.0),
    ])
    def test_lenient_reals(self, value, expected):
        assert SourceRow([value], line=2).real(0) == expected

    def test_strict_integer(self):
        with pytest.raises(RowParseError):
            SourceRow(['163.3'], line=2, parse_mode=ParseMode.STRICT).integer(0)

    @pytest.mark.parametrize('value', ['1_000', ' 12.5 ', '0x1p-2', '1e400'])
    def test_strict_real(self, value):
        with pytest.raises(RowParseError):
            SourceRow([value], line=2, parse_mode=ParseMode.STRICT).real(0)


class TestAtomicity:
    """A malformed row leaves nothing of that file in the store."""

    def test_short_row(self, store, tmp_path, write_csv, sources):
        header, rows = sources['airports.csv']
        rows.append('9,"KSHT","small_airport","Short Row"')
        path = write_csv(tmp_path / 'airports.csv', header, rows)
        with pytest.raises(RowParseError) as excinfo:
            AirportsLoader(store).load(path)
        assert excinfo.value.line == 4
        with store.view() as tx:
            assert tx.bucket('Airports') is None

    def test_long_row(self, store, tmp_path, write_csv, sources):
        header, rows = sources['runways.csv']
        rows[1] += ',extra,extra,extra'
        path = write_csv(tmp_path / 'runways.csv', header, rows)
        with pytest.raises(RowParseError):
            RunwaysLoader(store).load(path)
        with store.view() as tx:
            assert tx.bucket('Runways') is None

    @pytest.mark.parametrize('extra', [',EXTRA', ',EXTRA,MORE'])
    def test_long_first_row(self, store, tmp_path, write_csv, extra):
        path = write_csv(tmp_path / 'countries.csv', 'id,code,name', ['1,US,United States' + extra])
        with pytest.raises(RowParseError):
            CountriesLoader(store).load(path)
        with store.view() as tx:
            assert tx.bucket('Countries') is None

    @pytest.mark.parametrize('extra', [',EXTRA', ',EXTRA,MORE,FIELDS'])
    def test_long_first_row_of_longer_file(self, store, tmp_path, write_csv, sources, extra):
        header, rows = sources['airports.csv']
        rows[0] += extra
        path = write_csv(tmp_path / 'airports.csv', header, rows)
        with pytest.raises(RowParseError):
            AirportsLoader(store).load(path)
        with store.view() as tx:
            assert tx.bucket('Airports') is None

    def test_failed_reload_keeps_previous_data(self, store, data_dir, tmp_path, write_csv, sources):
        header, _ = sources['airports.csv']
        AirportsLoader(store).load(data_dir / 'airports.csv')
        path = write_csv(tmp_path / 'bad' / 'airports.csv', header,
                         ['9,"KSHT","small_airport","Short Row"'])
        with pytest.raises(RowParseError):
            AirportsLoader(store).load(path)
        assert stored(store, 'Airports', 'KSEA', Airport).code == 'KSEA'
        with store.view() as tx:
            assert tx.bucket('Airports').get('KSHT') is None


class TestIdempotence:

    @pytest.mark.parametrize('loader_cls', [AirportsLoader, RunwaysLoader, CountriesLoader, RegionsLoader])
    def test_load_twice(self, loader_cls, store, data_dir, snapshot):
        loader = loader_cls(store)
        loader.load(data_dir / loader.file_name)
        first = snapshot(store)
        loader.load(data_dir / loader.file_name)
        assert snapshot(store) == first
        assert len(first) > 0


class TestReadSource:

    def test_values_are_strings(self, data_dir):
        df = read_source(data_dir / 'runways.csv')
        assert len(df) == 3
        assert df.iloc[2, 8] == '08'
        assert df.iloc[0, 13] == ''
