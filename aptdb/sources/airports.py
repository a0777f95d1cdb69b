from ..config import AIRPORTS_BUCKET, AIRPORTS_FILE
from ..models.airport import Airport
from .base import SourceLoader, SourceRow


class AirportsLoader(SourceLoader):
    """Loads airports.csv into the Airports bucket, keyed by airport code."""

    kind = 'airport'
    bucket_name = AIRPORTS_BUCKET
    file_name = AIRPORTS_FILE

    # OurAirports airports.csv columns
    CODE = 1
    NAME = 3
    LATITUDE = 4
    LONGITUDE = 5
    ELEVATION = 6
    CONTINENT = 7
    COUNTRY = 8
    REGION = 9
    CITY = 10
    IATA = 13

    max_column = IATA

    def parse_row(self, row: SourceRow) -> Airport:
        return Airport(
            code=row.text(self.CODE),
            name=row.text(self.NAME),
            latitude=row.real(self.LATITUDE),
            longitude=row.real(self.LONGITUDE),
            elevation=row.integer(self.ELEVATION),
            city=row.text(self.CITY),
            region=row.text(self.REGION),
            country=row.text(self.COUNTRY),
            continent=row.text(self.CONTINENT),
            iata=row.text(self.IATA),
        )

    def key_for(self, record: Airport) -> str:
        return record.code
