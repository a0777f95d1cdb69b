from ..config import COUNTRIES_BUCKET, COUNTRIES_FILE
from ..models.country import Country
from .base import SourceLoader, SourceRow


class CountriesLoader(SourceLoader):
    """Loads countries.csv into the Countries bucket, keyed by ISO code."""

    kind = 'country'
    bucket_name = COUNTRIES_BUCKET
    file_name = COUNTRIES_FILE

    CODE = 1
    NAME = 2

    max_column = NAME

    def parse_row(self, row: SourceRow) -> Country:
        return Country(code=row.text(self.CODE), name=row.text(self.NAME))

    def key_for(self, record: Country) -> str:
        return record.code
