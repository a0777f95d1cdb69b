from ..config import REGIONS_BUCKET, REGIONS_FILE
from ..models.region import Region
from .base import SourceLoader, SourceRow


class RegionsLoader(SourceLoader):
    """Loads regions.csv into the Regions bucket, keyed by region code."""

    kind = 'region'
    bucket_name = REGIONS_BUCKET
    file_name = REGIONS_FILE

    CODE = 1
    LOCAL_CODE = 2
    NAME = 3
    COUNTRY = 5  # column 4 is the continent

    max_column = COUNTRY

    def parse_row(self, row: SourceRow) -> Region:
        return Region(
            code=row.text(self.CODE),
            local_code=row.text(self.LOCAL_CODE),
            name=row.text(self.NAME),
            country=row.text(self.COUNTRY),
        )

    def key_for(self, record: Region) -> str:
        return record.code
