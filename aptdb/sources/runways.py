from ..config import RUNWAYS_BUCKET, RUNWAYS_FILE
from ..models.runway import Runway
from ..codec import encode
from ..storage.bucket_store import Bucket
from .base import SourceLoader, SourceRow


class RunwaysLoader(SourceLoader):
    """
    Loads runways.csv into the Runways bucket.

    Runways are grouped per airport: the Runways bucket holds one nested
    bucket per airport code, and each runway is stored in it under
    "<le_ident>/<he_ident>". Listing the runways of an airport is then a
    scan of a single nested bucket.
    """

    kind = 'runway'
    bucket_name = RUNWAYS_BUCKET
    file_name = RUNWAYS_FILE

    AIRPORT = 2
    LENGTH = 3
    WIDTH = 4
    SURFACE = 5
    LIGHTED = 6
    CLOSED = 7
    LE_FIRST = 8
    HE_FIRST = 14

    # Offsets of the per-end columns from LE_FIRST / HE_FIRST
    IDENT = 0
    LATITUDE = 1
    LONGITUDE = 2
    ELEVATION = 3
    HEADING = 4
    DISPLACED = 5

    max_column = HE_FIRST + DISPLACED

    def parse_row(self, row: SourceRow) -> Runway:
        le = self.LE_FIRST
        he = self.HE_FIRST
        return Runway(
            airport=row.text(self.AIRPORT),
            length=row.integer(self.LENGTH),
            width=row.integer(self.WIDTH),
            surface=row.text(self.SURFACE),
            lighted=row.flag(self.LIGHTED),
            closed=row.flag(self.CLOSED),
            le_ident=row.text(le + self.IDENT),
            le_latitude=row.real(le + self.LATITUDE),
            le_longitude=row.real(le + self.LONGITUDE),
            le_elevation=row.integer(le + self.ELEVATION),
            le_heading=row.integer(le + self.HEADING),
            le_displaced_threshold=row.integer(le + self.DISPLACED),
            he_ident=row.text(he + self.IDENT),
            he_latitude=row.real(he + self.LATITUDE),
            he_longitude=row.real(he + self.LONGITUDE),
            he_elevation=row.integer(he + self.ELEVATION),
            he_heading=row.integer(he + self.HEADING),
            he_displaced_threshold=row.integer(he + self.DISPLACED),
        )

    def key_for(self, record: Runway) -> str:
        return record.key

    def write(self, bucket: Bucket, record: Runway) -> None:
        airport_bucket = bucket.create_bucket_if_not_exists(record.airport)
        airport_bucket.put(self.key_for(record), encode(record))
