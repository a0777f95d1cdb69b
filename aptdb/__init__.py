"""
Airport reference database.

This package loads the OurAirports airports, runways, countries and regions
files into an embedded transactional bucket store and answers exact-key
lookups from it.

The main public API includes:
- AptDB: Database façade (open, load, reload, populated, lookups)
- Airport, Runway, Country, Region: Record types returned by lookups
- download_data: Fetch the source files
- AptDBConfig, ParseMode: Configuration
"""

from .catalog import AptDB, open_db
from .config import AptDBConfig, ParseMode
from .models import Airport, Runway, Country, Region, ValidationResult
from .sources.download import download_data
from .exceptions import (
    AptDBError, SourceFileError, RowParseError, EncodeError, DecodeError,
    NotFoundError, TransactionError, BucketNotFoundError, StoreClosedError,
    DownloadError, UnpopulatedError,
)

__version__ = '0.1.0'
__all__ = [
    'AptDB',
    'open_db',
    'AptDBConfig',
    'ParseMode',
    'Airport',
    'Runway',
    'Country',
    'Region',
    'ValidationResult',
    'download_data',
    'AptDBError',
    'SourceFileError',
    'RowParseError',
    'EncodeError',
    'DecodeError',
    'NotFoundError',
    'TransactionError',
    'BucketNotFoundError',
    'StoreClosedError',
    'DownloadError',
    'UnpopulatedError',
]
