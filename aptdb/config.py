"""
Configuration for the aptdb library.
"""

from dataclasses import dataclass
from enum import Enum

# Bucket layout
AIRPORTS_BUCKET = "Airports"
RUNWAYS_BUCKET = "Runways"
COUNTRIES_BUCKET = "Countries"
REGIONS_BUCKET = "Regions"
META_BUCKET = "Meta"
POPULATED_KEY = "IsPopulated"

ENTITY_BUCKETS = [AIRPORTS_BUCKET, RUNWAYS_BUCKET, COUNTRIES_BUCKET, REGIONS_BUCKET]

# Source files, in load order
AIRPORTS_FILE = "airports.csv"
RUNWAYS_FILE = "runways.csv"
COUNTRIES_FILE = "countries.csv"
REGIONS_FILE = "regions.csv"

DATA_FILES = [AIRPORTS_FILE, RUNWAYS_FILE, COUNTRIES_FILE, REGIONS_FILE]

# Downloads
DEFAULT_BASE_URL = "https://davidmegginson.github.io/ourairports-data"
DOWNLOAD_TIMEOUT = 60  # seconds per request
DOWNLOAD_CHUNK_SIZE = 64 * 1024
USER_AGENT = "aptdb/0.1 (airport reference database)"

# Store
STORE_TIMEOUT = 30.0  # seconds to wait for the sqlite write lock
SOURCE_ENCODING = "utf-8-sig"


class ParseMode(Enum):
    """How numeric and boolean source fields are parsed."""

    LENIENT = "lenient"  # unparsable values become zero/False
    STRICT = "strict"  # unparsable values fail the row


@dataclass
class AptDBConfig:
    """Options for an AptDB instance."""

    parse_mode: ParseMode = ParseMode.LENIENT
    store_timeout: float = STORE_TIMEOUT
