"""
Data sources for the aptdb library.

This package contains the loaders that turn the OurAirports CSV files into
stored records, and the downloader that fetches those files.
"""

from .base import SourceLoader, SourceRow, read_source
from .airports import AirportsLoader
from .runways import RunwaysLoader
from .countries import CountriesLoader
from .regions import RegionsLoader
from .download import DataDownloader, download_data

__all__ = [
    'SourceLoader',
    'SourceRow',
    'read_source',
    'AirportsLoader',
    'RunwaysLoader',
    'CountriesLoader',
    'RegionsLoader',
    'DataDownloader',
    'download_data',
]
