import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from .codec import decode, encode_flag, decode_flag
from .config import (
    AptDBConfig, AIRPORTS_BUCKET, RUNWAYS_BUCKET, COUNTRIES_BUCKET, REGIONS_BUCKET,
    META_BUCKET, POPULATED_KEY, ENTITY_BUCKETS,
)
from .exceptions import AptDBError, NotFoundError, BucketNotFoundError, UnpopulatedError
from .models.airport import Airport
from .models.runway import Runway
from .models.country import Country
from .models.region import Region
from .models.validation import ValidationResult
from .sources.airports import AirportsLoader
from .sources.runways import RunwaysLoader
from .sources.countries import CountriesLoader
from .sources.regions import RegionsLoader
from .storage.bucket_store import BucketStore, Transaction

logger = logging.getLogger(__name__)

T = TypeVar('T')


class AptDB:
    """
    Airport reference database.

    AptDB owns the bucket store and exposes the lifecycle operations (open,
    load, reload, populated, close) and typed lookups. Records are decoded
    from the store on every call; nothing is cached.

    Store layout:
        Airports/<code>                      -> Airport
        Runways/<airport code>/<le>/<he>     -> Runway
        Countries/<code>                     -> Country
        Regions/<code>                       -> Region
        Meta/IsPopulated                     -> bool

    Callers should check populated() before relying on lookups: a store that
    was never loaded, or whose last load failed, answers NotFoundError rather
    than stale or partial data for the entity kinds it is missing.

    Example:
        with AptDB.open('airports.db') as db:
            if not db.populated():
                db.load('data')
            print(db.get_airport('KSEA').name)
    """

    # Runways refer to airports, so airports are always loaded first
    LOADERS = [AirportsLoader, RunwaysLoader, CountriesLoader, RegionsLoader]

    def __init__(self, store: BucketStore, config: Optional[AptDBConfig] = None):
        self.store = store
        self.config = config or AptDBConfig()

    @classmethod
    def open(cls, database_path: Union[str, Path], config: Optional[AptDBConfig] = None) -> 'AptDB':
        """
        Open or create the database file.

        This does not check whether the database has been loaded.

        Args:
            database_path: Path to the store file
            config: Optional configuration

        Returns:
            An open AptDB

        Raises:
            TransactionError: If the store file cannot be opened or created
        """
        config = config or AptDBConfig()
        store = BucketStore.open(database_path, timeout=config.store_timeout)
        logger.info(f"Opened airport database {database_path}")
        return cls(store, config)

    def close(self) -> None:
        """Release the store. Lookups after close raise StoreClosedError."""
        self.store.close()

    def __enter__(self) -> 'AptDB':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Population guard

    def populated(self) -> bool:
        """
        Check whether a full load has completed.

        Returns:
            True only if Meta/IsPopulated exists and decodes to True. Any
            failure along the way (missing bucket or key, corrupt value,
            store error) gives False.
        """
        try:
            with self.store.view() as tx:
                meta = tx.bucket(META_BUCKET)
                if meta is None:
                    return False
                value = meta.get(POPULATED_KEY)
                if value is None:
                    return False
                return decode_flag(value)
        except AptDBError as e:
            logger.debug(f"Populated check failed: {e}")
            return False

    def ensure_populated(self) -> None:
        """
        Raises:
            UnpopulatedError: If populated() is False
        """
        if not self.populated():
            raise UnpopulatedError(f"database {self.store.database_path} has not been fully loaded")

    def _set_populated(self, value: bool) -> None:
        with self.store.update() as tx:
            meta = tx.create_bucket_if_not_exists(META_BUCKET)
            meta.put(POPULATED_KEY, encode_flag(value))

    # Loading

    def load(self, data_dir: Union[str, Path]) -> Dict[str, int]:
        """
        Load the four source files from data_dir.

        Airports, runways, countries and regions are loaded in that order,
        each in its own transaction, then the populated flag is set in a
        final transaction. The flag is cleared before the first loader runs,
        so it is never True while a load is in progress or after one failed.

        A failure stops the load and is raised as is. Entity kinds loaded
        before the failure stay in the store; the failing kind leaves nothing.

        Args:
            data_dir: Directory holding airports.csv, runways.csv,
                countries.csv and regions.csv

        Returns:
            Number of records loaded per entity kind

        Raises:
            SourceFileError, RowParseError, EncodeError, TransactionError
        """
        data_dir = Path(data_dir)
        logger.info(f"Loading airport database from {data_dir}")
        self._set_populated(False)

        counts = {}
        for loader_cls in self.LOADERS:
            loader = loader_cls(self.store, self.config.parse_mode)
            try:
                counts[loader.kind] = loader.load(data_dir / loader.file_name)
            except AptDBError as e:
                logger.error(f"Load failed at {loader.bucket_name}: {e}")
                raise

        self._set_populated(True)
        logger.info(f"Airport database populated: {counts}")
        return counts

    def reload(self, data_dir: Union[str, Path]) -> Dict[str, int]:
        """
        Delete all entity buckets and the Meta bucket, then load again.

        Missing buckets are fine, so reloading a fresh store works. Any other
        failure while deleting aborts before anything is loaded.

        Args:
            data_dir: Directory holding the source files

        Returns:
            Number of records loaded per entity kind
        """
        with self.store.update() as tx:
            for name in ENTITY_BUCKETS + [META_BUCKET]:
                try:
                    tx.delete_bucket(name)
                    logger.debug(f"Deleted bucket {name}")
                except BucketNotFoundError:
                    logger.debug(f"Bucket {name} not present")
        logger.info(f"Cleared airport database {self.store.database_path}")
        return self.load(data_dir)

    # Lookups

    def _get(self, bucket_name: str, code: str, record_cls: Type[T]) -> T:
        with self.store.view() as tx:
            bucket = tx.bucket(bucket_name)
            if bucket is None:
                raise NotFoundError(f"{bucket_name} bucket does not exist")
            value = bucket.get(code)
            if value is None:
                raise NotFoundError(f"{record_cls.__name__.lower()} {code} not found")
            return decode(value, record_cls)

    def get_airport(self, code: str) -> Airport:
        """
        Get an airport by code.

        Raises:
            NotFoundError: If the airport is not in the database
            DecodeError: If the stored record is corrupt
        """
        return self._get(AIRPORTS_BUCKET, code, Airport)

    def get_country(self, code: str) -> Country:
        """Get a country by ISO code. Raises NotFoundError or DecodeError."""
        return self._get(COUNTRIES_BUCKET, code, Country)

    def get_region(self, code: str) -> Region:
        """Get a region by code. Raises NotFoundError or DecodeError."""
        return self._get(REGIONS_BUCKET, code, Region)

    def get_runways(self, airport_code: str) -> List[Runway]:
        """
        Get all runways of an airport.

        Runways come back in byte order of their "<le_ident>/<he_ident>" key.

        Args:
            airport_code: Airport code the runways belong to

        Returns:
            The airport's runways; empty if its runway bucket exists but holds
            no entries

        Raises:
            NotFoundError: If no runway bucket exists for the airport (an
                unknown airport, or one without any runway rows)
            DecodeError: If a stored record is corrupt
        """
        with self.store.view() as tx:
            runways = tx.bucket(RUNWAYS_BUCKET)
            if runways is None:
                raise NotFoundError(f"{RUNWAYS_BUCKET} bucket does not exist")
            airport = runways.bucket(airport_code)
            if airport is None:
                raise NotFoundError(f"no runways for airport {airport_code}")
            return [decode(value, Runway) for _, value in airport.items()]

    # Maintenance

    @staticmethod
    def _codes(tx: Transaction, bucket_name: str) -> set:
        bucket = tx.bucket(bucket_name)
        if bucket is None:
            return set()
        return {key.decode('utf-8') for key in bucket.keys()}

    def validate_references(self) -> ValidationResult:
        """
        Check the advisory references between loaded records.

        Reports runways whose airport was not loaded, airports whose country
        or region was not loaded, and regions whose country was not loaded.
        Empty reference fields are not reported. The store is not modified.

        Returns:
            ValidationResult listing every dangling reference
        """
        result = ValidationResult()
        with self.store.view() as tx:
            airport_codes = self._codes(tx, AIRPORTS_BUCKET)
            country_codes = self._codes(tx, COUNTRIES_BUCKET)
            region_codes = self._codes(tx, REGIONS_BUCKET)

            airports = tx.bucket(AIRPORTS_BUCKET)
            if airports is not None:
                for _, value in airports.items():
                    airport = decode(value, Airport)
                    result.checked += 1
                    if airport.country and airport.country not in country_codes:
                        result.add_issue('airport', airport.code, 'country', airport.country)
                    if airport.region and airport.region not in region_codes:
                        result.add_issue('airport', airport.code, 'region', airport.region)

            regions = tx.bucket(REGIONS_BUCKET)
            if regions is not None:
                for _, value in regions.items():
                    region = decode(value, Region)
                    result.checked += 1
                    if region.country and region.country not in country_codes:
                        result.add_issue('region', region.code, 'country', region.country)

            runways = tx.bucket(RUNWAYS_BUCKET)
            if runways is not None:
                for name in runways.buckets():
                    airport_code = name.decode('utf-8')
                    for key, _ in runways.bucket(name).items():
                        result.checked += 1
                        if airport_code not in airport_codes:
                            result.add_issue('runway', f"{airport_code} {key.decode('utf-8')}",
                                             'airport', airport_code)

        if result.is_valid:
            logger.info(f"Reference check passed: {result}")
        else:
            logger.warning(f"Reference check found {len(result.issues)} dangling references")
        return result

    def get_database_info(self) -> Dict[str, Any]:
        """Get information about the database."""
        info = {
            'database_path': str(self.store.database_path),
            'populated': self.populated(),
            'buckets': {},
        }
        with self.store.view() as tx:
            for name in ENTITY_BUCKETS:
                bucket = tx.bucket(name)
                if bucket is None:
                    info['buckets'][name] = 0
                elif name == RUNWAYS_BUCKET:
                    info['buckets'][name] = bucket.total_entries()
                else:
                    info['buckets'][name] = len(bucket)
        return info

    def __repr__(self):
        return f"AptDB('{self.store.database_path}')"


def open_db(database_path: Union[str, Path], config: Optional[AptDBConfig] = None) -> AptDB:
    """Open or create an airport database. See AptDB.open()."""
    return AptDB.open(database_path, config)
