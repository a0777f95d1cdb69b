import re
import math
import logging
import warnings
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence, Union

import pandas as pd

from ..codec import encode, INT64_MIN, INT64_MAX
from ..config import ParseMode, SOURCE_ENCODING
from ..exceptions import SourceFileError, RowParseError
from ..storage.bucket_store import BucketStore, Bucket

logger = logging.getLogger(__name__)

INT_PATTERN = re.compile(r'^[+-]?\d+$', re.ASCII)
FLOAT_PATTERN = re.compile(r'^[+-]?((\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?|inf|infinity|nan)$', re.IGNORECASE | re.ASCII)

TRUE_VALUES = {'1', 'true', 'yes'}
FALSE_VALUES = {'0', 'false', 'no'}


def read_source(path: Union[str, Path], min_columns: int = 0) -> pd.DataFrame:
    """
    Read a delimited source file into a DataFrame of strings.

    The first line is the header and is never treated as data. Every data
    row must have exactly as many fields as the header.

    Args:
        path: Path to the CSV file
        min_columns: Number of columns the caller needs

    Returns:
        DataFrame with one string column per header field

    Raises:
        SourceFileError: If the file is missing, unreadable or empty
        RowParseError: If a row has the wrong number of fields, or the header
            is narrower than min_columns
    """
    path = Path(path)
    try:
        # pandas only warns, and drops the extra fields, when the first data
        # row is longer than the header
        with warnings.catch_warnings():
            warnings.simplefilter('error', pd.errors.ParserWarning)
            df = pd.read_csv(
                path,
                dtype=str,
                keep_default_na=False,
                index_col=False,
                encoding=SOURCE_ENCODING,
            )
    except FileNotFoundError as e:
        raise SourceFileError(f"source file not found: {path}", path=str(path)) from e
    except pd.errors.EmptyDataError as e:
        raise SourceFileError(f"source file is empty: {path}", path=str(path)) from e
    except (pd.errors.ParserError, pd.errors.ParserWarning) as e:
        raise RowParseError(f"malformed row: {e}", path=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceFileError(f"cannot read source file {path}: {e}", path=str(path)) from e

    if len(df.columns) < min_columns:
        raise RowParseError(
            f"header has {len(df.columns)} fields, at least {min_columns} required",
            line=1, path=str(path)
        )

    # Rows shorter than the header come back padded with NaN; empty fields stay ''
    short_rows = df.isna().any(axis=1)
    if short_rows.any():
        first = int(short_rows.to_numpy().argmax())
        raise RowParseError(
            f"expected {len(df.columns)} fields, got fewer",
            line=first + 2, path=str(path)
        )
    return df


class SourceRow:
    """
    One data row of a source file with typed field accessors.

    Numeric and boolean accessors follow the parse mode: in LENIENT mode an
    unparsable value becomes the zero value, in STRICT mode it raises
    RowParseError. Empty fields are the zero value in both modes.
    """

    def __init__(self, values: Sequence[Any], line: int, parse_mode: ParseMode = ParseMode.LENIENT):
        self.values = values
        self.line = line
        self.parse_mode = parse_mode

    def _invalid(self, index: int, value: str, expected: str, default: Any) -> Any:
        if self.parse_mode is ParseMode.STRICT:
            raise RowParseError(f"column {index}: '{value}' is not a valid {expected}", line=self.line)
        return default

    def text(self, index: int) -> str:
        return str(self.values[index])

    def integer(self, index: int) -> int:
        value = self.text(index)
        if value == '':
            return 0
        if INT_PATTERN.fullmatch(value):
            number = int(value)
            if INT64_MIN <= number <= INT64_MAX:
                return number
        return self._invalid(index, value, 'integer', 0)

    def real(self, index: int) -> float:
        value = self.text(index)
        if value == '':
            return 0.0
        if FLOAT_PATTERN.fullmatch(value):
            number = float(value)
            # out of range literals overflow to inf
            if not math.isinf(number) or 'inf' in value.lower():
                return number
        return self._invalid(index, value, 'number', 0.0)

    def flag(self, index: int) -> bool:
        value = self.text(index).strip().lower()
        if value in TRUE_VALUES:
            return True
        if value == '' or value in FALSE_VALUES:
            return False
        return self._invalid(index, self.text(index), 'boolean', False)


class SourceLoader(ABC):
    """
    Base class for the loaders that bulk-write one entity kind.

    A loader reads its whole source file inside a single write transaction:
    either every row is stored or, on the first failure, none is. Loading
    the same file twice overwrites each key with identical bytes.

    Subclasses define which bucket and file they handle, the highest column
    index they read, and how a row becomes a record.
    """

    kind: str = ''
    bucket_name: str = ''
    file_name: str = ''
    max_column: int = 0

    def __init__(self, store: BucketStore, parse_mode: ParseMode = ParseMode.LENIENT):
        """
        Args:
            store: Store to write into
            parse_mode: How numeric and boolean fields are parsed
        """
        self.store = store
        self.parse_mode = parse_mode

    @abstractmethod
    def parse_row(self, row: SourceRow) -> Any:
        """Build a record from one source row."""
        pass

    @abstractmethod
    def key_for(self, record: Any) -> str:
        """Key of a record inside its bucket."""
        pass

    def write(self, bucket: Bucket, record: Any) -> None:
        """Store one record in the entity bucket."""
        bucket.put(self.key_for(record), encode(record))

    def load(self, source_path: Union[str, Path]) -> int:
        """
        Load every row of a source file in one transaction.

        Args:
            source_path: Path to the source CSV file

        Returns:
            Number of records written

        Raises:
            SourceFileError: If the file is missing or unreadable
            RowParseError: If a row is malformed (nothing is written)
            EncodeError: If a record cannot be encoded (nothing is written)
            TransactionError: On store failures (nothing is written)
        """
        path = Path(source_path)
        frame = read_source(path, self.max_column + 1)
        logger.info(f"Loading {len(frame)} {self.kind} rows from {path}")

        count = 0
        try:
            with self.store.update() as tx:
                bucket = tx.create_bucket_if_not_exists(self.bucket_name)
                for index, values in enumerate(frame.itertuples(index=False, name=None)):
                    row = SourceRow(values, line=index + 2, parse_mode=self.parse_mode)
                    self.write(bucket, self.parse_row(row))
                    count += 1
        except RowParseError as e:
            if e.path is None:
                e.path = str(path)
            logger.error(f"Aborted {self.kind} load: {e}")
            raise

        logger.info(f"Committed {count} {self.kind} records to {self.bucket_name}")
        return count
