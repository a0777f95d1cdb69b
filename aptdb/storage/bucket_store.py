import sqlite3
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union
from contextlib import contextmanager

from ..config import STORE_TIMEOUT
from ..exceptions import TransactionError, BucketNotFoundError, StoreClosedError

logger = logging.getLogger(__name__)

Key = Union[str, bytes]

ROOT_BUCKET_ID = 0


def _to_bytes(key: Key) -> bytes:
    # Keys are always stored as BLOBs so sqlite orders them bytewise
    if isinstance(key, str):
        return key.encode('utf-8')
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"key must be str or bytes, got {type(key).__name__}")


class BucketStore:
    """
    Embedded transactional key-value store with nested buckets.

    A bucket is a named namespace holding key/value pairs and other buckets.
    The store is a single sqlite file with two tables, one for the bucket
    tree and one for the entries. Keys and values are raw bytes and are
    iterated in byte order.

    Transactions follow a single-writer, multiple-reader discipline:
    update() takes the sqlite write lock up front (BEGIN IMMEDIATE), and the
    file runs in WAL mode so view() transactions read a consistent snapshot
    without blocking the writer.

    Example:
        store = BucketStore('airports.db')
        with store.update() as tx:
            tx.create_bucket_if_not_exists('Countries').put('FR', b'...')
        with store.view() as tx:
            value = tx.bucket('Countries').get('FR')
    """

    def __init__(self, database_path: Union[str, Path], timeout: float = STORE_TIMEOUT):
        """
        Open or create the store.

        Args:
            database_path: Path to the store file
            timeout: Seconds to wait for the write lock held by another connection
        """
        self.database_path = Path(database_path)
        self.timeout = timeout
        self._closed = False
        self._ensure_database_exists()

    @classmethod
    def open(cls, database_path: Union[str, Path], timeout: float = STORE_TIMEOUT) -> 'BucketStore':
        return cls(database_path, timeout)

    def _ensure_database_exists(self):
        """Ensure the store file exists and has the bucket schema."""
        with self._get_connection() as conn:
            try:
                conn.execute('PRAGMA journal_mode=WAL')
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS buckets (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        parent_id INTEGER NOT NULL,
                        name BLOB NOT NULL,
                        UNIQUE(parent_id, name)
                    )
                ''')
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS entries (
                        bucket_id INTEGER NOT NULL,
                        key BLOB NOT NULL,
                        value BLOB NOT NULL,
                        PRIMARY KEY (bucket_id, key)
                    ) WITHOUT ROWID
                ''')
            except sqlite3.Error as e:
                raise TransactionError(f"cannot initialise store {self.database_path}: {e}") from e
        logger.debug(f"Opened bucket store {self.database_path}")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the store. Further transactions raise StoreClosedError."""
        if not self._closed:
            self._closed = True
            logger.debug(f"Closed bucket store {self.database_path}")

    @contextmanager
    def _get_connection(self):
        """Get a database connection with manual transaction control."""
        if self._closed:
            raise StoreClosedError(f"store {self.database_path} is closed")
        try:
            conn = sqlite3.connect(str(self.database_path), timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise TransactionError(f"cannot open store {self.database_path}: {e}") from e
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def view(self) -> Iterator['Transaction']:
        """
        Run a read-only transaction.

        Yields:
            A Transaction on which writes raise TransactionError
        """
        with self._transaction('BEGIN', writable=False) as tx:
            yield tx

    @contextmanager
    def update(self) -> Iterator['Transaction']:
        """
        Run a read-write transaction.

        The transaction commits when the block exits normally and rolls back
        if the block raises; the exception is re-raised.

        Yields:
            A writable Transaction
        """
        with self._transaction('BEGIN IMMEDIATE', writable=True) as tx:
            yield tx

    @contextmanager
    def _transaction(self, begin: str, writable: bool):
        with self._get_connection() as conn:
            try:
                conn.execute(begin)
            except sqlite3.Error as e:
                raise TransactionError(f"cannot begin transaction: {e}") from e
            tx = Transaction(conn, writable)
            try:
                yield tx
                conn.execute('COMMIT')
            except sqlite3.Error as e:
                self._rollback(conn)
                raise TransactionError(f"transaction failed: {e}") from e
            except BaseException:
                self._rollback(conn)
                raise
            finally:
                tx._done = True

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        try:
            conn.execute('ROLLBACK')
        except sqlite3.Error as e:
            # sqlite may already have rolled back on its own
            logger.debug(f"Rollback failed: {e}")

    def __repr__(self):
        return f"BucketStore('{self.database_path}')"


class Transaction:
    """
    A transaction on a BucketStore.

    Only top-level buckets live directly in a transaction; the root cannot
    hold key/value pairs.
    """

    def __init__(self, conn: sqlite3.Connection, writable: bool):
        self._conn = conn
        self.writable = writable
        self._done = False
        self._root = Bucket(self, ROOT_BUCKET_ID, b'')

    def _execute(self, sql: str, params: tuple = (), write: bool = False) -> sqlite3.Cursor:
        if self._done:
            raise TransactionError("transaction has already finished")
        if write and not self.writable:
            raise TransactionError("transaction is read-only")
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise TransactionError(str(e)) from e

    def _executemany(self, sql: str, params: List[tuple]) -> None:
        if self._done:
            raise TransactionError("transaction has already finished")
        if not self.writable:
            raise TransactionError("transaction is read-only")
        try:
            self._conn.executemany(sql, params)
        except sqlite3.Error as e:
            raise TransactionError(str(e)) from e

    def bucket(self, name: Key) -> Optional['Bucket']:
        """Get a top-level bucket, or None if it does not exist."""
        return self._root.bucket(name)

    def create_bucket(self, name: Key) -> 'Bucket':
        """Create a top-level bucket; fails if it already exists."""
        return self._root.create_bucket(name)

    def create_bucket_if_not_exists(self, name: Key) -> 'Bucket':
        """Get a top-level bucket, creating it if needed."""
        return self._root.create_bucket_if_not_exists(name)

    def delete_bucket(self, name: Key) -> None:
        """Delete a top-level bucket and everything under it."""
        self._root.delete_bucket(name)

    def buckets(self) -> List[bytes]:
        """Names of the top-level buckets, in byte order."""
        return self._root.buckets()


class Bucket:
    """A namespace of key/value pairs and nested buckets inside a transaction."""

    def __init__(self, tx: Transaction, bucket_id: int, name: bytes):
        self._tx = tx
        self._id = bucket_id
        self.name = name

    def _check_key(self, key: Key) -> bytes:
        key_bytes = _to_bytes(key)
        if not key_bytes:
            raise TransactionError("key required")
        return key_bytes

    def get(self, key: Key) -> Optional[bytes]:
        """Get the value stored under key, or None if absent."""
        row = self._tx._execute(
            'SELECT value FROM entries WHERE bucket_id = ? AND key = ?',
            (self._id, _to_bytes(key))
        ).fetchone()
        return bytes(row[0]) if row else None

    def put(self, key: Key, value: bytes) -> None:
        """Store value under key, replacing any existing value."""
        if self._id == ROOT_BUCKET_ID:
            raise TransactionError("cannot store values at the root")
        key_bytes = self._check_key(key)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"value must be bytes, got {type(value).__name__}")
        if self._child_id(key_bytes) is not None:
            raise TransactionError(f"incompatible value: '{key_bytes.decode('utf-8', 'replace')}' is a bucket")
        self._tx._execute(
            'INSERT OR REPLACE INTO entries (bucket_id, key, value) VALUES (?, ?, ?)',
            (self._id, key_bytes, bytes(value)),
            write=True
        )

    def delete(self, key: Key) -> None:
        """Delete key if present."""
        self._tx._execute(
            'DELETE FROM entries WHERE bucket_id = ? AND key = ?',
            (self._id, _to_bytes(key)),
            write=True
        )

    def items(self) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate over (key, value) pairs in byte order of the key."""
        rows = self._tx._execute(
            'SELECT key, value FROM entries WHERE bucket_id = ? ORDER BY key',
            (self._id,)
        ).fetchall()
        for key, value in rows:
            yield bytes(key), bytes(value)

    def keys(self) -> List[bytes]:
        return [key for key, _ in self.items()]

    def __len__(self) -> int:
        row = self._tx._execute('SELECT COUNT(*) FROM entries WHERE bucket_id = ?', (self._id,)).fetchone()
        return row[0]

    def _child_id(self, name: bytes) -> Optional[int]:
        row = self._tx._execute(
            'SELECT id FROM buckets WHERE parent_id = ? AND name = ?',
            (self._id, name)
        ).fetchone()
        return row[0] if row else None

    def _subtree_ids(self, bucket_id: int) -> List[int]:
        rows = self._tx._execute('''
            WITH RECURSIVE tree(id) AS (
                SELECT ?
                UNION ALL
                SELECT b.id FROM buckets b JOIN tree t ON b.parent_id = t.id
            )
            SELECT id FROM tree
        ''', (bucket_id,)).fetchall()
        return [row[0] for row in rows]

    def bucket(self, name: Key) -> Optional['Bucket']:
        """Get a nested bucket, or None if it does not exist."""
        name_bytes = _to_bytes(name)
        child_id = self._child_id(name_bytes)
        if child_id is None:
            return None
        return Bucket(self._tx, child_id, name_bytes)

    def create_bucket(self, name: Key) -> 'Bucket':
        """Create a nested bucket; fails if it already exists."""
        name_bytes = self._check_key(name)
        if self._child_id(name_bytes) is not None:
            raise TransactionError(f"bucket '{name_bytes.decode('utf-8', 'replace')}' already exists")
        if self._id != ROOT_BUCKET_ID and self.get(name_bytes) is not None:
            raise TransactionError(f"incompatible value: '{name_bytes.decode('utf-8', 'replace')}' holds a value")
        cursor = self._tx._execute(
            'INSERT INTO buckets (parent_id, name) VALUES (?, ?)',
            (self._id, name_bytes),
            write=True
        )
        return Bucket(self._tx, cursor.lastrowid, name_bytes)

    def create_bucket_if_not_exists(self, name: Key) -> 'Bucket':
        """Get a nested bucket, creating it if needed."""
        existing = self.bucket(name)
        if existing is not None:
            return existing
        return self.create_bucket(name)

    def delete_bucket(self, name: Key) -> None:
        """
        Delete a nested bucket with all of its entries and nested buckets.

        Raises:
            BucketNotFoundError: If the bucket does not exist
        """
        name_bytes = _to_bytes(name)
        child_id = self._child_id(name_bytes)
        if child_id is None:
            raise BucketNotFoundError(f"bucket not found: {name_bytes.decode('utf-8', 'replace')}")
        ids = [(bucket_id,) for bucket_id in self._subtree_ids(child_id)]
        self._tx._executemany('DELETE FROM entries WHERE bucket_id = ?', ids)
        self._tx._executemany('DELETE FROM buckets WHERE id = ?', ids)

    def buckets(self) -> List[bytes]:
        """Names of the nested buckets, in byte order."""
        rows = self._tx._execute(
            'SELECT name FROM buckets WHERE parent_id = ? ORDER BY name',
            (self._id,)
        ).fetchall()
        return [bytes(row[0]) for row in rows]

    def total_entries(self) -> int:
        """Number of entries in this bucket and all nested buckets."""
        row = self._tx._execute('''
            WITH RECURSIVE tree(id) AS (
                SELECT ?
                UNION ALL
                SELECT b.id FROM buckets b JOIN tree t ON b.parent_id = t.id
            )
            SELECT COUNT(*) FROM entries WHERE bucket_id IN (SELECT id FROM tree)
        ''', (self._id,)).fetchone()
        return row[0]

    def __repr__(self):
        return f"Bucket('{self.name.decode('utf-8', 'replace')}')"
