# src/uploadcache/core/store/database.py
"""Store lifecycle for the upload cache.

Opens (or creates) the SQLite backing store, defines the schema and owns
all locking. A damaged store file is deleted and recreated once: losing
cached payloads is preferable to blocking telemetry collection.
"""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from pathlib import Path
from typing import Self

import structlog
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from uploadcache.contracts.errors import (
    FileSystemError,
    StoreIOError,
    StoreOpenError,
    UnsupportedStorageError,
)
from uploadcache.core.config import InMemoryStorage, OnDiskStorage
from uploadcache.core.store.schema import metadata

logger = structlog.get_logger(__name__)

# Sidecar files SQLite keeps next to a WAL-mode database
_SIDECAR_SUFFIXES: tuple[str, ...] = ("-wal", "-shm")


class UploadCacheDB:
    """Handle to the upload cache backing store.

    One handle per cache instance. Writes (insert, update, delete, schema,
    reclamation) are serialized by a handle-owned lock. On-disk reads run
    on pooled connections against WAL snapshots and do not wait for
    writers; the in-memory store has a single connection, so its reads
    take the same lock.

    Usage:
        db = UploadCacheDB(OnDiskStorage(base_path=Path("./cache")))
        with db.write() as conn:
            conn.execute(uploads_table.insert().values(...))
        # Committed automatically if no exception raised
    """

    def __init__(self, storage: InMemoryStorage | OnDiskStorage) -> None:
        """Open the store described by storage and define the schema.

        Args:
            storage: In-memory (named) or on-disk (directory-based) storage

        Raises:
            UnsupportedStorageError: storage is not a recognised mechanism
            FileSystemError: The store directory could not be created
            StoreOpenError: The store could not be opened, even after
                deleting and recreating a damaged file
            StoreIOError: Schema definition failed on the opened store
        """
        self.storage = storage
        self._lock = threading.RLock()
        self._engine: Engine | None = self._open(storage)
        self._create_tables()

    # --- opening -----------------------------------------------------------

    def _open(self, storage: InMemoryStorage | OnDiskStorage) -> Engine:
        match storage:
            case InMemoryStorage(name=name):
                return self._open_in_memory(name)
            case OnDiskStorage():
                self._ensure_directory(storage.base_path)
                return self._open_file(storage.file_path)
            case _:
                raise UnsupportedStorageError(f"Unsupported storage mechanism: {storage!r}")

    @staticmethod
    def _ensure_directory(base_path: Path) -> None:
        try:
            base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create upload cache directory {base_path}: {e}", path=base_path) from e

    @staticmethod
    def _open_in_memory(name: str) -> Engine:
        # Shared-cache memory URI: handles opened with the same name share data
        engine = create_engine(
            f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true",
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        UploadCacheDB._configure_sqlite(engine)
        try:
            UploadCacheDB._probe(engine)
        except DBAPIError as e:
            engine.dispose()
            raise StoreOpenError(f"Cannot open in-memory upload cache {name!r}: {e.orig}") from e
        return engine

    def _open_file(self, path: Path) -> Engine:
        """Open the store file, recreating it once if it is unreadable."""
        try:
            return self._connect_file(path)
        except DBAPIError as e:
            orig = e.orig
            logger.error(
                "upload_cache_open_failed",
                path=str(path),
                error=str(orig),
                error_type=type(orig).__name__,
                # sqlite3 exposes result codes on Python 3.11+
                error_code=getattr(orig, "sqlite_errorcode", None),
                error_name=getattr(orig, "sqlite_errorname", None),
                action="delete_and_recreate",
            )

        self._delete_store_file(path)

        try:
            engine = self._connect_file(path)
        except DBAPIError as e:
            raise StoreOpenError(f"Cannot open upload cache at {path} after recreating it: {e.orig}", path=path) from e

        logger.warning("upload_cache_recreated", path=str(path))
        return engine

    @staticmethod
    def _connect_file(path: Path) -> Engine:
        engine = create_engine(f"sqlite:///{path}", echo=False)
        UploadCacheDB._configure_sqlite(engine)
        try:
            UploadCacheDB._probe(engine)
        except DBAPIError:
            engine.dispose()
            raise
        return engine

    @staticmethod
    def _probe(engine: Engine) -> None:
        """Touch the file header and schema so a damaged file fails now."""
        with engine.connect() as conn:
            conn.execute(text("SELECT count(*) FROM sqlite_master"))

    @staticmethod
    def _delete_store_file(path: Path) -> None:
        """Delete a damaged store file and its WAL sidecars.

        Failures are logged only. The recreate attempt that follows is what
        surfaces an unrecoverable environment (permissions, read-only disk).
        """
        for candidate in (path, *(path.with_name(path.name + suffix) for suffix in _SIDECAR_SUFFIXES)):
            try:
                candidate.unlink(missing_ok=True)
            except OSError as e:
                logger.error(
                    "upload_cache_delete_failed",
                    path=str(candidate),
                    error=str(e),
                    error_type=type(e).__name__,
                )

    @staticmethod
    def _configure_sqlite(engine: Engine) -> None:
        """Configure SQLite connections for reliability.

        Registers a connection event hook that sets:
        - PRAGMA journal_mode=WAL (readers do not block the writer)
        - PRAGMA busy_timeout=5000 (contention tolerance)
        """

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
            cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]  # DBAPI connection typed as object by the event API
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    def _create_tables(self) -> None:
        """Create the uploads table if it doesn't exist."""
        with self._lock:
            try:
                metadata.create_all(self.engine)
            except SQLAlchemyError as e:
                raise StoreIOError(f"Upload cache schema definition failed: {e}") from e

    # --- units of work -----------------------------------------------------

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine."""
        if self._engine is None:
            raise RuntimeError("Upload cache store is closed")
        return self._engine

    @property
    def path(self) -> Path | None:
        """Store file path, or None for in-memory stores."""
        if isinstance(self.storage, OnDiskStorage):
            return self.storage.file_path
        return None

    def _read_guard(self) -> AbstractContextManager[object]:
        if isinstance(self.storage, InMemoryStorage):
            return self._lock
        return nullcontext()

    @contextmanager
    def read(self) -> Iterator[Connection]:
        """Connection for a read-only unit of work.

        Raises:
            StoreIOError: If the store rejects any statement in the block
        """
        with self._read_guard():
            try:
                with self.engine.connect() as conn:
                    yield conn
            except SQLAlchemyError as e:
                raise StoreIOError(f"Upload cache read failed: {e}") from e

    @contextmanager
    def write(self) -> Iterator[Connection]:
        """Connection for a serialized, atomic write unit of work.

        Commits on successful block exit, rolls back on exception.

        Raises:
            StoreIOError: If the store rejects any statement in the block
        """
        with self._lock:
            try:
                with self.engine.begin() as conn:
                    yield conn
            except SQLAlchemyError as e:
                raise StoreIOError(f"Upload cache write failed: {e}") from e

    def vacuum(self) -> None:
        """Rebuild the store file to reclaim space freed by deletes.

        VACUUM cannot run inside a transaction, so it runs in autocommit.
        """
        with self._lock:
            try:
                with self.engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
                    conn.exec_driver_sql("VACUUM")
            except SQLAlchemyError as e:
                raise StoreIOError(f"Upload cache vacuum failed: {e}") from e

    # --- lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """Close database connections. In-memory contents are released
        once every handle sharing the name is closed."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    @classmethod
    def in_memory(cls, name: str) -> Self:
        """Open a named in-memory store, mainly for tests."""
        return cls(InMemoryStorage(name=name))

    @classmethod
    def on_disk(cls, base_path: Path) -> Self:
        """Open (or create) the store file under base_path."""
        return cls(OnDiskStorage(base_path=base_path))
