"""SQL warehouse backed by SQLAlchemy.

Each destination table stores one row per transferred object:

    file_name, file_size, file_content, upload_timestamp, object_key,
    content_chunks

Small objects carry their bytes in ``file_content``. Streamed objects are
written in fixed-size chunks to a companion ``<table>_content`` table inside
the same transaction as the destination row; the row then has a NULL
``file_content`` and the number of chunks in ``content_chunks``. Peak memory
for a streamed insert is one chunk regardless of object size.

Tables are built with SQLAlchemy Core, so no table name is ever formatted into
SQL text, and any SQLAlchemy dialect works (PostgreSQL through psycopg2 by
default).
"""

import threading
from datetime import datetime, timezone
from typing import BinaryIO, Dict, Optional, Set

import pandas as pd
from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    inspect,
    select,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from bucketload.bucket.warehouse_provider import WarehouseProvider
from bucketload.exceptions import ConnectivityError, PlanningError, TransferError
from bucketload.logging_config import get_logger
from bucketload.objects.transfer_config import CONTENT_TABLE_SUFFIX, DEFAULT_CHUNK_SIZE
from bucketload.security import SecurityError, validate_table_name

logger = get_logger(__name__)


class SqlWarehouse(WarehouseProvider):
    """Warehouse implementation for SQLAlchemy-supported databases.

    Attributes:
        db_url: SQLAlchemy database URL
        schema: Optional schema holding the destination tables
        chunk_size: Chunk size in bytes for streamed inserts
        engine: SQLAlchemy engine, set while the session is open
    """

    CNAME_OBJECT_KEY = "object_key"

    FILE_NAME_LENGTH = 255

    OBJECT_KEY_LENGTH = 1024

    def __init__(
        self,
        db_url: str,
        schema: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        pool_size: int = 5,
        pool_timeout: int = 30,
    ) -> None:
        self.db_url = db_url
        self.schema = schema
        self.chunk_size = chunk_size
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self.engine: Optional[Engine] = None
        self.metadata = MetaData(schema=schema)
        self._file_tables: Dict[str, Table] = {}
        self._content_tables: Dict[str, Table] = {}
        self._lock = threading.Lock()

    def open(self) -> None:
        if self.engine is not None:
            return

        url = make_url(self.db_url)
        engine_options: Dict[str, int] = {}
        if url.get_backend_name() != "sqlite":
            # pool sized to the worker count so each worker holds one connection
            engine_options = {"pool_size": self.pool_size, "pool_timeout": self.pool_timeout}

        try:
            engine = create_engine(url, **engine_options)
        except (SQLAlchemyError, ImportError) as e:
            raise ConnectivityError(f"Unable to create warehouse engine: {e}") from e

        try:
            with engine.connect() as connection:
                connection.execute(text("select 1"))
        except SQLAlchemyError as e:
            engine.dispose()
            raise ConnectivityError(f"Unable to connect to warehouse {url.render_as_string()}: {e}") from e

        self.engine = engine
        logger.info(f"Connected to warehouse: {url.render_as_string()}")

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.debug("Warehouse session closed")

    def test_connection(self) -> bool:
        if self.engine is None:
            logger.error("Warehouse session is not open")
            return False
        try:
            with self.engine.connect() as connection:
                connection.execute(text("select 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Warehouse connection test failed: {e}")
            return False

    def ensure_table(self, table_name: str) -> None:
        engine = self._require_engine()
        try:
            tables = [self._file_table(table_name), self._content_table(table_name)]
            self.metadata.create_all(engine, tables=tables, checkfirst=True)
        except (SQLAlchemyError, SecurityError) as e:
            raise PlanningError(table_name, str(e)) from e

        logger.debug(f"Table {table_name} created/verified")

    def table_exists(self, table_name: str) -> bool:
        engine = self._require_engine()
        return inspect(engine).has_table(table_name, schema=self.schema)

    def query_distinct_keys(self, table_name: str) -> Set[str]:
        engine = self._require_engine()
        try:
            table = self._file_table(table_name)
            query = select(table.c.object_key).distinct()
            with engine.connect() as connection:
                keys = {row[0] for row in connection.execute(query)}
        except (SQLAlchemyError, SecurityError) as e:
            raise PlanningError(table_name, str(e)) from e

        logger.info(f"Found {len(keys)} already transferred objects in table {table_name}")
        return keys

    def insert_buffered(self, table_name: str, file_name: str, file_size: int, content: bytes, object_key: str) -> None:
        engine = self._require_engine()
        if len(content) != file_size:
            logger.warning(f"{object_key} listed as {file_size} bytes but read {len(content)} bytes")

        try:
            table = self._file_table(table_name)
            with engine.begin() as connection:
                connection.execute(
                    insert(table).values(
                        file_name=file_name,
                        file_size=len(content),
                        file_content=content,
                        upload_timestamp=datetime.now(timezone.utc),
                        object_key=object_key,
                        content_chunks=0,
                    )
                )
        except (SQLAlchemyError, SecurityError) as e:
            raise TransferError(f"Insert into {table_name} failed: {e}", key=object_key) from e

        logger.debug(f"Inserted {file_name} into {table_name} ({len(content)} bytes)")

    def insert_streamed(
        self, table_name: str, file_name: str, file_size: int, stream: BinaryIO, object_key: str
    ) -> None:
        engine = self._require_engine()
        try:
            table = self._file_table(table_name)
            content_table = self._content_table(table_name)

            with engine.begin() as connection:
                chunk_count = 0
                bytes_written = 0
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    connection.execute(
                        insert(content_table).values(
                            object_key=object_key,
                            chunk_index=chunk_count,
                            chunk=chunk,
                        )
                    )
                    chunk_count += 1
                    bytes_written += len(chunk)

                if bytes_written != file_size:
                    logger.warning(f"{object_key} listed as {file_size} bytes but streamed {bytes_written} bytes")

                connection.execute(
                    insert(table).values(
                        file_name=file_name,
                        file_size=bytes_written,
                        file_content=None,
                        upload_timestamp=datetime.now(timezone.utc),
                        object_key=object_key,
                        content_chunks=chunk_count,
                    )
                )
        except (SQLAlchemyError, OSError, SecurityError) as e:
            raise TransferError(f"Streamed insert into {table_name} failed: {e}", key=object_key) from e

        logger.debug(f"Streamed {file_name} into {table_name} ({bytes_written} bytes, {chunk_count} chunks)")

    def read_content(self, table_name: str, object_key: str) -> Optional[bytes]:
        """Reassemble the content stored for an object.

        Returns:
            Object content, or None if the key is not recorded in the table
        """
        engine = self._require_engine()
        table = self._file_table(table_name)
        content_table = self._content_table(table_name)

        with engine.connect() as connection:
            row = connection.execute(
                select(table.c.file_content, table.c.content_chunks).where(table.c.object_key == object_key)
            ).first()
            if row is None:
                return None
            if not row.content_chunks:
                return bytes(row.file_content or b"")

            chunks = connection.execute(
                select(content_table.c.chunk)
                .where(content_table.c.object_key == object_key)
                .order_by(content_table.c.chunk_index)
            )
            return b"".join(bytes(chunk_row[0]) for chunk_row in chunks)

    def files_in_table_df(self, table_name: str) -> pd.DataFrame:
        """Recorded objects of a table, without their content."""
        engine = self._require_engine()
        table = self._file_table(table_name)
        query = select(
            table.c.object_key,
            table.c.file_name,
            table.c.file_size,
            table.c.upload_timestamp,
        ).order_by(table.c.object_key)

        with engine.connect() as connection:
            return pd.read_sql(query, connection)

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise ConnectivityError("Warehouse session is not open")
        return self.engine

    def _file_table(self, table_name: str) -> Table:
        validate_table_name(table_name)
        with self._lock:
            if table_name in self._content_tables:
                raise SecurityError(f"Table name {table_name} is the content table of another table")
            table = self._file_tables.get(table_name)
            if table is None:
                table = Table(
                    table_name,
                    self.metadata,
                    Column("file_name", String(self.FILE_NAME_LENGTH), nullable=False),
                    Column("file_size", BigInteger, nullable=False),
                    Column("file_content", LargeBinary, nullable=True),
                    Column("upload_timestamp", DateTime(timezone=True), nullable=False),
                    Column(self.CNAME_OBJECT_KEY, String(self.OBJECT_KEY_LENGTH), nullable=False),
                    Column("content_chunks", Integer, nullable=False, default=0),
                )
                self._file_tables[table_name] = table
            return table

    def _content_table(self, table_name: str) -> Table:
        content_name = f"{table_name}{CONTENT_TABLE_SUFFIX}"
        validate_table_name(content_name)
        with self._lock:
            if content_name in self._file_tables:
                raise SecurityError(f"Content table {content_name} of {table_name} is already a file table")
            table = self._content_tables.get(content_name)
            if table is None:
                table = Table(
                    content_name,
                    self.metadata,
                    Column(self.CNAME_OBJECT_KEY, String(self.OBJECT_KEY_LENGTH), nullable=False),
                    Column("chunk_index", Integer, nullable=False),
                    Column("chunk", LargeBinary, nullable=False),
                )
                self._content_tables[content_name] = table
            return table
