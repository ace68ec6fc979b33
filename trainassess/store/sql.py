"""
SQL Document Store Module

This module stores documents in a relational database through SQLAlchemy's
async engine. Each document is one row of the ``documents`` table with its
body in a JSON column.
"""

import datetime
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import and_, delete, insert, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from trainassess.common.exceptions import ConflictError, DependencyError
from trainassess.common.logger import app_logger, log_execution_time
from trainassess.database.base import documents, metadata
from trainassess.store.base import (
    Document,
    DocumentStore,
    matches,
    new_id,
    sort_documents
)

logger = app_logger.getChild("store.sql")


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _to_document(row: Any) -> Document:
    document = dict(row.data)
    document["id"] = row.id
    document["version"] = row.version
    return document


def _body(document: Document) -> Document:
    """Strip the store-managed keys before persisting a body."""
    return {k: v for k, v in document.items() if k not in ("id", "version")}


class SQLDocumentStore(DocumentStore):
    """
    SQLAlchemy-backed implementation of the DocumentStore.

    Filtering and sorting on document fields happen in Python after the
    collection is loaded, which keeps the store portable across dialects.
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_timeout: int = 30
    ):
        """
        Initialize the store.

        Args:
            database_url: Async SQLAlchemy URL (e.g. ``sqlite+aiosqlite:///./app.db``)
            echo: Whether to echo SQL statements
            pool_timeout: Timeout for getting a connection from the pool
        """
        self.database_url = database_url
        self.echo = echo
        self.pool_timeout = pool_timeout
        self._engine: Optional[AsyncEngine] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Document store not opened. Call open() first.")
        return self._engine

    @log_execution_time(logger)
    async def open(self) -> None:
        """Create the engine, check connectivity and create the schema."""
        options: Dict[str, Any] = {"echo": self.echo}
        if not self.database_url.startswith("sqlite"):
            options["pool_timeout"] = self.pool_timeout

        logger.info(f"Opening document store at {self.database_url.split('://')[0]}://...")
        try:
            self._engine = create_async_engine(self.database_url, **options)
            async with self._engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to open document store: {e}")
            raise DependencyError("Document store unavailable", original_exception=e) from e

        logger.info("Document store opened")

    async def close(self) -> None:
        """Dispose of the engine and all pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            logger.info("Document store closed")

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncConnection]:
        try:
            async with self.engine.begin() as conn:
                yield conn
        except IntegrityError as e:
            raise ConflictError(f"Conflicting write during {operation}") from e
        except SQLAlchemyError as e:
            logger.error(f"Document store failure during {operation}: {e}")
            raise DependencyError(f"Document store failure during {operation}", original_exception=e) from e

    async def insert(self, collection: str, document: Document) -> Document:
        document_id = document.get("id") or new_id()
        now = _now()
        async with self._transaction("insert") as conn:
            await conn.execute(
                insert(documents).values(
                    collection=collection,
                    id=document_id,
                    version=1,
                    data=_body(document),
                    created_at=now,
                    updated_at=now
                )
            )

        stored = _body(document)
        stored["id"] = document_id
        stored["version"] = 1
        return stored

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        async with self._transaction("get") as conn:
            result = await conn.execute(
                select(documents).where(
                    and_(documents.c.collection == collection, documents.c.id == document_id)
                )
            )
            row = result.first()
        return _to_document(row) if row is not None else None

    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        async with self._transaction("find") as conn:
            result = await conn.execute(
                select(documents).where(documents.c.collection == collection)
            )
            rows = result.all()

        found = [doc for doc in (_to_document(row) for row in rows) if matches(doc, filters)]
        return sort_documents(found, sort_by, descending)

    async def replace(
        self,
        collection: str,
        document_id: str,
        document: Document,
        expected_version: Optional[int] = None
    ) -> Optional[Document]:
        key = and_(documents.c.collection == collection, documents.c.id == document_id)

        async with self._transaction("replace") as conn:
            result = await conn.execute(select(documents.c.version).where(key))
            current_version = result.scalar_one_or_none()
            if current_version is None:
                return None

            if expected_version is not None and current_version != expected_version:
                raise ConflictError(
                    f"Document {document_id} was modified concurrently",
                    details={"expected_version": expected_version, "current_version": current_version}
                )

            updated = await conn.execute(
                update(documents)
                .where(and_(key, documents.c.version == current_version))
                .values(data=_body(document), version=current_version + 1, updated_at=_now())
            )
            if updated.rowcount == 0:
                raise ConflictError(f"Document {document_id} was modified concurrently")

        stored = _body(document)
        stored["id"] = document_id
        stored["version"] = current_version + 1
        return stored

    async def delete(self, collection: str, document_id: str) -> bool:
        async with self._transaction("delete") as conn:
            result = await conn.execute(
                delete(documents).where(
                    and_(documents.c.collection == collection, documents.c.id == document_id)
                )
            )
        return result.rowcount > 0
