"""
SQLAlchemy Schema Configuration

This module provides the SQLAlchemy metadata and the single table backing
the SQL document store.
"""

from sqlalchemy import Column, DateTime, Integer, JSON, MetaData, String, Table

# Configure naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)

# One row per document; the body lives in ``data`` and ``version`` backs
# optimistic concurrency checks.
documents = Table(
    "documents",
    metadata,
    Column("collection", String(64), primary_key=True),
    Column("id", String(64), primary_key=True),
    Column("version", Integer, nullable=False, default=1),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
