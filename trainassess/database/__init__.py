"""
Database Module

SQLAlchemy schema used by the SQL document store.
"""

from trainassess.database.base import documents, metadata

__all__ = ['documents', 'metadata']
