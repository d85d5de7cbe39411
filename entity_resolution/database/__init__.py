"""Database package for the article record store"""

from entity_resolution.database.connection import check_connection, get_db_session, get_engine
from entity_resolution.database.models import (
    ArticleRecord,
    Base,
    SupplierRecord,
    create_all_tables,
    drop_all_tables,
)
from entity_resolution.database.store import RecordStore, SaveResult

__all__ = [
    "get_engine",
    "get_db_session",
    "check_connection",
    "Base",
    "SupplierRecord",
    "ArticleRecord",
    "create_all_tables",
    "drop_all_tables",
    "RecordStore",
    "SaveResult",
]
