"""
Database module - relational schema/sessions and MongoDB file storage.
"""
from eduopps.db.database import get_db_session, test_database_connection
from eduopps.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "test_database_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
