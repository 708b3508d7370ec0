"""
MongoDB Connection Utility

MongoDB stores uploaded opportunity documents (application forms,
flyers, spreadsheets) through GridFS when FILE_STORAGE_BACKEND=gridfs.
Document metadata stays in the relational `documents` table; the GridFS
file id is kept in `documents.object_name`.
"""
import gridfs
from loguru import logger
from pymongo import MongoClient
from pymongo.database import Database

from eduopps.core.config import get_settings

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None

GRIDFS_BUCKET = "opportunity_documents"


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the file storage database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_gridfs_bucket() -> gridfs.GridFSBucket:
    """GridFS bucket holding uploaded document blobs."""
    return gridfs.GridFSBucket(get_mongo_db(), bucket_name=GRIDFS_BUCKET)


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


def init_mongo_indexes():
    """
    Create indexes for document lookups by opportunity.
    Call this once during app startup (gridfs backend only).
    """
    db = get_mongo_db()
    db[f"{GRIDFS_BUCKET}.files"].create_index("metadata.opportunity_id")
    logger.info("MongoDB GridFS indexes created")
