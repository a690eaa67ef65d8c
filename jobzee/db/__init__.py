"""
Database module - MongoDB connection, collections and index maintenance.
"""
from jobzee.db.mongodb import (
    COLLECTIONS,
    get_collection,
    get_mongo_db,
    init_mongo_indexes,
    test_mongo_connection,
)

__all__ = [
    "COLLECTIONS",
    "get_collection",
    "get_mongo_db",
    "init_mongo_indexes",
    "test_mongo_connection",
]
