"""MongoDB connection helpers."""

from __future__ import annotations

import os

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionhouse import applog

MONGODB_URL = "MONGODB_URL"
MONGODB_DB = "MONGODB_DB"


def connect(url: str, database_name: str) -> Database:
    """Connect to MongoDB, check the server answers, and return the database."""
    try:
        client = MongoClient(url)
    except PyMongoError as err:
        applog.error("Error trying to connect to mongodb database", err)
        raise

    try:
        client.admin.command("ping")
    except PyMongoError as err:
        applog.error("Error trying to ping mongodb database", err)
        client.close()
        raise

    return client[database_name]


def connect_from_env() -> Database:
    """Connect using the MONGODB_URL and MONGODB_DB environment variables."""
    return connect(os.environ.get(MONGODB_URL, ""), os.environ.get(MONGODB_DB, ""))