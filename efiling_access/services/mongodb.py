# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB connection service backing the entity directory.
"""

import logging
from typing import Dict, Optional, Any
from pymongo import MongoClient, ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError, PyMongoError

from ..settings import ScopingSettings, get_scoping_settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "efiling_users"
ROLES_COLLECTION = "efiling_roles"
ROLE_GROUPS_COLLECTION = "efiling_role_groups"
USER_TEAMS_COLLECTION = "efiling_user_teams"
ROLE_LOCATIONS_COLLECTION = "efiling_role_locations"


class MongoDBService:
    """MongoDB connection holder with lazy client creation and pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None,
                 settings: Optional[ScopingSettings] = None):
        """Initialize MongoDB service with connection pooling."""
        settings = settings or get_scoping_settings()
        self.connection_string = connection_string or settings.mongodb_uri
        self.database_name = database_name or settings.mongodb_database
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = settings.mongodb_max_pool_size
        self.server_selection_timeout_ms = settings.mongodb_server_selection_timeout_ms

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryReads=True
                )
                # Test connection
                client.admin.command('ping')
                self._client = client
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    def create_indexes(self) -> None:
        """Create the indexes directory lookups rely on."""
        try:
            logger.info("Creating MongoDB indexes...")

            users = self.get_collection(USERS_COLLECTION)
            users.create_index([("isActive", ASCENDING), ("roleId", ASCENDING)])
            users.create_index([("isActive", ASCENDING), ("departmentId", ASCENDING)])

            roles = self.get_collection(ROLES_COLLECTION)
            roles.create_index("code", unique=True)

            teams = self.get_collection(USER_TEAMS_COLLECTION)
            teams.create_index([("managerId", ASCENDING), ("isActive", ASCENDING)])

            locations = self.get_collection(ROLE_LOCATIONS_COLLECTION)
            locations.create_index([("roleId", ASCENDING), ("zoneId", ASCENDING)])

            logger.info("MongoDB indexes created successfully")

        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
