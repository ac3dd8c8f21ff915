# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - directory access and the resolution/scoping components.
"""

from .mongodb import MongoDBService, get_mongodb_service, close_mongodb_connection
from .directory import EntityDirectory, MongoEntityDirectory, predicate_to_mongo_filter
from .memory_directory import InMemoryEntityDirectory
from .recipients import RecipientResolver
from .geography import GeographyResolver
from .visibility import VisibilityScoper
from .scoping import ScopingService, create_scoping_service

__all__ = [
    "MongoDBService",
    "get_mongodb_service",
    "close_mongodb_connection",
    "EntityDirectory",
    "MongoEntityDirectory",
    "predicate_to_mongo_filter",
    "InMemoryEntityDirectory",
    "RecipientResolver",
    "GeographyResolver",
    "VisibilityScoper",
    "ScopingService",
    "create_scoping_service"
]
