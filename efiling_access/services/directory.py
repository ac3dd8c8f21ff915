# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Entity directory interface and its MongoDB implementation.

The directory is the read-only source of truth for users, roles, role groups
and teams. The resolvers depend only on the `EntityDirectory` protocol; any
storage failure surfaces as DirectoryUnavailableException.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Type, TypeVar, runtime_checkable
from pydantic import BaseModel, ValidationError as PydanticValidationError
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ..exceptions import DirectoryUnavailableException
from ..models.entities import ActiveUser, RoleGroup, UserGeography, VisibilityPredicate
from ..models.enums import GeoDimension
from .mongodb import (
    MongoDBService,
    USERS_COLLECTION,
    ROLES_COLLECTION,
    ROLE_GROUPS_COLLECTION,
    USER_TEAMS_COLLECTION,
    ROLE_LOCATIONS_COLLECTION
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Mongo field names for each location dimension on location-tagged entities
MONGO_LOCATION_FIELDS: Dict[GeoDimension, str] = {
    GeoDimension.ZONE: "zoneId",
    GeoDimension.DIVISION: "divisionId",
    GeoDimension.DISTRICT: "districtId",
    GeoDimension.TOWN: "townId",
}

# Legacy rows leave untagged location fields null, empty or zero
ABSENT_LOCATION_VALUES: List[Any] = [None, "", 0]


@runtime_checkable
class EntityDirectory(Protocol):
    """Read-only lookups the resolvers need. Only active users are returned."""

    def find_active_user_by_id(self, user_id: int) -> Optional[ActiveUser]: ...

    def find_active_users_by_role(self, role_id: int) -> List[ActiveUser]: ...

    def find_active_users_by_department(self, department_id: int) -> List[ActiveUser]: ...

    def find_active_users_by_role_codes_any(self, codes: List[str]) -> List[ActiveUser]: ...

    def find_all_active_users(self) -> List[ActiveUser]: ...

    def find_role_group(self, group_id: int) -> Optional[RoleGroup]: ...

    def find_team_members(self, manager_id: int) -> List[int]: ...

    def find_geography(self, user_id: int) -> Optional[UserGeography]: ...


def role_code_patterns(codes: List[str]) -> List[re.Pattern]:
    """
    Case-insensitive exact-match patterns for stored role codes.

    Group codes are compared upper-cased while `efiling_roles.code` keeps
    whatever case it was entered with.
    """
    return [re.compile(f"^{re.escape(code)}$", re.IGNORECASE) for code in dict.fromkeys(codes)]


@contextmanager
def directory_errors(operation: str) -> Iterator[None]:
    """
    Translate infrastructure failures into DirectoryUnavailableException.

    Args:
        operation: Name of the directory operation, for logs and messages
    """
    try:
        yield
    except DirectoryUnavailableException:
        raise
    except (PyMongoError, ConnectionError, TimeoutError) as e:
        logger.error(
            f"Entity directory unavailable during {operation}",
            extra={"operation": operation, "error_class": e.__class__.__name__, "error": str(e)}
        )
        raise DirectoryUnavailableException(f"Entity directory unavailable during {operation}") from e


def _to_model(model: Type[ModelT], document: Mapping[str, Any]) -> ModelT:
    """Convert a Mongo document to a model, exposing `_id` as `id`."""
    data = dict(document)
    if "_id" in data:
        data["id"] = data.pop("_id")
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        logger.error(
            f"Malformed {model.__name__} record in directory",
            extra={"record_id": data.get("id"), "errors": e.errors()}
        )
        raise DirectoryUnavailableException(
            f"Entity directory returned a malformed {model.__name__} record ({data.get('id')})"
        ) from e


class MongoEntityDirectory:
    """EntityDirectory over the e-filing MongoDB collections."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def _collection(self, name: str):
        return self.mongodb_service.get_collection(name)

    def _find_users(self, query: Dict[str, Any], operation: str) -> List[ActiveUser]:
        with directory_errors(operation):
            cursor = self._collection(USERS_COLLECTION).find(
                {**query, "isActive": True}
            ).sort("_id", ASCENDING)
            users = [_to_model(ActiveUser, doc) for doc in cursor]

        logger.debug(f"{operation} returned {len(users)} active users")
        return users

    def find_active_user_by_id(self, user_id: int) -> Optional[ActiveUser]:
        with directory_errors("find_active_user_by_id"):
            document = self._collection(USERS_COLLECTION).find_one({"_id": user_id, "isActive": True})
            return _to_model(ActiveUser, document) if document else None

    def find_active_users_by_role(self, role_id: int) -> List[ActiveUser]:
        return self._find_users({"roleId": role_id}, "find_active_users_by_role")

    def find_active_users_by_department(self, department_id: int) -> List[ActiveUser]:
        return self._find_users({"departmentId": department_id}, "find_active_users_by_department")

    def find_active_users_by_role_codes_any(self, codes: List[str]) -> List[ActiveUser]:
        if not codes:
            return []

        with directory_errors("find_active_users_by_role_codes_any"):
            role_ids = self._collection(ROLES_COLLECTION).distinct(
                "_id", {"code": {"$in": role_code_patterns(codes)}}
            )

        if not role_ids:
            logger.debug(f"No roles found for codes {codes}")
            return []

        return self._find_users({"roleId": {"$in": role_ids}}, "find_active_users_by_role_codes_any")

    def find_all_active_users(self) -> List[ActiveUser]:
        return self._find_users({}, "find_all_active_users")

    def find_role_group(self, group_id: int) -> Optional[RoleGroup]:
        with directory_errors("find_role_group"):
            document = self._collection(ROLE_GROUPS_COLLECTION).find_one({"_id": group_id})
            return _to_model(RoleGroup, document) if document else None

    def find_team_members(self, manager_id: int) -> List[int]:
        with directory_errors("find_team_members"):
            member_ids = self._collection(USER_TEAMS_COLLECTION).distinct(
                "teamMemberId", {"managerId": manager_id, "isActive": True}
            )
            if not member_ids:
                return []

            # Memberships of deactivated users are still on file
            active_ids = self._collection(USERS_COLLECTION).distinct(
                "_id", {"_id": {"$in": member_ids}, "isActive": True}
            )

        return sorted(active_ids)

    def find_geography(self, user_id: int) -> Optional[UserGeography]:
        user = self.find_active_user_by_id(user_id)
        if user is None:
            return None

        role_code = None
        zone_ids: List[int] = []

        if user.role_id is not None:
            with directory_errors("find_geography"):
                role = self._collection(ROLES_COLLECTION).find_one({"_id": user.role_id}, {"code": 1})
                role_code = role.get("code") if role else None
                zone_ids = self._collection(ROLE_LOCATIONS_COLLECTION).distinct(
                    "zoneId", {"roleId": user.role_id, "zoneId": {"$ne": None}}
                )

        return UserGeography.from_user(user, role_code, zone_ids)


def predicate_to_mongo_filter(predicate: VisibilityPredicate,
                              field_map: Optional[Mapping[GeoDimension, str]] = None) -> Dict[str, Any]:
    """
    Translate a visibility predicate into a MongoDB query document.

    Args:
        predicate: Predicate built by the visibility scoper
        field_map: Dimension to document-field mapping for the listed
            collection; dimensions left out are not tagged on that collection

    Returns:
        Query document to merge into a listing query ({} for unrestricted)
    """
    if predicate.unrestricted:
        return {}

    fields = MONGO_LOCATION_FIELDS if field_map is None else field_map
    if not fields:
        # Nothing on this collection is location-tagged
        return {}

    disjuncts: List[Dict[str, Any]] = []
    for clause in predicate.clauses:
        field = fields.get(clause.dimension)
        if field:
            disjuncts.append({field: {"$in": sorted(clause.values)}})

    if predicate.include_untagged:
        disjuncts.append({"$and": [{field: {"$in": ABSENT_LOCATION_VALUES}} for field in fields.values()]})

    if not disjuncts:
        return {"_id": {"$exists": False}}

    return {"$or": disjuncts}


__all__ = [
    "EntityDirectory",
    "MongoEntityDirectory",
    "MONGO_LOCATION_FIELDS",
    "ABSENT_LOCATION_VALUES",
    "role_code_patterns",
    "directory_errors",
    "predicate_to_mongo_filter",
]
