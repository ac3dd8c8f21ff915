# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas for the e-filing access core.
"""

# Base models
from .base import DirectoryRecord, ValueObject

# Enumerations
from .enums import TargetKind, DeliveryStatus, GeoDimension

# Core entities
from .entities import (
    DEFAULT_LOCATION_FIELDS,
    DistributionTarget,
    ActiveUser,
    RoleGroup,
    TeamMembership,
    UserGeography,
    LocationClause,
    VisibilityPredicate,
    DeliveryRecord,
    normalise_role_code
)

# Request models
from .requests import ResolveRecipientsRequest, VisibilityQuery

# Response models
from .responses import (
    RecipientSource,
    ResolvedRecipientsResponse,
    VisibilityClauseResponse,
    VisibilityResponse,
    ProblemResponse
)

__all__ = [
    # Base
    "DirectoryRecord",
    "ValueObject",

    # Enums
    "TargetKind",
    "DeliveryStatus",
    "GeoDimension",

    # Entities
    "DEFAULT_LOCATION_FIELDS",
    "DistributionTarget",
    "ActiveUser",
    "RoleGroup",
    "TeamMembership",
    "UserGeography",
    "LocationClause",
    "VisibilityPredicate",
    "DeliveryRecord",
    "normalise_role_code",

    # Requests
    "ResolveRecipientsRequest",
    "VisibilityQuery",

    # Responses
    "RecipientSource",
    "ResolvedRecipientsResponse",
    "VisibilityClauseResponse",
    "VisibilityResponse",
    "ProblemResponse"
]
