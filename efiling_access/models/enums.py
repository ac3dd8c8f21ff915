# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the e-filing access core.
"""

from enum import Enum


class TargetKind(str, Enum):
    """Abstract distribution target kinds."""
    USER = "USER"
    ROLE = "ROLE"
    ROLE_GROUP = "ROLE_GROUP"
    TEAM = "TEAM"
    DEPARTMENT = "DEPARTMENT"
    EVERYONE = "EVERYONE"


class DeliveryStatus(str, Enum):
    """Status lifecycle of a persisted delivery or attendee row."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    ACKNOWLEDGED = "ACKNOWLEDGED"


class GeoDimension(str, Enum):
    """Location dimensions an entity can be tagged with."""
    ZONE = "zone_id"
    DIVISION = "division_id"
    DISTRICT = "district_id"
    TOWN = "town_id"
