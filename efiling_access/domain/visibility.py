# SPDX-License-Identifier: Apache-2.0

"""
Visibility domain logic for geography-scoped listings.

This module contains pure functions for global-role checks and for composing
a VisibilityPredicate from a caller's geography.
"""

from dataclasses import dataclass
from typing import Any, AbstractSet, List, Optional

from ..models.entities import (
    LocationClause, UserGeography, VisibilityPredicate, normalise_role_code
)
from ..models.enums import GeoDimension


@dataclass(frozen=True)
class RequestScope:
    """Scope computed for one listing request."""
    user_id: Optional[int]
    is_global: bool
    predicate: VisibilityPredicate
    geography: Optional[UserGeography] = None


def is_global_role(role_code: Optional[str], global_role_codes: AbstractSet[str]) -> bool:
    """
    Check if a role code is exempt from geography scoping.

    Args:
        role_code: Caller's role code, any letter case
        global_role_codes: Upper-cased global role codes

    Returns:
        True if the role grants global visibility
    """
    code = normalise_role_code(role_code)
    return bool(code) and code in global_role_codes


def is_admin_system_role(system_role: Any, admin_system_roles: AbstractSet[int]) -> bool:
    """Check if a system role is one of the top administrative roles."""
    if system_role is None or system_role == "":
        return False
    try:
        return int(system_role) in admin_system_roles
    except (TypeError, ValueError):
        return False


def build_location_clauses(geography: UserGeography) -> List[LocationClause]:
    """
    Build one disjunct per populated geography dimension.

    Dimensions absent from the geography contribute nothing.
    """
    clauses = []

    if geography.zone_ids:
        clauses.append(LocationClause(dimension=GeoDimension.ZONE, values=geography.zone_ids))

    if geography.division_id is not None:
        clauses.append(LocationClause(dimension=GeoDimension.DIVISION, values={geography.division_id}))

    if geography.district_id is not None:
        clauses.append(LocationClause(dimension=GeoDimension.DISTRICT, values={geography.district_id}))

    if geography.town_id is not None:
        clauses.append(LocationClause(dimension=GeoDimension.TOWN, values={geography.town_id}))

    return clauses


def build_visibility_predicate(geography: Optional[UserGeography], is_global: bool) -> VisibilityPredicate:
    """
    Compose the visibility predicate for a caller.

    Args:
        geography: Caller's geography; may be None only for global callers
        is_global: Whether the caller bypasses geography scoping

    Returns:
        Unrestricted predicate for global callers, otherwise location clauses
        OR'd with the untagged-entity clause. A caller without any geography
        sees only untagged entities.
    """
    if is_global:
        return VisibilityPredicate.allow_all()

    clauses = build_location_clauses(geography) if geography is not None else []

    return VisibilityPredicate(clauses=tuple(clauses), include_untagged=True)
