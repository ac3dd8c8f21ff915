# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for recipient resolution and visibility scoping.
"""

import json
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
from pydantic import AliasChoices, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel
from .base import DirectoryRecord, ValueObject, is_absent, optional_id
from .enums import TargetKind, DeliveryStatus, GeoDimension


DEFAULT_LOCATION_FIELDS: Dict[GeoDimension, str] = {
    dimension: dimension.value for dimension in GeoDimension
}


def normalise_role_code(code: Any) -> str:
    """Role codes are compared stripped and upper-cased."""
    return str(code or "").strip().upper()


def _read_field(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


class DistributionTarget(ValueObject):
    """Abstract description of who should receive an item, before expansion."""

    kind: TargetKind = Field(
        ...,
        validation_alias=AliasChoices('kind', 'type'),
        description="Target kind"
    )
    reference_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices('reference_id', 'referenceId', 'id'),
        description="Referenced user, role, group, manager or department id"
    )

    @field_validator('kind', mode='before')
    @classmethod
    def normalise_kind(cls, v):
        """Accept kinds in any letter case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def requires_reference(self) -> bool:
        """Every kind except EVERYONE names a concrete directory record."""
        return self.kind != TargetKind.EVERYONE

    def to_wire(self) -> Dict[str, Any]:
        """Shape used by distribution payloads: {"type": ..., "id": ...}."""
        return {"type": self.kind.value, "id": self.reference_id}


class ActiveUser(DirectoryRecord):
    """Directory projection of an e-filing user."""

    model_config = ConfigDict(alias_generator=to_camel)

    id: int = Field(..., description="E-filing user id")
    is_active: bool = Field(default=True, description="Whether the user may receive items")
    role_id: Optional[int] = Field(None, description="Assigned e-filing role")
    department_id: Optional[int] = Field(None, description="Department")
    district_id: Optional[int] = Field(None, description="District")
    town_id: Optional[int] = Field(None, description="Town")
    subtown_id: Optional[int] = Field(None, description="Sub-town")
    division_id: Optional[int] = Field(None, description="Division")

    @field_validator('role_id', 'department_id', 'district_id', 'town_id',
                     'subtown_id', 'division_id', mode='before')
    @classmethod
    def coerce_optional_ids(cls, v):
        """Empty strings from legacy rows mean absent."""
        return optional_id(v)


class RoleGroup(DirectoryRecord):
    """Named group of role codes used as a single distribution target."""

    model_config = ConfigDict(alias_generator=to_camel)

    id: int = Field(..., description="Role group id")
    name: Optional[str] = Field(None, description="Display name")
    is_active: bool = Field(default=True, description="Inactive groups expand to nobody")
    role_codes: List[str] = Field(default_factory=list, description="Member role codes")

    @field_validator('role_codes', mode='before')
    @classmethod
    def parse_role_codes(cls, v):
        """Accept a native list or its JSON-serialized form."""
        if v is None:
            return []
        if isinstance(v, bytes):
            v = v.decode('utf-8')
        if isinstance(v, str):
            text = v.strip()
            if not text:
                return []
            try:
                v = json.loads(text)
            except ValueError:
                raise ValueError('role_codes is neither a list nor a serialized list')
        if not isinstance(v, (list, tuple)):
            raise ValueError('role_codes must be a list of strings')
        return [normalise_role_code(code) for code in v if normalise_role_code(code)]

    def unique_role_codes(self) -> List[str]:
        """Role codes without duplicates, first occurrence wins."""
        return list(dict.fromkeys(self.role_codes))


class TeamMembership(DirectoryRecord):
    """Manager/member relation; a team is identified by its manager."""

    model_config = ConfigDict(alias_generator=to_camel)

    manager_id: int = Field(..., description="Team manager user id")
    member_id: int = Field(..., alias="teamMemberId", description="Team member user id")
    is_active: bool = Field(default=True, description="Whether the membership is current")


class UserGeography(ValueObject):
    """A user's role code and organizational location attributes."""

    role_code: str = Field(default="", description="Upper-cased role code")
    zone_ids: FrozenSet[int] = Field(default_factory=frozenset, description="Zones assigned via the role")
    division_id: Optional[int] = Field(None, description="Division, if any")
    district_id: Optional[int] = Field(None, description="District, if any")
    town_id: Optional[int] = Field(None, description="Town, if any")
    subtown_id: Optional[int] = Field(None, description="Sub-town, if any")

    @field_validator('role_code', mode='before')
    @classmethod
    def normalise_role(cls, v):
        return normalise_role_code(v)

    @field_validator('zone_ids', mode='before')
    @classmethod
    def drop_empty_zones(cls, v):
        """Absent zone references are dropped."""
        return frozenset(int(zone) for zone in (v or []) if not is_absent(zone))

    @field_validator('division_id', 'district_id', 'town_id', 'subtown_id', mode='before')
    @classmethod
    def coerce_optional_ids(cls, v):
        return optional_id(v)

    @classmethod
    def from_user(cls, user: ActiveUser, role_code: Optional[str],
                  zone_ids: Iterable[Optional[int]] = ()) -> "UserGeography":
        """Build a geography from a directory user record."""
        return cls(
            role_code=role_code,
            zone_ids=list(zone_ids),
            division_id=user.division_id,
            district_id=user.district_id,
            town_id=user.town_id,
            subtown_id=user.subtown_id
        )

    def has_location(self) -> bool:
        """Check whether any scoping dimension is populated."""
        return bool(self.zone_ids) or any(
            value is not None for value in (self.division_id, self.district_id, self.town_id)
        )


class LocationClause(ValueObject):
    """A single `entity.<dimension> IN values` disjunct."""

    dimension: GeoDimension = Field(..., description="Location dimension")
    values: FrozenSet[int] = Field(..., min_length=1, description="Accepted ids")

    def matches(self, value: Any) -> bool:
        """Check an entity's raw location value, tolerating numeric strings."""
        if is_absent(value):
            return False
        try:
            return int(value) in self.values
        except (TypeError, ValueError):
            return False


class VisibilityPredicate(ValueObject):
    """
    Composable description of which location-tagged entities a caller sees.

    Either unrestricted, or a disjunction of location clauses OR'd with an
    "entity carries no location tag" clause. A predicate with no clauses is
    fail-closed: only untagged entities match.
    """

    unrestricted: bool = Field(default=False, description="All entities visible")
    clauses: Tuple[LocationClause, ...] = Field(default=(), description="Location disjuncts")
    include_untagged: bool = Field(default=True, description="Untagged entities always visible")

    @classmethod
    def allow_all(cls) -> "VisibilityPredicate":
        return cls(unrestricted=True)

    @property
    def is_fail_closed(self) -> bool:
        return not self.unrestricted and not self.clauses

    def matches(self, record: Any, field_map: Optional[Mapping[GeoDimension, str]] = None) -> bool:
        """
        Evaluate the predicate against a single record.

        Args:
            record: Mapping or object exposing location fields
            field_map: Dimension to record-field mapping; dimensions left out
                are not considered on this entity type

        Returns:
            True if the record is visible
        """
        if self.unrestricted:
            return True

        fields = DEFAULT_LOCATION_FIELDS if field_map is None else field_map

        if self.include_untagged and all(is_absent(_read_field(record, key)) for key in fields.values()):
            return True

        for clause in self.clauses:
            key = fields.get(clause.dimension)
            if key and clause.matches(_read_field(record, key)):
                return True

        return False

    def filter_visible(self, records: Iterable[Any],
                       field_map: Optional[Mapping[GeoDimension, str]] = None) -> List[Any]:
        """Filter records to the visible ones, preserving order."""
        return [record for record in records if self.matches(record, field_map)]

    def to_dict(self) -> Dict[str, Any]:
        """Plain description for logs and HTTP responses."""
        return {
            "unrestricted": self.unrestricted,
            "include_untagged": self.include_untagged,
            "clauses": [
                {"dimension": clause.dimension.value, "values": sorted(clause.values)}
                for clause in self.clauses
            ]
        }


class DeliveryRecord(ValueObject):
    """Row a distribution flow persists for each resolved recipient."""

    user_id: int = Field(..., description="Recipient e-filing user id")
    source_kind: TargetKind = Field(..., description="Kind of target that produced the recipient")
    source_id: Optional[int] = Field(None, description="Reference id of that target")
    status: DeliveryStatus = Field(default=DeliveryStatus.PENDING, description="Delivery status")
