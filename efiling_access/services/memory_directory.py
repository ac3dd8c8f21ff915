# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
In-memory entity directory for tests, fixtures and local development.

NOT FOR PRODUCTION USE - data lives in the process only.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from ..models.entities import ActiveUser, RoleGroup, TeamMembership, UserGeography, normalise_role_code


class InMemoryEntityDirectory:
    """
    EntityDirectory backed by plain dictionaries.

    Mirrors MongoEntityDirectory semantics: only active users are returned and
    team members must have an active membership and an active user record.
    """

    def __init__(
        self,
        users: Iterable[ActiveUser] = (),
        roles: Optional[Mapping[int, str]] = None,
        role_groups: Iterable[RoleGroup] = (),
        memberships: Iterable[TeamMembership] = (),
        role_zones: Optional[Mapping[int, Iterable[Optional[int]]]] = None,
    ) -> None:
        self._users: Dict[int, ActiveUser] = {user.id: user for user in users}
        self._roles: Dict[int, str] = {  # role_id -> role code
            role_id: normalise_role_code(code) for role_id, code in (roles or {}).items()
        }
        self._role_groups: Dict[int, RoleGroup] = {group.id: group for group in role_groups}
        self._memberships: List[TeamMembership] = list(memberships)
        self._role_zones: Dict[int, List[Optional[int]]] = {
            role_id: list(zones) for role_id, zones in (role_zones or {}).items()
        }

    def _active(self) -> List[ActiveUser]:
        return [self._users[user_id] for user_id in sorted(self._users) if self._users[user_id].is_active]

    def find_active_user_by_id(self, user_id: int) -> Optional[ActiveUser]:
        user = self._users.get(user_id)
        return user if user is not None and user.is_active else None

    def find_active_users_by_role(self, role_id: int) -> List[ActiveUser]:
        return [user for user in self._active() if user.role_id == role_id]

    def find_active_users_by_department(self, department_id: int) -> List[ActiveUser]:
        return [user for user in self._active() if user.department_id == department_id]

    def find_active_users_by_role_codes_any(self, codes: List[str]) -> List[ActiveUser]:
        wanted = set(codes)
        role_ids = {role_id for role_id, code in self._roles.items() if code in wanted}
        return [user for user in self._active() if user.role_id in role_ids]

    def find_all_active_users(self) -> List[ActiveUser]:
        return self._active()

    def find_role_group(self, group_id: int) -> Optional[RoleGroup]:
        return self._role_groups.get(group_id)

    def find_team_members(self, manager_id: int) -> List[int]:
        member_ids = {
            membership.member_id
            for membership in self._memberships
            if membership.manager_id == manager_id and membership.is_active
        }
        return sorted(user_id for user_id in member_ids if self.find_active_user_by_id(user_id))

    def find_geography(self, user_id: int) -> Optional[UserGeography]:
        user = self.find_active_user_by_id(user_id)
        if user is None:
            return None

        role_code = self._roles.get(user.role_id) if user.role_id is not None else None
        zone_ids = self._role_zones.get(user.role_id, []) if user.role_id is not None else []

        return UserGeography.from_user(user, role_code, zone_ids)
