# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from unittest.mock import MagicMock

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['MONGODB_DATABASE'] = 'efiling_test'

from efiling_access.models.entities import ActiveUser, RoleGroup, TeamMembership
from efiling_access.services.memory_directory import InMemoryEntityDirectory
from efiling_access.services.scoping import ScopingService
from efiling_access.settings import ScopingSettings


@pytest.fixture
def test_settings():
    """Settings with the default global roles and tracing disabled."""
    return ScopingSettings(environment="test", otel_enabled=False, base_url="https://efiling.test")


@pytest.fixture
def sample_roles():
    """Role id to role code."""
    return {1: "CEO", 2: "COO", 3: "ENG", 4: "XEN", 5: "CLERK"}


@pytest.fixture
def sample_users():
    """Directory users covering every location shape."""
    return [
        ActiveUser(id=10, role_id=3, department_id=100, division_id=5),
        ActiveUser(id=11, role_id=3, department_id=200),
        ActiveUser(id=12, role_id=4, department_id=100, division_id=5, town_id=7),
        ActiveUser(id=13, role_id=4, department_id=100, is_active=False),
        ActiveUser(id=14, role_id=5, department_id=300, district_id=9),
        ActiveUser(id=15, role_id=1, department_id=400),
        ActiveUser(id=16, role_id=5, department_id=200),
        ActiveUser(id=17, department_id=500),
        ActiveUser(id=20, role_id=5, department_id=300),
        ActiveUser(id=30, role_id=5, department_id=300, is_active=False),
    ]


@pytest.fixture
def sample_role_groups():
    """Role groups in both list and serialized-list form."""
    return [
        RoleGroup(id=7, name="Engineering", role_codes=["ENG", "ENG"]),
        RoleGroup(id=8, name="Field staff", role_codes='["XEN", "CLERK"]'),
        RoleGroup(id=9, name="Retired", role_codes=["ENG"], is_active=False),
        RoleGroup(id=10, name="Empty", role_codes=[]),
    ]


@pytest.fixture
def sample_memberships():
    """Team of manager 20."""
    return [
        TeamMembership(manager_id=20, member_id=11),
        TeamMembership(manager_id=20, member_id=12),
        TeamMembership(manager_id=20, member_id=13),
        TeamMembership(manager_id=20, member_id=14, is_active=False),
    ]


@pytest.fixture
def directory(sample_users, sample_roles, sample_role_groups, sample_memberships):
    """In-memory entity directory with the sample data."""
    return InMemoryEntityDirectory(
        users=sample_users,
        roles=sample_roles,
        role_groups=sample_role_groups,
        memberships=sample_memberships,
        role_zones={4: [21, 22, None]}
    )


@pytest.fixture
def spy_directory(directory):
    """Directory spy that records every lookup."""
    return MagicMock(wraps=directory)


@pytest.fixture
def scoping_service(directory, test_settings):
    """Scoping service over the sample directory."""
    return ScopingService(directory, test_settings)
