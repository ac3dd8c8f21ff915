# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for recipient resolution.
"""

import pytest
from unittest.mock import MagicMock
from pymongo.errors import ServerSelectionTimeoutError

from efiling_access.exceptions import DirectoryUnavailableException, ValidationException
from efiling_access.models.entities import DistributionTarget
from efiling_access.models.enums import DeliveryStatus, TargetKind
from efiling_access.services.directory import EntityDirectory
from efiling_access.services.recipients import RecipientResolver


def target(kind: str, reference_id=None) -> DistributionTarget:
    return DistributionTarget(kind=kind, reference_id=reference_id)


class TestTargetExpansion:
    """Test expansion of each target kind."""

    @pytest.fixture
    def resolver(self, directory):
        return RecipientResolver(directory)

    def test_user_target_active(self, resolver):
        assert resolver.resolve([target("USER", 10)]).user_ids == {10}

    def test_user_target_inactive_contributes_nothing(self, resolver):
        assert resolver.resolve([target("USER", 13)]).user_ids == set()

    def test_user_target_unknown_contributes_nothing(self, resolver):
        assert resolver.resolve([target("USER", 999)]).user_ids == set()

    def test_role_target_excludes_inactive_holders(self, resolver):
        assert resolver.resolve([target("ROLE", 3)]).user_ids == {10, 11}
        assert resolver.resolve([target("ROLE", 4)]).user_ids == {12}

    def test_role_group_duplicate_codes_do_not_duplicate_result(self, resolver):
        result = resolver.resolve([target("ROLE_GROUP", 7)])

        assert result.user_ids == {10, 11}
        assert len(result) == 2

    def test_role_group_serialized_codes(self, resolver):
        result = resolver.resolve([target("ROLE_GROUP", 8)])

        # XEN holders plus active CLERK holders
        assert result.user_ids == {12, 14, 16, 20}

    def test_role_group_inactive_missing_or_empty(self, resolver):
        assert resolver.resolve([target("ROLE_GROUP", 9)]).user_ids == set()
        assert resolver.resolve([target("ROLE_GROUP", 99)]).user_ids == set()
        assert resolver.resolve([target("ROLE_GROUP", 10)]).user_ids == set()

    def test_team_includes_manager_and_active_members(self, resolver):
        result = resolver.resolve([target("TEAM", 20)])

        # 13 is an inactive user, 14 an inactive membership
        assert result.user_ids == {20, 11, 12}

    def test_team_without_members_contains_manager(self, resolver):
        assert resolver.resolve([target("TEAM", 10)]).user_ids == {10}

    def test_team_always_contains_raw_manager_id(self, resolver):
        assert 30 in resolver.resolve([target("TEAM", 30)])
        assert resolver.resolve([target("TEAM", 999)]).user_ids == {999}

    def test_department_target(self, resolver):
        assert resolver.resolve([target("DEPARTMENT", 100)]).user_ids == {10, 12}

    def test_everyone_returns_all_active_users(self, resolver):
        result = resolver.resolve([target("EVERYONE")])

        assert result.user_ids == {10, 11, 12, 14, 15, 16, 17, 20}
        assert 13 not in result
        assert 30 not in result

    def test_everyone_ignores_reference_id(self, resolver):
        with_ref = resolver.resolve([target("EVERYONE", 12345)])
        without_ref = resolver.resolve([target("EVERYONE")])

        assert with_ref == without_ref

    def test_raw_mappings_are_accepted(self, resolver):
        result = resolver.resolve([{"type": "role", "id": "3"}, {"kind": "USER", "referenceId": 12}])

        assert result.user_ids == {10, 11, 12}

    def test_empty_target_list(self, resolver):
        result = resolver.resolve([])

        assert result.user_ids == set()
        assert list(result) == []


class TestAggregation:
    """Test union semantics across targets."""

    @pytest.fixture
    def resolver(self, directory):
        return RecipientResolver(directory)

    def test_overlapping_targets_are_deduplicated(self, resolver):
        by_role = resolver.resolve([target("ROLE", 3)])
        by_department = resolver.resolve([target("DEPARTMENT", 100)])
        combined = resolver.resolve([target("ROLE", 3), target("DEPARTMENT", 100)])

        # User 10 holds role 3 and sits in department 100
        assert combined.user_ids == {10, 11, 12}
        assert len(combined) < len(by_role) + len(by_department)

    def test_disjoint_targets_add_up(self, resolver):
        by_role = resolver.resolve([target("ROLE", 4)])
        by_department = resolver.resolve([target("DEPARTMENT", 300)])
        combined = resolver.resolve([target("ROLE", 4), target("DEPARTMENT", 300)])

        assert len(combined) == len(by_role) + len(by_department)

    def test_resolution_is_idempotent(self, resolver):
        targets = [target("TEAM", 20), target("ROLE_GROUP", 8), target("USER", 15)]

        assert resolver.resolve(targets) == resolver.resolve(targets)

    def test_resolution_is_order_independent(self, resolver):
        targets = [target("DEPARTMENT", 200), target("ROLE", 4), target("TEAM", 20)]

        assert resolver.resolve(targets).user_ids == resolver.resolve(list(reversed(targets))).user_ids

    def test_inactive_user_never_resolved(self, resolver):
        targets = [target("USER", 13), target("ROLE", 4), target("DEPARTMENT", 100), target("TEAM", 20)]

        assert 13 not in resolver.resolve(targets)

    def test_repeated_targets_are_expanded_once(self, spy_directory):
        resolver = RecipientResolver(spy_directory)

        resolver.resolve([target("ROLE", 3), target("ROLE", 3), {"type": "ROLE", "id": 3}])

        assert spy_directory.find_active_users_by_role.call_count == 1

    def test_sources_record_first_contributing_target(self, resolver):
        result = resolver.resolve([target("ROLE", 3), target("DEPARTMENT", 100)])

        assert result.sources[10] == target("ROLE", 3)
        assert result.sources[12] == target("DEPARTMENT", 100)

    def test_delivery_rows(self, resolver):
        result = resolver.resolve([target("TEAM", 20)])

        rows = result.delivery_rows()

        assert [row.user_id for row in rows] == [11, 12, 20]
        assert all(row.status == DeliveryStatus.PENDING for row in rows)
        assert all(row.source_kind == TargetKind.TEAM and row.source_id == 20 for row in rows)

    def test_delivery_rows_with_status(self, resolver):
        rows = resolver.resolve([target("USER", 10)]).delivery_rows(DeliveryStatus.ACKNOWLEDGED)

        assert rows[0].status == DeliveryStatus.ACKNOWLEDGED


class TestValidation:
    """Test that malformed targets fail before any directory access."""

    def test_missing_reference_id(self, spy_directory):
        resolver = RecipientResolver(spy_directory)

        with pytest.raises(ValidationException) as exc_info:
            resolver.resolve([target("ROLE", 3), target("DEPARTMENT")])

        assert exc_info.value.status_code == 400
        assert exc_info.value.validation_errors[0]["field"] == "targets[1].id"
        assert spy_directory.method_calls == []

    def test_unknown_kind(self, spy_directory):
        resolver = RecipientResolver(spy_directory)

        with pytest.raises(ValidationException) as exc_info:
            resolver.resolve([{"type": "USER", "id": 10}, {"type": "COMMITTEE", "id": 1}])

        assert "position 1" in exc_info.value.message
        assert spy_directory.method_calls == []

    def test_non_object_target(self, spy_directory):
        resolver = RecipientResolver(spy_directory)

        with pytest.raises(ValidationException):
            resolver.resolve(["ROLE:3"])

        assert spy_directory.method_calls == []

    def test_targets_must_be_a_list(self, directory):
        resolver = RecipientResolver(directory)

        with pytest.raises(ValidationException):
            resolver.resolve({"type": "ROLE", "id": 3})


class TestDirectoryFailures:
    """Test that infrastructure failures abort resolution."""

    def test_pymongo_timeout_becomes_directory_unavailable(self, directory):
        failing = MagicMock(wraps=directory)
        failing.find_active_users_by_department.side_effect = ServerSelectionTimeoutError("no servers")
        resolver = RecipientResolver(failing)

        with pytest.raises(DirectoryUnavailableException) as exc_info:
            resolver.resolve([target("ROLE", 3), target("DEPARTMENT", 100)])

        assert exc_info.value.status_code == 503

    def test_builtin_timeout_becomes_directory_unavailable(self):
        failing = MagicMock(spec=EntityDirectory)
        failing.find_all_active_users.side_effect = TimeoutError("deadline exceeded")
        resolver = RecipientResolver(failing)

        with pytest.raises(DirectoryUnavailableException):
            resolver.resolve([target("EVERYONE")])

    def test_directory_unavailable_propagates(self):
        failing = MagicMock(spec=EntityDirectory)
        failing.find_team_members.side_effect = DirectoryUnavailableException("down")
        resolver = RecipientResolver(failing)

        with pytest.raises(DirectoryUnavailableException) as exc_info:
            resolver.resolve([target("TEAM", 20)])

        assert exc_info.value.message == "down"
