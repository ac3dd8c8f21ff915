# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for geography resolution and the scoping service facade.
"""

import pytest
from unittest.mock import MagicMock, Mock
from pymongo.errors import NetworkTimeout

from efiling_access.exceptions import (
    AuthenticationException, DirectoryUnavailableException, NotFoundException
)
from efiling_access.models.enums import GeoDimension
from efiling_access.services.directory import EntityDirectory, MongoEntityDirectory
from efiling_access.services.geography import GeographyResolver
from efiling_access.services.scoping import ScopingService, create_scoping_service
from efiling_access.settings import ScopingSettings


class TestGeographyResolver:
    """Test geography lookup."""

    def test_geography_with_zones(self, directory):
        """Test zones come from the user's role and null zones are dropped."""
        geography = GeographyResolver(directory).geography_of(12)

        assert geography.role_code == "XEN"
        assert geography.zone_ids == frozenset({21, 22})
        assert geography.division_id == 5
        assert geography.town_id == 7
        assert geography.district_id is None

    def test_geography_without_location(self, directory):
        geography = GeographyResolver(directory).geography_of(16)

        assert geography.role_code == "CLERK"
        assert not geography.has_location()

    def test_user_without_role(self, directory):
        geography = GeographyResolver(directory).geography_of(17)

        assert geography.role_code == ""
        assert geography.zone_ids == frozenset()

    def test_unknown_user(self, directory):
        with pytest.raises(NotFoundException) as exc_info:
            GeographyResolver(directory).geography_of(999)

        assert exc_info.value.status_code == 404

    def test_inactive_user(self, directory):
        with pytest.raises(NotFoundException):
            GeographyResolver(directory).geography_of(13)

    def test_directory_failure(self):
        failing = MagicMock(spec=EntityDirectory)
        failing.find_geography.side_effect = NetworkTimeout("timed out")

        with pytest.raises(DirectoryUnavailableException):
            GeographyResolver(failing).geography_of(12)


class TestScopingService:
    """Test the call-level scoping operations."""

    def test_resolve_recipients(self, scoping_service):
        result = scoping_service.resolve_recipients([{"type": "ROLE_GROUP", "id": 7}])

        assert result.user_ids == {10, 11}

    def test_division_caller_predicate(self, scoping_service):
        predicate = scoping_service.build_visibility_predicate(10)

        assert not predicate.unrestricted
        assert len(predicate.clauses) == 1
        assert predicate.clauses[0].dimension == GeoDimension.DIVISION
        assert predicate.clauses[0].values == frozenset({5})

    def test_global_role_caller(self, scoping_service):
        scope = scoping_service.resolve_request_scope(15)

        assert scope.is_global
        assert scope.predicate.unrestricted
        assert scope.geography.role_code == "CEO"

    def test_fail_closed_caller(self, scoping_service):
        scope = scoping_service.resolve_request_scope(16)

        assert not scope.is_global
        assert scope.predicate.is_fail_closed

    def test_admin_system_role_skips_directory(self, test_settings):
        directory = Mock(spec=EntityDirectory)
        service = ScopingService(directory, test_settings)

        scope = service.resolve_request_scope(999, system_role=1)

        assert scope.is_global
        assert scope.predicate.unrestricted
        assert scope.geography is None
        assert directory.method_calls == []

    def test_admin_system_role_without_user(self, scoping_service):
        assert scoping_service.build_visibility_predicate(None, system_role="2").unrestricted

    def test_missing_user_id(self, scoping_service):
        with pytest.raises(AuthenticationException) as exc_info:
            scoping_service.build_visibility_predicate(None, system_role=5)

        assert exc_info.value.status_code == 401

    def test_unknown_user(self, scoping_service):
        with pytest.raises(NotFoundException):
            scoping_service.build_visibility_predicate(999)

    def test_configured_global_roles(self, directory):
        settings = ScopingSettings(environment="test", global_role_codes="xen", otel_enabled=False)
        service = ScopingService(directory, settings)

        assert service.build_visibility_predicate(12).unrestricted
        assert not service.build_visibility_predicate(15).unrestricted

    def test_resolution_ignores_caller_geography(self, scoping_service):
        """Test recipients outside the sender's division are still resolved."""
        predicate = scoping_service.build_visibility_predicate(10)
        recipients = scoping_service.resolve_recipients([{"type": "DEPARTMENT", "id": 300}])

        assert recipients.user_ids == {14, 20}
        assert not predicate.matches({"district_id": 9})

    def test_create_scoping_service(self, test_settings):
        mongodb_service = MagicMock()

        service = create_scoping_service(test_settings, mongodb_service)

        assert isinstance(service.directory, MongoEntityDirectory)
        assert service.directory.mongodb_service is mongodb_service
        assert service.settings is test_settings
