# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Scoping service - the call-level operations distribution and listing flows use.

Distribution flows call `resolve_recipients` and persist the result as
delivery or attendee rows. Listing flows call `build_visibility_predicate`
(or `resolve_request_scope`) and hand the predicate to their storage layer.
"""

import logging
from typing import Any, Iterable, Optional
from opentelemetry import trace

from ..domain.recipients import ResolvedRecipientSet, TargetInput
from ..domain.visibility import RequestScope, is_admin_system_role
from ..exceptions import AuthenticationException
from ..models.entities import VisibilityPredicate
from ..settings import ScopingSettings, get_scoping_settings
from .directory import EntityDirectory, MongoEntityDirectory
from .geography import GeographyResolver
from .mongodb import MongoDBService, get_mongodb_service
from .recipients import RecipientResolver
from .visibility import VisibilityScoper

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class ScopingService:
    """Facade over the recipient resolver, geography resolver and visibility scoper."""

    def __init__(self, directory: EntityDirectory, settings: Optional[ScopingSettings] = None):
        self.settings = settings or get_scoping_settings()
        self.directory = directory
        self.recipient_resolver = RecipientResolver(directory)
        self.geography_resolver = GeographyResolver(directory)
        self.visibility_scoper = VisibilityScoper(self.settings.global_role_codes)

    def resolve_recipients(self, targets: Iterable[TargetInput]) -> ResolvedRecipientSet:
        """Expand distribution targets into the active recipient set."""
        return self.recipient_resolver.resolve(targets)

    def build_visibility_predicate(self, user_id: Optional[int], system_role: Any = None) -> VisibilityPredicate:
        """
        Build the visibility predicate for a caller.

        Args:
            user_id: Caller's directory user id
            system_role: Caller's system role; top administrative roles are
                treated as global without a directory lookup

        Returns:
            VisibilityPredicate

        Raises:
            AuthenticationException: If no user id is given for a non-admin caller
            NotFoundException: If the caller has no active directory record
            DirectoryUnavailableException: If the directory cannot be reached
        """
        return self.resolve_request_scope(user_id, system_role).predicate

    def resolve_request_scope(self, user_id: Optional[int], system_role: Any = None) -> RequestScope:
        """Resolve global status, geography and predicate for one request."""
        with tracer.start_as_current_span("scoping.request_scope") as span:
            if is_admin_system_role(system_role, self.settings.admin_system_roles):
                span.set_attribute("scoping.admin_bypass", True)
                logger.debug(
                    "Administrative system role bypasses geography resolution",
                    extra={"user_id": user_id, "system_role": system_role}
                )
                return RequestScope(
                    user_id=user_id,
                    is_global=True,
                    predicate=self.visibility_scoper.scope(None, True)
                )

            if user_id is None:
                raise AuthenticationException("An authenticated e-filing user is required for scoped listings")

            span.set_attribute("scoping.admin_bypass", False)
            geography = self.geography_resolver.geography_of(user_id)
            is_global = self.visibility_scoper.is_global(geography.role_code)

            return RequestScope(
                user_id=user_id,
                is_global=is_global,
                predicate=self.visibility_scoper.scope(geography, is_global),
                geography=geography
            )


def create_scoping_service(settings: Optional[ScopingSettings] = None,
                           mongodb_service: Optional[MongoDBService] = None) -> ScopingService:
    """
    Create a ScopingService backed by the MongoDB entity directory.

    Args:
        settings: Process settings (defaults to the environment)
        mongodb_service: Connection service (defaults to the singleton)

    Returns:
        Configured ScopingService
    """
    settings = settings or get_scoping_settings()
    directory = MongoEntityDirectory(mongodb_service or get_mongodb_service())
    return ScopingService(directory, settings)
