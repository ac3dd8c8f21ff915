# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Visibility scoping for location-tagged entities such as file types.
"""

import logging
from typing import AbstractSet, Optional
from opentelemetry import trace

from ..domain.visibility import build_visibility_predicate, is_global_role
from ..models.entities import UserGeography, VisibilityPredicate

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class VisibilityScoper:
    """Builds visibility predicates from a caller's geography."""

    def __init__(self, global_role_codes: AbstractSet[str]):
        self.global_role_codes = frozenset(global_role_codes)

    def is_global(self, role_code: Optional[str]) -> bool:
        """Check the role code against the static global role set."""
        return is_global_role(role_code, self.global_role_codes)

    def scope(self, geography: Optional[UserGeography], is_global: bool) -> VisibilityPredicate:
        """
        Build the predicate selecting entities visible to a caller.

        Args:
            geography: Caller's geography (ignored for global callers)
            is_global: Whether the caller bypasses geography scoping

        Returns:
            VisibilityPredicate
        """
        with tracer.start_as_current_span("visibility.scope") as span:
            predicate = build_visibility_predicate(geography, is_global)

            span.set_attributes({
                "visibility.global": is_global,
                "visibility.unrestricted": predicate.unrestricted,
                "visibility.clause_count": len(predicate.clauses)
            })

            if predicate.is_fail_closed:
                logger.info(
                    "Caller has no geography; only untagged entities are visible",
                    extra={"role_code": geography.role_code if geography else None}
                )

            return predicate

    def scope_for(self, geography: UserGeography) -> VisibilityPredicate:
        """Scope a caller whose global status follows from their role code."""
        return self.scope(geography, self.is_global(geography.role_code))
