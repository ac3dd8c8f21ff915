# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Recipient resolution for daak distribution and meeting invitations.

Expands abstract distribution targets into the deduplicated set of active
users who should receive an item. Resolution is never geography filtered;
visibility scoping is a separate step applied to entities only.
"""

import logging
from typing import Callable, Dict, Iterable, List
from opentelemetry import trace

from ..domain.recipients import (
    ResolvedRecipientSet, TargetInput, unique_targets, validate_targets
)
from ..models.entities import DistributionTarget
from ..models.enums import TargetKind
from .directory import EntityDirectory, directory_errors

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class RecipientResolver:
    """Expands DistributionTargets into concrete active user ids."""

    def __init__(self, directory: EntityDirectory):
        self.directory = directory
        self._expanders: Dict[TargetKind, Callable[[DistributionTarget], List[int]]] = {
            TargetKind.USER: self._expand_user,
            TargetKind.ROLE: self._expand_role,
            TargetKind.ROLE_GROUP: self._expand_role_group,
            TargetKind.TEAM: self._expand_team,
            TargetKind.DEPARTMENT: self._expand_department,
            TargetKind.EVERYONE: self._expand_everyone,
        }

    def resolve(self, targets: Iterable[TargetInput]) -> ResolvedRecipientSet:
        """
        Resolve a list of distribution targets.

        Args:
            targets: DistributionTargets or {"type", "id"} mappings

        Returns:
            ResolvedRecipientSet with every active recipient exactly once

        Raises:
            ValidationException: If any target is malformed (before any lookup)
            DirectoryUnavailableException: If the directory cannot be reached
        """
        validated = validate_targets(targets)

        with tracer.start_as_current_span("recipients.resolve") as span:
            distinct = unique_targets(validated)
            span.set_attributes({
                "recipients.target_count": len(validated),
                "recipients.distinct_target_count": len(distinct),
                "recipients.target_kinds": sorted({target.kind.value for target in distinct})
            })

            sources: Dict[int, DistributionTarget] = {}
            for target in distinct:
                with directory_errors(f"expand {target.kind.value}"):
                    user_ids = self._expanders[target.kind](target)

                for user_id in user_ids:
                    sources.setdefault(user_id, target)

            result = ResolvedRecipientSet.from_sources(sources)
            span.set_attribute("recipients.count", len(result))

            logger.info(
                f"Resolved {len(result)} recipients from {len(validated)} targets",
                extra={
                    "target_count": len(validated),
                    "recipient_count": len(result)
                }
            )

            return result

    def _expand_user(self, target: DistributionTarget) -> List[int]:
        user = self.directory.find_active_user_by_id(target.reference_id)
        if user is None:
            logger.debug(f"User target {target.reference_id} is missing or inactive")
            return []
        return [user.id]

    def _expand_role(self, target: DistributionTarget) -> List[int]:
        return [user.id for user in self.directory.find_active_users_by_role(target.reference_id)]

    def _expand_role_group(self, target: DistributionTarget) -> List[int]:
        group = self.directory.find_role_group(target.reference_id)
        if group is None or not group.is_active:
            logger.debug(f"Role group {target.reference_id} is missing or inactive")
            return []

        codes = group.unique_role_codes()
        if not codes:
            return []

        return [user.id for user in self.directory.find_active_users_by_role_codes_any(codes)]

    def _expand_team(self, target: DistributionTarget) -> List[int]:
        members = self.directory.find_team_members(target.reference_id)
        # A manager always belongs to their own team
        return [target.reference_id, *members]

    def _expand_department(self, target: DistributionTarget) -> List[int]:
        return [user.id for user in self.directory.find_active_users_by_department(target.reference_id)]

    def _expand_everyone(self, target: DistributionTarget) -> List[int]:
        return [user.id for user in self.directory.find_all_active_users()]
