# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Geography resolution: a user's role code and location attributes.
"""

import logging
from opentelemetry import trace

from ..exceptions import NotFoundException
from ..models.entities import UserGeography
from .directory import EntityDirectory, directory_errors

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class GeographyResolver:
    """Looks up the UserGeography of a directory user."""

    def __init__(self, directory: EntityDirectory):
        self.directory = directory

    def geography_of(self, user_id: int) -> UserGeography:
        """
        Resolve a user's geography.

        Args:
            user_id: Directory user id

        Returns:
            UserGeography; location fields the directory leaves null are omitted

        Raises:
            NotFoundException: If the user has no active directory record
            DirectoryUnavailableException: If the directory cannot be reached
        """
        with tracer.start_as_current_span("geography.resolve") as span:
            span.set_attribute("user.id", user_id)

            with directory_errors("find_geography"):
                geography = self.directory.find_geography(user_id)

            if geography is None:
                span.set_attribute("geography.found", False)
                logger.warning(
                    "No active e-filing profile for user",
                    extra={"user_id": user_id}
                )
                raise NotFoundException(f"No active e-filing profile found for user {user_id}")

            span.set_attributes({
                "geography.found": True,
                "geography.role_code": geography.role_code,
                "geography.zone_count": len(geography.zone_ids),
                "geography.has_location": geography.has_location()
            })

            return geography
