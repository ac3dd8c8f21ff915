# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models shared by directory projections and value objects.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


def is_absent(value: Any) -> bool:
    """
    Check for a missing id.

    Legacy rows store a missing reference as null, an empty string or zero;
    all three mean the same thing.
    """
    if value is None:
        return True
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return True
    try:
        return int(value) == 0
    except (TypeError, ValueError):
        return False


def optional_id(value: Any) -> Optional[int]:
    """Coerce a directory id to int, keeping absent values absent."""
    if is_absent(value):
        return None
    return int(value)


class DirectoryRecord(BaseModel):
    """Base for read-only projections owned by the entity directory."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # The core never mutates directory data
        frozen=True,
        # Ignore storage-specific extras such as timestamps
        extra="ignore"
    )


class ValueObject(BaseModel):
    """Base for immutable values created per call."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True
    )
