# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for the HTTP embedding.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field


class ResolveRecipientsRequest(BaseModel):
    """Request model for expanding distribution targets."""

    # Kept as raw mappings; target shape is validated by the resolver so that
    # malformed targets surface as ValidationException like any other caller.
    targets: List[Dict[str, Any]] = Field(..., description="Targets as {type, id} objects")


class VisibilityQuery(BaseModel):
    """Query parameters for building a visibility predicate."""

    user_id: Optional[int] = Field(None, description="Caller's user id")
    system_role: Optional[int] = Field(None, description="Caller's system role")
