# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for the HTTP embedding.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field


class RecipientSource(BaseModel):
    """Target that first contributed a recipient."""

    type: str = Field(..., description="Target kind")
    id: Optional[int] = Field(None, description="Target reference id")


class ResolvedRecipientsResponse(BaseModel):
    """Resolved recipient set."""

    recipients: List[int] = Field(default_factory=list, description="Sorted user ids")
    count: int = Field(..., description="Number of distinct recipients")
    sources: Dict[str, RecipientSource] = Field(default_factory=dict, description="Provenance per user id")


class VisibilityClauseResponse(BaseModel):
    """Location clause description."""

    dimension: str = Field(..., description="Location dimension")
    values: List[int] = Field(..., description="Accepted ids")


class VisibilityResponse(BaseModel):
    """Visibility predicate description for a caller."""

    user_id: Optional[int] = Field(None, description="Caller's user id")
    is_global: bool = Field(..., description="Whether the caller bypasses geography scoping")
    unrestricted: bool = Field(..., description="All entities visible")
    include_untagged: bool = Field(..., description="Untagged entities visible")
    clauses: List[VisibilityClauseResponse] = Field(default_factory=list, description="Location disjuncts")


class ProblemResponse(BaseModel):
    """RFC 7807 problem document."""

    type: str = Field(..., description="Problem type URI")
    title: str = Field(..., description="Short summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="Request path")
    errors: List[Dict[str, Any]] = Field(default_factory=list, description="Field-level validation errors")
