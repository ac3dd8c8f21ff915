# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Scoping endpoints: recipient resolution and visibility predicates.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import ValidationError as PydanticValidationError
import logging

from ..exceptions import ValidationException
from ..models.requests import ResolveRecipientsRequest, VisibilityQuery
from ..models.responses import (
    RecipientSource,
    ResolvedRecipientsResponse,
    VisibilityClauseResponse,
    VisibilityResponse
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

scoping_tag = Tag(name="Scoping", description="Recipient resolution and visibility scoping")
scoping_bp = APIBlueprint(
    'scoping',
    __name__,
    url_prefix='/api/scoping',
    abp_tags=[scoping_tag]
)


def _validation_errors(error: PydanticValidationError):
    return [
        {
            "field": ".".join(str(loc) for loc in err.get("loc", ())),
            "message": err.get("msg")
        }
        for err in error.errors()
    ]


@scoping_bp.post('/recipients')
def resolve_recipients():
    """
    Resolve distribution targets into recipients.

    Accepts {"targets": [{"type": "ROLE", "id": 4}, ...]} and returns the
    deduplicated active recipients with the target that produced each one.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationException("Request body must be a JSON object")

    try:
        body = ResolveRecipientsRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationException("Invalid recipient resolution request", _validation_errors(e))

    with tracer.start_as_current_span("scoping.http.resolve_recipients") as span:
        span.set_attribute("recipients.target_count", len(body.targets))
        resolved = current_app.scoping_service.resolve_recipients(body.targets)

    response = ResolvedRecipientsResponse(
        recipients=list(resolved),
        count=len(resolved),
        sources={
            str(user_id): RecipientSource(type=target.kind.value, id=target.reference_id)
            for user_id, target in sorted(resolved.sources.items())
        }
    )

    return jsonify(response.model_dump()), 200


@scoping_bp.get('/visibility')
def get_visibility():
    """
    Build the visibility predicate for a caller.

    Query parameters: user_id, system_role. Top administrative system roles
    receive an unrestricted predicate without a directory lookup.
    """
    try:
        query = VisibilityQuery.model_validate(request.args.to_dict())
    except PydanticValidationError as e:
        raise ValidationException("Invalid visibility query", _validation_errors(e))

    with tracer.start_as_current_span("scoping.http.visibility") as span:
        if query.user_id is not None:
            span.set_attribute("user.id", query.user_id)
        scope = current_app.scoping_service.resolve_request_scope(query.user_id, query.system_role)

    logger.debug(
        "Visibility predicate built",
        extra={"user_id": scope.user_id, "is_global": scope.is_global}
    )
    predicate = scope.predicate

    response = VisibilityResponse(
        user_id=scope.user_id,
        is_global=scope.is_global,
        unrestricted=predicate.unrestricted,
        include_untagged=predicate.include_untagged,
        clauses=[
            VisibilityClauseResponse(dimension=clause["dimension"], values=clause["values"])
            for clause in predicate.to_dict()["clauses"]
        ]
    )

    return jsonify(response.model_dump()), 200
