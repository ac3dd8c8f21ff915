# SPDX-License-Identifier: Apache-2.0

"""
Recipient domain logic for distribution target handling.

This module contains pure functions for target validation and normalisation,
and the value object returned by recipient resolution.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Union
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationException
from ..models.entities import DistributionTarget, DeliveryRecord
from ..models.enums import TargetKind, DeliveryStatus

TargetInput = Union[DistributionTarget, Mapping[str, Any]]


@dataclass(frozen=True)
class ResolvedRecipientSet:
    """
    Deduplicated set of concrete, active recipient ids.

    Equality compares the ids only; `sources` records which target first
    contributed each recipient and depends on input order.
    """
    user_ids: FrozenSet[int]
    sources: Mapping[int, DistributionTarget] = field(default_factory=dict, compare=False)

    @classmethod
    def from_sources(cls, sources: Mapping[int, DistributionTarget]) -> "ResolvedRecipientSet":
        return cls(user_ids=frozenset(sources), sources=dict(sources))

    def __len__(self) -> int:
        return len(self.user_ids)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self.user_ids

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.user_ids))

    def delivery_rows(self, status: DeliveryStatus = DeliveryStatus.PENDING) -> List[DeliveryRecord]:
        """
        Build the rows a distribution flow persists, one per recipient.

        Args:
            status: Initial delivery status

        Returns:
            Delivery records sorted by user id
        """
        rows = []
        for user_id in self:
            source = self.sources.get(user_id)
            rows.append(DeliveryRecord(
                user_id=user_id,
                source_kind=source.kind if source else TargetKind.USER,
                source_id=source.reference_id if source else user_id,
                status=status
            ))
        return rows


def _format_errors(error: PydanticValidationError, index: int) -> List[Dict[str, Any]]:
    return [
        {
            "field": f"targets[{index}]." + ".".join(str(loc) for loc in err.get("loc", ())),
            "message": err.get("msg"),
            "input": err.get("input")
        }
        for err in error.errors()
    ]


def coerce_target(raw: TargetInput, index: int = 0) -> DistributionTarget:
    """
    Convert a raw target into a DistributionTarget.

    Args:
        raw: DistributionTarget or mapping such as {"type": "ROLE", "id": 4}
        index: Position in the input list, used in error messages

    Returns:
        DistributionTarget

    Raises:
        ValidationException: If the target has an unknown kind or bad shape
    """
    if isinstance(raw, DistributionTarget):
        return raw

    if not isinstance(raw, Mapping):
        raise ValidationException(
            f"Target {index} must be an object with a type",
            [{"field": f"targets[{index}]", "message": "expected an object", "input": raw}]
        )

    try:
        return DistributionTarget.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationException(f"Malformed distribution target at position {index}", _format_errors(e, index))


def validate_target(target: DistributionTarget, index: int = 0) -> DistributionTarget:
    """
    Check reference requirements and canonicalise a target.

    EVERYONE ignores its reference id, so it is dropped to make equal targets
    compare equal.
    """
    if target.kind == TargetKind.EVERYONE:
        if target.reference_id is not None:
            return target.model_copy(update={"reference_id": None})
        return target

    if target.reference_id is None:
        raise ValidationException(
            f"Target {index} of type {target.kind.value} requires a reference id",
            [{"field": f"targets[{index}].id", "message": "reference id is required", "input": None}]
        )

    return target


def validate_targets(targets: Iterable[TargetInput]) -> List[DistributionTarget]:
    """
    Validate a whole target list before any directory access.

    Args:
        targets: Raw or typed targets

    Returns:
        Canonical targets in input order

    Raises:
        ValidationException: On the first malformed target
    """
    if targets is None or isinstance(targets, (str, bytes, Mapping)):
        raise ValidationException("Targets must be a list")

    return [
        validate_target(coerce_target(raw, index), index)
        for index, raw in enumerate(targets)
    ]


def unique_targets(targets: Iterable[DistributionTarget]) -> List[DistributionTarget]:
    """Drop repeated targets, keeping first-seen order."""
    return list(dict.fromkeys(targets))
