from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypedDict

from typing_extensions import Self

from instance_construction_engine.internal.util.multiformat import MultiformatModelMixin
from instance_construction_engine.internal.util.validation import validate_typed_dict


class ConstructionPolicyMapping(TypedDict, total=False):
    """
    Keys accepted by `ConstructionPolicy.from_mapping`.
    """

    ignore_unknown_data: bool
    nullable_is_optional: bool
    ignore_unchecked_assignments: bool


@dataclass(kw_only=True, frozen=True, slots=True)
class ConstructionPolicy(MultiformatModelMixin):
    """
    Policy knobs that decide which construction problems are only reported and
    which disqualify a constructor. Everything is strict by default.

    Attributes:
        ignore_unknown_data (bool): Data items that bind to neither a constructor
            parameter nor a property are reported instead of failing the
            construction.
        nullable_is_optional (bool): Nullable constructor parameters without a
            value are treated as optional and receive None.
        ignore_unchecked_assignments (bool): Assignments that cannot be verified
            because of generic parameters are reported instead of failing the
            construction.
    """

    ignore_unknown_data: bool = False
    nullable_is_optional: bool = False
    ignore_unchecked_assignments: bool = False

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return {
            "ignore_unknown_data": self.ignore_unknown_data,
            "nullable_is_optional": self.nullable_is_optional,
            "ignore_unchecked_assignments": self.ignore_unchecked_assignments,
        }

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], *args: Any, **kwargs: Any) -> Self:
        section = mapping.get("policy", mapping)
        if not isinstance(section, Mapping):
            raise ValueError(
                f"Invalid policy value: expected mapping; got {type(section).__name__}"
            )
        validate_typed_dict("construction policy", section, ConstructionPolicyMapping, bool)
        return cls(
            ignore_unknown_data=section.get("ignore_unknown_data", False),
            nullable_is_optional=section.get("nullable_is_optional", False),
            ignore_unchecked_assignments=section.get(
                "ignore_unchecked_assignments", False
            ),
        )
