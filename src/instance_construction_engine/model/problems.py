from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from instance_construction_engine.internal.util.multiformat import (
    MultiformatSerializableMixin,
)
from instance_construction_engine.model.descriptors import TypeDescriptor


class ProblemKind(Enum):
    MISSING_PARAMETER = "missing_parameter"
    UNCHECKED_ASSIGNMENT = "unchecked_assignment"
    UNKNOWN_DATA = "unknown_data"


def _report_value(value: Any) -> Any:
    # Reports must stay serializable whatever the data held
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


@dataclass(frozen=True, slots=True)
class ConstructionProblem(MultiformatSerializableMixin):
    """
    A problem found while matching data against one constructor.

    Problems are advisory: they are carried in the construction result and are
    never raised.
    """

    name: str

    @property
    def kind(self) -> ProblemKind:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class MissingParameter(ConstructionProblem):
    type: TypeDescriptor

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.MISSING_PARAMETER

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return {"kind": self.kind.value, "name": self.name, "type": str(self.type)}

    def __str__(self) -> str:
        return f"Missing value for parameter {self.name}: {self.type}"


@dataclass(frozen=True, slots=True)
class UncheckedAssignment(ConstructionProblem):
    type: TypeDescriptor
    value: Any

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.UNCHECKED_ASSIGNMENT

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "type": str(self.type),
            "value": _report_value(self.value),
        }

    def __str__(self) -> str:
        return f"Unchecked assignment {self.name}: {self.type} = {self.value!r}"


@dataclass(frozen=True, slots=True)
class UnknownData(ConstructionProblem):
    value: Any

    @property
    def kind(self) -> ProblemKind:
        return ProblemKind.UNKNOWN_DATA

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "value": _report_value(self.value),
        }

    def __str__(self) -> str:
        return f"Unknown data {self.name} = {self.value!r}"
