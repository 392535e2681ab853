from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

from instance_construction_engine.internal.util.multiformat import (
    MultiformatSerializableMixin,
)
from instance_construction_engine.model.problems import ConstructionProblem

T = TypeVar("T")


class ConstructionResult(Generic[T], MultiformatSerializableMixin):
    """
    Outcome of one construction attempt: either `Success` or `Fail`.
    """

    __slots__ = ()

    @property
    def success(self) -> bool:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Success(ConstructionResult[T]):
    """
    Successful construction.

    Attributes:
        instance: The constructed instance.
        problems: Problems that were tolerated for the selected constructor.
        constructor_name: Name of the constructor that produced the instance.
    """

    instance: T
    problems: tuple[ConstructionProblem, ...] = ()
    constructor_name: str = ""

    @property
    def success(self) -> bool:
        return True

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return {
            "success": True,
            "constructor": self.constructor_name,
            "problems": [p.to_mapping() for p in self.problems],
        }


@dataclass(frozen=True, slots=True)
class Fail(ConstructionResult[T]):
    """
    Failed construction.

    Attributes:
        problems: One problem list per candidate constructor, in constructor
            declaration order.
        constructor_names: Names of the candidate constructors, aligned with
            `problems`.
    """

    problems: tuple[tuple[ConstructionProblem, ...], ...]
    constructor_names: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return False

    @property
    def instance(self) -> None:
        return None

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        names = self.constructor_names or tuple(
            f"#{i}" for i in range(len(self.problems))
        )
        return {
            "success": False,
            "candidates": [
                {"constructor": name, "problems": [p.to_mapping() for p in problems]}
                for name, problems in zip(names, self.problems)
            ],
        }


class ConstructionError(Exception):
    """
    Base error type for faults that stop a construction engine from working.

    Advisory construction problems are never raised; they are reported in
    `ConstructionResult`.
    """


class TypeMetadataError(ConstructionError):
    """
    Raised when a metadata provider cannot describe a target type.
    """

    def __init__(self, message: str, *, target: Any = None):
        super().__init__(message)
        self.target = target
