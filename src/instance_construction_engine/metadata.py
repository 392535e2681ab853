from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from instance_construction_engine.model.descriptors import (
    ConstructorDescriptor,
    PropertyDescriptor,
)

METADATA_PROVIDER_ENTRYPOINT_GROUP = "instance_construction_engine.metadata_providers"

ALTERNATIVE_CONSTRUCTOR_MARKER = "__alternative_constructor__"

F = TypeVar("F")


def alternative_constructor(obj: F) -> F:
    """
    Marks a classmethod or staticmethod as an additional constructor of its
    class, next to `__init__`.

    Works on either side of `@classmethod`:

        @alternative_constructor
        @classmethod
        def from_pair(cls, x: str, y: int) -> Pair: ...
    """
    func: Any = obj.__func__ if isinstance(obj, (classmethod, staticmethod)) else obj
    if not callable(func):
        raise TypeError(
            f"alternative_constructor expects a function or classmethod, got {type(obj).__name__}"
        )
    setattr(func, ALTERNATIVE_CONSTRUCTOR_MARKER, True)
    return obj


def is_alternative_constructor(obj: Any) -> bool:
    func = obj.__func__ if isinstance(obj, (classmethod, staticmethod)) else obj
    return bool(getattr(func, ALTERNATIVE_CONSTRUCTOR_MARKER, False))


@dataclass(frozen=True, slots=True)
class TypeMetadata:
    """
    Everything the construction engine needs to know about a target type.

    Attributes:
        target: The runtime class being described.
        constructors: Constructors in declaration order; the class's own
            `__init__` comes first when it is usable.
        properties: Properties in declaration order, settable or not.
    """

    target: type
    constructors: tuple[ConstructorDescriptor, ...]
    properties: tuple[PropertyDescriptor, ...] = ()


class TypeMetadataProvider(ABC):
    """
    Source of constructor and property descriptors for target types.
    """

    @abstractmethod
    def describe(self, target: type) -> TypeMetadata: ...

    def close(self) -> None:
        """
        Cleanup hook for providers.

        The default implementation is a no-op. Override in providers that hold
        resources.
        """
        return None


MetadataProviderFactory = Callable[..., TypeMetadataProvider]
