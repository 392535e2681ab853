from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import Any, ClassVar, get_origin, get_type_hints

from instance_construction_engine.metadata import (
    TypeMetadata,
    TypeMetadataProvider,
    is_alternative_constructor,
)
from instance_construction_engine.model.descriptors import (
    ConstructorDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
)
from instance_construction_engine.model.result import TypeMetadataError

_DATA_PARAMETER_KINDS = (
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def _type_hints(obj: Any, target: type) -> dict[str, Any]:
    if not (inspect.isfunction(obj) or inspect.ismethod(obj) or inspect.isclass(obj)):
        return {}
    try:
        return get_type_hints(obj)
    except (NameError, TypeError) as e:
        raise TypeMetadataError(
            f"cannot evaluate type hints of {getattr(obj, '__qualname__', obj)!r}: {e}",
            target=target,
        ) from e


def _signature(obj: Any, target: type) -> inspect.Signature:
    try:
        return inspect.signature(obj)
    except (TypeError, ValueError) as e:
        raise TypeMetadataError(
            f"cannot read the signature of {getattr(obj, '__qualname__', obj)!r}: {e}",
            target=target,
        ) from e


def _is_hidden(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


class IntrospectionMetadataProvider(TypeMetadataProvider):
    """
    Reads constructors and properties straight from Python classes.

    Constructors are the class call itself (its `__init__`) followed by every
    classmethod or staticmethod marked with `@alternative_constructor`, in
    definition order. Properties are `property` objects and class-level
    annotated attributes; the latter are settable unless the class is a frozen
    dataclass.
    """

    def __init__(self, *, include_alternative_constructors: bool = True) -> None:
        self._include_alternatives = include_alternative_constructors

    def describe(self, target: type) -> TypeMetadata:
        if not inspect.isclass(target):
            raise TypeMetadataError(
                f"expected a class to describe, got {type(target).__name__}",
                target=target,
            )

        constructors: list[ConstructorDescriptor] = []
        init = self._describe_constructor(
            name="__init__",
            factory=target,
            signature=_signature(target, target),
            hints=self._init_hints(target),
            target=target,
        )
        if init is not None:
            constructors.append(init)

        if self._include_alternatives:
            for name in self._alternative_constructor_names(target):
                raw = inspect.getattr_static(target, name)
                factory = getattr(target, name)
                ctor = self._describe_constructor(
                    name=name,
                    factory=factory,
                    signature=_signature(factory, target),
                    hints=_type_hints(raw.__func__, target),
                    target=target,
                )
                if ctor is not None:
                    constructors.append(ctor)

        return TypeMetadata(
            target=target,
            constructors=tuple(constructors),
            properties=self._describe_properties(target),
        )

    @staticmethod
    def _init_hints(target: type) -> dict[str, Any]:
        for attr in ("__init__", "__new__"):
            func = getattr(target, attr)
            if inspect.isfunction(func) or inspect.ismethod(func):
                return _type_hints(func, target)
        return {}

    @staticmethod
    def _alternative_constructor_names(target: type) -> list[str]:
        names: dict[str, None] = {}
        for klass in reversed(target.__mro__):
            for name, obj in vars(klass).items():
                if isinstance(obj, (classmethod, staticmethod)) and is_alternative_constructor(obj):
                    names.setdefault(name, None)
        return [
            n
            for n in names
            if is_alternative_constructor(inspect.getattr_static(target, n))
        ]

    @staticmethod
    def _describe_constructor(
        *,
        name: str,
        factory: Any,
        signature: inspect.Signature,
        hints: dict[str, Any],
        target: type,
    ) -> ConstructorDescriptor | None:
        params: list[ParameterDescriptor] = []
        for p in signature.parameters.values():
            if p.kind is inspect.Parameter.POSITIONAL_ONLY:
                logging.debug(
                    f"constructor skipped: {target.__qualname__}.{name} "
                    f"has positional-only parameter {p.name!r}"
                )
                return None
            if p.kind not in _DATA_PARAMETER_KINDS:
                continue
            params.append(
                ParameterDescriptor(
                    name=p.name,
                    declared_type=TypeDescriptor.from_annotation(hints.get(p.name, Any)),
                    is_optional=p.default is not inspect.Parameter.empty,
                )
            )
        return ConstructorDescriptor(name=name, parameters=tuple(params), factory=factory)

    @staticmethod
    def _describe_properties(target: type) -> tuple[PropertyDescriptor, ...]:
        frozen = dataclasses.is_dataclass(target) and target.__dataclass_params__.frozen
        class_hints = _type_hints(target, target)
        found: dict[str, PropertyDescriptor] = {}

        for klass in reversed(target.__mro__):
            if klass is object:
                continue
            for name in inspect.get_annotations(klass):
                hint = class_hints.get(name, Any)
                if _is_hidden(name) or get_origin(hint) is ClassVar or hint is ClassVar:
                    continue
                if isinstance(hint, dataclasses.InitVar):
                    continue
                found[name] = PropertyDescriptor(
                    name=name,
                    declared_type=TypeDescriptor.from_annotation(hint),
                    settable=not frozen,
                )
            for name, obj in vars(klass).items():
                if not isinstance(obj, property) or _is_hidden(name):
                    continue
                found[name] = PropertyDescriptor(
                    name=name,
                    declared_type=TypeDescriptor.from_annotation(
                        _property_hint(obj, target)
                    ),
                    settable=obj.fset is not None,
                )

        return tuple(found.values())


def _property_hint(prop: property, target: type) -> Any:
    if prop.fset is not None:
        setter_hints = _type_hints(prop.fset, target)
        value_params = [
            n for n in inspect.signature(prop.fset).parameters if n != "self"
        ]
        if value_params and value_params[0] in setter_hints:
            return setter_hints[value_params[0]]
    if prop.fget is not None:
        return _type_hints(prop.fget, target).get("return", Any)
    return Any
