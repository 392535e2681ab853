from __future__ import annotations

import types
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Annotated, Any, Literal, TypeVar, Union, get_args, get_origin

from typing_extensions import Self


class TypeKind(Enum):
    """
    Shape of a declared type, as far as the compatibility checker cares.

    CLASS: a plain runtime class such as `int` or `Person`.
    PARAMETERIZED: a subscripted generic such as `list[int]` or `Holder[str]`.
    TYPE_VARIABLE: a `typing.TypeVar` that needs a substitution to be checked.
    LITERAL: `typing.Literal`; the allowed values are kept in `arguments`.
    UNION: two or more non-None alternatives.
    ANY: `typing.Any`.
    NONE: `None` on its own.
    UNSUPPORTED: anything the checker cannot reason about (forward reference
        strings, other special forms).
    """

    CLASS = "class"
    PARAMETERIZED = "parameterized"
    TYPE_VARIABLE = "type_variable"
    LITERAL = "literal"
    UNION = "union"
    ANY = "any"
    NONE = "none"
    UNSUPPORTED = "unsupported"


_NONE_TYPE = type(None)


def type_repr(annotation: Any) -> str:
    if annotation is _NONE_TYPE or annotation is None:
        return "None"
    if isinstance(annotation, type) and get_origin(annotation) is None:
        return annotation.__qualname__
    if isinstance(annotation, TypeVar):
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    A declared type, parsed once from a Python annotation.

    Attributes:
        annotation: The annotation this descriptor was parsed from.
        kind: The shape of the type.
        nullable: Whether `None` is an accepted value.
        raw: The runtime class for CLASS and PARAMETERIZED kinds.
        arguments: Generic arguments of a PARAMETERIZED type, or the allowed
            values of a LITERAL type.
        members: Alternatives of a UNION type.
        type_variable: The type variable of a TYPE_VARIABLE type.
    """

    annotation: Any
    kind: TypeKind
    nullable: bool = False
    raw: type | None = None
    arguments: tuple[Any, ...] = ()
    members: tuple[TypeDescriptor, ...] = ()
    type_variable: TypeVar | None = None

    @property
    def is_parameterized(self) -> bool:
        return self.kind is TypeKind.PARAMETERIZED

    def as_nullable(self) -> TypeDescriptor:
        if self.nullable:
            return self
        return replace(self, nullable=True)

    def __str__(self) -> str:
        return type_repr(self.annotation)

    @classmethod
    def from_annotation(cls, annotation: Any) -> Self:
        if annotation is Any:
            return cls(annotation=annotation, kind=TypeKind.ANY, nullable=True)
        if annotation is None or annotation is _NONE_TYPE:
            return cls(
                annotation=annotation, kind=TypeKind.NONE, nullable=True, raw=_NONE_TYPE
            )
        if isinstance(annotation, TypeVar):
            return cls(
                annotation=annotation,
                kind=TypeKind.TYPE_VARIABLE,
                type_variable=annotation,
            )

        supertype = getattr(annotation, "__supertype__", None)
        if supertype is not None:
            # NewType: checked as its supertype, reported under its own name
            return replace(cls.from_annotation(supertype), annotation=annotation)

        origin = get_origin(annotation)
        if origin is Annotated:
            return cls.from_annotation(get_args(annotation)[0])
        if origin is Literal:
            values = get_args(annotation)
            return cls(
                annotation=annotation,
                kind=TypeKind.LITERAL,
                nullable=None in values,
                arguments=tuple(v for v in values if v is not None),
            )
        if origin is Union or origin is types.UnionType:
            return cls._from_union(annotation)
        if origin is not None:
            if isinstance(origin, type):
                arguments = get_args(annotation)
                return cls(
                    annotation=annotation,
                    kind=TypeKind.PARAMETERIZED if arguments else TypeKind.CLASS,
                    raw=origin,
                    arguments=arguments,
                )
            return cls(annotation=annotation, kind=TypeKind.UNSUPPORTED)
        if isinstance(annotation, type):
            return cls(
                annotation=annotation,
                kind=TypeKind.CLASS,
                nullable=annotation is object,
                raw=annotation,
            )
        return cls(annotation=annotation, kind=TypeKind.UNSUPPORTED)

    @classmethod
    def _from_union(cls, annotation: Any) -> Self:
        args = get_args(annotation)
        non_none = [a for a in args if a is not _NONE_TYPE]
        has_none = len(non_none) != len(args)
        if len(non_none) == 1:
            inner = cls.from_annotation(non_none[0])
            nullable = has_none or inner.nullable
            return replace(inner, annotation=annotation, nullable=nullable)
        members = tuple(cls.from_annotation(a) for a in non_none)
        return cls(
            annotation=annotation,
            kind=TypeKind.UNION,
            nullable=has_none or any(m.nullable for m in members),
            members=members,
        )


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    name: str
    declared_type: TypeDescriptor
    is_optional: bool = False


@dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    """
    One way of creating an instance of the target type.

    `factory` is called with keyword arguments only, one per bound parameter.
    """

    name: str
    parameters: tuple[ParameterDescriptor, ...]
    factory: Callable[..., Any] = field(compare=False)

    def parameter(self, name: str) -> ParameterDescriptor | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    @property
    def signature_text(self) -> str:
        params = ", ".join(f"{p.name}: {p.declared_type}" for p in self.parameters)
        return f"{self.name}({params})"


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    name: str
    declared_type: TypeDescriptor
    settable: bool = True


@dataclass(frozen=True, slots=True)
class PropertyAssignment:
    target: PropertyDescriptor
    value: Any

    @property
    def name(self) -> str:
        return self.target.name


def settable_properties(
    properties: Sequence[PropertyDescriptor],
) -> dict[str, PropertyDescriptor]:
    return {p.name: p for p in properties if p.settable}
