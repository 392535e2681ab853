from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, TypeVar

from instance_construction_engine.model.descriptors import TypeDescriptor, TypeKind

SubstitutionMap = Mapping[TypeVar, Any]

# PEP 484 numeric tower: an int is acceptable where a float or complex is
# declared, and a float where a complex is declared.
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


class Assignment(Enum):
    """
    Verdict for assigning one value to one declared type.

    SAFE: the value is known to satisfy the declared type.
    UNCHECKED: the value matches the raw class, but generic parameters on the
        declared type or on the value's class cannot be verified.
    UNABLE: the value cannot be assigned.
    """

    SAFE = "safe"
    UNCHECKED = "unchecked"
    UNABLE = "unable"


_RANK = {Assignment.SAFE: 0, Assignment.UNCHECKED: 1, Assignment.UNABLE: 2}


def has_generic_parameters(cls: type) -> bool:
    """
    Whether a runtime class is itself generic, so that its instances carry
    element types that cannot be inspected.

    Builtin containers declare `__class_getitem__` directly; `typing.Generic`
    subclasses list their open type variables in `__parameters__`.
    """
    if getattr(cls, "__parameters__", ()):
        return True
    return "__class_getitem__" in vars(cls)


def _assignable_to_class(value: Any, raw: type, parameterized: bool) -> Assignment:
    try:
        compatible = isinstance(value, raw) or isinstance(
            value, _NUMERIC_PROMOTIONS.get(raw, ())
        )
    except TypeError:
        # protocols that are not runtime checkable refuse isinstance()
        return Assignment.UNCHECKED
    if not compatible:
        return Assignment.UNABLE
    if parameterized or has_generic_parameters(type(value)):
        return Assignment.UNCHECKED
    return Assignment.SAFE


def _literal_member(value: Any, allowed: tuple[Any, ...]) -> Assignment:
    # exact type match so that True does not pass for Literal[1]
    if any(type(value) is type(v) and value == v for v in allowed):
        return Assignment.SAFE
    return Assignment.UNABLE


def _resolve(
    declared: TypeDescriptor, substitutions: SubstitutionMap
) -> TypeDescriptor | None:
    resolved = substitutions.get(declared.type_variable)
    if resolved is None:
        return None
    target = TypeDescriptor.from_annotation(resolved)
    if target.kind is TypeKind.TYPE_VARIABLE and target.type_variable is declared.type_variable:
        return None
    return target.as_nullable() if declared.nullable else target


def classify(
    value: Any, declared: TypeDescriptor, substitutions: SubstitutionMap
) -> Assignment:
    """
    Decides whether `value` can be assigned to `declared`.

    Type variables are resolved through `substitutions` first. A type variable
    that cannot be resolved is UNCHECKED for any value but None, because its
    safety cannot be proven and it must not be rejected either. The same holds
    for annotations the descriptor model does not understand.

    Args:
        value: The candidate value, of any runtime type.
        declared: The declared type of the parameter or property.
        substitutions: Type variable substitutions for the target type; may be
            incomplete.

    Returns:
        Assignment: the verdict.
    """
    if declared.kind is TypeKind.TYPE_VARIABLE:
        target = _resolve(declared, substitutions)
        if target is None:
            if value is None:
                return Assignment.SAFE if declared.nullable else Assignment.UNABLE
            return Assignment.UNCHECKED
        return classify(value, target, substitutions)

    if value is None:
        return Assignment.SAFE if declared.nullable else Assignment.UNABLE

    match declared.kind:
        case TypeKind.ANY:
            return Assignment.SAFE
        case TypeKind.CLASS | TypeKind.PARAMETERIZED if declared.raw is not None:
            return _assignable_to_class(value, declared.raw, declared.is_parameterized)
        case TypeKind.UNION:
            verdicts = [classify(value, m, substitutions) for m in declared.members]
            return min(verdicts, key=_RANK.__getitem__, default=Assignment.UNABLE)
        case TypeKind.LITERAL:
            return _literal_member(value, declared.arguments)
        case TypeKind.UNSUPPORTED:
            return Assignment.UNCHECKED
        case _:
            return Assignment.UNABLE
