from __future__ import annotations

from collections.abc import Sized
from enum import Enum
from typing import Any, Literal, NewType, Optional, Protocol, TypeVar

import pytest

from instance_construction_engine.internal.compatibility import (
    Assignment,
    classify,
    has_generic_parameters,
)
from instance_construction_engine.model.descriptors import TypeDescriptor, TypeKind
from unit.helpers.models_helper import GenericHolder, Holder, IntHolder, Person, td

T = TypeVar("T")
U = TypeVar("U")
UserId = NewType("UserId", int)
OwnerId = NewType("OwnerId", UserId)


class _Mode(Enum):
    FAST = "fast"
    SLOW = "slow"


class _NotRuntimeCheckable(Protocol):
    def speak(self) -> str: ...


###############################################################################
# BRANCH LEDGER
###############################################################################
"""
## has_generic_parameters(cls)
C000F001B0001: class lists open type parameters -> True
C000F001B0002: class declares __class_getitem__ itself -> True
C000F001B0003: otherwise -> False

## _assignable_to_class(value, raw, parameterized)
C000F002B0001: isinstance raises TypeError -> UNCHECKED
C000F002B0002: not an instance, no numeric promotion -> UNABLE
C000F002B0003: declared type is parameterized -> UNCHECKED
C000F002B0004: value's class is generic -> UNCHECKED
C000F002B0005: otherwise -> SAFE
C000F002B0006: numeric promotion (int for float, float for complex) -> SAFE

## _resolve(declared, substitutions)
C000F003B0001: no substitution -> None
C000F003B0002: substitution maps the variable to itself -> None
C000F003B0003: substitution found; declared nullable -> nullable target

## _literal_member(value, allowed)
C000F005B0001: equal value of the same type -> SAFE
C000F005B0002: no equal value, or equal only across types -> UNABLE

## classify(value, declared, substitutions)
C000F004B0001: type variable, unresolved, value None, nullable -> SAFE
C000F004B0002: type variable, unresolved, value None, not nullable -> UNABLE
C000F004B0003: type variable, unresolved, value not None -> UNCHECKED
C000F004B0004: type variable, resolved -> verdict against the substitution
C000F004B0005: value None, nullable -> SAFE
C000F004B0006: value None, not nullable -> UNABLE
C000F004B0007: ANY -> SAFE
C000F004B0008: CLASS / PARAMETERIZED with a raw class -> _assignable_to_class
C000F004B0009: UNION -> best member verdict
C000F004B0010: UNSUPPORTED -> UNCHECKED
C000F004B0011: LITERAL -> _literal_member
C000F004B0012: anything else (NONE, CLASS without raw) -> UNABLE
"""

# ==============================================================================
# CASE MATRICES
# ==============================================================================

HAS_GENERIC_PARAMETERS_CASES = [
    (GenericHolder, True, ["C000F001B0001"]),
    (list, True, ["C000F001B0002"]),
    (dict, True, ["C000F001B0002"]),
    (IntHolder, False, ["C000F001B0003"]),
    (str, False, ["C000F001B0003"]),
    (Person, False, ["C000F001B0003"]),
]

CLASSIFY_CASES = [
    # value, annotation, substitutions, expected, covers
    (None, Optional[T], {}, Assignment.SAFE, ["C000F004B0001"]),
    (None, T, {}, Assignment.UNABLE, ["C000F004B0002"]),
    (1, T, {}, Assignment.UNCHECKED, ["C000F004B0003", "C000F003B0001"]),
    (1, T, {T: T}, Assignment.UNCHECKED, ["C000F004B0003", "C000F003B0002"]),
    (1, T, {T: int}, Assignment.SAFE, ["C000F004B0004"]),
    ("abc", T, {T: int}, Assignment.UNABLE, ["C000F004B0004"]),
    (None, Optional[T], {T: int}, Assignment.SAFE, ["C000F004B0004", "C000F003B0003"]),
    (None, T, {T: int}, Assignment.UNABLE, ["C000F004B0004"]),
    (None, T, {T: Optional[int]}, Assignment.SAFE, ["C000F004B0004"]),
    ([1], T, {T: list[int]}, Assignment.UNCHECKED, ["C000F004B0004"]),
    (1, T, {T: U}, Assignment.UNCHECKED, ["C000F004B0004"]),
    (1, T, {T: U, U: int}, Assignment.SAFE, ["C000F004B0004"]),
    (None, int | None, {}, Assignment.SAFE, ["C000F004B0005"]),
    (None, object, {}, Assignment.SAFE, ["C000F004B0005"]),
    (None, int, {}, Assignment.UNABLE, ["C000F004B0006"]),
    (object(), Any, {}, Assignment.SAFE, ["C000F004B0007"]),
    ([1], Any, {}, Assignment.SAFE, ["C000F004B0007"]),
    (None, Any, {}, Assignment.SAFE, ["C000F004B0005"]),
    (1, int, {}, Assignment.SAFE, ["C000F004B0008", "C000F002B0005"]),
    (True, int, {}, Assignment.SAFE, ["C000F004B0008", "C000F002B0005"]),
    ("abc", int, {}, Assignment.UNABLE, ["C000F004B0008", "C000F002B0002"]),
    (1, str, {}, Assignment.UNABLE, ["C000F002B0002"]),
    (1.5, int, {}, Assignment.UNABLE, ["C000F002B0002"]),
    (1, float, {}, Assignment.SAFE, ["C000F002B0006"]),
    (1, complex, {}, Assignment.SAFE, ["C000F002B0006"]),
    (1.5, complex, {}, Assignment.SAFE, ["C000F002B0006"]),
    ([1], list[int], {}, Assignment.UNCHECKED, ["C000F002B0003"]),
    ({"a": 1}, dict[str, int], {}, Assignment.UNCHECKED, ["C000F002B0003"]),
    ("abc", list[int], {}, Assignment.UNABLE, ["C000F002B0002"]),
    ([1], list, {}, Assignment.UNCHECKED, ["C000F002B0004"]),
    (GenericHolder(1), GenericHolder, {}, Assignment.UNCHECKED, ["C000F002B0004"]),
    (IntHolder(1), GenericHolder, {}, Assignment.SAFE, ["C000F002B0005"]),
    (Holder(1), object, {}, Assignment.SAFE, ["C000F002B0005"]),
    (Holder(1), Holder, {}, Assignment.SAFE, ["C000F002B0005"]),
    ([1], Sized, {}, Assignment.UNCHECKED, ["C000F002B0004"]),
    ("abc", Sized, {}, Assignment.SAFE, ["C000F002B0005"]),
    (Holder(1), _NotRuntimeCheckable, {}, Assignment.UNCHECKED, ["C000F002B0001"]),
    (1, int | str, {}, Assignment.SAFE, ["C000F004B0009"]),
    ("abc", int | str, {}, Assignment.SAFE, ["C000F004B0009"]),
    (1.5, int | str, {}, Assignment.UNABLE, ["C000F004B0009"]),
    ([1], list[int] | str, {}, Assignment.UNCHECKED, ["C000F004B0009"]),
    ([1], list[int] | Any, {}, Assignment.SAFE, ["C000F004B0009"]),
    (1, T | str, {T: int}, Assignment.SAFE, ["C000F004B0009"]),
    (1, "Forward", {}, Assignment.UNCHECKED, ["C000F004B0010"]),
    (None, "Forward", {}, Assignment.UNABLE, ["C000F004B0006"]),
    ("fast", Literal["fast", "slow"], {}, Assignment.SAFE, ["C000F004B0011", "C000F005B0001"]),
    ("medium", Literal["fast", "slow"], {}, Assignment.UNABLE, ["C000F004B0011", "C000F005B0002"]),
    (None, Literal["fast", None], {}, Assignment.SAFE, ["C000F004B0005"]),
    (None, Literal["fast"], {}, Assignment.UNABLE, ["C000F004B0006"]),
    (_Mode.FAST, Literal[_Mode.FAST], {}, Assignment.SAFE, ["C000F005B0001"]),
    ("fast", Literal[_Mode.FAST], {}, Assignment.UNABLE, ["C000F005B0002"]),
    (True, Literal[1], {}, Assignment.UNABLE, ["C000F005B0002"]),
    (1.0, Literal[1], {}, Assignment.UNABLE, ["C000F005B0002"]),
    (1, Literal["a"] | int, {}, Assignment.SAFE, ["C000F004B0009"]),
    (7, UserId, {}, Assignment.SAFE, ["C000F004B0008"]),
    ("7", UserId, {}, Assignment.UNABLE, ["C000F004B0008"]),
    (7, OwnerId, {}, Assignment.SAFE, ["C000F004B0008"]),
    (None, Optional[UserId], {}, Assignment.SAFE, ["C000F004B0005"]),
    (1, None, {}, Assignment.UNABLE, ["C000F004B0012"]),
]


# ==============================================================================
# Tests
# ==============================================================================


@pytest.mark.parametrize("cls, expected, covers", HAS_GENERIC_PARAMETERS_CASES)
def test_has_generic_parameters_cases(cls: type, expected: bool, covers: list[str]) -> None:
    assert has_generic_parameters(cls) is expected


@pytest.mark.parametrize(
    "value, annotation, substitutions, expected, covers", CLASSIFY_CASES
)
def test_classify_cases(
    value: Any,
    annotation: Any,
    substitutions: dict[Any, Any],
    expected: Assignment,
    covers: list[str],
) -> None:
    assert classify(value, td(annotation), substitutions) is expected


def test_classify_accepts_any_value_for_unresolved_variable() -> None:
    # Covers: C000F004B0003
    for value in (1, "abc", [1], Holder(1), object()):
        assert classify(value, td(T), {}) is Assignment.UNCHECKED


def test_classify_class_descriptor_without_raw_is_unable() -> None:
    # Covers: C000F004B0012
    declared = TypeDescriptor(annotation=int, kind=TypeKind.CLASS)

    assert classify(1, declared, {}) is Assignment.UNABLE


@pytest.mark.parametrize(
    "annotation, expected",
    [
        (int, Assignment.SAFE),
        (float, Assignment.SAFE),
        (complex, Assignment.SAFE),
        (int | None, Assignment.SAFE),
        (Literal[1], Assignment.UNABLE),
        (Literal[True], Assignment.SAFE),
        (str, Assignment.UNABLE),
    ],
)
def test_bool_follows_python_subclassing(annotation: Any, expected: Assignment) -> None:
    # bool subclasses int, so it is an int wherever isinstance says so
    assert classify(True, td(annotation), {}) is expected


IDEMPOTENCE_CASES = [
    (1, int, {}),
    ("abc", int, {}),
    (None, Optional[int], {}),
    ([1], list[int], {}),
    (1, T, {}),
    (1, T, {T: int}),
    ("abc", T, {T: int}),
    (1, T, {T: U, U: int}),
    (1.5, int | str, {}),
    ([1], list[int] | str, {}),
    (1, T | str, {T: int}),
    ("fast", Literal["fast", "slow"], {}),
    (7, UserId, {}),
    (1, "Forward", {}),
]


@pytest.mark.parametrize("value, annotation, substitutions", IDEMPOTENCE_CASES)
def test_classify_is_repeatable(
    value: Any, annotation: Any, substitutions: dict[Any, Any]
) -> None:
    declared = td(annotation)
    first = classify(value, declared, substitutions)

    verdicts = [classify(value, declared, substitutions) for _ in range(5)]
    verdicts.append(classify(value, td(annotation), dict(substitutions)))

    assert verdicts == [first] * 6
