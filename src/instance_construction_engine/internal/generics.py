from __future__ import annotations

from typing import Any, Mapping, TypeVar, get_args, get_origin


def _bind_parameters(alias: Any, out: dict[TypeVar, Any]) -> None:
    origin = get_origin(alias)
    if origin is None:
        return
    for tv, arg in zip(getattr(origin, "__parameters__", ()), get_args(alias)):
        if isinstance(tv, TypeVar) and arg is not tv and tv not in out:
            out[tv] = arg


def inherited_substitutions(cls: type) -> dict[TypeVar, Any]:
    """
    Substitutions fixed by subscripted base classes, e.g. `T: int` for
    `class IntHolder(Holder[int])`. Classes closer to `cls` in the MRO win.
    """
    out: dict[TypeVar, Any] = {}
    for klass in cls.__mro__:
        for base in vars(klass).get("__orig_bases__", ()):
            _bind_parameters(base, out)
    return out


def split_generic_target(
    target: Any, substitutions: Mapping[TypeVar, Any] | None = None
) -> tuple[type, dict[TypeVar, Any]]:
    """
    Splits a construction target into its runtime class and the type variable
    substitutions it carries.

    `Holder[int]` becomes `(Holder, {T: int})` when `Holder` is declared as
    `class Holder(Generic[T])`; a plain class only carries what its subscripted
    base classes fix. Explicit `substitutions` win over everything read from
    the target.

    Raises:
        TypeError: If `target` is neither a class nor a subscripted class.
    """
    origin = get_origin(target)
    raw = origin if origin is not None else target
    if not isinstance(raw, type):
        raise TypeError(f"construction target must be a class, got {target!r}")

    derived: dict[TypeVar, Any] = {}
    _bind_parameters(target, derived)
    for tv, arg in inherited_substitutions(raw).items():
        derived.setdefault(tv, arg)

    derived.update(substitutions or {})
    return raw, derived
