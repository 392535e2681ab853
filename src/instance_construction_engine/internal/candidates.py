from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from instance_construction_engine.internal.compatibility import (
    Assignment,
    SubstitutionMap,
    classify,
)
from instance_construction_engine.model.descriptors import (
    ConstructorDescriptor,
    PropertyAssignment,
    PropertyDescriptor,
    settable_properties,
)
from instance_construction_engine.model.policy import ConstructionPolicy
from instance_construction_engine.model.problems import (
    ConstructionProblem,
    MissingParameter,
    UncheckedAssignment,
    UnknownData,
)


@dataclass(frozen=True, slots=True)
class ConstructionCandidate:
    """
    One constructor matched against one data mapping.

    Attributes:
        constructor: The constructor this candidate would call.
        arguments: Data items bound to constructor parameters, by parameter name.
        nulled_parameters: Nullable parameters without data that receive None
            because the policy treats nullable parameters as optional.
        property_assignments: Data items bound to settable properties, in
            property declaration order.
        problems: Every problem found for this constructor.
    """

    constructor: ConstructorDescriptor
    arguments: Mapping[str, Any] = field(default_factory=dict)
    nulled_parameters: tuple[str, ...] = ()
    property_assignments: tuple[PropertyAssignment, ...] = ()
    problems: tuple[ConstructionProblem, ...] = ()

    def has_problem(self, problem_type: type[ConstructionProblem]) -> bool:
        return any(isinstance(p, problem_type) for p in self.problems)

    @property
    def bound_keys(self) -> frozenset[str]:
        return frozenset(self.arguments) | {a.name for a in self.property_assignments}


def _bind_constructor_data(
    constructor: ConstructorDescriptor,
    data: Mapping[str, Any],
    substitutions: SubstitutionMap,
    problems: list[ConstructionProblem],
) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for key, value in data.items():
        param = constructor.parameter(key)
        if param is None:
            continue
        verdict = classify(value, param.declared_type, substitutions)
        # an unassignable item may still fit a property, so it is not missing yet
        if verdict is Assignment.UNABLE:
            continue
        if verdict is Assignment.UNCHECKED:
            problems.append(UncheckedAssignment(key, param.declared_type, value))
        arguments[key] = value
    return arguments


def _collect_missing(
    constructor: ConstructorDescriptor,
    arguments: Mapping[str, Any],
    policy: ConstructionPolicy,
    problems: list[ConstructionProblem],
) -> tuple[str, ...]:
    nulled: list[str] = []
    for param in constructor.parameters:
        if param.name in arguments or param.is_optional:
            continue
        if policy.nullable_is_optional and param.declared_type.nullable:
            nulled.append(param.name)
            continue
        problems.append(MissingParameter(param.name, param.declared_type))
    return tuple(nulled)


def _bind_property_data(
    data: Mapping[str, Any],
    arguments: Mapping[str, Any],
    properties: Sequence[PropertyDescriptor],
    substitutions: SubstitutionMap,
    problems: list[ConstructionProblem],
) -> tuple[PropertyAssignment, ...]:
    assignments: list[PropertyAssignment] = []
    for name, prop in settable_properties(properties).items():
        if name not in data or name in arguments:
            continue
        value = data[name]
        verdict = classify(value, prop.declared_type, substitutions)
        if verdict is Assignment.UNABLE:
            continue
        if verdict is Assignment.UNCHECKED:
            problems.append(UncheckedAssignment(name, prop.declared_type, value))
        assignments.append(PropertyAssignment(target=prop, value=value))
    return tuple(assignments)


def build_candidate(
    constructor: ConstructorDescriptor,
    data: Mapping[str, Any],
    properties: Sequence[PropertyDescriptor],
    policy: ConstructionPolicy,
    substitutions: SubstitutionMap,
) -> ConstructionCandidate:
    """
    Partitions `data` for one constructor.

    Every key of `data` ends up in exactly one place: a constructor argument, a
    property assignment, or an `UnknownData` problem. Constructor parameters
    take precedence over properties of the same name.

    Args:
        constructor: The constructor to match.
        data: The field mapping for this construction attempt.
        properties: Property descriptors of the target type; only settable ones
            take data.
        policy: Active construction policy.
        substitutions: Type variable substitutions for the target type.

    Returns:
        ConstructionCandidate: the bindings and the problems found.
    """
    problems: list[ConstructionProblem] = []

    arguments = _bind_constructor_data(constructor, data, substitutions, problems)
    nulled = _collect_missing(constructor, arguments, policy, problems)
    assignments = _bind_property_data(
        data, arguments, properties, substitutions, problems
    )

    assigned = {a.name for a in assignments}
    problems.extend(
        UnknownData(key, value)
        for key, value in data.items()
        if key not in arguments and key not in assigned
    )

    logging.debug(
        f"candidate built: {constructor.signature_text} "
        f"args={sorted(arguments)} props={sorted(assigned)} problems={len(problems)}"
    )

    return ConstructionCandidate(
        constructor=constructor,
        arguments=arguments,
        nulled_parameters=nulled,
        property_assignments=assignments,
        problems=tuple(problems),
    )
