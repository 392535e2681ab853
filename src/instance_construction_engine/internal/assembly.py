from __future__ import annotations

from typing import Any

from instance_construction_engine.internal.candidates import ConstructionCandidate


def constructor_kwargs(candidate: ConstructionCandidate) -> dict[str, Any]:
    """
    Keyword arguments for the candidate's constructor, in parameter order.

    Bound data is passed as is and nullable parameters admitted as optional get
    an explicit None. Optional parameters without data are left out so that the
    constructor's own defaults apply.
    """
    kwargs: dict[str, Any] = {}
    for param in candidate.constructor.parameters:
        if param.name in candidate.arguments:
            kwargs[param.name] = candidate.arguments[param.name]
        elif param.name in candidate.nulled_parameters:
            kwargs[param.name] = None
    return kwargs


def assemble_instance(candidate: ConstructionCandidate) -> Any:
    """
    Calls the constructor once, then writes each property assignment once, in
    the recorded order. Exceptions from the constructor or from a setter
    propagate; assignments already made are not rolled back.
    """
    instance = candidate.constructor.factory(**constructor_kwargs(candidate))
    for assignment in candidate.property_assignments:
        setattr(instance, assignment.name, assignment.value)
    return instance
