from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, Mapping, TypeVar

from instance_construction_engine.internal.assembly import assemble_instance
from instance_construction_engine.internal.candidates import (
    ConstructionCandidate,
    build_candidate,
)
from instance_construction_engine.internal.generics import split_generic_target
from instance_construction_engine.internal.providers.factory import (
    open_metadata_provider,
)
from instance_construction_engine.internal.providers.registry import ProviderRegistry
from instance_construction_engine.internal.selection import select_candidate
from instance_construction_engine.metadata import TypeMetadata
from instance_construction_engine.model.policy import ConstructionPolicy
from instance_construction_engine.model.result import ConstructionResult, Fail, Success

T = TypeVar("T")


def _fail(candidates: list[ConstructionCandidate]) -> Fail[Any]:
    return Fail(
        problems=tuple(c.problems for c in candidates),
        constructor_names=tuple(c.constructor.name for c in candidates),
    )


@dataclass(kw_only=True, frozen=True, slots=True)
class ConstructionEngine(Generic[T]):
    """
    Builds instances of one target type from mappings of named values.

    For every call the engine matches the data against each constructor of the
    target, selects the best match under its policy and either returns the
    constructed instance or reports, per constructor, why it was rejected.

    The engine holds no mutable state; one instance can serve any number of
    threads.

    Attributes:
        target: The runtime class to construct.
        metadata: Constructors and properties of `target`.
        substitutions: Type variable substitutions for generic targets; may be
            incomplete.
        policy: Which construction problems are tolerated.
    """

    target: type[T]
    metadata: TypeMetadata
    substitutions: Mapping[TypeVar, Any] = field(default_factory=dict)
    policy: ConstructionPolicy = field(default_factory=ConstructionPolicy)

    @property
    def ignore_unknown_data(self) -> bool:
        return self.policy.ignore_unknown_data

    @property
    def nullable_is_optional(self) -> bool:
        return self.policy.nullable_is_optional

    @property
    def ignore_unchecked_assignments(self) -> bool:
        return self.policy.ignore_unchecked_assignments

    # :: FeatureFlow | type=feature_start | name=construction
    def construct(self, data: Mapping[str, Any] | None = None) -> ConstructionResult[T]:
        """
        Attempts to construct a `target` instance from `data`.

        The chosen constructor is the one for which
          1) every required parameter (nullable ones too, unless the policy
             says otherwise) can be bound from `data`;
          2) the remaining items bind to settable properties, the constructor
             taking priority;
          3) nothing is left over, unless the policy ignores unknown data;
          4) no generic assignment is unverifiable, unless the policy ignores
             unchecked assignments.

        Returns:
            `Success` with the instance and the tolerated problems, or `Fail`
            with one problem list per constructor.
        """
        snapshot: Mapping[str, Any] = MappingProxyType(dict(data or {}))

        candidates = [
            build_candidate(
                ctor,
                snapshot,
                self.metadata.properties,
                self.policy,
                self.substitutions,
            )
            for ctor in self.metadata.constructors
        ]

        best = select_candidate(candidates, self.policy)
        if best is None:
            logging.debug(
                f"construction failed: {self.target.__qualname__} "
                f"candidates={len(candidates)} keys={sorted(snapshot)}"
            )
            return _fail(candidates)

        instance = assemble_instance(best)
        return Success(
            instance=instance,
            problems=best.problems,
            constructor_name=best.constructor.name,
        )

    def construct_pairs(self, *pairs: tuple[str, Any]) -> ConstructionResult[T]:
        """
        Same as `construct`, with the data given as `(name, value)` pairs.
        A repeated name keeps its last value.
        """
        return self.construct(dict(pairs))


def construction_engine_for(
    target: Any,
    *,
    policy: ConstructionPolicy | None = None,
    ignore_unknown_data: bool | None = None,
    nullable_is_optional: bool | None = None,
    ignore_unchecked_assignments: bool | None = None,
    substitutions: Mapping[TypeVar, Any] | None = None,
    provider_id: str | None = None,
    provider_config: Mapping[str, Any] | None = None,
    registry: ProviderRegistry | None = None,
) -> ConstructionEngine[Any]:
    """
    Shorthand for building a `ConstructionEngine`.

    `target` may be a class or a subscripted generic class such as
    `Holder[int]`; in the latter case the type arguments become the engine's
    substitutions. Explicit policy flags override the ones in `policy`.

    The metadata provider is opened, asked once for the target's metadata and
    closed again before the engine is returned.

    Raises:
        TypeError: If `target` is not a class.
        TypeMetadataError: If the provider cannot describe the target.
        ProviderSelectionError: If `provider_id` is unknown.
    """
    raw, subs = split_generic_target(target, substitutions)

    overrides = {
        name: value
        for name, value in (
            ("ignore_unknown_data", ignore_unknown_data),
            ("nullable_is_optional", nullable_is_optional),
            ("ignore_unchecked_assignments", ignore_unchecked_assignments),
        )
        if value is not None
    }
    effective = dataclasses.replace(policy or ConstructionPolicy(), **overrides)

    with open_metadata_provider(
        provider_id=provider_id, config=provider_config, registry=registry
    ) as provider:
        metadata = provider.describe(raw)

    logging.debug(
        f"construction engine ready: {raw.__qualname__} "
        f"constructors={len(metadata.constructors)} properties={len(metadata.properties)}"
    )
    return ConstructionEngine(
        target=raw, metadata=metadata, substitutions=subs, policy=effective
    )
