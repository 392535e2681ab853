from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from instance_construction_engine.metadata import TypeMetadataProvider


class ProviderFactory(Protocol):
    def __call__(self, *, config: Mapping[str, Any] | None = None) -> TypeMetadataProvider: ...


def _create_introspection(*, config: Mapping[str, Any] | None = None) -> TypeMetadataProvider:
    from instance_construction_engine.internal.providers.introspection import (
        IntrospectionMetadataProvider,
    )

    cfg = config or {}
    return IntrospectionMetadataProvider(
        include_alternative_constructors=cfg.get("include_alternative_constructors", True)
    )


def _create_registered(*, config: Mapping[str, Any] | None = None) -> TypeMetadataProvider:
    from instance_construction_engine.internal.providers.registered import (
        registered_provider_from_config,
    )

    return registered_provider_from_config(config)


DEFAULT_PROVIDER_ID = "introspection"

BUILTIN_PROVIDER_FACTORIES: dict[str, Callable[..., TypeMetadataProvider]] = {
    "introspection": _create_introspection,
    "registered": _create_registered,
}
