from __future__ import annotations

import inspect
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Mapping

from instance_construction_engine.internal.providers.builtin import (
    BUILTIN_PROVIDER_FACTORIES,
    ProviderFactory,
)
from instance_construction_engine.metadata import METADATA_PROVIDER_ENTRYPOINT_GROUP


class ProviderRegistryError(RuntimeError):
    pass


class ProviderEntrypointError(ProviderRegistryError):
    pass


@dataclass(frozen=True, slots=True)
class ProviderRegistry:
    """
    Metadata provider factories that are available to an engine.

    builtins: factories shipped with the library
    externals: factories discovered via entry points
    """

    builtins: Mapping[str, ProviderFactory]
    externals: Mapping[str, ProviderFactory]

    def merged(self) -> dict[str, ProviderFactory]:
        dupes: set[str] = set(self.builtins).intersection(self.externals)
        if dupes:
            raise ProviderRegistryError(
                f"duplicate provider ids found in builtins and entry points: {sorted(dupes)}"
            )
        merged: dict[str, ProviderFactory] = dict(self.builtins)
        merged.update(self.externals)
        return merged


def _validate_provider_factory_callable(
    provider_id: str, factory_obj: object
) -> ProviderFactory:
    """
    Entry points must load a callable that accepts a keywordable `config`:
        def factory(*, config: Mapping[str, Any] | None = None) -> TypeMetadataProvider

    Classes are refused; publish a small factory function instead.
    """
    if not callable(factory_obj):
        raise ProviderEntrypointError(
            f"provider entry point '{provider_id}' must load a callable factory; "
            f"got {type(factory_obj).__name__}"
        )

    if inspect.isclass(factory_obj):
        raise ProviderEntrypointError(
            f"provider entry point '{provider_id}' must load a callable factory; "
            f"got class {factory_obj.__name__}"
        )

    sig = inspect.signature(factory_obj)
    params = sig.parameters

    if "config" not in params:
        raise ProviderEntrypointError(
            f"provider entry point '{provider_id}' factory must accept keyword argument "
            f"'config'. Signature={sig}"
        )

    p = params["config"]
    if p.kind not in (
        inspect.Parameter.KEYWORD_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise ProviderEntrypointError(
            f"provider entry point '{provider_id}' factory param 'config' must be "
            f"keywordable. Signature={sig}"
        )

    return factory_obj


def _load_entrypoint_provider_factories(*, group: str) -> dict[str, ProviderFactory]:
    """
    Entry point name is the provider id; duplicate ids within the group are an
    error.
    """
    factories: dict[str, ProviderFactory] = {}
    dupes: set[str] = set()

    for ep in entry_points().select(group=group):
        provider_id = ep.name
        factory = _validate_provider_factory_callable(provider_id, ep.load())

        if provider_id in factories:
            dupes.add(provider_id)
            continue

        factories[provider_id] = factory

    if dupes:
        raise ProviderEntrypointError(
            f"duplicate provider ids found in entry points group '{group}': {sorted(dupes)}"
        )

    return factories


def build_provider_registry() -> ProviderRegistry:
    externals = _load_entrypoint_provider_factories(
        group=METADATA_PROVIDER_ENTRYPOINT_GROUP
    )
    return ProviderRegistry(builtins=BUILTIN_PROVIDER_FACTORIES, externals=externals)
