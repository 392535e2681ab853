from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Literal, Mapping

from instance_construction_engine.internal.providers.builtin import (
    DEFAULT_PROVIDER_ID,
    ProviderFactory,
)
from instance_construction_engine.internal.providers.registry import (
    ProviderRegistry,
    ProviderRegistryError,
    build_provider_registry,
)
from instance_construction_engine.metadata import TypeMetadataProvider


class ProviderSelectionError(RuntimeError):
    """
    Raised when the requested metadata provider id cannot be served.
    """


@dataclass(frozen=True, slots=True)
class ProviderSelection:
    provider_id: str
    origin: Literal["builtin", "entrypoint"]
    factory: ProviderFactory


def _select_provider(
    *, provider_id: str | None, registry: ProviderRegistry
) -> ProviderSelection:
    pid = provider_id or DEFAULT_PROVIDER_ID

    merged = registry.merged()
    if pid not in merged:
        raise ProviderSelectionError(
            f"unknown metadata provider id {pid!r}. available={sorted(merged)}"
        )

    origin: Literal["builtin", "entrypoint"] = (
        "builtin" if pid in registry.builtins else "entrypoint"
    )
    return ProviderSelection(provider_id=pid, origin=origin, factory=merged[pid])


@contextmanager
def open_metadata_provider(
    *,
    provider_id: str | None = None,
    config: Mapping[str, Any] | None = None,
    registry: ProviderRegistry | None = None,
) -> Iterator[TypeMetadataProvider]:
    """
    Create one metadata provider and close it when the block ends.

    Parameters:
      - provider_id: None means "use the default"
      - config: passed to the selected factory (keyword arg `config`)
      - registry: test seam; entry points are not scanned when it is given
    """
    if registry is None:
        registry = build_provider_registry()

    try:
        selection = _select_provider(provider_id=provider_id, registry=registry)
    except ProviderRegistryError as e:
        raise ProviderSelectionError(str(e)) from e

    logging.debug(
        f"metadata provider selected: {selection.provider_id} ({selection.origin})"
    )
    provider = selection.factory(config=config)

    try:
        yield provider
    finally:
        provider.close()
