from __future__ import annotations

from typing import Any, Mapping

from instance_construction_engine.metadata import TypeMetadata, TypeMetadataProvider
from instance_construction_engine.model.result import TypeMetadataError


class RegisteredMetadataProvider(TypeMetadataProvider):
    """
    Serves explicitly registered metadata instead of reading it from classes.

    Use it for targets whose construction surface cannot be read through
    introspection, or to expose a narrower surface than the class has.
    """

    def __init__(self, schemas: Mapping[type, TypeMetadata] | None = None) -> None:
        self._schemas: dict[type, TypeMetadata] = {}
        for target, metadata in (schemas or {}).items():
            self.register(target, metadata)

    def register(self, target: type, metadata: TypeMetadata) -> None:
        if metadata.target is not target:
            raise TypeMetadataError(
                f"metadata for {metadata.target.__qualname__} cannot be registered "
                f"under {target.__qualname__}",
                target=target,
            )
        self._schemas[target] = metadata

    def describe(self, target: type) -> TypeMetadata:
        metadata = self._schemas.get(target)
        if metadata is None:
            raise TypeMetadataError(
                f"no metadata registered for {getattr(target, '__qualname__', target)!r}",
                target=target,
            )
        return metadata

    def close(self) -> None:
        self._schemas.clear()


def registered_provider_from_config(
    config: Mapping[str, Any] | None,
) -> RegisteredMetadataProvider:
    schemas = (config or {}).get("schemas", {})
    if not isinstance(schemas, Mapping):
        raise TypeMetadataError(
            f"'schemas' must be a mapping of class to TypeMetadata; got {type(schemas).__name__}"
        )
    return RegisteredMetadataProvider(schemas)
