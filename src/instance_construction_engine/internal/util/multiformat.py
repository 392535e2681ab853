from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from typing_extensions import Self

from instance_construction_engine.internal.util.toml import (
    dump_toml_to_str,
    load_toml_text,
)


def _normalize(value: Any) -> Any:
    """
    Converts a value into a JSON friendly, order-stable structure.

    Mappings are key-sorted, sets become sorted lists, paths and enums become
    their plain values and dates become ISO strings. Anything else is returned
    unchanged.
    """
    match value:
        case Path():
            return value.as_posix()
        case Enum():
            return value.value
        case Mapping():
            return {str(k): _normalize(value[k]) for k in sorted(value, key=str)}
        case set() | frozenset():
            return sorted(_normalize(v) for v in value)
        case list() | tuple():
            return [_normalize(v) for v in value]
        case datetime() | date():
            return value.isoformat()
        case _:
            return value


def _sort_dict(value: Any) -> Any:
    # TOML has no null, so None entries are dropped
    if isinstance(value, Mapping):
        return {
            k: _sort_dict(value[k]) for k in sorted(value) if value[k] is not None
        }
    if isinstance(value, (list, tuple)):
        return [_sort_dict(v) for v in value]
    return value


class MultiformatSerializableMixin:
    """
    Adds JSON, YAML and TOML rendering to any object that can describe itself
    as a mapping through `to_mapping()`.
    """

    __slots__ = ()

    def to_mapping(self, *args: Any, **kwargs: Any) -> Mapping[str, Any]:
        raise NotImplementedError(
            f"{type(self).__name__} must implement to_mapping()"
        )

    def mapping_hash(self) -> str:
        normalized = _normalize(self.to_mapping())
        payload = json.dumps(normalized, sort_keys=True, separators=(",", ":"))
        return hashlib.new("sha512", payload.encode("utf-8")).hexdigest()

    def to_json(self) -> str:
        return json.dumps(
            _normalize(self.to_mapping()), ensure_ascii=False, indent=2, sort_keys=True
        )

    def to_yaml(self) -> str:
        try:
            import yaml
        except ImportError as e:
            raise RuntimeError(
                "PyYAML not installed; install the 'yaml' extra to use YAML"
            ) from e
        return yaml.safe_dump(
            _normalize(self.to_mapping()), sort_keys=True, allow_unicode=True, indent=2
        )

    def to_toml(self) -> str:
        return dump_toml_to_str(_sort_dict(_normalize(self.to_mapping())))

    def serialize(self, fmt: str = "json") -> str:
        match fmt:
            case "json":
                return self.to_json()
            case "yaml":
                return self.to_yaml()
            case "toml":
                return self.to_toml()
            case _:
                raise ValueError(f"unrecognized format: {fmt}")

    def flat_summary(
        self,
        *,
        first_fields: Iterable[str] = (),
        last_fields: Iterable[str] = (),
        exclude: Iterable[str] = (),
        include_empty: bool = False,
        sep: str = ", ",
    ) -> str:
        mapping = self.to_mapping()
        all_keys = set(mapping.keys()) - set(exclude)
        first = [f for f in first_fields if f in all_keys]
        last = [f for f in last_fields if f in all_keys and f not in first]
        middle = sorted(all_keys - set(first) - set(last))

        items: list[str] = []
        for k in (*first, *middle, *last):
            v = mapping[k]
            if not include_empty and (
                v is None
                or v == ""
                or (isinstance(v, (list, tuple, set, dict)) and not v)
            ):
                continue
            if isinstance(v, (datetime, date)):
                items.append(f"{k}: {v.isoformat()}")
            elif isinstance(v, dict):
                items.append(f"{k}: {{{', '.join(f'{ik}: {iv!r}' for ik, iv in v.items())}}}")
            elif isinstance(v, (list, tuple, set)):
                items.append(f"{k}: [{', '.join(str(i) for i in v)}]")
            else:
                items.append(f"{k}: {v}")
        return sep.join(items)

    def __str__(self) -> str:
        return self.flat_summary()


class MultiformatDeserializableMixin:
    """
    Adds JSON, YAML, TOML and file loading to any class that can build itself
    from a mapping through `from_mapping()`.
    """

    __slots__ = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], **kwargs: Any) -> Self:
        raise NotImplementedError(f"{cls.__name__} must implement from_mapping()")

    @classmethod
    def deserialize(cls, text: str, fmt: str = "json", **kwargs: Any) -> Self:
        raw = cls._parse_text(text, fmt)
        return cls.from_mapping(cls._coerce_root_mapping(raw), **kwargs)

    @classmethod
    def from_json(cls, text: str, **kwargs: Any) -> Self:
        return cls.deserialize(text, fmt="json", **kwargs)

    @classmethod
    def from_yaml(cls, text: str, **kwargs: Any) -> Self:
        return cls.deserialize(text, fmt="yaml", **kwargs)

    @classmethod
    def from_toml(cls, text: str, **kwargs: Any) -> Self:
        return cls.deserialize(text, fmt="toml", **kwargs)

    @classmethod
    def from_file(cls, path: str | Path, fmt: str | None = None, **kwargs: Any) -> Self:
        p = Path(path)
        text = cls._load_text(p)
        raw = cls._parse_text(text, fmt or cls._infer_format_from_suffix(p))
        return cls.from_mapping(cls._coerce_root_mapping(raw), **kwargs)

    @staticmethod
    def _load_text(path: Path) -> str:
        return path.read_text(encoding="utf-8")

    @staticmethod
    def _infer_format_from_suffix(path: Path) -> str:
        match path.suffix.lower():
            case ".json":
                return "json"
            case ".yaml" | ".yml":
                return "yaml"
            case ".toml":
                return "toml"
            case _:
                raise ValueError(f"cannot infer format from file suffix: {path.name!r}")

    @staticmethod
    def _parse_text(text: str, fmt: str) -> Any:
        match fmt:
            case "json":
                return json.loads(text)
            case "yaml":
                try:
                    import yaml
                except ImportError as e:
                    raise RuntimeError(
                        "PyYAML not installed; install the 'yaml' extra to use YAML"
                    ) from e
                docs = list(yaml.safe_load_all(text))
                if len(docs) > 1:
                    raise ValueError("expected a single YAML document")
                return docs[0] if docs else {}
            case "toml":
                return load_toml_text(text)
            case _:
                raise ValueError(f"unrecognized format: {fmt}")

    @staticmethod
    def _coerce_root_mapping(raw: Any) -> Mapping[str, Any]:
        if isinstance(raw, Mapping):
            return raw
        raise TypeError(f"expected a mapping at document root, got {type(raw).__name__}")


class MultiformatModelMixin(MultiformatSerializableMixin, MultiformatDeserializableMixin):
    """Both directions of the multiformat contract."""

    __slots__ = ()
