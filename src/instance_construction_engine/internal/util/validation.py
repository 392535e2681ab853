from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def validate_typed_dict(
    desc: str,
    mapping: Mapping[str, Any],
    validation_type: type,
    value_type: type | tuple[type, ...],
) -> None:
    """
    Validates a mapping against a TypedDict definition for its keys and values.

    Args:
        desc: Description of the mapping being validated, used for error messages.
        mapping: Mapping to be validated against the TypedDict definition.
        validation_type: TypedDict class whose annotations list the allowed keys.
        value_type: Expected type or tuple of types for the values in the mapping.

    Raises:
        ValueError: If the mapping has keys the TypedDict does not declare, or
            values that are not instances of `value_type`.
    """
    allowed_keys = set(validation_type.__annotations__.keys())
    bad_keys = set(mapping.keys()) - allowed_keys
    if bad_keys:
        raise ValueError(f"Invalid {desc} keys: {sorted(bad_keys)}")
    bad_vals = [
        (k, type(v).__name__)
        for k, v in mapping.items()
        if not isinstance(v, value_type)
    ]
    if bad_vals:
        details = ", ".join(f"{k} (got {t})" for k, t in bad_vals)
        expected = (
            value_type.__name__
            if isinstance(value_type, type)
            else " | ".join(t.__name__ for t in value_type)
        )
        raise ValueError(f"Invalid {desc} values: expected {expected}; {details}")
