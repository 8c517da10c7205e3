"""Recursive merge of a configuration document with a partial patch."""

from collections.abc import Mapping
from typing import Any, TypeGuard


def is_plain_record(value: Any) -> TypeGuard[Mapping[str, Any]]:
    """True for key/value mappings; lists, scalars and None are not records."""
    return isinstance(value, Mapping)


def merge_config_patch(base: Any, patch: Any) -> Any:
    """Overlay ``patch`` onto ``base`` and return a new document.

    Nested records merge key by key. Any other value in the patch, lists
    included, replaces the base value wholesale. When either side is not a
    record the patch wins outright. Neither input is mutated.
    """
    if not is_plain_record(base) or not is_plain_record(patch):
        return patch

    merged: dict[str, Any] = dict(base)
    for key, value in patch.items():
        existing = merged.get(key)
        if is_plain_record(existing) and is_plain_record(value):
            merged[key] = merge_config_patch(existing, value)
        else:
            merged[key] = value
    return merged
