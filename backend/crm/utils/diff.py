from __future__ import annotations
"""Field-level diff between two flat entity snapshots.

Both snapshots map field name -> value. A field counts as changed when it is present in
only one snapshot (addition or removal) or when its values differ by structural equality,
so nested dicts and lists compare by content rather than identity.
"""
from typing import Any, List, Mapping, Optional

_MISSING = object()


def _normalize(value: Any) -> Any:
    # tuples and lists are the same JSON array once persisted; True must not equal 1
    if isinstance(value, bool):
        return (bool, value)
    if isinstance(value, Mapping):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def values_differ(before: Any, after: Any) -> bool:
    if before is _MISSING or after is _MISSING:
        return before is not after
    return _normalize(before) != _normalize(after)


def changed_fields(previous: Optional[Mapping[str, Any]], current: Optional[Mapping[str, Any]]) -> List[str]:
    """Return the sorted names of fields that differ between ``previous`` and ``current``.

    Returns an empty list when either snapshot is absent.
    """
    if previous is None or current is None:
        return []
    changed = []
    for key in set(previous) | set(current):
        if values_differ(previous.get(key, _MISSING), current.get(key, _MISSING)):
            changed.append(key)
    return sorted(changed)


__all__ = ['changed_fields', 'values_differ']
