"""
Deep merge of a freshly parsed JSON document into a live object graph.

Containers in the target keep their identity: only their contents change,
so anything holding a reference to a nested dict or list sees the update.
"""
from typing import Any, Union

Container = Union[dict, list]


def merge(target: Container, source: Container) -> None:
    """
    Make target structurally equal to source, in place.

    Keys (or trailing indices) missing from source are removed first, then
    every source entry is assigned. Nested dicts/lists are merged into the
    existing container when the kinds match, otherwise the slot gets a new
    empty container of the source's kind which is then filled.

    Lists are merged index by index.
    """
    if isinstance(target, dict):
        if not isinstance(source, dict):
            raise TypeError(f"Cannot merge {type(source).__name__} into dict")
        for key in [key for key in target if key not in source]:
            del target[key]
        for key, value in list(source.items()):
            target[key] = _merge_slot(target.get(key), value)
    elif isinstance(target, list):
        if not isinstance(source, list):
            raise TypeError(f"Cannot merge {type(source).__name__} into list")
        del target[len(source):]
        for index, value in enumerate(list(source)):
            if index < len(target):
                target[index] = _merge_slot(target[index], value)
            else:
                target.append(_merge_slot(None, value))
    else:
        raise TypeError(f"Merge target must be dict or list, got {type(target).__name__}")


def _merge_slot(current: Any, value: Any) -> Any:
    if isinstance(value, (dict, list)):
        kind = dict if isinstance(value, dict) else list
        if not isinstance(current, kind):
            current = kind()
        merge(current, value)
        return current
    return value
