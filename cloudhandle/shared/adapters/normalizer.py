"""
Take provider-specific resource objects and flatten them into opaque key/value
attributes.

Two steps, kept separate so the flatten pass never depends on a provider type:

1. ``to_generic_tree`` serializes a provider object into a JSON-shaped mapping.
2. ``get_key_value_list`` walks the top level of that mapping and emits one
   ``KeyValue`` per field. Nested objects and arrays are rendered as canonical
   JSON text instead of being expanded.

Example:
    {"name": "ip-1", "users": ["zones/a/instances/vm-1"], "labels": {"b": 2, "a": 1}}
    ->
    [KeyValue(key="name", value="ip-1"),
     KeyValue(key="users", value='["zones/a/instances/vm-1"]'),
     KeyValue(key="labels", value='{"a":1,"b":2}')]
"""
import dataclasses
import json
from collections.abc import Iterable, Mapping
from typing import Any

import proto
from pydantic import BaseModel

from cloudhandle.schemas.resources import KeyValue
from cloudhandle.shared.core.exceptions import MappingFailureError


def to_generic_tree(obj: Any) -> dict[str, Any]:
    """Serialize a provider object into a generic ``{str: value}`` mapping."""
    if isinstance(obj, Mapping):
        tree: Any = dict(obj)
    elif isinstance(obj, proto.Message):
        # Compute SDK resources are proto-plus messages.
        tree = type(obj).to_dict(obj, preserving_proto_field_name=True)
    elif isinstance(obj, BaseModel):
        tree = obj.model_dump(mode="json")
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        tree = dataclasses.asdict(obj)
    else:
        raise MappingFailureError(
            f"Cannot serialize {type(obj).__name__} into a field mapping",
            details={"type": type(obj).__name__},
        )

    non_string_keys = [k for k in tree if not isinstance(k, str)]
    if non_string_keys:
        raise MappingFailureError(
            "Field mapping keys must be strings",
            details={"keys": [repr(k) for k in non_string_keys]},
        )
    return tree


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    if value is None or isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return str(value)


def get_key_value_list(tree: Mapping[str, Any]) -> list[KeyValue]:
    """Flatten one level of ``tree`` into KeyValues, in source field order."""
    return [KeyValue(key=key, value=_render_value(value)) for key, value in tree.items()]


def opaque_key_values(obj: Any, promoted: Iterable[str] = ()) -> list[KeyValue]:
    """
    Opaque attributes for a provider object.

    Fields named in ``promoted`` are already typed attributes on the common
    model and are left out so nothing is reported twice.
    """
    excluded = set(promoted)
    tree = to_generic_tree(obj)
    return [kv for kv in get_key_value_list(tree) if kv.key not in excluded]
