"""JSON-ready serialization of payload dataclasses."""

import math
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_jsonable(obj: Any) -> Any:
    """Recursively convert dataclasses to dicts with camelCase keys.

    Plain dict keys are left alone: they come from providers or the model.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {camel(f.name): to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(i) for i in obj]
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj
