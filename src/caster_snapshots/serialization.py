"""Serialization pipeline turning arbitrary values into snapshot text."""

from __future__ import annotations

import dataclasses
import pprint
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from caster_snapshots.codec import template_escape
from caster_snapshots.errors import SnapshotStateError

Serializer = Callable[[Any], Any]


def serialize(value: Any, serializers: Sequence[Serializer]) -> str:
    """Fold ``value`` through ``serializers`` and return the escaped snapshot text.

    Each serializer receives the previous step's output; the final result is
    cast with ``str()``. With no serializers the value is cast directly. A
    chain that ends in ``None`` (a serializer that returned nothing) fails.
    """

    try:
        result = value
        for serializer in serializers:
            result = serializer(result)
        text = None if serializers and result is None else str(result)
    except Exception as exc:
        raise SnapshotStateError(
            "The provided serializers did not generate a string.",
            input=value,
        ) from exc
    if text is None:
        raise SnapshotStateError(
            "The provided serializers did not generate a string.",
            input=value,
        )
    return f"\n{template_escape(text)}\n"


def normalize_value(value: Any) -> Any:
    """Convert models and containers into plain, deterministically ordered data."""

    if isinstance(value, BaseModel):
        return normalize_value(value.model_dump(mode="python"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return normalize_value(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {key: normalize_value(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((normalize_value(item) for item in value), key=repr)
    if isinstance(value, list):
        return [normalize_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(normalize_value(item) for item in value)
    return value


def pretty_format(value: Any) -> str:
    return pprint.pformat(value, sort_dicts=True, width=80)


DEFAULT_SERIALIZERS: tuple[Serializer, ...] = (normalize_value, pretty_format)


__all__ = ["DEFAULT_SERIALIZERS", "Serializer", "normalize_value", "pretty_format", "serialize"]
