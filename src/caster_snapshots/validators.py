"""Argument validation for snapshot configuration and assertion options."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from caster_snapshots.errors import SnapshotArgumentTypeError, SnapshotArgumentValueError
from caster_snapshots.serialization import Serializer

_ASSERTION_OPTION_KEYS = frozenset({"serializers"})


def validate_callable(value: Any, name: str) -> Callable[..., Any]:
    if not callable(value):
        raise SnapshotArgumentTypeError(
            f'The "{name}" argument must be of type function. Received {type(value).__name__}',
            name=name,
        )
    return value


def validate_serializers(value: Any, name: str, *, kind: str = "argument") -> tuple[Serializer, ...]:
    """Return ``value`` as a tuple of callables or raise a typed argument error."""

    if not isinstance(value, (list, tuple)):
        raise SnapshotArgumentTypeError(
            f'The "{name}" {kind} must be an instance of list or tuple. '
            f"Received {type(value).__name__}",
            name=name,
        )
    for index, item in enumerate(value):
        if not callable(item):
            item_name = f"{name}[{index}]"
            raise SnapshotArgumentTypeError(
                f'The "{item_name}" {kind} must be of type function. '
                f"Received {type(item).__name__}",
                name=item_name,
            )
    return tuple(value)


def validate_assertion_options(options: Any) -> tuple[Serializer, ...] | None:
    """Validate snapshot assertion options; return the serializer override, if any."""

    if not isinstance(options, Mapping):
        raise SnapshotArgumentTypeError(
            f'The "options" argument must be of type Mapping. Received {type(options).__name__}',
            name="options",
        )
    unknown = sorted(str(key) for key in options if key not in _ASSERTION_OPTION_KEYS)
    if unknown:
        raise SnapshotArgumentValueError(
            f'The "options" argument contains unsupported keys: {", ".join(unknown)}',
            name="options",
        )
    if "serializers" not in options:
        return None
    return validate_serializers(options["serializers"], "options.serializers", kind="property")


__all__ = ["validate_assertion_options", "validate_callable", "validate_serializers"]
