"""
State view handed to resource adapters by the engine.

:class:`ResourceData` pairs the user's declaration (the configuration record)
with the values an adapter records after talking to the device. Every field
has an explicit :class:`Presence`, so adapters can tell an undeclared field
from one the user deliberately set to an empty value.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .schema import FieldType, ResourceSchema


class Presence(str, Enum):
    """Tri-state for a field in the configuration record."""

    UNSET = "unset"
    EMPTY = "empty"
    VALUE = "value"


class ResourceData:
    """
    Configuration record and recorded state for one resource instance.

    Parameters
    ----------
    schema:
        Field schema of the resource type.
    config:
        Declared values. Keys missing or mapped to ``None`` are unset. Pass
        ``None`` when no declaration is available (refresh and import); the
        view then reads from ``state`` alone.
    state:
        Values recorded by a previous Read. With a declaration present they
        only fill in computed fields the declaration leaves out.
    resource_id:
        Identity of the remote object, empty when none exists.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        config: Optional[Mapping[str, Any]] = None,
        *,
        state: Optional[Mapping[str, Any]] = None,
        resource_id: str = "",
    ) -> None:
        self.schema = schema
        self._has_config = config is not None
        self._config: Dict[str, Any] = schema.coerce(config or {})
        self._state: Dict[str, Any] = schema.coerce(state or {})
        self._id = resource_id

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        """Record the identity; an empty string tells the engine the object is gone."""

        self._id = value

    def raw(self, key: str) -> Any:
        """Current value of ``key``, ``None`` when unset."""

        spec = self.schema.require(key)
        if not self._has_config:
            return self._state.get(key)
        value = self._config.get(key)
        if value is None and spec.computed:
            value = self._state.get(key)
        return value

    def get(self, key: str) -> Any:
        """Like :meth:`raw` but falls back to the schema default or zero value."""

        value = self.raw(key)
        if value is None:
            return self.schema.require(key).unset_value()
        return value

    def presence(self, key: str) -> Presence:
        spec = self.schema.require(key)
        value = self.raw(key)
        if value is None:
            return Presence.UNSET
        if spec.type is FieldType.BLOCK:
            return Presence.VALUE if value else Presence.EMPTY
        return Presence.EMPTY if value == spec.zero_value() else Presence.VALUE

    def is_set(self, key: str) -> bool:
        return self.presence(key) is not Presence.UNSET

    def set(self, key: str, value: Any) -> None:
        """Record a value read from the device; ``None`` records the zero value."""

        spec = self.schema.require(key)
        coerced = spec.coerce(value)
        self._state[key] = spec.zero_value() if coerced is None else coerced

    def discard(self, key: str) -> None:
        """Forget a recorded value."""

        self.schema.require(key)
        self._state.pop(key, None)

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self._config)

    @property
    def state(self) -> Dict[str, Any]:
        return dict(self._state)

    def snapshot(self) -> Dict[str, Any]:
        """Recorded state plus the identity, suitable for persistence or display."""

        payload: Dict[str, Any] = {"id": self._id}
        payload.update(self._state)
        return payload
