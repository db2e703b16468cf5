"""
MetadataHelper — the run-scoped key/value context.

One helper is created at the top of a run and handed to every plugin hook,
core transform and nested engine within that run.  Writes are visible to
every later reader of the same instance; nothing is shared across runs.

EngineFrame is the record appended to an error's engine stack each time it
passes, unrecovered, through an engine.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Iterator


# ═══════════════════════════════════════════════════════════
#  MetadataHelper
# ═══════════════════════════════════════════════════════════

class MetadataHelper:
    """
    Mutable metadata store shared by everything inside one run.

    Args:
        item_id: Identifier of the run.  A fresh UUID is minted when omitted.
    """

    def __init__(self, item_id: str | None = None) -> None:
        self._item_id = item_id or str(uuid.uuid4())
        self._data: dict[str, Any] = {}

    @property
    def item_id(self) -> str:
        return self._item_id

    def add(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous value for the key."""
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or `default` when the key is absent."""
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def get_all(self) -> dict[str, Any]:
        """Snapshot of everything stored so far."""
        return dict(self._data)

    def keys(self) -> list[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MetadataHelper(item_id={self._item_id!r}, keys={list(self._data)!r})"


# ═══════════════════════════════════════════════════════════
#  EngineFrame
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EngineFrame:
    """One hop of an unrecovered error through an engine."""

    source: str                     # engine id
    type: str                       # CoreProcessType value
    item_id: str
    name: str | None = None
    data_keys: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise for structured logs."""
        return {
            "source": self.source,
            "type": self.type,
            "item_id": self.item_id,
            "name": self.name,
            "data_keys": list(self.data_keys) if self.data_keys is not None else None,
        }
