"""
Pass-through pipeline steps that copy the running value into metadata.

    Pipeline.create(
        [parse, store_metadata("parsed"), enrich, store_output(enrich, "enriched")],
        name="ingest",
    )

Both connectors record the running value in the run's MetadataHelper and
return it unchanged.  The optional `previous_step` argument only documents
which step's output is being captured; it is not called.
"""

from __future__ import annotations

from typing import Any, Callable

from convee.pipeline.context import MetadataHelper


def store_metadata(key: str, previous_step: Any = None) -> Callable[[Any, MetadataHelper], Any]:
    """Step that stores the current value under `key` and passes it on."""

    def _store(item: Any, metadata: MetadataHelper) -> Any:
        metadata.add(key, item)
        return item

    _store.__name__ = f"store_metadata[{key}]"
    return _store


def store_output(previous_step: Any, key: str) -> Callable[[Any, MetadataHelper], Any]:
    """Same as store_metadata, with the captured step named first."""
    step = store_metadata(key, previous_step)
    step.__name__ = f"store_output[{key}]"
    return step
