"""
Step chain check: does each step's output feed the next step's input?

The pipeline compares step annotations at construction time.  Only plain
class annotations are compared; unannotated, generic and unresolvable
annotations are skipped.
"""

from __future__ import annotations

import inspect
import typing
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from convee.core.logging import get_logger
from convee.pipeline.errors import ChainTypeError

# int is acceptable where float is expected, and both where complex is.
_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    int: (float, complex),
    float: (complex,),
}


@dataclass(frozen=True)
class ChainLink:
    """Resolved input/output annotation of one step."""

    label: str
    input_type: type | None
    output_type: type | None


def _as_class(annotation: Any) -> type | None:
    if annotation is Any or annotation is object or typing.get_origin(annotation) is not None:
        return None
    if not isinstance(annotation, type):
        return None
    return annotation


def callable_io_types(fn: Callable[..., Any]) -> tuple[type | None, type | None]:
    """
    Return (first-parameter class, return class) for a callable.

    Either side is None when it is missing or is not a plain class.
    """
    target = fn
    if not (inspect.isfunction(target) or inspect.ismethod(target)):
        target = getattr(fn, "__call__", fn)

    try:
        hints = typing.get_type_hints(target)
        params = list(inspect.signature(target).parameters.values())
    except (AttributeError, NameError, SyntaxError, TypeError, ValueError):
        return None, None

    input_type = None
    if params:
        input_type = _as_class(hints.get(params[0].name))
    return input_type, _as_class(hints.get("return"))


def is_compatible(produced: type, expected: type) -> bool:
    if issubclass(produced, expected):
        return True
    return expected in _NUMERIC_PROMOTIONS.get(produced, ())


def check_chain(
    links: Sequence[ChainLink],
    *,
    pipeline_name: str,
    strict: bool = False,
) -> list[tuple[ChainLink, ChainLink]]:
    """
    Compare every adjacent pair of links.

    Returns the mismatching pairs.  With `strict`, the first mismatch raises
    ChainTypeError instead; otherwise each one is logged as a warning.
    """
    mismatches: list[tuple[ChainLink, ChainLink]] = []
    logger = get_logger(__name__)

    for current, following in zip(links, links[1:]):
        produced, expected = current.output_type, following.input_type
        if produced is None or expected is None or is_compatible(produced, expected):
            continue

        mismatches.append((current, following))
        message = (
            f"Step '{current.label}' returns {produced.__name__} but "
            f"'{following.label}' expects {expected.__name__}"
        )
        if strict:
            raise ChainTypeError(
                message,
                engine_name=pipeline_name,
                details={
                    "producer": current.label,
                    "consumer": following.label,
                    "produced": produced.__name__,
                    "expected": expected.__name__,
                },
            )
        logger.warning(
            "Pipeline step types do not chain",
            pipeline=pipeline_name,
            producer=current.label,
            consumer=following.label,
            produced=produced.__name__,
            expected=expected.__name__,
        )

    return mismatches
