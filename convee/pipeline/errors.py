"""
Exception types for the execution engine.

ConveeError is the envelope every core-transform failure is wrapped in.  It
keeps the original exception and an append-only stack of EngineFrame records,
one per engine the error passed through without being recovered.

Configuration problems (bad steps, unknown plugin targets, plugins without
hooks) inherit from ConveeConfigurationError so callers can catch broadly or
narrowly as needed.  Each carries structured `details` for logging.
"""

from __future__ import annotations

from typing import Any

from convee.pipeline.context import EngineFrame


# ═══════════════════════════════════════════════════════════
#  Error envelope
# ═══════════════════════════════════════════════════════════

class ConveeError(Exception):
    """
    Error envelope carrying an engine traversal stack.

    Args:
        message: Human-readable message, normally the wrapped error's.
        source_error: The original exception.
        engine_stack: Frames inherited from a previous envelope, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        source_error: BaseException | None = None,
        engine_stack: list[EngineFrame] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.source_error = source_error
        self.engine_stack: list[EngineFrame] = list(engine_stack or [])
        if source_error is not None:
            self.__cause__ = source_error

    @classmethod
    def wrap(
        cls,
        error: BaseException,
        *,
        engine_stack: list[EngineFrame] | None = None,
    ) -> ConveeError:
        """Wrap an arbitrary exception with an empty (or inherited) stack."""
        message = str(error) or error.__class__.__name__
        return cls(message, source_error=error, engine_stack=engine_stack)

    def enrich_stack(self, frame: EngineFrame) -> ConveeError:
        """Append a frame and return self, so callers can `raise err.enrich_stack(...)`."""
        self.engine_stack.append(frame)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialise for structured logs."""
        return {
            "message": self.message,
            "source_error": repr(self.source_error) if self.source_error is not None else None,
            "engine_stack": [frame.to_dict() for frame in self.engine_stack],
        }

    def __str__(self) -> str:
        return self.message


def wrap_error(error: BaseException) -> ConveeError:
    return ConveeError.wrap(error)


def is_error(value: Any) -> bool:
    """True for exception instances; error plugins use this to signal 'not recovered'."""
    return isinstance(value, BaseException)


def is_convee_error(value: Any) -> bool:
    """True when the value can already carry an engine stack."""
    return (
        is_error(value)
        and isinstance(getattr(value, "engine_stack", None), list)
        and callable(getattr(value, "enrich_stack", None))
    )


def ensure_convee_error(
    error: BaseException,
    *,
    inherit: ConveeError | None = None,
) -> ConveeError:
    """
    Return `error` unchanged when it already carries a stack, else wrap it.

    When `inherit` is given, a freshly created wrapper starts with a copy of
    that envelope's frames so the stack never shrinks.
    """
    if isinstance(error, ConveeError):
        return error
    if is_convee_error(error):
        return ConveeError.wrap(error, engine_stack=list(error.engine_stack))
    return ConveeError.wrap(error, engine_stack=inherit.engine_stack if inherit else None)


# ═══════════════════════════════════════════════════════════
#  Configuration errors
# ═══════════════════════════════════════════════════════════

class ConveeConfigurationError(Exception):
    """Base exception for engine, pipeline and plugin misconfiguration."""

    def __init__(
        self,
        message: str,
        *,
        engine_id: str | None = None,
        engine_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.engine_id = engine_id
        self.engine_name = engine_name
        self.details = details or {}
        super().__init__(message)


class EngineDefinitionError(ConveeConfigurationError):
    """A ProcessEngine was built without a core transform."""
    pass


class PluginDefinitionError(ConveeConfigurationError):
    """A belt plugin implements none of the three hooks, or has no name."""
    pass


class EmptyPipelineError(ConveeConfigurationError):
    """A pipeline (or a run_custom call) was given no steps."""
    pass


class UnknownStepError(ConveeConfigurationError):
    """A pipeline step is neither a callable nor a ProcessEngine."""

    def __init__(
        self,
        message: str,
        *,
        step_index: int | None = None,
        **kwargs,
    ) -> None:
        self.step_index = step_index
        super().__init__(message, **kwargs)


class TargetNotFoundError(ConveeConfigurationError):
    """add_plugin/remove_plugin named a target the pipeline does not expose."""

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        available: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.target = target
        self.available = available or []
        super().__init__(message, **kwargs)


class ChainTypeError(ConveeConfigurationError):
    """Annotated output of one step cannot feed the next step's input."""
    pass
