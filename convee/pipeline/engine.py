"""
ProcessEngine — wraps a core transform with input, output and error belts.

Responsibilities:
    - Resolve the run's item id and MetadataHelper
    - Fold the item through the input belt
    - Run the core transform
    - Fold the result through the output belt
    - On core failure, envelope the error, offer it to the error belt and
      either continue with a recovered value or re-raise it with a new
      engine stack frame

Plugins registered on the engine run first, in registration order; single-use
plugins passed to one `run` call are appended after them for that call only.

Exceptions raised by belt plugins themselves are not wrapped, not offered to
the error belt and not enriched: they reach the caller exactly as raised.
Only the core transform's failures go through the error belt.
"""

from __future__ import annotations

import uuid
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar

import structlog

from convee.core.config import settings
from convee.core.constants import BeltHook, CoreProcessType
from convee.core.logging import get_logger
from convee.pipeline.chain import callable_io_types
from convee.pipeline.context import EngineFrame, MetadataHelper
from convee.pipeline.errors import (
    ConveeError,
    EngineDefinitionError,
    PluginDefinitionError,
    ensure_convee_error,
    is_error,
)
from convee.pipeline.plugin import plugin_hooks, resolve, select

I = TypeVar("I")
O = TypeVar("O")

Transform = Callable[[Any, MetadataHelper], Any]
CoreFn = Callable[[Any, MetadataHelper], Awaitable[Any]]


def validate_plugin(plugin: Any) -> None:
    """Reject objects that cannot take part in any belt."""
    name = getattr(plugin, "name", None)
    if not isinstance(name, str) or not name:
        raise PluginDefinitionError(
            f"Plugin {plugin!r} has no name",
        )
    if not plugin_hooks(plugin):
        raise PluginDefinitionError(
            f"Plugin '{name}' implements none of "
            f"{', '.join(hook.value for hook in BeltHook)}",
            details={"plugin": name},
        )


class ProcessEngine(Generic[I, O]):
    """
    A core transform plus its plugin belts.

    Build one from a function::

        double = ProcessEngine.create(lambda n, meta: n * 2, name="double")
        result = await double.run(21)

    or subclass it and implement `process`::

        class SumProcessor(ProcessEngine):
            name = "SumProcessor"

            async def process(self, item, metadata):
                return item["a"] + item["b"]
    """

    name: str | None = None
    kind: CoreProcessType = CoreProcessType.PROCESS_ENGINE

    def __init__(
        self,
        transform: Transform | None = None,
        *,
        name: str | None = None,
        id: str | None = None,
        plugins: Iterable[Any] | None = None,
    ) -> None:
        class_name = type(self).name
        self.is_named = bool(name or class_name)
        self.name = name or class_name or self._default_name()
        self.id = id or str(uuid.uuid4())

        if transform is None and type(self).process is ProcessEngine.process:
            raise EngineDefinitionError(
                f"Engine '{self.name}' has no transform: pass one or override process()",
                engine_id=self.id,
                engine_name=self.name,
            )
        if transform is not None and not callable(transform):
            raise EngineDefinitionError(
                f"Engine '{self.name}' transform must be callable",
                engine_id=self.id,
                engine_name=self.name,
            )
        self._transform: Transform = transform if transform is not None else self.process

        self._plugins: list[Any] = []
        for plugin in plugins or []:
            self.add_plugin(plugin)

    @classmethod
    def create(
        cls,
        transform: Transform,
        *,
        name: str | None = None,
        id: str | None = None,
        plugins: Iterable[Any] | None = None,
    ) -> ProcessEngine:
        """Build an engine around a `(item, metadata) -> output` function."""
        return cls(transform, name=name, id=id, plugins=plugins)

    def _default_name(self) -> str:
        return settings.DEFAULT_PROCESS_NAME

    @property
    def logger(self) -> structlog.typing.FilteringBoundLogger:
        """Engine logger, resolved against the current structlog configuration."""
        return get_logger("convee.engine")

    # ─── Core transform ────────────────────────────────

    async def process(self, item: I, metadata: MetadataHelper) -> O:
        """Override in subclasses that do not pass a transform."""
        raise NotImplementedError

    async def _core(self, item: Any, metadata: MetadataHelper) -> Any:
        return await resolve(self._transform(item, metadata))

    @property
    def input_type(self) -> type | None:
        """Annotated input class of the transform, when resolvable."""
        return callable_io_types(self._transform)[0]

    @property
    def output_type(self) -> type | None:
        """Annotated output class of the transform, when resolvable."""
        return callable_io_types(self._transform)[1]

    # ─── Plugin registry ───────────────────────────────

    @property
    def plugins(self) -> tuple[Any, ...]:
        return tuple(self._plugins)

    def add_plugin(self, plugin: Any) -> None:
        """Register a plugin at the end of every belt it takes part in."""
        validate_plugin(plugin)
        self._plugins.append(plugin)

    def remove_plugin(self, plugin_name: str) -> None:
        """Drop every registered plugin with that name.  Unknown names are ignored."""
        self._plugins = [p for p in self._plugins if p.name != plugin_name]

    # ─── Execution ─────────────────────────────────────

    async def run(
        self,
        item: I,
        *,
        existing_item_id: str | None = None,
        single_use_plugins: Iterable[Any] | None = None,
        metadata_helper: MetadataHelper | None = None,
    ) -> O:
        """
        Run the item through the belts and the core transform.

        Args:
            item: Input value.
            existing_item_id: Reuse an item id instead of minting one.
            single_use_plugins: Plugins applied after the registered ones,
                                for this call only.
            metadata_helper: Shared context from an enclosing pipeline.
                             A fresh helper is created when omitted.

        Raises:
            ConveeError: The core transform failed and no error plugin recovered.
            Exception: Whatever a belt plugin raised, unchanged.
        """
        return await self._execute(
            item,
            self._core,
            existing_item_id=existing_item_id,
            single_use_plugins=single_use_plugins,
            metadata_helper=metadata_helper,
        )

    async def _execute(
        self,
        item: Any,
        core: CoreFn,
        *,
        existing_item_id: str | None = None,
        single_use_plugins: Iterable[Any] | None = None,
        metadata_helper: MetadataHelper | None = None,
    ) -> Any:
        item_id = (
            existing_item_id
            or (metadata_helper.item_id if metadata_helper is not None else None)
            or str(uuid.uuid4())
        )
        metadata = metadata_helper if metadata_helper is not None else MetadataHelper(item_id)

        single_use = list(single_use_plugins or [])
        for plugin in single_use:
            validate_plugin(plugin)
        combined = [*self._plugins, *single_use]

        log = self.logger.bind(
            engine_name=self.name,
            engine_id=self.id,
            engine_kind=str(self.kind),
            item_id=item_id,
        )

        item = await self._run_input_belt(item, metadata, combined, log)

        try:
            output = await core(item, metadata)
        except Exception as exc:
            error = ensure_convee_error(exc)
            collected_keys = tuple(metadata.keys())
            log.debug("Core transform failed", error=str(error))

            recovered, outcome = await self._run_error_belt(error, metadata, combined, log)
            if not recovered:
                raise outcome.enrich_stack(self._frame(item_id, collected_keys))
            output = outcome

        return await self._run_output_belt(output, metadata, combined, log)

    # ─── Belts ─────────────────────────────────────────

    async def _run_input_belt(
        self,
        item: Any,
        metadata: MetadataHelper,
        plugins: list[Any],
        log: structlog.typing.FilteringBoundLogger,
    ) -> Any:
        for plugin in select(plugins, BeltHook.INPUT):
            log.debug("Input belt", plugin=plugin.name)
            item = await resolve(plugin.process_input(item, metadata))
        return item

    async def _run_output_belt(
        self,
        item: Any,
        metadata: MetadataHelper,
        plugins: list[Any],
        log: structlog.typing.FilteringBoundLogger,
    ) -> Any:
        for plugin in select(plugins, BeltHook.OUTPUT):
            log.debug("Output belt", plugin=plugin.name)
            item = await resolve(plugin.process_output(item, metadata))
        return item

    async def _run_error_belt(
        self,
        error: ConveeError,
        metadata: MetadataHelper,
        plugins: list[Any],
        log: structlog.typing.FilteringBoundLogger,
    ) -> tuple[bool, Any]:
        """
        Offer the error to each error plugin in turn.

        Returns (True, value) on the first recovery, else (False, final_error).
        """
        current = error
        for plugin in select(plugins, BeltHook.ERROR):
            result = await resolve(plugin.process_error(current, metadata))
            if is_error(result):
                current = ensure_convee_error(result, inherit=current)
                log.debug("Error belt forwarded error", plugin=plugin.name, error=str(current))
                continue

            log.info("Error recovered by plugin", plugin=plugin.name, error=str(current))
            return True, result

        log.warning(
            "Unrecovered error, re-raising",
            error=str(current),
            stack_depth=len(current.engine_stack) + 1,
        )
        return False, current

    def _frame(self, item_id: str, collected_keys: tuple[str, ...]) -> EngineFrame:
        return EngineFrame(
            source=self.id,
            type=str(self.kind),
            item_id=item_id,
            name=self.name,
            data_keys=collected_keys if settings.STACK_INCLUDE_METADATA_KEYS else None,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={self.id!r}, plugins={len(self._plugins)})"
