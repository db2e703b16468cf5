"""
Pipeline — a ProcessEngine whose core transform runs a list of steps.

A step is either:
    - a callable `(item, metadata) -> item` (sync or async), or
    - a nested ProcessEngine / Pipeline, run with the pipeline's own
      MetadataHelper so the whole run shares one context.

The pipeline keeps its own plugin belt around the step sequence, and routes
targeted add_plugin/remove_plugin calls to named nested engines.

Usage::

    pricing = Pipeline.create(
        [apply_discount(0.02), add_tax(0.10)],
        name="pricing",
    )
    total = await pricing.run(500)
"""

from __future__ import annotations

import functools
from typing import Any, Iterable, Sequence

from convee.core.config import settings
from convee.core.constants import CoreProcessType
from convee.pipeline.chain import ChainLink, callable_io_types, check_chain
from convee.pipeline.context import MetadataHelper
from convee.pipeline.engine import ProcessEngine
from convee.pipeline.errors import (
    EmptyPipelineError,
    TargetNotFoundError,
    UnknownStepError,
)
from convee.pipeline.plugin import resolve


def step_label(step: Any, index: int) -> str:
    """Readable name for logs and errors."""
    if isinstance(step, ProcessEngine):
        return step.name
    return getattr(step, "__name__", None) or f"step[{index}]"


def step_io_types(step: Any) -> tuple[type | None, type | None]:
    if isinstance(step, ProcessEngine):
        return step.input_type, step.output_type
    if callable(step):
        return callable_io_types(step)
    return None, None


class Pipeline(ProcessEngine):
    """
    Ordered, non-empty sequence of steps run as one engine.

    Args:
        steps: Callables and/or nested engines, in execution order.
        name: Pipeline name; also the target name for its own belt.
        id: Optional fixed id.
        plugins: Plugins for the pipeline's own belt.
    """

    kind = CoreProcessType.PIPELINE

    def __init__(
        self,
        steps: Sequence[Any],
        *,
        name: str,
        id: str | None = None,
        plugins: Iterable[Any] | None = None,
    ) -> None:
        self._steps: tuple[Any, ...] = tuple(steps)
        super().__init__(self._run_fixed_steps, name=name, id=id, plugins=plugins)

        if not self._steps:
            raise EmptyPipelineError(
                f"Pipeline '{self.name}' needs at least one step",
                engine_id=self.id,
                engine_name=self.name,
            )

        check_chain(
            self._chain_links(self._steps),
            pipeline_name=self.name,
            strict=settings.STRICT_CHAIN_TYPES,
        )

    @classmethod
    def create(
        cls,
        steps: Sequence[Any],
        *,
        name: str,
        id: str | None = None,
        plugins: Iterable[Any] | None = None,
    ) -> Pipeline:
        return cls(steps, name=name, id=id, plugins=plugins)

    def _default_name(self) -> str:
        return settings.DEFAULT_PIPELINE_NAME

    # ─── Introspection ─────────────────────────────────

    @property
    def steps(self) -> tuple[Any, ...]:
        return self._steps

    @property
    def pluggable_names(self) -> list[str]:
        """The pipeline's own name, then every explicitly named nested engine."""
        names = [self.name]
        for step in self._steps:
            if isinstance(step, ProcessEngine) and step.is_named and step.name not in names:
                names.append(step.name)
        return names

    @property
    def input_type(self) -> type | None:
        return step_io_types(self._steps[0])[0]

    @property
    def output_type(self) -> type | None:
        return step_io_types(self._steps[-1])[1]

    def _chain_links(self, steps: Sequence[Any]) -> list[ChainLink]:
        links = []
        for index, step in enumerate(steps):
            input_type, output_type = step_io_types(step)
            links.append(ChainLink(step_label(step, index), input_type, output_type))
        return links

    # ─── Plugin routing ────────────────────────────────

    def _find_step(self, target: str) -> ProcessEngine | None:
        for step in self._steps:
            if isinstance(step, ProcessEngine) and step.is_named and step.name == target:
                return step
        return None

    def _target_not_found(self, target: str) -> TargetNotFoundError:
        return TargetNotFoundError(
            f"Pipeline '{self.name}' has no plugin target '{target}'",
            target=target,
            available=self.pluggable_names,
            engine_id=self.id,
            engine_name=self.name,
        )

    def add_plugin(self, plugin: Any, target: str | None = None) -> None:
        """
        Attach a plugin to the pipeline's own belt or to a named step.

        `target` defaults to the pipeline itself.

        Raises:
            TargetNotFoundError: If `target` is neither the pipeline nor a named step.
        """
        if target is None or target == self.name:
            super().add_plugin(plugin)
            return

        step = self._find_step(target)
        if step is None:
            raise self._target_not_found(target)
        if isinstance(step, Pipeline):
            step.add_plugin(plugin, step.name)
        else:
            step.add_plugin(plugin)

    def remove_plugin(self, target: str, plugin_name: str) -> None:
        """
        Detach a plugin by name from the pipeline's belt or a named step.

        Both arguments are required; pass the pipeline's own name as `target`
        to detach from its own belt.

        Raises:
            TargetNotFoundError: If `target` is neither the pipeline nor a named step.
        """
        if target == self.name:
            super().remove_plugin(plugin_name)
            return

        step = self._find_step(target)
        if step is None:
            raise self._target_not_found(target)
        if isinstance(step, Pipeline):
            step.remove_plugin(step.name, plugin_name)
        else:
            step.remove_plugin(plugin_name)

    # ─── Execution ─────────────────────────────────────

    async def run_custom(
        self,
        item: Any,
        custom_steps: Sequence[Any],
        *,
        existing_item_id: str | None = None,
        single_use_plugins: Iterable[Any] | None = None,
        metadata_helper: MetadataHelper | None = None,
    ) -> Any:
        """
        Run the pipeline's belts around a different step list, for this call only.

        `steps` is left untouched and concurrent calls do not see each other's
        step lists.

        Raises:
            EmptyPipelineError: If `custom_steps` is empty.
        """
        custom_steps = tuple(custom_steps)
        if not custom_steps:
            raise EmptyPipelineError(
                f"Pipeline '{self.name}' run_custom needs at least one step",
                engine_id=self.id,
                engine_name=self.name,
            )

        return await self._execute(
            item,
            functools.partial(self._run_steps, custom_steps),
            existing_item_id=existing_item_id,
            single_use_plugins=single_use_plugins,
            metadata_helper=metadata_helper,
        )

    async def _run_fixed_steps(self, item: Any, metadata: MetadataHelper) -> Any:
        return await self._run_steps(self._steps, item, metadata)

    async def _run_steps(
        self,
        steps: Sequence[Any],
        item: Any,
        metadata: MetadataHelper,
    ) -> Any:
        value = item
        for index, step in enumerate(steps):
            self.logger.debug(
                "Running step",
                item_id=metadata.item_id,
                step=step_label(step, index),
                step_index=index + 1,
                total_steps=len(steps),
            )

            if isinstance(step, ProcessEngine):
                value = await step.run(value, metadata_helper=metadata)
            elif callable(step):
                value = await resolve(step(value, metadata))
            else:
                raise UnknownStepError(
                    f"Pipeline '{self.name}' step {index + 1} is neither a "
                    f"function nor a ProcessEngine: {step!r}",
                    step_index=index,
                    engine_id=self.id,
                    engine_name=self.name,
                )
        return value
