"""
BeltPlugin — named bundle of optional belt hooks.

A plugin implements any non-empty subset of:
    - process_input(item, metadata)   → item          (input belt)
    - process_output(item, metadata)  → item          (output belt)
    - process_error(error, metadata)  → error | value (error belt)

Hooks may be plain functions or coroutines; the engine awaits either.
The engine picks plugins for a belt by probing for the hook, so one plugin
object can serve several belts.

Two ways to build one::

    audit = Plugin.create(
        name="audit",
        process_input=lambda n, meta: (meta.add("seen", n), n)[1],
    )

    class Clamp(BeltPlugin):
        name = "clamp"

        async def process_output(self, item, metadata):
            return max(item, 0)
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from convee.core.constants import BeltHook
from convee.pipeline.context import MetadataHelper
from convee.pipeline.errors import ConveeError, PluginDefinitionError

T = TypeVar("T")

Hook = Callable[[Any, MetadataHelper], Any]


async def resolve(value: T | Awaitable[T]) -> T:
    """Await `value` when it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


def has_hook(plugin: Any, hook: BeltHook | str) -> bool:
    """True when the plugin exposes a callable for the given hook."""
    return callable(getattr(plugin, str(hook), None))


def plugin_hooks(plugin: Any) -> list[BeltHook]:
    return [hook for hook in BeltHook if has_hook(plugin, hook)]


def select(plugins: Iterable[Any], hook: BeltHook) -> list[Any]:
    """Plugins that take part in one belt, in the given order."""
    return [p for p in plugins if has_hook(p, hook)]


class BeltPlugin:
    """
    Base class for belt plugins.

    Subclasses set `name` and define at least one of the hook methods.
    The base class defines none of them, so capability probing only sees
    what a subclass (or Plugin.create) actually provides.
    """

    name: str = ""

    def __init__(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        if not self.name:
            raise PluginDefinitionError(
                f"{type(self).__name__} must have a non-empty name",
            )
        if not plugin_hooks(self):
            raise PluginDefinitionError(
                f"Plugin '{self.name}' implements none of "
                f"{', '.join(hook.value for hook in BeltHook)}",
                details={"plugin": self.name},
            )

    @property
    def hooks(self) -> list[BeltHook]:
        return plugin_hooks(self)

    def __repr__(self) -> str:
        hooks = ", ".join(hook.value for hook in self.hooks)
        return f"{type(self).__name__}(name={self.name!r}, hooks=[{hooks}])"


class FunctionPlugin(BeltPlugin):
    """Plugin assembled from standalone hook callables."""

    def __init__(
        self,
        name: str,
        *,
        process_input: Hook | None = None,
        process_output: Hook | None = None,
        process_error: Callable[[ConveeError, MetadataHelper], Any] | None = None,
    ) -> None:
        # Only set the hooks that were given: an attribute holding None
        # would still be found by getattr-based probing elsewhere.
        provided = {
            BeltHook.INPUT: process_input,
            BeltHook.OUTPUT: process_output,
            BeltHook.ERROR: process_error,
        }
        for hook, fn in provided.items():
            if fn is None:
                continue
            if not callable(fn):
                raise PluginDefinitionError(
                    f"Plugin '{name}': {hook.value} must be callable",
                    details={"plugin": name, "hook": hook.value},
                )
            setattr(self, hook.value, fn)
        super().__init__(name)


def create(
    *,
    name: str,
    process_input: Hook | None = None,
    process_output: Hook | None = None,
    process_error: Callable[[ConveeError, MetadataHelper], Any] | None = None,
) -> FunctionPlugin:
    """
    Build a plugin from hook functions.

    Raises:
        PluginDefinitionError: If no hook is given or the name is empty.
    """
    return FunctionPlugin(
        name,
        process_input=process_input,
        process_output=process_output,
        process_error=process_error,
    )


class Plugin:
    """Factory namespace: `Plugin.create(name=..., process_input=...)`."""

    create = staticmethod(create)
