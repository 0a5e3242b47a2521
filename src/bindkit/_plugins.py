from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from ._container import ChildContainer, PrimitiveContainer


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    Plugin = Callable[[Any], object]

C = TypeVar("C")
B = TypeVar("B", bound=type)


def use_plugins(container: C, *plugins: Plugin) -> C:
    """Run each plugin against `container`, in order.

    Plugins only act through the container's public api (`bind_to`, `bind`,
    `unbind`, ...); their return values are ignored. A plugin sees every binding
    made by the plugins before it.
    """
    for plugin in plugins:
        logger.debug("Applying plugin %s", getattr(plugin, "__qualname__", plugin))
        plugin(container)

    return container


def _use(self: C, *plugins: Plugin) -> C:
    return use_plugins(self, *plugins)


def create_with_use(base: B) -> B:
    """Derive a container type from `base` that gains a `use(*plugins)` method.

    Example:
      MyContainerWithUse = create_with_use(MyContainer)
      MyContainerWithUse().use(database_plugin, cache_plugin).get("db")

    """
    return type(
        f"{base.__name__}WithUse",
        (base,),
        {
            "__module__": base.__module__,
            "__doc__": base.__doc__,
            "use": _use,
        },
    )


PrimitiveContainerWithUse = create_with_use(PrimitiveContainer)
ChildContainerWithUse = create_with_use(ChildContainer)
