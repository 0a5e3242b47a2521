from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._container import NotFoundError
from ._preprocess import ChildPreProcessContainerWithUse, PreProcessContainerWithUse


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from typing import Self

    from ._container import SupportsGet

    Plugin = Callable[[Any], object]

MOCK = "mock"


class PluginTagNotFoundError(NotFoundError):
    """Raised by `apply_plugins` when a requested tag has no registered plugin."""

    def __init__(self, tag: str) -> None:
        super().__init__(tag, f"No plugin registered under tag {tag!r}")
        self.tag = tag


def variant_of(plugin: Plugin, name: str = MOCK) -> Callable[[Plugin], Plugin]:
    """Attach the decorated function to `plugin` as its `name` variant.

    Example:
      def api_plugin(container): container.bind_to("api", lambda _: RealApi())

      @variant_of(api_plugin, "mock")
      def api_plugin_mock(container): container.bind_to("api", lambda _: FakeApi())

    """

    def decorator(variant: Plugin) -> Plugin:
        setattr(plugin, name, variant)
        return variant

    return decorator


class PluginRegistry:
    """Pending plugins, their tag index and the preferred plugin variant."""

    def __init__(self) -> None:
        self.preferred_variant: str | None = None
        # dict as an insertion-ordered set
        self._pending: dict[Plugin, None] = {}
        self._by_tag: dict[str, Plugin] = {}

    def register(self, plugin: Plugin, tags: Iterable[str] | str = ()) -> None:
        self._pending.setdefault(plugin, None)

        for tag in _as_tags(tags):
            previous = self._by_tag.get(tag)
            if previous is not None and previous is not plugin:
                logger.warning(
                    "Tag %r re-registered: %s replaces %s",
                    tag,
                    _plugin_name(plugin),
                    _plugin_name(previous),
                )
            self._by_tag[tag] = plugin

    def select(self, tags: Iterable[str] | str | None = None) -> list[Plugin]:
        """Plugins for `tags` in tag order, or every pending plugin in registration order."""
        if tags is None:
            return list(self._pending)

        tags = _as_tags(tags)
        for tag in tags:
            if tag not in self._by_tag:
                raise PluginTagNotFoundError(tag)

        return [self._by_tag[tag] for tag in tags]

    def substitute(self, plugin: Plugin) -> Plugin:
        """Return the preferred variant of `plugin` when it has one, else `plugin`."""
        name = self.preferred_variant
        if name is None:
            return plugin

        variant = getattr(plugin, name, None)
        if not callable(variant):
            return plugin

        logger.debug("Using %r variant of plugin %s", name, _plugin_name(plugin))
        return variant


def _plugin_name(plugin: Plugin) -> str:
    return getattr(plugin, "__qualname__", repr(plugin))


def _as_tags(tags: Iterable[str] | str) -> list[str]:
    # a bare string is one tag, not a sequence of characters
    return [tags] if isinstance(tags, str) else list(tags)


class BasicContainer(PreProcessContainerWithUse):
    """Pre-resolving container with plugins, lazy tagged plugins and plugin variants.

    A plugin is a callable taking the container. Alternate implementations can
    hang off it as attributes (`plugin.mock = mock_plugin`, or `variant_of`);
    after `use_mocks()` / `use_sub_plugin(name)` those variants are applied
    in place of the plugin.

    The variant switch is not retroactive, it only affects plugins applied
    after it:

      container.use_mocks().use(plugin)   # applies plugin.mock
      container.use(plugin).use_mocks()   # already applied plugin itself

    """

    def __init__(self) -> None:
        super().__init__()
        self._plugins = PluginRegistry()

    def use_mocks(self) -> Self:
        return self.use_sub_plugin(MOCK)

    def use_sub_plugin(self, name: str) -> Self:
        self._plugins.preferred_variant = name
        return self

    def use(self, *plugins: Plugin) -> Self:
        return super().use(*(self._plugins.substitute(plugin) for plugin in plugins))

    def register_plugin(self, plugin: Plugin, tags: Iterable[str] | str = ()) -> Self:
        """Register `plugin` for a later `apply_plugins` call, indexed under `tags`.

        A tag maps to a single plugin; registering another plugin under the same
        tag replaces it in the index.
        """
        self._plugins.register(plugin, tags)
        return self

    def apply_plugins(self, tags: Iterable[str] | str | None = None) -> Self:
        """Apply registered plugins.

        With `tags`, only the plugins indexed under them, in the order of `tags`;
        an unknown tag raises `PluginTagNotFoundError` before anything is applied.
        Without, every registered plugin in registration order.
        """
        return self.use(*self._plugins.select(tags))

    def create_child(self) -> BasicChildContainer:
        return BasicChildContainer(self)


class BasicChildContainer(ChildPreProcessContainerWithUse):
    """`BasicContainer` features on top of a child container."""

    use_mocks = BasicContainer.use_mocks
    use_sub_plugin = BasicContainer.use_sub_plugin
    register_plugin = BasicContainer.register_plugin
    apply_plugins = BasicContainer.apply_plugins

    def __init__(self, parent: SupportsGet | None = None) -> None:
        super().__init__(parent)
        self._plugins = PluginRegistry()

    def use(self, *plugins: Plugin) -> Self:
        return super().use(*(self._plugins.substitute(plugin) for plugin in plugins))

    def create_child(self) -> BasicChildContainer:
        return BasicChildContainer(self)
