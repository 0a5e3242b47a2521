from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._container import ChildContainer, PrimitiveContainer, Scope
from ._plugins import create_with_use


if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable
    from typing import Self

    Identifier = Hashable
    Resolver = Callable[[Any, Any], Any]
    PreProcessProvider = Callable[[Any, Any, Any], object]


@dataclass(frozen=True)
class Dependency:
    identifier: Identifier
    optional: bool = False  # resolve to None instead of raising NotFoundError


def _compose_provider(
    provider: PreProcessProvider,
    resolve_dependencies: Resolver | None,
    meta: Any,
) -> Callable[[Any], object]:
    def composed(ctx: Any) -> object:
        resolved = resolve_dependencies(ctx, meta) if resolve_dependencies is not None else None
        return provider(resolved, ctx, meta)

    return composed


class PreProcessContainer(PrimitiveContainer):
    """Container whose `bind` resolves dependencies before calling the provider.

    Example:
      container.bind(
          "repo",
          lambda deps, ctx, meta: Repo(*deps),
          resolve_dependencies=resolve_in_order(["db", Dependency("cache", optional=True)]),
      )

    """

    def bind(
        self,
        identifier: Identifier,
        provider: PreProcessProvider,
        *,
        resolve_dependencies: Resolver | None = None,
        scope: Scope | str = Scope.SINGLETON,
        meta: Any = None,
    ) -> Self:
        """Bind `identifier` to `provider(resolved_deps, container, meta)`.

        `resolve_dependencies(container, meta)` runs first on every provider call
        and its result becomes `resolved_deps` (None when no resolver is given).
        Unlike `bind_to`, the default scope is singleton.
        """
        return self.bind_to(identifier, _compose_provider(provider, resolve_dependencies, meta), scope)

    def create_child(self) -> ChildPreProcessContainer:
        return ChildPreProcessContainer(self)


class ChildPreProcessContainer(ChildContainer):
    """`ChildContainer` with the pre-resolving `bind` of `PreProcessContainer`."""

    bind = PreProcessContainer.bind

    def create_child(self) -> ChildPreProcessContainer:
        return ChildPreProcessContainer(self)


PreProcessContainerWithUse = create_with_use(PreProcessContainer)
ChildPreProcessContainerWithUse = create_with_use(ChildPreProcessContainer)


def _as_dependency(dep: Dependency | Identifier) -> Dependency:
    return dep if isinstance(dep, Dependency) else Dependency(dep)


def resolve_in_order(deps: Iterable[Dependency | Identifier]) -> Resolver:
    """Build a resolver returning the dependencies as a list, in the given order.

    Bare identifiers are required dependencies; wrap them in
    `Dependency(identifier, optional=True)` to get None instead of an error.
    """
    dependencies = [_as_dependency(dep) for dep in deps]

    def resolver(ctx: Any, meta: Any = None) -> list[Any]:  # noqa: ARG001
        return [ctx.get(dep.identifier, dep.optional) for dep in dependencies]

    return resolver


def resolve_as_map(deps: Iterable[Dependency | Identifier]) -> Resolver:
    """Same as `resolve_in_order`, returning an identifier -> value dict."""
    dependencies = [_as_dependency(dep) for dep in deps]

    def resolver(ctx: Any, meta: Any = None) -> dict[Identifier, Any]:  # noqa: ARG001
        return {dep.identifier: ctx.get(dep.identifier, dep.optional) for dep in dependencies}

    return resolver
