from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterator
    from typing import Protocol, Self

    # str, sentinel objects and ints are the usual identifiers
    Identifier = Hashable
    Provider = Callable[[Any], object]

    class SupportsGet(Protocol):
        def get(self, identifier: Identifier, do_not_throw_if_null: bool = ...) -> Any: ...


class Scope(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass
class Binding:
    provider: Provider
    scope: Scope
    cached_instance: object | None = None
    resolved: bool = False  # singleton provider already ran


class ResolutionError(RuntimeError):
    pass


class NotFoundError(ResolutionError, KeyError):
    """Raised when an identifier has no binding in the container (or its parents)."""

    def __init__(self, identifier: Identifier, message: str | None = None) -> None:
        if message is None:
            message = f"Could not resolve {identifier!r}, did you register it?"
        super().__init__(message)
        self.identifier = identifier
        self.message = message

    def __str__(self) -> str:
        return self.message


class Registry:
    """Identifier -> Binding mapping owned by a single container."""

    def __init__(self) -> None:
        self._bindings: dict[Identifier, Binding] = {}

    def set(self, identifier: Identifier, binding: Binding) -> Binding | None:
        previous = self._bindings.get(identifier)
        self._bindings[identifier] = binding
        return previous

    def get(self, identifier: Identifier) -> Binding | None:
        return self._bindings.get(identifier)

    def remove(self, identifier: Identifier) -> Binding | None:
        return self._bindings.pop(identifier, None)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Identifier]:
        return iter(self._bindings)


class PrimitiveContainer:
    """Minimal identifier-keyed container.

    - bind identifiers to provider callables
    - scopes: singleton (memoized) / transient (fresh on every get)
    - providers receive the container and pull their own dependencies with `get`.

    Example:
      container.bind_to("config", lambda _: {"url": "sqlite://"}, Scope.SINGLETON)
      container.bind_to("db", lambda c: connect(c.get("config")["url"]))

    """

    def __init__(self) -> None:
        self._registry = Registry()
        self._lock = threading.RLock()

    def bind_to(
        self,
        identifier: Identifier,
        provider: Provider,
        scope: Scope | str = Scope.TRANSIENT,
    ) -> Self:
        """Register or replace the binding for `identifier`.

        Replacing a binding drops the singleton instance cached by the old one.
        """
        binding = Binding(provider=provider, scope=Scope(scope))

        with self._lock:
            previous = self._registry.set(identifier, binding)

        if previous is not None:
            logger.debug("Replaced binding for %r (%s)", identifier, binding.scope.value)
        else:
            logger.debug("Bound %r (%s)", identifier, binding.scope.value)

        return self

    def get(self, identifier: Identifier, do_not_throw_if_null: bool = False) -> Any:
        """Resolve `identifier`.

        Raises `NotFoundError` for an unbound identifier unless
        `do_not_throw_if_null` is set, in which case None is returned.
        """
        with self._lock:
            binding = self._registry.get(identifier)

            if binding is None:
                if do_not_throw_if_null:
                    return None
                raise NotFoundError(identifier)

            if binding.scope is Scope.TRANSIENT:
                return binding.provider(self)

            if not binding.resolved:
                binding.cached_instance = binding.provider(self)
                binding.resolved = True

            return binding.cached_instance

    def unbind(self, identifier: Identifier) -> Self:
        with self._lock:
            removed = self._registry.remove(identifier)

        if removed is not None:
            logger.debug("Unbound %r", identifier)

        return self

    def has(self, identifier: Identifier) -> bool:
        """Whether this container's own registry binds `identifier`."""
        with self._lock:
            return identifier in self._registry

    def create_child(self) -> ChildContainer:
        """Create a child container that falls back to this one."""
        return ChildContainer(self)


class ChildContainer(PrimitiveContainer):
    """A container that resolves from its own bindings first, then from a parent.

    Useful for feature- or request-level overrides without touching the parent's
    bindings. The parent is only ever read from.
    """

    def __init__(self, parent: SupportsGet | None = None) -> None:
        super().__init__()
        self._parent = parent

    @property
    def parent(self) -> SupportsGet | None:
        return self._parent

    def get(self, identifier: Identifier, do_not_throw_if_null: bool = False) -> Any:
        instance = super().get(identifier, True)

        if instance is None and self._parent is not None:
            instance = self._parent.get(identifier, True)

        if instance is None and not do_not_throw_if_null:
            msg = f"Not found {identifier!r} in child container or its parent"
            raise NotFoundError(identifier, msg)

        return instance
