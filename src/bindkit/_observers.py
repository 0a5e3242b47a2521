from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from typing import Self

T = TypeVar("T")
P = TypeVar("P")


def _positional_arity(fn: Callable[..., Any]) -> int | None:
    """Number of positional args `fn` accepts, None when unbounded or unknown."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None

    count = 0
    for p in params:
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _call_with_accepted(fn: Callable[..., T], *args: Any) -> T:
    """Call `fn` with as many leading `args` as its signature takes.

    Lets derivation and updater callbacks skip trailing arguments they don't
    care about, e.g. `lambda sources: ...` where `(sources, previous)` is offered.
    """
    arity = _positional_arity(fn)
    if arity is not None:
        args = args[:arity]
    return fn(*args)


class ObservableStore(Generic[T]):
    """A mutable value that synchronously notifies its listeners on every update."""

    def __init__(self, initial_value: T) -> None:
        self._value = initial_value
        # dict as an insertion-ordered set
        self._listeners: dict[Callable[[T], None], None] = {}

    @property
    def value(self) -> T:
        return self._value

    def get_value(self) -> T:
        return self._value

    def subscribe(self, listener: Callable[[T], None], emit_current: bool = False) -> Self:
        """Add `listener`; with `emit_current` it is called right away with the current value."""
        self._listeners.setdefault(listener, None)
        if emit_current:
            listener(self._value)
        return self

    def subscribe_with_cleanup(
        self, listener: Callable[[T], None], emit_current: bool = False
    ) -> Callable[[], None]:
        """Like `subscribe`, returning a function that unsubscribes `listener`."""
        self.subscribe(listener, emit_current)

        def cleanup() -> None:
            self.unsubscribe(listener)

        return cleanup

    def unsubscribe(self, listener: Callable[[T], None]) -> Self:
        self._listeners.pop(listener, None)
        return self

    def update(self, updater: T | Callable[[T], T]) -> Self:
        """Set a new value, or compute it from the previous one, and notify listeners."""
        self._value = updater(self._value) if callable(updater) else updater
        self._notify()
        return self

    def _notify(self) -> None:
        # listeners may (un)subscribe while being notified; removed ones are skipped
        for listener in list(self._listeners):
            if listener in self._listeners:
                listener(self._value)


class DerivedStore(ObservableStore[T]):
    """A store computed from several named source stores.

    `derive(source_values, previous)` runs at construction and again whenever any
    source updates. Call `dispose()` to detach from the sources.

    Example:
      total = DerivedStore(
          {"cart": cart_store, "tax": tax_store},
          lambda sources: sum(sources["cart"]) * (1 + sources["tax"]),
      )

    """

    def __init__(
        self,
        sources: Mapping[str, ObservableStore[Any]],
        derive: Callable[[dict[str, Any], T | None], T],
    ) -> None:
        self._sources = dict(sources)
        self._derive = derive
        self._disposed = False
        super().__init__(_call_with_accepted(derive, self.get_source_values(), None))

        self._cleanups = [
            store.subscribe_with_cleanup(self._on_source_update) for store in self._sources.values()
        ]

    def _on_source_update(self, _: Any) -> None:
        if self._disposed:
            return
        source_values = self.get_source_values()
        super().update(lambda previous: _call_with_accepted(self._derive, source_values, previous))

    def get_sources(self) -> dict[str, ObservableStore[Any]]:
        return self._sources

    def get_source_values(self) -> dict[str, Any]:
        return {name: store.get_value() for name, store in self._sources.items()}

    def update(self, updater: T | Callable[[T, dict[str, Any]], T]) -> Self:
        """Override the derived value; callables get `(previous, source_values)`."""
        if not callable(updater):
            return super().update(lambda _: updater)

        source_values = self.get_source_values()
        return super().update(lambda previous: _call_with_accepted(updater, previous, source_values))

    def dispose(self) -> Self:
        self._disposed = True
        for cleanup in self._cleanups:
            cleanup()
        self._cleanups = []
        logger.debug("Disposed derived store %r", self)
        return self


class ChildObservableStore(ObservableStore[T], Generic[T, P]):
    """A store that recomputes its own value from a parent store's updates.

    `on_parent_update(parent_value, child_previous)` runs on every parent update;
    the child's listeners are then notified as with any `update`.
    """

    def __init__(
        self,
        initial_value: T,
        parent: ObservableStore[P],
        on_parent_update: Callable[[P, T], T],
    ) -> None:
        super().__init__(initial_value)
        self._parent = parent
        self._on_parent_update = on_parent_update
        self._cleanup: Callable[[], None] | None = parent.subscribe_with_cleanup(self._handle_parent_update)

    def _handle_parent_update(self, parent_value: P) -> None:
        super().update(lambda previous: _call_with_accepted(self._on_parent_update, parent_value, previous))

    def set_on_parent_update(self, on_parent_update: Callable[[P, T], T]) -> Self:
        self._on_parent_update = on_parent_update
        return self

    def update(self, updater: T | Callable[[T, P], T]) -> Self:
        """Set the child value; callables get `(child_previous, parent_value)`."""
        if not callable(updater):
            return super().update(lambda _: updater)

        parent_value = self._parent.get_value()
        return super().update(lambda previous: _call_with_accepted(updater, previous, parent_value))

    def dispose(self) -> Self:
        if self._cleanup is not None:
            self._cleanup()
            self._cleanup = None
            logger.debug("Disposed child store %r", self)
        return self
