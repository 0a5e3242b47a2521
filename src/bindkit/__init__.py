"""Small, explicit dependency injection containers and observable stores.

Providers are plain callables that receive the container and fetch their own
dependencies with `get`; nothing is discovered through reflection.

Exports:
- `PrimitiveContainer`: identifier -> provider bindings with singleton/transient scope.
- `ChildContainer`: resolves its own bindings first, then falls back to a parent.
- `PreProcessContainer` / `ChildPreProcessContainer`: add `bind`, which runs a
  dependency resolver (`resolve_in_order`, `resolve_as_map`) before the provider.
- `create_with_use` and the `...WithUse` containers: plugin composition via `use`.
- `BasicContainer` / `BasicChildContainer`: lazy tagged plugins and plugin
  variants such as mocks.
- `ObservableStore`, `DerivedStore`, `ChildObservableStore`: observable values.
"""

from ._basic import BasicChildContainer, BasicContainer, PluginRegistry, PluginTagNotFoundError, variant_of
from ._container import (
    Binding,
    ChildContainer,
    NotFoundError,
    PrimitiveContainer,
    Registry,
    ResolutionError,
    Scope,
)
from ._observers import ChildObservableStore, DerivedStore, ObservableStore
from ._plugins import ChildContainerWithUse, PrimitiveContainerWithUse, create_with_use, use_plugins
from ._preprocess import (
    ChildPreProcessContainer,
    ChildPreProcessContainerWithUse,
    Dependency,
    PreProcessContainer,
    PreProcessContainerWithUse,
    resolve_as_map,
    resolve_in_order,
)


__all__ = [
    "BasicChildContainer",
    "BasicContainer",
    "Binding",
    "ChildContainer",
    "ChildContainerWithUse",
    "ChildObservableStore",
    "ChildPreProcessContainer",
    "ChildPreProcessContainerWithUse",
    "Dependency",
    "DerivedStore",
    "NotFoundError",
    "ObservableStore",
    "PluginRegistry",
    "PluginTagNotFoundError",
    "PreProcessContainer",
    "PreProcessContainerWithUse",
    "PrimitiveContainer",
    "PrimitiveContainerWithUse",
    "Registry",
    "ResolutionError",
    "Scope",
    "create_with_use",
    "resolve_as_map",
    "resolve_in_order",
    "use_plugins",
    "variant_of",
]
