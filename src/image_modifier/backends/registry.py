"""Global backend registry and registration decorator."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import overload

from image_modifier.backends.protocol import BackendExecutor
from image_modifier.exceptions import BackendError
from image_modifier.settings import Settings, get_settings

type BackendFactory = Callable[[Settings], BackendExecutor]


class BackendAlreadyRegisteredError(Exception):
    """Raised when attempting to register a backend with a name that already exists."""

    def __init__(self, backend_name: str) -> None:
        self.backend_name = backend_name
        super().__init__(
            f"Backend '{backend_name}' is already registered. "
            f"Use a different name or unregister the existing one first."
        )


class UnknownBackendError(BackendError, LookupError):
    """Raised when a backend name is not registered, e.g. a mistyped ``IMAGE_MODIFIER_BACKEND``."""

    def __init__(self, backend_name: str, available: list[str]) -> None:
        self.backend_name = backend_name
        super().__init__(
            f"Unknown backend '{backend_name}'. Available: {', '.join(available) or 'none'}."
        )


@dataclass(frozen=True)
class BackendMetadata:
    """
    Immutable metadata for registered backends.

    :param name: Unique identifier of the backend
    :param description: Human-readable description (from docstring or explicit)
    """

    name: str
    description: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Backend name cannot be empty")


class _BackendRegistry:
    """
    Global singleton registry of backend factories.

    A factory receives the active `Settings` and returns a fresh executor, so
    every export can get its own backend instance.

    Example:
        >>> registry = get_backend_registry()
        >>> @registry.register(name="pillow")
        ... class PillowBackend:
        ...     '''Backend operating on PIL images.'''
        ...     def __init__(self, settings: Settings | None = None) -> None: ...
    """

    _instance: _BackendRegistry | None = None
    _factories: dict[str, tuple[BackendFactory, BackendMetadata]]

    def __new__(cls) -> _BackendRegistry:
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._factories = {}
        return cls._instance

    @overload
    def register[F: BackendFactory](self, factory: F) -> F: ...

    @overload
    def register[F: BackendFactory](
        self,
        factory: None = None,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Callable[[F], F]: ...

    def register[F: BackendFactory](
        self,
        factory: F | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> F | Callable[[F], F]:
        """
        Register a backend factory (usually the backend class itself).

        Can be used as a decorator with or without arguments:

            @registry.register
            class MyBackend: ...

            @registry.register(name="custom_name")
            class MyBackend: ...

        :param factory: Callable taking `Settings` and returning a backend
        :param name: Override the backend name (defaults to the lowercased factory name)
        :param description: Override description (defaults to docstring)
        :returns: The factory, unchanged
        :raises BackendAlreadyRegisteredError: If name already registered
        """

        def decorator(func: F) -> F:
            backend_name = name or func.__name__.lower()
            if backend_name in self._factories:
                raise BackendAlreadyRegisteredError(backend_name)
            metadata = BackendMetadata(
                name=backend_name,
                description=description or (func.__doc__ or "").strip().split("\n")[0],
            )
            self._factories[backend_name] = (func, metadata)
            return func

        if factory is not None:
            return decorator(factory)
        return decorator

    def unregister(self, name: str) -> None:
        self._factories.pop(name, None)

    def create(self, name: str | None = None, settings: Settings | None = None) -> BackendExecutor:
        """
        Instantiate a registered backend.

        :param name: Registry name, defaults to the configured ``backend`` setting
        :param settings: Settings handed to the factory, defaults to `get_settings()`
        :returns: A new backend instance
        :raises UnknownBackendError: If no backend is registered under that name
        """
        settings = settings or get_settings()
        backend_name = name or settings.backend
        if backend_name not in self._factories:
            raise UnknownBackendError(backend_name, sorted(self._factories))
        factory, _ = self._factories[backend_name]
        return factory(settings)

    def list_backends(self) -> list[BackendMetadata]:
        """List all registered backends."""
        return [metadata for _, metadata in self._factories.values()]

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def get_backend_registry() -> _BackendRegistry:
    """Get the global backend registry instance."""
    return _BackendRegistry()
