"""
Loader Chain

Holds the application-registered PropertiesLoader instances and runs them
in ascending priority order during resolution.
"""

from typing import Iterable, Iterator, MutableMapping, Optional

from omnisettings.core.exceptions import ErrorContext, LoaderError
from omnisettings.core.interfaces.loader import LoaderDescriptor, PropertiesLoader
from omnisettings.observability import get_logger, metrics, timed_operation_sync

log = get_logger(__name__)


class LoaderChain:
    """
    Ordered set of pluggable settings loaders.

    Loaders run by ascending priority; loaders with the same priority run in
    registration order. A loader that runs later overwrites keys written by
    one that ran earlier.

    Example:
        ```python
        chain = LoaderChain()
        chain.register(DatabaseLoader())
        chain.register(VaultLoader(), name="vault")

        # Disable a loader without removing it
        chain.disable("vault")

        chain.run(working_settings)
        ```
    """

    def __init__(self, loaders: Optional[Iterable[PropertiesLoader]] = None):
        self._loaders: dict[str, PropertiesLoader] = {}
        self._order: dict[str, int] = {}
        self._enabled: dict[str, bool] = {}
        self._counter = 0

        for loader in loaders or ():
            self.register(loader)

    def register(
        self,
        loader: PropertiesLoader,
        name: Optional[str] = None,
    ) -> str:
        """
        Register a loader.

        Args:
            loader: Loader instance to register
            name: Optional custom name. Without one, loader.name is used,
                suffixed with the registration position when already taken

        Returns:
            The name the loader was registered under

        Raises:
            ValueError: If an explicit name is already registered
        """
        if name is not None:
            if name in self._loaders:
                raise ValueError(f"Loader '{name}' is already registered")
            loader_name = name
        else:
            loader_name = loader.name
            position = self._counter
            while loader_name in self._loaders:
                loader_name = f"{loader.name}#{position}"
                position += 1

        self._loaders[loader_name] = loader
        self._order[loader_name] = self._counter
        self._enabled[loader_name] = True
        self._counter += 1
        return loader_name

    def unregister(self, name: str) -> bool:
        """
        Unregister a loader.

        Returns:
            True if unregistered, False if not found
        """
        if name in self._loaders:
            del self._loaders[name]
            del self._order[name]
            del self._enabled[name]
            return True
        return False

    def enable(self, name: str) -> None:
        """Enable a loader."""
        if name in self._loaders:
            self._enabled[name] = True

    def disable(self, name: str) -> None:
        """Disable a loader without removing it."""
        if name in self._loaders:
            self._enabled[name] = False

    def is_enabled(self, name: str) -> bool:
        """True if the loader is registered and enabled."""
        return self._enabled.get(name, False)

    def get(self, name: str) -> Optional[PropertiesLoader]:
        """Get a registered loader by name."""
        return self._loaders.get(name)

    def descriptors(self) -> list[LoaderDescriptor]:
        """
        Enabled loaders in execution order.

        Raises:
            LoaderError: If a loader's priority() fails or is not an int
        """
        result = []
        for name, loader in self._loaders.items():
            if not self._enabled[name]:
                continue
            try:
                priority = loader.priority()
            except Exception as e:
                raise LoaderError(
                    f"Loader '{name}' failed to report its priority",
                    loader_name=name,
                    cause=e,
                ) from e
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise LoaderError(
                    f"Loader '{name}' priority must be an int, got {type(priority).__name__}",
                    loader_name=name,
                )
            result.append(LoaderDescriptor(priority, loader, name, self._order[name]))

        return sorted(result, key=lambda d: d.sort_key)

    def run(self, settings: MutableMapping[str, str]) -> None:
        """
        Invoke every enabled loader in order against the working settings.

        Raises:
            LoaderError: On the first loader that fails; later loaders do not run
        """
        for descriptor in self.descriptors():
            before = len(settings)
            with timed_operation_sync("settings.loader", source=descriptor.name):
                try:
                    descriptor.loader.load(settings)
                except Exception as e:
                    raise LoaderError(
                        f"Loader '{descriptor.name}' failed: {e}",
                        loader_name=descriptor.name,
                        context=ErrorContext(
                            source=descriptor.name,
                            operation="run_loader",
                            metadata={"priority": descriptor.priority},
                        ),
                        cause=e,
                    ) from e

            self._check_types(descriptor.name, settings)
            added = len(settings) - before
            metrics.increment_counter(f"settings.keys.loader.{descriptor.name}", max(added, 0))
            log.debug("Loader applied", source=descriptor.name,
                      priority=descriptor.priority, new_keys=added)

    @staticmethod
    def _check_types(name: str, settings: MutableMapping[str, str]) -> None:
        for key, value in settings.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise LoaderError(
                    f"Loader '{name}' wrote a non-string entry {key!r}: {type(value).__name__}",
                    loader_name=name,
                )

    def __iter__(self) -> Iterator[PropertiesLoader]:
        return (d.loader for d in self.descriptors())

    def __len__(self) -> int:
        return len(self._loaders)

    def __contains__(self, name: object) -> bool:
        return name in self._loaders
