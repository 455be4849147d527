"""
Properties Loader Interface

Defines the contract for pluggable settings sources contributed by the
application. Loaders are registered explicitly with a LoaderChain and run
in ascending priority order during resolution.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import MutableMapping


class PropertiesLoader(ABC):
    """
    Abstract base class for application-defined settings loaders.

    A loader may read any origin (database, vault, remote file) and add its
    entries to the working settings. Lower priority loaders run first, so a
    higher priority loader overwrites keys written by a lower one.

    Example:
        ```python
        class VaultLoader(PropertiesLoader):
            def priority(self) -> int:
                return 100

            def load(self, settings: MutableMapping[str, str]) -> None:
                settings.update(fetch_secrets())
        ```
    """

    @property
    def name(self) -> str:
        """Name used in logs and errors. Defaults to the class name."""
        return type(self).__name__

    @abstractmethod
    def priority(self) -> int:
        """
        Order in which this loader runs.

        Lower priority loaders run earlier; their values can be overwritten
        by loaders that run later.
        """
        pass

    @abstractmethod
    def load(self, settings: MutableMapping[str, str]) -> None:
        """
        Add entries to the working settings.

        Args:
            settings: Mutable working settings, already holding bundle,
                override file and lower priority loader entries.

        Raises:
            Any exception; resolution aborts with a LoaderError.
        """
        pass


@dataclass(frozen=True)
class LoaderDescriptor:
    """
    A registered loader together with its ordering information.

    Attributes:
        priority: Value returned by the loader's priority()
        loader: The loader instance
        name: Registration name, unique within a chain
        order: Registration position, used to break priority ties
    """
    priority: int
    loader: PropertiesLoader
    name: str
    order: int = 0

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority, self.order)
