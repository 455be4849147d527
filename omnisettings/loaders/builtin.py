"""
Built-in Loaders

Ready-made PropertiesLoader implementations for common sources.
"""

import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Union

from omnisettings.config.loader import ConfigLoader
from omnisettings.core.interfaces.loader import PropertiesLoader


class MappingPropertiesLoader(PropertiesLoader):
    """Contributes a fixed mapping, e.g. values computed by the host at startup."""

    def __init__(self, values: Mapping[str, str], priority: int = 0):
        self._values = dict(values)
        self._priority = priority

    def priority(self) -> int:
        return self._priority

    def load(self, settings: MutableMapping[str, str]) -> None:
        settings.update(self._values)


class FilePropertiesLoader(PropertiesLoader):
    """
    Contributes the entries of a properties file.

    Args:
        path: .properties, .xml or .yaml file
        priority: Loader priority
        required: When False a missing file contributes nothing
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        priority: int = 0,
        required: bool = True,
    ):
        self.path = Path(path)
        self._priority = priority
        self.required = required
        self._config_loader = ConfigLoader()

    @property
    def name(self) -> str:
        return f"file:{self.path}"

    def priority(self) -> int:
        return self._priority

    def load(self, settings: MutableMapping[str, str]) -> None:
        if self.required:
            settings.update(self._config_loader.load_file(self.path))
        else:
            settings.update(self._config_loader.load_optional(self.path))


class EnvironmentPropertiesLoader(PropertiesLoader):
    """
    Contributes environment variables starting with a prefix.

    The prefix is stripped: with prefix ``APP_``, ``APP_db.host=x`` becomes
    ``db.host=x``.
    """

    def __init__(
        self,
        prefix: str,
        priority: int = 0,
        environ: Optional[Mapping[str, str]] = None,
    ):
        if not prefix:
            raise ValueError("prefix must not be empty")
        self.prefix = prefix
        self._priority = priority
        self._environ = environ

    @property
    def name(self) -> str:
        return f"env:{self.prefix}"

    def priority(self) -> int:
        return self._priority

    def load(self, settings: MutableMapping[str, str]) -> None:
        env = os.environ if self._environ is None else self._environ
        for name, value in env.items():
            if name.startswith(self.prefix) and len(name) > len(self.prefix):
                settings[name[len(self.prefix):]] = value
