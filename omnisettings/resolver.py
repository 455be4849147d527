"""
Settings Resolver

Merges bootstrap-driven stage bundles, an optional external override file
and the application's loader chain into one frozen settings mapping.

Resolution order (each step may overwrite keys of the previous ones):
1. Bootstrap resource (controls resolution, never exposed)
2. Active stage
3. Base bundle, then stage bundle
4. External override file named by the settings switch
5. Loader chain, ascending priority
6. ``actualStageName`` (always wins)
7. Freeze
"""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, MutableMapping, Optional, Union

from pydantic import ValidationError

from omnisettings.config.loader import ConfigLoader, PropertiesFormatError
from omnisettings.config.settings import BootstrapSettings, ResolverOptions, get_options
from omnisettings.core.exceptions import (
    BootstrapError,
    BundleError,
    ErrorContext,
    ExternalSettingsError,
)
from omnisettings.core.interfaces.loader import PropertiesLoader
from omnisettings.loaders.chain import LoaderChain
from omnisettings.observability import get_logger, metrics, timed_operation_sync, traced_sync
from omnisettings.stage import StageResolver, lookup_switch

log = get_logger(__name__)

ACTUAL_STAGE_KEY = "actualStageName"


class FrozenSettings(Mapping[str, str]):
    """
    Immutable, fully resolved settings.

    Safe to share between threads; nothing can write to it.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, str]] = None):
        self._data = MappingProxyType(dict(data or {}))

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenSettings({len(self._data)} keys)"

    @property
    def stage(self) -> Optional[str]:
        """The resolved stage, as injected under ``actualStageName``."""
        return self._data.get(ACTUAL_STAGE_KEY)

    def with_prefix(self, prefix: str) -> "FrozenSettings":
        """Entries whose key starts with ``prefix``; the whole mapping for an empty prefix."""
        if not prefix:
            return self
        return FrozenSettings({k: v for k, v in self._data.items() if k.startswith(prefix)})


class SettingsBuilder:
    """
    Mutable working settings, used only while resolving.

    ``freeze()`` ends the build phase; the builder refuses writes afterwards.
    """

    def __init__(self):
        self._data: dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def data(self) -> MutableMapping[str, str]:
        """The working mapping handed to loaders."""
        self._check_open()
        return self._data

    def merge(self, entries: Mapping[str, str]) -> int:
        """Overwrite with ``entries``; returns the number of entries merged."""
        self._check_open()
        self._data.update(entries)
        return len(entries)

    def force(self, key: str, value: Optional[str]) -> None:
        """Set a derived key, or remove it when ``value`` is None."""
        self._check_open()
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value

    def freeze(self) -> FrozenSettings:
        self._check_open()
        self._frozen = True
        return FrozenSettings(self._data)

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("Settings are frozen")


class SettingsResolver:
    """
    Produces the single frozen settings mapping.

    Example:
        ```python
        resolver = SettingsResolver(
            loaders=[DatabaseLoader(), VaultLoader()],
            resource_root="config",
        )
        settings = resolver.resolve()
        print(settings["db.host"], settings.stage)
        ```
    """

    def __init__(
        self,
        loaders: Union[LoaderChain, Iterable[PropertiesLoader], None] = None,
        resource_root: Union[str, os.PathLike, None] = None,
        bootstrap_name: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        options: Optional[ResolverOptions] = None,
    ):
        options = options or get_options()

        if isinstance(loaders, LoaderChain):
            self.chain = loaders
        else:
            self.chain = LoaderChain(loaders)

        self.resource_root = Path(resource_root) if resource_root else options.resource_root
        self.bootstrap_name = bootstrap_name or options.bootstrap_name
        self._environ = environ
        self._config_loader = ConfigLoader(self.resource_root)

    def resolve(self) -> FrozenSettings:
        """
        Run every resolution step and freeze the result.

        Raises:
            FatalConfigError: If any step fails; nothing is returned
        """
        with timed_operation_sync("settings.resolve"):
            bootstrap = self.load_bootstrap()
            stage = StageResolver(
                bootstrap.stage_property_name,
                bootstrap.default_stage,
                self._environ,
            ).resolve()

            builder = SettingsBuilder()
            self._load_stage_bundles(builder, bootstrap, stage)
            self._load_external(builder, bootstrap, stage)
            self.chain.run(builder.data)

            # Non-overridable
            builder.force(ACTUAL_STAGE_KEY, stage)
            settings = builder.freeze()

        metrics.increment_counter("settings.resolutions")
        log.info("Settings resolved", stage=stage, keys=len(settings), loaders=len(self.chain))
        return settings

    @traced_sync(operation="settings.bootstrap")
    def load_bootstrap(self) -> BootstrapSettings:
        """
        Read and validate the bootstrap resource.

        Every existing ``<bootstrap_name>.{properties,xml,yaml,yml}`` under the
        resource root is read, later files overriding earlier ones.

        Raises:
            BootstrapError: If no resource exists or one cannot be parsed
        """
        resource = str(self.resource_root / self.bootstrap_name)
        paths = self._config_loader.find_resources(self.bootstrap_name)
        if not paths:
            raise BootstrapError(f"No bootstrap resource found at {resource}.*", resource=resource)

        raw: dict[str, str] = {}
        for path in paths:
            try:
                raw.update(self._config_loader.load_file(path))
            except (OSError, PropertiesFormatError) as e:
                raise BootstrapError(
                    f"Error loading bootstrap settings from {path}",
                    resource=str(path),
                    cause=e,
                ) from e

        try:
            bootstrap = BootstrapSettings.model_validate(raw)
        except ValidationError as e:
            raise BootstrapError(
                f"Invalid bootstrap settings in {resource}: {e}",
                resource=resource,
                cause=e,
            ) from e

        log.debug("Bootstrap loaded", source=resource,
                  stage_switch=bootstrap.stage_property_name,
                  settings_switch=bootstrap.settings_property_name,
                  file_name=bootstrap.file_name)
        return bootstrap

    def _load_stage_bundles(
        self,
        builder: SettingsBuilder,
        bootstrap: BootstrapSettings,
        stage: Optional[str],
    ) -> None:
        for path in self._config_loader.staged_paths(bootstrap.file_name, stage):
            try:
                entries = self._config_loader.load_optional(path)
            except (OSError, PropertiesFormatError) as e:
                raise BundleError(
                    f"Error loading settings bundle {path}",
                    resource=str(path),
                    context=ErrorContext(source=str(path), operation="load_stage_bundle", stage=stage),
                    cause=e,
                ) from e

            count = builder.merge(entries)
            metrics.increment_counter("settings.keys.bundle", count)
            log.debug("Bundle merged", source=str(path), stage=stage, keys=count)

    def _load_external(
        self,
        builder: SettingsBuilder,
        bootstrap: BootstrapSettings,
        stage: Optional[str],
    ) -> None:
        setting_file = lookup_switch(bootstrap.settings_property_name, self._environ)
        if setting_file is None:
            log.debug("No external settings switch", switch=bootstrap.settings_property_name)
            return

        context = ErrorContext(source=setting_file, operation="load_external", stage=stage)
        if not setting_file.strip() or "\x00" in setting_file:
            raise ExternalSettingsError(
                f"Error loading settings from {setting_file!r}: malformed path",
                path=setting_file,
                context=context,
            )

        path = Path(setting_file).expanduser()
        try:
            entries = ConfigLoader().load_file(path)
        except (OSError, PropertiesFormatError) as e:
            raise ExternalSettingsError(
                f"Error loading settings from {setting_file}",
                path=setting_file,
                context=context,
                cause=e,
            ) from e

        count = builder.merge(entries)
        metrics.increment_counter("settings.keys.external", count)
        log.info("External settings merged", source=str(path), keys=count)


# Process-scoped settings
_settings: Optional[FrozenSettings] = None


def get_application_settings(
    loaders: Union[LoaderChain, Iterable[PropertiesLoader], None] = None,
    resource_root: Union[str, os.PathLike, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FrozenSettings:
    """
    Get the process settings, resolving them on first call.

    Arguments are only used by the first call; later calls return the same
    frozen mapping.
    """
    global _settings

    if _settings is None:
        _settings = SettingsResolver(
            loaders=loaders,
            resource_root=resource_root,
            environ=environ,
        ).resolve()

    return _settings


def reset_application_settings() -> None:
    """Reset the process settings (for testing)."""
    global _settings
    _settings = None
