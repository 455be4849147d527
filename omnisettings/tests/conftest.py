"""
Pytest Configuration and Shared Fixtures

This file is automatically loaded by pytest and provides:
- Fake loader implementations for isolated testing
- Resource tree builders (bootstrap resource, stage bundles) under tmp_path
- Resets for process-scoped state between tests

Run tests:
    pytest omnisettings/tests/ -v
    pytest omnisettings/tests/ -v --cov=omnisettings  # with coverage
"""

from pathlib import Path
from typing import Callable, MutableMapping, Optional

import pytest

from omnisettings.config.settings import reset_options
from omnisettings.core.interfaces.loader import PropertiesLoader
from omnisettings.observability import metrics
from omnisettings.resolver import reset_application_settings


# =============================================================================
# FAKE LOADERS
# =============================================================================

class FakeLoader(PropertiesLoader):
    """
    Fake loader for testing purposes.

    Writes a fixed mapping and records every call into a shared journal so
    tests can assert on execution order.

    Usage:
        journal = []
        loader = FakeLoader("db", 10, {"db.host": "x"}, journal)
    """

    def __init__(
        self,
        label: str,
        priority: int,
        values: Optional[dict] = None,
        journal: Optional[list] = None,
    ):
        self.label = label
        self._priority = priority
        self.values = values or {}
        self.journal = journal if journal is not None else []
        self.calls = 0

    @property
    def name(self) -> str:
        return self.label

    def priority(self) -> int:
        return self._priority

    def load(self, settings: MutableMapping[str, str]) -> None:
        self.calls += 1
        self.journal.append(self.label)
        settings.update(self.values)


class FailingLoader(FakeLoader):
    """Loader whose load() always raises."""

    def __init__(self, label: str = "failing", priority: int = 0, error: Optional[Exception] = None):
        super().__init__(label, priority)
        self.error = error or OSError("source unreachable")

    def load(self, settings: MutableMapping[str, str]) -> None:
        self.calls += 1
        raise self.error


# =============================================================================
# RESOURCE TREES
# =============================================================================

def properties_text(entries: dict) -> str:
    return "".join(f"{key}={value}\n" for key, value in entries.items())


def xml_properties_text(entries: dict) -> str:
    body = "".join(f'  <entry key="{key}">{value}</entry>\n' for key, value in entries.items())
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">\n'
        "<properties>\n"
        f"{body}"
        "</properties>\n"
    )


@pytest.fixture
def resource_root(tmp_path: Path) -> Path:
    """Empty resource root directory."""
    root = tmp_path / "config"
    root.mkdir()
    return root


@pytest.fixture
def write_bootstrap(resource_root: Path) -> Callable[..., Path]:
    """Write ``omni-settings.properties`` with the given entries."""
    def _write(suffix: str = ".properties", **entries) -> Path:
        path = resource_root / f"omni-settings{suffix}"
        if suffix == ".xml":
            path.write_text(xml_properties_text(entries), encoding="utf-8")
        else:
            path.write_text(properties_text(entries), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_bundle(resource_root: Path) -> Callable[..., Path]:
    """Write an XML settings bundle, optionally under a stage directory."""
    def _write(entries: dict, stage: Optional[str] = None,
               file_name: str = "application-settings.xml") -> Path:
        directory = resource_root / stage if stage else resource_root
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / file_name
        if file_name.endswith(".xml"):
            path.write_text(xml_properties_text(entries), encoding="utf-8")
        else:
            path.write_text(properties_text(entries), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def standard_tree(write_bootstrap, write_bundle, resource_root: Path) -> Path:
    """
    Bootstrap with default stage ``dev`` plus base, dev and prod bundles.
    """
    write_bootstrap(defaultStage="dev")
    write_bundle({"app.name": "demo", "db.host": "base-host", "db.port": "5432"})
    write_bundle({"db.host": "dev-host"}, stage="dev")
    write_bundle({"db.host": "prod-host", "db.pool": "20"}, stage="prod")
    return resource_root


# =============================================================================
# STATE RESETS
# =============================================================================

@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear singletons and metrics around every test."""
    reset_application_settings()
    reset_options()
    metrics.reset()
    yield
    reset_application_settings()
    reset_options()
    metrics.reset()


@pytest.fixture
def journal() -> list:
    """Shared call journal for FakeLoader instances."""
    return []


@pytest.fixture
def make_loader(journal: list) -> Callable[..., FakeLoader]:
    """Factory for FakeLoader instances sharing the test journal."""
    def _make(label: str, priority: int, values: Optional[dict] = None) -> FakeLoader:
        return FakeLoader(label, priority, values, journal)
    return _make


@pytest.fixture
def failing_loader() -> Callable[..., FailingLoader]:
    """Factory for FailingLoader instances."""
    return FailingLoader
