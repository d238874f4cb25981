"""
Shared test fixtures and configuration.

The ``host`` fixture is a Host whose files live under a temp directory
(real FilesystemAdapter, relocated) and whose service manager, PATH
lookup and command runner are MockAdapters, so checks can be exercised
end to end without root.
"""

import logging
from pathlib import Path

import pytest

from hostpreflight.adapters.mock import MockAdapter
from hostpreflight.adapters.registry import AdapterRegistry
from hostpreflight.adapters.shell.filesystem import FilesystemAdapter
from hostpreflight.core.host import Host


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings and audit files out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    monkeypatch.delenv("HPF_CONFIG", raising=False)
    monkeypatch.delenv("HPF_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HPF_LOG_FILE", raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """Directory standing in for / on the host."""
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def services() -> MockAdapter:
    """Mock service manager; NetworkManager runs, everything else is unknown."""
    mock = MockAdapter(adapter_name="systemd")
    mock.set_output("systemd.status:NetworkManager.service", "running")
    return mock


@pytest.fixture
def tools() -> MockAdapter:
    """Mock PATH lookup; every executable is found unless configured otherwise."""
    return MockAdapter(adapter_name="path", default_output="/usr/bin/found")


@pytest.fixture
def registry(services: MockAdapter, tools: MockAdapter) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(FilesystemAdapter())
    registry.register(services)
    registry.register(tools)
    registry.register(MockAdapter(adapter_name="shell"))
    return registry


@pytest.fixture
def host(registry: AdapterRegistry, host_root: Path) -> Host:
    return Host(registry, root=host_root)


def host_file(root: Path, path: str) -> Path:
    """Location of an absolute host path under a test root."""
    return root / path.lstrip("/")
