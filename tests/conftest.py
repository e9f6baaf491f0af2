"""Shared fixtures for hub tests."""

import pytest

from helpers import RecordingBus
from hub.plugins.registry import PluginRegistry
from hub.plugins.style import StyleRegistry


@pytest.fixture
def plugins_dir(tmp_path):
    return tmp_path / "plugins"


@pytest.fixture
def style_file(tmp_path):
    return tmp_path / "data" / "style.css"


@pytest.fixture
def registry(plugins_dir):
    return PluginRegistry(plugins_dir)


@pytest.fixture
def styles(style_file):
    return StyleRegistry(style_file)


@pytest.fixture
def recording_bus():
    return RecordingBus()
