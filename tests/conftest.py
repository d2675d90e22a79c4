"""
Pytest configuration and fixtures for all tests.
"""

import logging
import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from services.privacy_config import PrivacyConfigLoader


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch, tmp_path):
    """Keep tests away from the real ~/.config and the shared loader."""
    monkeypatch.delenv('PRIVACY_CONFIG_PATH', raising=False)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    PrivacyConfigLoader.reset_instance()
    yield
    PrivacyConfigLoader.reset_instance()


@pytest.fixture
def quiet_logger():
    """Logger that drops all diagnostics."""
    quiet = logging.getLogger('tests.quiet')
    quiet.addHandler(logging.NullHandler())
    quiet.propagate = False
    return quiet
