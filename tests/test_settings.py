"""
Tests for config/settings.py
"""
import importlib

import pytest

from roadmap_pipeline.config import settings


@pytest.fixture
def reload_settings(monkeypatch):
    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(settings)

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings)


class TestSettings:
    """Test environment-driven configuration"""

    def test_environment_overrides(self, reload_settings):
        config = reload_settings(
            URL_BATCH_SIZE="10",
            STORAGE_BATCH_SIZE="3",
            SECTION_PROGRESSION="Basics, ,Mastery",
        )

        assert config.URL_BATCH_SIZE == 10
        assert config.STORAGE_BATCH_SIZE == 3
        assert config.SECTION_PROGRESSION == ["Basics", "Mastery"]

    def test_default_section_progression(self, reload_settings, monkeypatch):
        monkeypatch.delenv("SECTION_PROGRESSION", raising=False)
        config = reload_settings()

        assert config.SECTION_PROGRESSION == [
            "Getting Started", "Core Concepts", "Practical Applications", "Advanced Topics"
        ]
