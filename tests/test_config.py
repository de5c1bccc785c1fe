from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from permgraph.config import AppSettings, LayoutSettings, configure_logging, get_settings


def test_defaults() -> None:
    settings = AppSettings()

    assert settings.layout == LayoutSettings()
    assert settings.layout.node_width == 180.0
    assert settings.layout.direction == "TB"
    assert settings.view.default_depth == 2
    assert settings.view.default_max_nodes == 500
    assert settings.cache.capacity == 32
    assert settings.cache.enabled


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERMGRAPH_CACHE__CAPACITY", "8")
    monkeypatch.setenv("PERMGRAPH_LAYOUT__DIRECTION", "LR")

    settings = AppSettings()

    assert settings.cache.capacity == 8
    assert settings.layout.direction == "LR"


@pytest.mark.parametrize(
    "section",
    [
        {"layout": {"node_width": 0}},
        {"layout": {"layer_spacing": -10}},
        {"layout": {"direction": "diagonal"}},
        {"cache": {"capacity": 0}},
        {"view": {"default_depth": 0}},
    ],
)
def test_invalid_values(section) -> None:
    with pytest.raises(ValidationError):
        AppSettings(**section)


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_configure_logging() -> None:
    configure_logging(AppSettings(logging={"level": "WARNING"}))

    assert logging.getLogger("permgraph").getEffectiveLevel() <= logging.WARNING
