"""
App factory — module discovery, load order and the provider registry.

Run:
    pytest tests/test_app.py -v
"""

import pytest

from core.app import _discover_modules, _resolve_load_order
from core.interfaces.compliance import ComplianceProvider
from core.registry import ModuleRegistry


def test_every_module_is_discovered():
    found = {name.split(".")[-1] for name in _discover_modules()}
    assert {"vendors", "customers", "software", "packages", "lpars", "deployments"} <= found


def test_providers_load_before_consumers():
    order = [name.split(".")[-1] for name in _resolve_load_order(_discover_modules())]
    assert order.index("deployments") < order.index("lpars")


def test_compliance_provider_is_registered(app):
    provider = app.state.registry.get_provider("ComplianceProvider")
    assert isinstance(provider, ComplianceProvider)


def test_missing_provider_fails_validation():
    registry = ModuleRegistry()
    registry.record_requires("lpars", ["ComplianceProvider"])
    assert registry.validate_dependencies() is False
    assert registry.get_provider("ComplianceProvider") is None


def test_missing_lists_unsatisfied_requirements():
    registry = ModuleRegistry()
    registry.record_requires("lpars", ["ComplianceProvider"])
    assert registry.missing() == [("lpars", "ComplianceProvider")]


def test_provider_must_implement_the_interface():
    registry = ModuleRegistry()
    with pytest.raises(TypeError):
        registry.register_provider("ComplianceProvider", object())
    assert registry.providers == {}


def test_compliance_interface_only_asks_for_lpar_summary():
    assert ComplianceProvider.__abstractmethods__ == frozenset({"lpar_summary"})


def test_settings_read_environment_and_ignore_unknown_keys(monkeypatch):
    from core.config import Settings

    monkeypatch.setenv("END_OF_SUPPORT_WINDOW_DAYS", "30")
    monkeypatch.setenv("UNRELATED_SETTING", "x")
    loaded = Settings(_env_file=None)
    assert loaded.end_of_support_window_days == 30
    assert Settings.model_config["extra"] == "ignore"
    assert not hasattr(Settings, "Config")
