"""Tests for ConditionRegistry.

Verifies:
- Each registration appends an incomplete entry of the right kind
- Registration order is preserved
- acquire() yields a copy taken at acquisition time
- Registration from inside an acquired pass does not deadlock
- Non-callable predicates are rejected
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cypat.domain.engine.models import (
    AppCondition,
    AppData,
    ConditionKind,
    FileCondition,
    InstallMethod,
    UserCondition,
)
from cypat.engine.registry import ConditionRegistry


@pytest.fixture
def registry() -> ConditionRegistry:
    return ConditionRegistry()


def _never(*_args) -> bool:
    return False


class TestRegistration:
    def test_starts_empty(self, registry: ConditionRegistry):
        assert len(registry) == 0
        assert registry.snapshot() == []

    def test_file_check(self, registry: ConditionRegistry, tmp_path: Path):
        entry = registry.register_file(tmp_path / "flag.txt", _never)
        assert entry.kind == ConditionKind.FILE
        assert isinstance(entry.condition, FileCondition)
        assert entry.condition.path == str(tmp_path / "flag.txt")
        assert entry.condition.cursor == 0
        assert entry.completed is False

    def test_app_check_snapshot(self, registry: ConditionRegistry):
        entry = registry.register_app("nmap", InstallMethod.SNAP, _never)
        assert isinstance(entry.condition, AppCondition)
        assert entry.condition.app == AppData("nmap", InstallMethod.SNAP)

    def test_app_check_accepts_method_value(self, registry: ConditionRegistry):
        entry = registry.register_app("vlc", "flatpak", _never)
        assert entry.condition.app.install_method == InstallMethod.FLATPAK

    def test_user_check(self, registry: ConditionRegistry):
        entry = registry.register_user("guest", _never)
        assert isinstance(entry.condition, UserCondition)
        assert entry.condition.username == "guest"

    def test_custom_check_label(self, registry: ConditionRegistry):
        entry = registry.register_custom(lambda: True, label="firewall on")
        assert entry.kind == ConditionKind.CUSTOM
        assert entry.condition.describe() == "firewall on"

    def test_order_is_registration_order(self, registry: ConditionRegistry):
        registry.register_user("a", _never)
        registry.register_custom(_never)
        registry.register_app("b", InstallMethod.DEFAULT, _never)
        kinds = [kind for kind, _ in registry.snapshot()]
        assert kinds == [ConditionKind.USER, ConditionKind.CUSTOM, ConditionKind.APP]

    def test_rejects_non_callable(self, registry: ConditionRegistry):
        with pytest.raises(TypeError):
            registry.register_custom("not callable")
        assert len(registry) == 0


class TestAcquire:
    def test_yields_copy(self, registry: ConditionRegistry):
        registry.register_custom(_never)
        with registry.acquire() as entries:
            registry.register_custom(_never)
            assert len(entries) == 1
        assert len(registry) == 2

    def test_entries_are_shared_objects(self, registry: ConditionRegistry):
        entry = registry.register_custom(_never)
        with registry.acquire() as entries:
            entries[0].completed = True
        assert entry.completed is True
