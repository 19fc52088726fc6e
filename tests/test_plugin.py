from __future__ import annotations

import json
import random
from pathlib import Path

from unwrap_commands.permissions import PermissionRegistry
from unwrap_commands.plugin import UnwrapCommandsPlugin
from unwrap_commands.reactor.config import PERMISSION_BYPASS_COOLDOWN, PERMISSION_USE
from unwrap_commands.reactor.types import UnwrapResult
from unwrap_commands.schemas.event import Actor, TriggerItem

ALICE = Actor(actor_id=76561198000000001, display_name="Alice")
PRESENT = TriggerItem(shortname="xmas.present.small", default_name="Small Present")

COOLDOWN_YAML = """
version: "1.0.0"
profiles:
  - item_shortname: widget
    cooldown_seconds: 60
    block_unwrap_while_on_cooldown: true
    commands:
      - command: "give {steamid} gold 1"
"""


class _Clock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _make_plugin(tmp_path: Path, executor, messenger, permissions=None, clock=None) -> UnwrapCommandsPlugin:
    return UnwrapCommandsPlugin(
        config_path=tmp_path / "config" / "unwrap_commands.yaml",
        data_path=tmp_path / "data" / "unwrap_commands.json",
        executor=executor,
        messenger=messenger,
        permissions=permissions or PermissionRegistry(),
        rng=random.Random(5),
        clock=clock or _Clock(1_000.0),
    )


def test_init_creates_config_and_registers_permissions(tmp_path, executor, messenger):
    registry = PermissionRegistry()
    plugin = _make_plugin(tmp_path, executor, messenger, permissions=registry)
    plugin.init()

    assert plugin.loaded
    assert (tmp_path / "config" / "unwrap_commands.yaml").exists()
    assert registry.registered == [PERMISSION_USE, PERMISSION_BYPASS_COOLDOWN]


def test_default_profile_unwrap(tmp_path, executor, messenger):
    plugin = _make_plugin(tmp_path, executor, messenger)
    plugin.init()

    assert plugin.on_item_unwrap(PRESENT, ALICE) == UnwrapResult.ALLOW
    assert len(executor.commands) == 1
    assert executor.commands[0] in (
        "inventory.giveto 76561198000000001 scrap 50",
        "inventory.giveto 76561198000000001 supply.signal 1",
    )
    assert messenger.messages == ["You unwrapped a Small Present!"]
    assert plugin.metrics.processed_total == 1


def test_unwrap_before_init_is_ignored(tmp_path, executor, messenger):
    plugin = _make_plugin(tmp_path, executor, messenger)
    assert plugin.on_item_unwrap(PRESENT, ALICE) == UnwrapResult.ALLOW
    assert executor.calls == []


def test_cooldowns_survive_restart(tmp_path, executor, messenger):
    config_path = tmp_path / "config" / "unwrap_commands.yaml"
    config_path.parent.mkdir(parents=True)
    config_path.write_text(COOLDOWN_YAML, encoding="utf-8")
    widget = TriggerItem(shortname="widget", default_name="Widget")
    clock = _Clock(1_000.0)

    first = _make_plugin(tmp_path, executor, messenger, clock=clock)
    first.init()
    assert first.on_item_unwrap(widget, ALICE) == UnwrapResult.ALLOW
    first.unload()
    assert not first.loaded

    data = json.loads((tmp_path / "data" / "unwrap_commands.json").read_text(encoding="utf-8"))
    assert data["player_cooldowns"][ALICE.id_string] == {"widget/0/": 1_000.0}

    clock.now = 1_030.0
    second = _make_plugin(tmp_path, executor, messenger, clock=clock)
    second.init()
    assert second.on_item_unwrap(widget, ALICE) == UnwrapResult.SUPPRESS
    assert messenger.messages == ["You must wait 30 seconds before unwrapping another Widget."]
    assert len(executor.calls) == 1


def test_save_failure_is_not_fatal(tmp_path, executor, messenger):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    plugin = UnwrapCommandsPlugin(
        config_path=tmp_path / "c.yaml",
        data_path=blocker / "state.json",
        executor=executor,
        messenger=messenger,
        permissions=PermissionRegistry(),
        rng=random.Random(1),
    )
    plugin.init()
    plugin.on_item_unwrap(PRESENT, ALICE)

    assert plugin.save_data() is False
    assert plugin.cooldowns.dirty is True


def test_reload_registers_new_permissions(tmp_path, executor, messenger):
    registry = PermissionRegistry()
    plugin = _make_plugin(tmp_path, executor, messenger, permissions=registry)
    plugin.init()

    path = tmp_path / "config" / "unwrap_commands.yaml"
    path.write_text(
        COOLDOWN_YAML.replace("cooldown_seconds: 60", "cooldown_seconds: 60\n    required_permission: widgets.vip"),
        encoding="utf-8",
    )
    assert plugin.reload_config() is True
    assert "widgets.vip" in registry.registered
    assert plugin.provider.snapshot().profiles[0].item_shortname == "widget"


def test_server_save_writes_state(tmp_path, executor, messenger):
    config_path = tmp_path / "config" / "unwrap_commands.yaml"
    config_path.parent.mkdir(parents=True)
    config_path.write_text(COOLDOWN_YAML, encoding="utf-8")

    plugin = _make_plugin(tmp_path, executor, messenger)
    plugin.init()
    plugin.on_item_unwrap(TriggerItem(shortname="widget"), ALICE)
    assert plugin.cooldowns.dirty

    plugin.on_server_save()
    assert not plugin.cooldowns.dirty
    assert (tmp_path / "data" / "unwrap_commands.json").exists()
