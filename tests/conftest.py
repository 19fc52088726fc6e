# tests/conftest.py
# Pytest 配置 + 共享的宿主替身

from __future__ import annotations

import random
from typing import Callable, List, Optional, Tuple

import pytest

from unwrap_commands.lang import Localizer
from unwrap_commands.permissions import PermissionRegistry
from unwrap_commands.reactor.config import ReactorConfig
from unwrap_commands.reactor.cooldowns import CooldownStore
from unwrap_commands.reactor.metrics import ReactorMetrics
from unwrap_commands.reactor.types import ReactorContext
from unwrap_commands.schemas.event import Actor


def pytest_configure(config):
    """注册自定义 marker"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (touches the filesystem heavily)"
    )
    config.addinivalue_line(
        "markers", "offline: mark test as offline test (no external services required)"
    )


# 默认给所有不标记的测试加上 offline marker
def pytest_collection_modifyitems(config, items):
    for item in items:
        if "integration" not in item.keywords:
            item.add_marker(pytest.mark.offline)


class RecordingExecutor:
    """记录所有命令调用；fail_on 中的命令会抛异常"""

    def __init__(self, fail_on: Tuple[str, ...] = ()) -> None:
        self.calls: List[Tuple[str, Optional[int], str]] = []
        self.fail_on = fail_on

    def _record(self, channel: str, actor: Optional[Actor], command: str) -> None:
        if command in self.fail_on:
            raise RuntimeError(f"host rejected {command}")
        self.calls.append((channel, actor.actor_id if actor else None, command))

    def server_command(self, command: str) -> None:
        self._record("server", None, command)

    def chat_command(self, actor: Actor, command: str) -> None:
        self._record("chat", actor, command)

    def client_command(self, actor: Actor, command: str) -> None:
        self._record("client", actor, command)

    @property
    def commands(self) -> List[str]:
        return [c[2] for c in self.calls]


class RecordingMessenger:
    def __init__(self) -> None:
        self.sent: List[Tuple[int, str]] = []

    def reply(self, actor: Actor, message: str) -> None:
        self.sent.append((actor.actor_id, message))

    @property
    def messages(self) -> List[str]:
        return [m for _, m in self.sent]


class ScriptedRandom:
    """
    可控随机源：按顺序返回预设值，用完后抛 AssertionError。
    randrange / randint 会记录调用参数。
    """

    def __init__(
        self,
        floats: Tuple[float, ...] = (),
        ints: Tuple[int, ...] = (),
    ) -> None:
        self._floats = list(floats)
        self._ints = list(ints)
        self.randrange_calls: List[int] = []
        self.randint_calls: List[Tuple[int, int]] = []

    def random(self) -> float:
        assert self._floats, "unexpected random() draw"
        return self._floats.pop(0)

    def randrange(self, stop: int) -> int:
        assert self._ints, "unexpected randrange() draw"
        self.randrange_calls.append(stop)
        return self._ints.pop(0)

    def randint(self, a: int, b: int) -> int:
        assert self._ints, "unexpected randint() draw"
        self.randint_calls.append((a, b))
        return self._ints.pop(0)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def permissions() -> PermissionRegistry:
    registry = PermissionRegistry()
    registry.register_all(ReactorConfig.default().permissions())
    return registry


@pytest.fixture
def scripted_random() -> Callable[..., ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def make_ctx(executor, messenger, permissions) -> Callable[..., ReactorContext]:
    """按需构造 ReactorContext；同一测试内共享 store / metrics。"""
    store = CooldownStore()
    metrics = ReactorMetrics()

    def _make(
        config: ReactorConfig,
        *,
        now: float = 1_700_000_000.0,
        rng=None,
        localizer: Optional[Localizer] = None,
    ) -> ReactorContext:
        permissions.register_all(config.permissions())
        return ReactorContext(
            now=now,
            config=config,
            cooldowns=store,
            permissions=permissions,
            executor=executor,
            messenger=messenger,
            rng=rng if rng is not None else random.Random(1234),
            localizer=localizer,
            metrics=metrics,
        )

    return _make
