# reactor/placeholders.py
# =========================
# 占位符展开（单遍扫描）
# Placeholder expansion (single pass over the template)
# =========================

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional, Union

from .grid import position_to_grid
from .types import RandomSource
from ..schemas.event import Actor, TriggerItem

# 用户可控文本中需要剔除的字符（防命令注入）
UNSAFE_CHARS = (";", '"', "'", "`", "$", "&", "|", "\n", "\r")

RANDOM_PREFIX = "random:"

_SANITIZE_TABLE = str.maketrans({ch: None for ch in UNSAFE_CHARS})


def sanitize(text: Optional[str]) -> str:
    if not text:
        return text or ""
    return text.translate(_SANITIZE_TABLE)


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    name: str
    raw: str


@dataclass(frozen=True)
class RandomRange:
    low: int
    high: int
    raw: str


Token = Union[Literal, Placeholder, RandomRange]


def _parse_random(name: str, raw: str) -> Optional[RandomRange]:
    parts = name[len(RANDOM_PREFIX):].split(":")
    if len(parts) != 2 or not all(p.isdecimal() for p in parts):
        return None
    return RandomRange(low=int(parts[0]), high=int(parts[1]), raw=raw)


def tokenize(template: str, known: frozenset) -> List[Token]:
    """
    把模板切成字面量 / 占位符 token 序列。

    只有 known 中的名字和 {random:MIN:MAX} 会成为占位符，其余 {...} 原样保留。
    """
    tokens: List[Token] = []
    buf: List[str] = []
    pos = 0
    n = len(template)

    while pos < n:
        start = template.find("{", pos)
        if start < 0:
            buf.append(template[pos:])
            break
        end = template.find("}", start + 1)
        if end < 0:
            buf.append(template[pos:])
            break

        # 内部再出现 "{" 时从新的 "{" 重新匹配，如 "{{steamid}"
        inner_open = template.find("{", start + 1, end)
        if inner_open >= 0:
            buf.append(template[pos:inner_open])
            pos = inner_open
            continue

        name = template[start + 1:end]
        raw = template[start:end + 1]
        token: Optional[Token] = None
        if name in known:
            token = Placeholder(name=name, raw=raw)
        elif name.startswith(RANDOM_PREFIX):
            token = _parse_random(name, raw)

        buf.append(template[pos:start])
        if token is None:
            buf.append(raw)
        else:
            if buf:
                tokens.append(Literal("".join(buf)))
                buf = []
            tokens.append(token)
        pos = end + 1

    if buf:
        text = "".join(buf)
        if text:
            tokens.append(Literal(text))
    return [t for t in tokens if not (isinstance(t, Literal) and not t.text)]


class PlaceholderEngine:
    """
    占位符展开引擎

    - 玩家名 / 物品名先做 sanitize 再替换
    - 每个 {random:MIN:MAX} 独立抽取（闭区间）
    - 替换结果不会被二次扫描
    """

    ACTOR_NAMES = frozenset({
        "playername",
        "steamid",
        "playerid",
        "position",
        "position.x",
        "position.y",
        "position.z",
        "grid",
    })
    ITEM_NAMES = frozenset({
        "itemname",
        "itemshortname",
        "itemid",
        "itemamount",
        "itemuid",
        "skinid",
    })
    TIME_NAMES = frozenset({"timestamp", "datetime"})

    def __init__(self, rng: RandomSource, *, world_size: float = 4500.0) -> None:
        self.rng = rng
        self.world_size = world_size

    def expand(
        self,
        template: Optional[str],
        actor: Actor,
        item: Optional[TriggerItem],
        *,
        now: float,
    ) -> str:
        if not template:
            return template or ""

        values = self._values(actor, item, now)
        known = frozenset(values)
        out: List[str] = []
        for token in tokenize(template, known):
            if isinstance(token, Literal):
                out.append(token.text)
            elif isinstance(token, Placeholder):
                out.append(values[token.name]())
            else:
                out.append(str(self._draw(token)))
        return "".join(out)

    def _draw(self, token: RandomRange) -> int:
        low, high = token.low, token.high
        if low > high:
            low, high = high, low
        return self.rng.randint(low, high)

    def _values(
        self,
        actor: Actor,
        item: Optional[TriggerItem],
        now: float,
    ) -> Dict[str, Callable[[], str]]:
        pos = actor.position
        values: Dict[str, Callable[[], str]] = {
            "playername": lambda: sanitize(actor.display_name),
            "steamid": lambda: actor.id_string,
            "playerid": lambda: actor.id_string,
            "position": lambda: str(pos),
            "position.x": lambda: f"{pos.x:.2f}",
            "position.y": lambda: f"{pos.y:.2f}",
            "position.z": lambda: f"{pos.z:.2f}",
            "grid": lambda: position_to_grid(pos, self.world_size),
            "timestamp": lambda: str(int(now)),
            "datetime": lambda: datetime.fromtimestamp(now).strftime("%Y-%m-%d %H:%M:%S"),
        }
        if item is not None:
            values.update({
                "itemname": lambda: sanitize(item.display_name),
                "itemshortname": lambda: item.shortname,
                "itemid": lambda: str(item.item_id),
                "itemamount": lambda: str(item.amount),
                "itemuid": lambda: str(item.uid),
                "skinid": lambda: str(item.skin_id),
            })
        return values


def iter_placeholders(template: str) -> Iterator[str]:
    """列出模板里所有可识别的占位符名（用于配置检查）"""
    known = PlaceholderEngine.ACTOR_NAMES | PlaceholderEngine.ITEM_NAMES | PlaceholderEngine.TIME_NAMES
    for token in tokenize(template or "", known):
        if isinstance(token, Placeholder):
            yield token.name
        elif isinstance(token, RandomRange):
            yield token.raw[1:-1]
