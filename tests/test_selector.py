import random

from unwrap_commands.reactor.config import ActionEntry
from unwrap_commands.reactor.selector import ActionSelector
from unwrap_commands.reactor.types import SelectionMode


def _action(cmd: str, weight: int = 1, chance: float = 100.0) -> ActionEntry:
    return ActionEntry(command=cmd, weight=weight, execute_chance=chance)


def test_weighted_distribution():
    selector = ActionSelector(random.Random(42))
    actions = [_action("scrap", 70), _action("signal", 30)]
    trials = 10_000
    hits = sum(
        1 for _ in range(trials)
        if selector.select(SelectionMode.WEIGHTED, actions)[0].command == "scrap"
    )
    assert abs(hits / trials - 0.70) < 0.03


def test_zero_chance_is_never_selected():
    selector = ActionSelector(random.Random(7))
    actions = [_action("never", chance=0.0), _action("always")]
    for _ in range(1000):
        picked = selector.select(SelectionMode.ALL, actions)
        assert [a.command for a in picked] == ["always"]


def test_full_chance_consumes_no_draw(scripted_random):
    rng = scripted_random()
    selector = ActionSelector(rng)
    picked = selector.select(SelectionMode.ALL, [_action("a"), _action("b", chance=150.0)])
    assert [a.command for a in picked] == ["a", "b"]


def test_chance_boundary_is_inclusive(scripted_random):
    selector = ActionSelector(scripted_random(floats=(0.25, 0.2501)))
    assert selector.is_eligible(_action("x", chance=25.0))
    assert not selector.is_eligible(_action("x", chance=25.0))


def test_all_mode_keeps_declared_order(scripted_random):
    rng = scripted_random(floats=(0.9,))
    selector = ActionSelector(rng)
    actions = [_action("first"), _action("dropped", chance=50.0), _action("third"), _action("fourth")]
    picked = selector.select(SelectionMode.ALL, actions)
    assert [a.command for a in picked] == ["first", "third", "fourth"]
    assert rng.randrange_calls == []


def test_random_mode_picks_from_filtered_set(scripted_random):
    rng = scripted_random(floats=(0.5,), ints=(1,))
    selector = ActionSelector(rng)
    actions = [_action("a"), _action("b", chance=10.0), _action("c")]
    picked = selector.select(SelectionMode.RANDOM, actions)
    assert [a.command for a in picked] == ["c"]
    assert rng.randrange_calls == [2]


def test_random_mode_is_uniform_regardless_of_weight():
    selector = ActionSelector(random.Random(3))
    actions = [_action("heavy", 1000), _action("light", 1)]
    trials = 4000
    heavy = sum(
        1 for _ in range(trials)
        if selector.select(SelectionMode.RANDOM, actions)[0].command == "heavy"
    )
    assert abs(heavy / trials - 0.5) < 0.05


def test_weights_below_one_count_as_one(scripted_random):
    rng = scripted_random(ints=(4,))
    selector = ActionSelector(rng)
    actions = [_action("zero", 0), _action("negative", -5), _action("three", 3)]
    picked = selector.select(SelectionMode.WEIGHTED, actions)
    assert rng.randrange_calls == [5]
    assert picked[0].command == "three"


def test_weighted_pick_boundaries(scripted_random):
    actions = [_action("a", 2), _action("b", 3)]
    assert ActionSelector(scripted_random(ints=(1,))).select(SelectionMode.WEIGHTED, actions)[0].command == "a"
    assert ActionSelector(scripted_random(ints=(2,))).select(SelectionMode.WEIGHTED, actions)[0].command == "b"


def test_empty_eligible_set_selects_nothing(scripted_random):
    actions = [_action("a", chance=1.0), _action("b", chance=1.0)]
    for mode in (SelectionMode.WEIGHTED, SelectionMode.RANDOM):
        rng = scripted_random(floats=(0.99, 0.99))
        assert ActionSelector(rng).select(mode, actions) == []
        assert rng.randrange_calls == []


def test_selection_mode_parse():
    assert SelectionMode.parse("All") == SelectionMode.ALL
    assert SelectionMode.parse(" random ") == SelectionMode.RANDOM
    assert SelectionMode.parse("Weighted") == SelectionMode.WEIGHTED
    assert SelectionMode.parse("bogus") == SelectionMode.WEIGHTED
    assert SelectionMode.parse(None) == SelectionMode.WEIGHTED
