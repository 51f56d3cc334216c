import pytest

from tactics.ai.config import DEFAULT_CONFIG
from tactics.ai.gates import GateContext, timing_gate
from tactics.ai.timing import AbilityRule, TimingCategory

T = TimingCategory


def make_ctx(**overrides):
    values = dict(
        hp_percent=100.0,
        first_action_done=False,
        enemy_hp_percents=(100.0,),
        ally_hp_percents=(),
        momentum=100,
        weapon_needs_reload=False,
        config=DEFAULT_CONFIG,
    )
    values.update(overrides)
    return GateContext(**values)


@pytest.mark.parametrize("category", list(TimingCategory))
def test_every_category_has_a_gate(category):
    reason = timing_gate(AbilityRule(category), make_ctx())
    assert reason is None or isinstance(reason, str)


def test_post_first_action_waits_for_an_action():
    rule = AbilityRule(T.POST_FIRST_ACTION)
    assert timing_gate(rule, make_ctx()) == "waiting for first action"
    assert timing_gate(rule, make_ctx(first_action_done=True)) is None


def test_post_first_action_respects_own_health_floor():
    rule = AbilityRule(T.POST_FIRST_ACTION, hp_threshold=30)
    assert timing_gate(rule, make_ctx(first_action_done=True, hp_percent=20.0)) is not None
    assert timing_gate(rule, make_ctx(first_action_done=True, hp_percent=40.0)) is None


def test_finisher_needs_a_wounded_enemy():
    rule = AbilityRule(T.FINISHER, target_hp_threshold=30)
    assert timing_gate(rule, make_ctx(enemy_hp_percents=(80.0, 45.0))) is not None
    assert timing_gate(rule, make_ctx(enemy_hp_percents=(80.0, 30.0))) is None


def test_self_damage_needs_own_health():
    rule = AbilityRule(T.SELF_DAMAGE, hp_threshold=60)
    assert timing_gate(rule, make_ctx(hp_percent=50.0)) is not None
    assert timing_gate(rule, make_ctx(hp_percent=70.0)) is None


def test_self_damage_without_threshold_uses_configured_default():
    rule = AbilityRule(T.SELF_DAMAGE)
    config = DEFAULT_CONFIG.replace(self_damage_hp_percent=80.0)
    assert timing_gate(rule, make_ctx(hp_percent=70.0, config=config)) is not None


def test_emergency_unlocks_for_self_or_ally():
    rule = AbilityRule(T.EMERGENCY)
    assert timing_gate(rule, make_ctx(hp_percent=80.0, ally_hp_percents=(90.0,))) == "no emergency"
    assert timing_gate(rule, make_ctx(hp_percent=80.0, ally_hp_percents=(20.0,))) is None
    assert timing_gate(rule, make_ctx(hp_percent=25.0)) is None


def test_momentum_gates():
    heroic = AbilityRule(T.HEROIC_ACT)
    desperate = AbilityRule(T.DESPERATE_MEASURE)
    assert timing_gate(heroic, make_ctx(momentum=100)) is not None
    assert timing_gate(heroic, make_ctx(momentum=180)) is None
    assert timing_gate(desperate, make_ctx(momentum=100)) is not None
    assert timing_gate(desperate, make_ctx(momentum=40)) is None


def test_reload_only_with_a_spent_magazine():
    rule = AbilityRule(T.RELOAD)
    assert timing_gate(rule, make_ctx()) == "magazine full"
    assert timing_gate(rule, make_ctx(weapon_needs_reload=True)) is None


def test_turn_ending_respects_health_floor():
    rule = AbilityRule(T.TURN_ENDING, hp_threshold=50)
    assert timing_gate(rule, make_ctx(hp_percent=40.0)) is not None
    assert timing_gate(rule, make_ctx(hp_percent=60.0)) is None
