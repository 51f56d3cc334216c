import pytest

from tactics.ai.catalog import DEFAULT_CATALOG, AbilityCatalog, normalize_ability_id
from tactics.ai.timing import AbilityRule, TimingCategory


def test_normalize_strips_separators_case_and_suffix():
    assert normalize_ability_id("Blood_Oath Ability") == "bloodoath"
    assert normalize_ability_id("run-and-gun") == "runandgun"
    assert normalize_ability_id("") == ""


def test_exact_lookup_ignores_formatting():
    rule = DEFAULT_CATALOG.lookup("Blood Oath")
    assert rule is not None
    assert rule.category is TimingCategory.SELF_DAMAGE
    assert rule.single_use is True
    assert rule.hp_threshold == 60


def test_lookup_misses_unknown_ids():
    assert DEFAULT_CATALOG.lookup("totally_new_power") is None
    assert "totally_new_power" not in DEFAULT_CATALOG
    assert "dispatch" in DEFAULT_CATALOG


def test_variant_lookup_prefers_longest_key():
    assert DEFAULT_CATALOG.lookup_variant("veteran_execute").category is TimingCategory.FINISHER
    rule = DEFAULT_CATALOG.lookup_variant("lidless_stare_ultimate")
    assert rule is not None
    assert rule.category is TimingCategory.DANGEROUS_AOE
    # "plasma_reload" outranks the shorter "reload" entry
    assert DEFAULT_CATALOG.lookup_variant("plasma_reload_mk2") is DEFAULT_CATALOG.lookup("plasma_reload")


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CATALOG.rules()["dispatch"] = AbilityRule(TimingCategory.NORMAL)


def test_extended_catalog_leaves_default_untouched():
    extra = AbilityCatalog({"cleaving_arc": AbilityRule(TimingCategory.DANGEROUS_AOE)})
    assert len(extra) == 1
    combined = DEFAULT_CATALOG.extended({"cleaving_arc": AbilityRule(TimingCategory.DANGEROUS_AOE)})
    assert combined.lookup("cleaving_arc").category is TimingCategory.DANGEROUS_AOE
    assert DEFAULT_CATALOG.lookup("cleaving_arc") is None
    assert len(combined) == len(DEFAULT_CATALOG) + 1


def test_colliding_keys_are_rejected():
    with pytest.raises(ValueError):
        AbilityCatalog(
            {
                "shield_wall": AbilityRule(TimingCategory.PRE_COMBAT_BUFF),
                "ShieldWall": AbilityRule(TimingCategory.TURN_ENDING),
            }
        )
