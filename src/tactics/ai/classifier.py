from __future__ import annotations

import logging
from typing import Dict, Optional

from tactics.ai.catalog import DEFAULT_CATALOG, AbilityCatalog, normalize_ability_id
from tactics.ai.config import DEFAULT_CONFIG, TacticalConfig
from tactics.ai.heuristics import KeywordHeuristic, looks_like_hp_cost
from tactics.ai.timing import AbilityRule, TimingCategory
from tactics.components.ability import Ability

logger = logging.getLogger(__name__)


class AbilityClassifier:
    """Resolves abilities to timing rules: catalog first, heuristics on a miss.

    Results are memoised per normalized id so an ability keeps the same
    category for the lifetime of the classifier.
    """

    def __init__(
        self,
        catalog: AbilityCatalog = DEFAULT_CATALOG,
        heuristic: Optional[KeywordHeuristic] = None,
        config: TacticalConfig = DEFAULT_CONFIG,
    ) -> None:
        self.catalog = catalog
        self.heuristic = heuristic or KeywordHeuristic(
            default_finisher_target_hp=config.finisher_target_hp_percent,
            default_self_damage_hp=config.self_damage_hp_percent,
        )
        self._cache: Dict[str, AbilityRule] = {}

    def classify(self, ability_id: str, metadata: Ability) -> TimingCategory:
        return self.rule_for(ability_id, metadata).category

    def rule_for(self, ability_id: str, metadata: Ability) -> AbilityRule:
        key = normalize_ability_id(ability_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        rule = self.catalog.lookup(ability_id)
        source = "catalog"
        if rule is None:
            rule = self.catalog.lookup_variant(ability_id)
            source = "catalog variant"
        if rule is None:
            rule = self.heuristic.classify(metadata)
            source = "heuristic"
        if metadata.single_use and not rule.single_use:
            rule = AbilityRule(
                category=rule.category,
                hp_threshold=rule.hp_threshold,
                target_hp_threshold=rule.target_hp_threshold,
                single_use=True,
                description=rule.description,
                from_catalog=rule.from_catalog,
            )
        logger.debug("Classified %s as %s (%s)", ability_id, rule.category.value, source)
        if key:
            self._cache[key] = rule
        return rule

    def is_hp_cost(self, ability: Ability) -> bool:
        rule = self.rule_for(ability.ability_id, ability)
        if rule.category is TimingCategory.SELF_DAMAGE:
            return True
        return looks_like_hp_cost(ability)

    def clear_cache(self) -> None:
        self._cache.clear()
