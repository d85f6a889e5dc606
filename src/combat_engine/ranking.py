"""Moveset ranking across every creature and defending type pair.

Builds on :class:`CombatSimulator` by running every (fast, charged) pair of
every creature twice, once at full power and once at the power multiplier
that keeps the creature under the restricted CP ceiling, and scoring the
result globally, per attacking type, and against each defending type pair.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from src.combat_engine.combat_simulator import CombatSimulator
from src.combat_engine.config import DODGE_REACTION_MARGIN, UNDEFENDED_DAMAGE_FACTOR
from src.combat_engine.models import (
    Ability,
    Creature,
    DamageInfo,
    MovesetResult,
    SimulationParameters,
    TypeChart,
)

logger = logging.getLogger(__name__)

METRICS = ("dps", "ms_dps", "damage_till_faint", "restricted_power")


def ranked(results: Iterable[MovesetResult], metric: str) -> List[MovesetResult]:
    """Sort *results* descending by *metric*.

    Equal metrics fall back to creature id, fast id, charged id and
    opponent types, all ascending, so the order never depends on input order.
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric!r}. Must be one of {METRICS}.")
    return sorted(results, key=lambda r: (-r.metric(metric), r.sort_key))


@dataclass
class RankingResults:
    """Every ranked result set produced by one aggregation pass."""

    movesets: List[MovesetResult] = field(default_factory=list)
    per_creature: Dict[int, List[MovesetResult]] = field(default_factory=dict)
    by_attack_type: Dict[int, List[MovesetResult]] = field(default_factory=dict)
    counters: Dict[Tuple[int, int], List[MovesetResult]] = field(default_factory=dict)
    rejected: int = 0
    excluded: int = 0

    @property
    def by_dps(self) -> List[MovesetResult]:
        return ranked(self.movesets, "dps")

    @property
    def by_ms_dps(self) -> List[MovesetResult]:
        return ranked(self.movesets, "ms_dps")

    @property
    def by_damage_till_faint(self) -> List[MovesetResult]:
        return ranked(self.movesets, "damage_till_faint")

    @property
    def by_restricted_power(self) -> List[MovesetResult]:
        return ranked(self.movesets, "restricted_power")

    def by_attack_type_for(self, type_id: int, metric: str = "dps") -> List[MovesetResult]:
        """Best attackers of one attacking type."""
        return ranked(self.by_attack_type.get(type_id, []), metric)

    def counters_for(
        self, first: int, second: int, metric: str = "dps"
    ) -> List[MovesetResult]:
        """Best counters of a defending type pair, in canonical order."""
        key = (min(first, second), max(first, second))
        return ranked(self.counters.get(key, []), metric)


class MovesetRejected(Exception):
    """Raised internally when a moveset violates a data precondition."""


class RankingAggregator:
    """Simulate and rank every moveset of every creature.

    Tables are read-only during ranking. Movesets that reference an unknown
    ability or type, or an ability with zero duration, are rejected one at
    a time without aborting the pass. Movesets whose fast ability cannot be
    cast between two opponent strikes are excluded from every pool.
    """

    def __init__(
        self,
        creatures: Dict[int, Creature],
        abilities: Dict[int, Ability],
        type_chart: TypeChart,
        params: SimulationParameters,
        simulator: Optional[CombatSimulator] = None,
    ):
        self.creatures = creatures
        self.abilities = abilities
        self.type_chart = type_chart
        self.params = params
        self.simulator = simulator or CombatSimulator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def rank(self) -> RankingResults:
        """Run the whole aggregation pass and sort every result list."""
        results = RankingResults()

        for creature_id in sorted(self.creatures):
            creature = self.creatures[creature_id]
            creature_results = results.per_creature.setdefault(creature_id, [])

            for fast_index, fast_id in enumerate(creature.fast_abilities):
                for charged_index, charged_id in enumerate(creature.charged_abilities):
                    is_legacy = (
                        creature.is_legacy_fast(fast_index)
                        or creature.is_legacy_charged(charged_index)
                    )
                    try:
                        scored = self.score_moveset(
                            creature, fast_id, charged_id, is_legacy
                        )
                    except MovesetRejected as e:
                        logger.warning("Skipping %s moveset: %s", creature.name, e)
                        results.rejected += 1
                        continue

                    if scored is None:
                        results.excluded += 1
                        continue

                    base, by_type, counters = scored
                    results.movesets.append(base)
                    creature_results.append(base)
                    for type_id, entry in by_type:
                        results.by_attack_type.setdefault(type_id, []).append(entry)
                    for type_pair, entry in counters:
                        results.counters.setdefault(type_pair, []).append(entry)

        self._sort_all(results)

        logger.info(
            "Ranked %d movesets across %d creatures "
            "(%d rejected, %d excluded as non-dodgeable, %d type-pair buckets)",
            len(results.movesets), len(self.creatures),
            results.rejected, results.excluded, len(results.counters),
        )
        return results

    def score_moveset(
        self,
        creature: Creature,
        fast_id: int,
        charged_id: int,
        is_legacy: bool = False,
    ) -> Optional[Tuple[MovesetResult, List, List]]:
        """Simulate one moveset and build all of its ranking entries.

        Returns:
            ``(base, by_type, counters)`` where *by_type* is a list of
            ``(attacking_type, entry)`` and *counters* a list of
            ``((type1, type2), entry)``; ``None`` when the fast ability
            cannot be cast between strikes.

        Raises:
            MovesetRejected: on an unknown ability or type id, or an
                ability with zero duration.
        """
        fast = self._resolve_ability(fast_id)
        charged = self._resolve_ability(charged_id)
        self._check_types(creature, fast, charged)

        params = self.params
        hits = self.simulator.hits_per_turn(fast, params.strike_interval)
        if hits == 0:
            logger.debug(
                "Excluding %s (%s + %s): fast ability cannot fit between strikes",
                creature.name, fast.name, charged.name,
            )
            return None

        combat = self._simulate(creature, fast, charged, params.power_multiplier)
        restricted_multiplier = creature.restricted_power_multiplier(
            params.restricted_cp_ceiling, params.power_multiplier
        )
        restricted = self._simulate(creature, fast, charged, restricted_multiplier)
        defend_factor = self._defend_factor(charged)

        def entry(primary_weight, secondary_weight, opponent_types=None):
            return self._build_result(
                creature, fast, charged, combat, restricted,
                restricted_multiplier, defend_factor, is_legacy,
                primary_weight, secondary_weight, opponent_types,
            )

        base = entry(1.0, 1.0)

        if fast.type_id == charged.type_id:
            by_type = [(fast.type_id, base)]
        else:
            by_type = [
                (fast.type_id, entry(1.0, 0.0)),
                (charged.type_id, entry(0.0, 1.0)),
            ]

        chart = self.type_chart
        type_ids = chart.type_ids
        counters = []
        try:
            for first in type_ids:
                for second in type_ids:
                    if first > second:
                        continue
                    pair = (first, second)
                    counters.append((pair, entry(
                        chart.pair_multiplier(fast.type_id, pair),
                        chart.pair_multiplier(charged.type_id, pair),
                        pair,
                    )))
        except KeyError as e:
            raise MovesetRejected(
                f"type chart has no effectiveness entry for type {e}"
            ) from e

        return base, by_type, counters

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _resolve_ability(self, ability_id: int) -> Ability:
        ability = self.abilities.get(ability_id)
        if ability is None:
            raise MovesetRejected(f"unknown ability id {ability_id}")
        if ability.duration <= 0:
            raise MovesetRejected(
                f"ability {ability.name} ({ability_id}) has zero duration"
            )
        return ability

    def _check_types(self, creature: Creature, fast: Ability, charged: Ability):
        for type_id in (*creature.types, fast.type_id, charged.type_id):
            if not self.type_chart.has_type(type_id):
                raise MovesetRejected(f"type {type_id} missing from type chart")

    def _simulate(
        self,
        creature: Creature,
        fast: Ability,
        charged: Ability,
        power_multiplier: float,
    ) -> DamageInfo:
        params = self.params
        return self.simulator.simulate(
            creature,
            fast,
            charged,
            power_multiplier,
            params.strike_interval,
            params.duration,
            params.regen_lifetime,
        )

    def _defend_factor(self, charged: Ability) -> float:
        """1.0 when the charged cast fits between two strikes, else penalised."""
        window = self.params.strike_interval - DODGE_REACTION_MARGIN
        if charged.duration <= window:
            return 1.0
        return UNDEFENDED_DAMAGE_FACTOR

    @staticmethod
    def _build_result(
        creature: Creature,
        fast: Ability,
        charged: Ability,
        combat: DamageInfo,
        restricted: DamageInfo,
        restricted_multiplier: float,
        defend_factor: float,
        is_legacy: bool,
        primary_weight: float,
        secondary_weight: float,
        opponent_types: Optional[Tuple[int, int]],
    ) -> MovesetResult:
        ms_dps = (
            combat.primary_dps * primary_weight
            + combat.secondary_dps * secondary_weight
        )
        restricted_ms_dps = (
            restricted.primary_dps * primary_weight
            + restricted.secondary_dps * secondary_weight
        )
        attack = creature.effective_attack

        return MovesetResult(
            creature_id=creature.creature_id,
            fast_id=fast.ability_id,
            charged_id=charged.ability_id,
            ms_dps=ms_dps,
            dps=ms_dps * attack,
            damage_till_faint=ms_dps * creature.strength * defend_factor,
            restricted_power=restricted_multiplier ** 3 * restricted_ms_dps * attack,
            is_legacy=is_legacy,
            fast_casts_per_turn=combat.hits_per_turn,
            charged_casts=combat.charged_casts,
            opponent_types=opponent_types,
        )

    @staticmethod
    def _sort_all(results: RankingResults):
        results.movesets = ranked(results.movesets, "dps")
        for key, entries in results.per_creature.items():
            results.per_creature[key] = ranked(entries, "dps")
        for key, entries in results.by_attack_type.items():
            results.by_attack_type[key] = ranked(entries, "dps")
        for key, entries in results.counters.items():
            results.counters[key] = ranked(entries, "dps")
