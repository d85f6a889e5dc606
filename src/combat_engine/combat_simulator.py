"""Deterministic mock battle for a single creature and ability pair.

The attacker fights an opponent that strikes every ``strike_interval``
seconds. Every strike is dodged, so fast abilities are cast in batches that
fit between two strikes, followed by a short dodge window. Charged abilities
fire as soon as enough energy has been stored. Damage is tracked separately
for the fast (primary) and charged (secondary) ability so that callers can
re-weight each part against different defending types.
"""

import logging
import math

from src.combat_engine.config import (
    DODGE_REACTION_MARGIN,
    IV_BONUS,
    MAX_ENERGY,
    MIN_DODGE_WINDOW,
    PASSIVE_ENERGY_PER_HP,
    STAB_MULTIPLIER,
)
from src.combat_engine.models import Ability, Creature, DamageInfo

logger = logging.getLogger(__name__)

# A clock this close to a strike (in strike intervals) is treated as at it
_STRIKE_EPSILON = 1e-9


class CombatSimulator:
    """Replays a fixed-length battle and reports per-ability DPS.

    The simulator is stateless: identical arguments always produce an
    identical :class:`DamageInfo`. Abilities with a zero duration are a
    caller precondition violation and are not guarded against here.
    """

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    @staticmethod
    def hits_per_turn(fast: Ability, strike_interval: float) -> int:
        """How many fast casts fit between two opponent strikes."""
        return max(
            math.floor((strike_interval - DODGE_REACTION_MARGIN) / fast.duration), 0
        )

    @staticmethod
    def stab(creature: Creature, ability: Ability) -> float:
        """Same-type attack bonus for *ability* used by *creature*."""
        if ability.type_id in creature.types[:2]:
            return STAB_MULTIPLIER
        return 1.0

    @staticmethod
    def next_strike(clock: float, strike_interval: float) -> float:
        """Time of the first opponent strike after *clock*.

        Strike times are computed from the window index, not accumulated, so
        a clock that lands within rounding error of a strike counts as
        being at it.
        """
        window = math.floor(clock / strike_interval + _STRIKE_EPSILON)
        return (window + 1) * strike_interval

    def cast_damage(self, creature: Creature, ability: Ability, hits: int = 1) -> float:
        return ability.power * self.stab(creature, ability) * hits

    @staticmethod
    def passive_energy(
        creature: Creature,
        fast: Ability,
        hits: int,
        power_multiplier: float,
        regen_lifetime: float,
    ) -> float:
        """Energy gained from damage taken while casting *hits* fast abilities."""
        hp = (creature.stamina + IV_BONUS) * power_multiplier
        return (fast.duration / regen_lifetime) * PASSIVE_ENERGY_PER_HP * hp * hits

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def simulate(
        self,
        creature: Creature,
        fast: Ability,
        charged: Ability,
        power_multiplier: float,
        strike_interval: float,
        duration: float,
        regen_lifetime: float,
    ) -> DamageInfo:
        """Run one battle from t=0 until the clock passes *duration*.

        Returns:
            :class:`DamageInfo` whose DPS figures are each ability's damage
            divided by the total simulated time. ``hits_per_turn`` of 0
            means the fast ability cannot be cast between strikes; no
            battle is run in that case.
        """
        max_hits = self.hits_per_turn(fast, strike_interval)
        if max_hits == 0:
            return DamageInfo(
                primary_dps=0.0,
                secondary_dps=0.0,
                fast_casts=0,
                charged_casts=0,
                hits_per_turn=0,
                elapsed=0.0,
            )

        fast_damage = self.cast_damage(creature, fast)
        charged_damage = self.cast_damage(creature, charged)

        energy = 0.0
        clock = 0.0
        primary = 0.0
        secondary = 0.0
        fast_casts = 0
        charged_casts = 0

        while clock < duration:
            if energy >= charged.energy_cost:
                secondary += charged_damage
                clock += charged.duration
                energy = min(energy + charged.energy_delta, MAX_ENERGY)
                charged_casts += 1
                continue

            # Pack fast casts into what is left of the current strike interval.
            next_strike = self.next_strike(clock, strike_interval)
            remaining = next_strike - clock
            hits = math.floor((remaining - DODGE_REACTION_MARGIN) / fast.duration)
            hits = min(max(hits, 0), max_hits)

            primary += fast_damage * hits
            clock += fast.duration * hits
            energy = min(energy + fast.energy_delta * hits, MAX_ENERGY)
            fast_casts += hits

            energy = min(
                energy
                + self.passive_energy(
                    creature, fast, hits, power_multiplier, regen_lifetime
                ),
                MAX_ENERGY,
            )

            # Dodge until the strike lands, for at least the minimum window.
            clock = max(next_strike, clock + MIN_DODGE_WINDOW)

        logger.debug(
            "Simulated %s (%s + %s): %.1fs, %d fast, %d charged",
            creature.name, fast.name, charged.name,
            clock, fast_casts, charged_casts,
        )

        return DamageInfo(
            primary_dps=primary / clock,
            secondary_dps=secondary / clock,
            fast_casts=fast_casts,
            charged_casts=charged_casts,
            hits_per_turn=max_hits,
            elapsed=clock,
        )
