"""Data models for the combat engine."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.combat_engine.config import (
    CREATURE_LIFETIME,
    IV_BONUS,
    MAX_POWER_MULTIPLIER,
    OPPONENT_STRIKE_INTERVAL,
    RESTRICTED_CP_CEILING,
    SIMULATED_DURATION,
)


@dataclass
class Creature:
    """A creature template with its movepool and derived strength stats.

    ``types`` holds two ids when the template declares any type; a
    single-typed creature repeats its type, and a template with no type
    field leaves it empty. The first ``standard_fast_count`` /
    ``standard_charged_count`` entries of each movepool are the decoded
    movepool, anything after them was appended as a legacy ability.
    """

    creature_id: int
    name: str
    attack: int = 0
    defense: int = 0
    stamina: int = 0
    types: List[int] = field(default_factory=list)
    fast_abilities: List[int] = field(default_factory=list)
    charged_abilities: List[int] = field(default_factory=list)
    standard_fast_count: int = 0
    standard_charged_count: int = 0

    @property
    def effective_attack(self) -> int:
        return self.attack + IV_BONUS

    @property
    def effective_defense(self) -> int:
        return self.defense + IV_BONUS

    @property
    def effective_stamina(self) -> int:
        return self.stamina + IV_BONUS

    def _cp_factor(self) -> float:
        return (
            self.effective_attack
            * math.sqrt(self.effective_defense)
            * math.sqrt(self.effective_stamina)
        )

    def cp(self, power_multiplier: float = MAX_POWER_MULTIPLIER) -> float:
        """Combat power at *power_multiplier*."""
        return self._cp_factor() * power_multiplier ** 2 / 10.0

    @property
    def max_cp(self) -> float:
        return self.cp()

    @property
    def tankiness(self) -> float:
        return float(self.effective_defense * self.effective_stamina)

    @property
    def strength(self) -> float:
        return self.effective_attack * self.tankiness / 10000.0

    def restricted_power_multiplier(
        self, cp_ceiling: float, max_multiplier: float = MAX_POWER_MULTIPLIER
    ) -> float:
        """Largest power multiplier that keeps combat power under *cp_ceiling*.

        Never exceeds *max_multiplier*, the multiplier used for unrestricted
        combat.
        """
        factor = self._cp_factor()
        if factor <= 0 or cp_ceiling <= 0:
            return 0.0
        return min(max_multiplier, math.sqrt(cp_ceiling * 10.0 / factor))

    def is_legacy_fast(self, index: int) -> bool:
        return index >= self.standard_fast_count

    def is_legacy_charged(self, index: int) -> bool:
        return index >= self.standard_charged_count


@dataclass
class Ability:
    """A fast or charged ability.

    ``energy_delta`` is positive for fast abilities (energy gained per cast)
    and non-positive for charged abilities (energy spent per cast).
    """

    ability_id: int
    name: str
    type_id: int = 0
    power: float = 0.0
    duration: float = 0.0  # seconds
    energy_delta: int = 0

    @property
    def is_fast(self) -> bool:
        return self.energy_delta > 0

    @property
    def energy_cost(self) -> int:
        return -self.energy_delta

    @property
    def eps(self) -> float:
        """Energy per second."""
        return self.energy_delta / self.duration if self.duration else 0.0

    @property
    def dps(self) -> float:
        """Damage per second."""
        return self.power / self.duration if self.duration else 0.0

    @property
    def dpe(self) -> float:
        """Damage per energy."""
        return self.power / self.energy_delta if self.energy_delta else 0.0


@dataclass
class TypeChart:
    """Attacking type -> defending type -> damage multiplier."""

    effectiveness: Dict[int, Dict[int, float]] = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict)

    @property
    def type_ids(self) -> List[int]:
        return sorted(self.effectiveness)

    def has_type(self, type_id: int) -> bool:
        return type_id in self.effectiveness

    def multiplier(self, attacking: int, defending: int) -> float:
        """Raises ``KeyError`` when either type is missing from the chart."""
        return self.effectiveness[attacking][defending]

    def pair_multiplier(self, attacking: int, defending: Tuple[int, int]) -> float:
        """Effectiveness against a defending type pair.

        A same-type pair uses the single-type multiplier; a cross-type pair
        multiplies both factors.
        """
        first, second = defending
        if first == second:
            return self.multiplier(attacking, first)
        return self.multiplier(attacking, first) * self.multiplier(attacking, second)

    def short_name(self, type_id: int) -> str:
        name = self.names.get(type_id, str(type_id))
        return name.replace("POKEMON_TYPE_", "", 1)


@dataclass(frozen=True)
class DamageInfo:
    """Raw output of one simulated battle."""

    primary_dps: float
    secondary_dps: float
    fast_casts: int
    charged_casts: int
    hits_per_turn: int
    elapsed: float


@dataclass(frozen=True)
class SimulationParameters:
    """Battle settings handed to the simulator and the aggregator."""

    strike_interval: float = OPPONENT_STRIKE_INTERVAL
    duration: float = SIMULATED_DURATION
    regen_lifetime: float = CREATURE_LIFETIME
    restricted_cp_ceiling: float = RESTRICTED_CP_CEILING
    power_multiplier: float = MAX_POWER_MULTIPLIER

    def __post_init__(self):
        for name in ("strike_interval", "duration", "regen_lifetime", "power_multiplier"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"Invalid {name}: {value!r}. Must be positive.")
        if self.restricted_cp_ceiling < 0:
            raise ValueError(
                f"Invalid restricted_cp_ceiling: {self.restricted_cp_ceiling!r}. "
                "Must not be negative."
            )

    def to_dict(self) -> Dict[str, float]:
        return {
            "strike_interval": self.strike_interval,
            "duration": self.duration,
            "regen_lifetime": self.regen_lifetime,
            "restricted_cp_ceiling": self.restricted_cp_ceiling,
            "power_multiplier": self.power_multiplier,
        }


@dataclass
class MovesetResult:
    """Ranking entry for one creature + fast ability + charged ability.

    ``opponent_types`` is set for entries scored against a defending type
    pair and ``None`` for the context-free entries.
    """

    creature_id: int
    fast_id: int
    charged_id: int
    ms_dps: float
    dps: float
    damage_till_faint: float
    restricted_power: float
    is_legacy: bool = False
    fast_casts_per_turn: int = 0
    charged_casts: int = 0
    opponent_types: Optional[Tuple[int, int]] = None

    def metric(self, name: str) -> float:
        return getattr(self, name)

    @property
    def sort_key(self) -> Tuple:
        return (
            self.creature_id,
            self.fast_id,
            self.charged_id,
            self.opponent_types or (0, 0),
        )
