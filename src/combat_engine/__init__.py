from src.combat_engine.combat_simulator import CombatSimulator
from src.combat_engine.models import (
    Ability,
    Creature,
    DamageInfo,
    MovesetResult,
    SimulationParameters,
    TypeChart,
)
from src.combat_engine.ranking import RankingAggregator, RankingResults, ranked

__all__ = [
    "Ability",
    "CombatSimulator",
    "Creature",
    "DamageInfo",
    "MovesetResult",
    "RankingAggregator",
    "RankingResults",
    "SimulationParameters",
    "TypeChart",
    "ranked",
]
