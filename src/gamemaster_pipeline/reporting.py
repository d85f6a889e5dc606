"""JSON report generation for a ranking run.

Turns the record tables and :class:`RankingResults` into pandas tables with
human-readable names, then writes a single JSON document:

- creature stats (sorted by max CP) and creature rankings
- ability stats (sorted by name) and the non-neutral type chart entries
- the four global moveset rankings
- best attackers per attacking type and best counters per type pair,
  ranked by DPS and by damage till faint, truncated to ``top_n`` entries
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd

from src.combat_engine.models import MovesetResult, SimulationParameters
from src.combat_engine.ranking import METRICS, RankingResults, ranked
from src.gamemaster_pipeline.config import REPORT_TOP_N
from src.gamemaster_pipeline.extraction import GameMasterData

logger = logging.getLogger(__name__)

REPORT_VERSION = "1.0"

MOVESET_COLUMNS = [
    "creature", "fast", "charged",
    "ms_dps", "dps", "damage_till_faint", "restricted_power",
    "legacy", "fast_casts_per_turn", "charged_casts",
]

CREATURE_COLUMNS = [
    "id", "name", "types", "attack", "defense", "stamina",
    "max_cp", "tankiness", "strength", "fast_abilities", "charged_abilities",
]

ABILITY_COLUMNS = [
    "id", "name", "type", "power", "energy", "duration", "eps", "dps", "dpe",
]

TYPE_CHART_COLUMNS = ["attacker_id", "attacker", "defender_id", "defender", "multiplier"]

# Metrics reported for the per-type and per-type-pair lists
GROUPED_METRICS = ("dps", "damage_till_faint")

_FLOAT_DIGITS = 4


class RankingReportWriter:
    """Formats ranking results for the JSON report."""

    def __init__(self, data: GameMasterData, top_n: int = REPORT_TOP_N):
        self.data = data
        self.top_n = top_n

    # ------------------------------------------------------------------
    # Name lookups
    # ------------------------------------------------------------------
    def _creature_name(self, creature_id: int) -> str:
        creature = self.data.creatures.get(creature_id)
        return creature.name if creature else str(creature_id)

    def _ability_name(self, ability_id: int) -> str:
        ability = self.data.abilities.get(ability_id)
        return ability.name if ability else str(ability_id)

    def _type_name(self, type_id: int) -> str:
        return self.data.type_chart.short_name(type_id)

    def _type_pair_name(self, first: int, second: int) -> str:
        return f"{self._type_name(first)}-{self._type_name(second)}"

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------
    def creatures_frame(self) -> pd.DataFrame:
        """One row per creature, sorted by max CP (descending)."""
        rows = []
        for creature in self.data.creatures.values():
            type_names = [self._type_name(t) for t in dict.fromkeys(creature.types)]
            rows.append({
                "id": creature.creature_id,
                "name": creature.name,
                "types": "/".join(type_names),
                "attack": creature.attack,
                "defense": creature.defense,
                "stamina": creature.stamina,
                "max_cp": creature.max_cp,
                "tankiness": creature.tankiness,
                "strength": creature.strength,
                "fast_abilities": [self._ability_name(a) for a in creature.fast_abilities],
                "charged_abilities": [
                    self._ability_name(a) for a in creature.charged_abilities
                ],
            })

        df = pd.DataFrame(rows, columns=CREATURE_COLUMNS)
        return self._sorted(df, "max_cp")

    def abilities_frame(self) -> pd.DataFrame:
        """One row per ability, sorted by name."""
        rows = [
            {
                "id": ability.ability_id,
                "name": ability.name,
                "type": self._type_name(ability.type_id),
                "power": ability.power,
                "energy": ability.energy_delta,
                "duration": ability.duration,
                "eps": ability.eps,
                "dps": ability.dps,
                "dpe": ability.dpe,
            }
            for ability in self.data.abilities.values()
        ]
        df = pd.DataFrame(rows, columns=ABILITY_COLUMNS)
        return df.sort_values(["name", "id"], kind="mergesort").reset_index(drop=True)

    def type_chart_frame(self) -> pd.DataFrame:
        """Every non-neutral effectiveness entry, by attacker then defender id."""
        chart = self.data.type_chart
        rows = [
            {
                "attacker_id": attacking,
                "attacker": self._type_name(attacking),
                "defender_id": defending,
                "defender": self._type_name(defending),
                "multiplier": multiplier,
            }
            for attacking, row in sorted(chart.effectiveness.items())
            for defending, multiplier in sorted(row.items())
            if multiplier != 1.0
        ]
        return pd.DataFrame(rows, columns=TYPE_CHART_COLUMNS)

    def movesets_frame(self, entries: Iterable[MovesetResult]) -> pd.DataFrame:
        """Moveset results with names resolved, in the order given."""
        rows = [
            {
                "creature": self._creature_name(r.creature_id),
                "fast": self._ability_name(r.fast_id),
                "charged": self._ability_name(r.charged_id),
                "ms_dps": r.ms_dps,
                "dps": r.dps,
                "damage_till_faint": r.damage_till_faint,
                "restricted_power": r.restricted_power,
                "legacy": r.is_legacy,
                "fast_casts_per_turn": r.fast_casts_per_turn,
                "charged_casts": r.charged_casts,
            }
            for r in entries
        ]
        return pd.DataFrame(rows, columns=MOVESET_COLUMNS)

    @staticmethod
    def _sorted(df: pd.DataFrame, metric: str) -> pd.DataFrame:
        return df.sort_values(
            [metric, "id"], ascending=[False, True], kind="mergesort"
        ).reset_index(drop=True)

    def creature_rankings(self, creatures: pd.DataFrame) -> Dict[str, List[Dict]]:
        """Creature names ranked by max CP, tankiness and strength."""
        rankings = {}
        for metric in ("max_cp", "tankiness", "strength"):
            ordered = self._sorted(creatures, metric)[["name", metric]]
            rankings[metric] = self._records(ordered)
        return rankings

    def _top_by_metric(self, entries: List[MovesetResult]) -> Dict[str, List[Dict]]:
        """The best ``top_n`` entries under each grouped metric."""
        return {
            metric: self._records(
                self.movesets_frame(ranked(entries, metric)[: self.top_n])
            )
            for metric in GROUPED_METRICS
        }

    @staticmethod
    def _records(df: pd.DataFrame) -> List[Dict]:
        return df.round(_FLOAT_DIGITS).to_dict(orient="records")

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------
    def build_report(
        self,
        results: RankingResults,
        params: SimulationParameters,
        source_name: str,
    ) -> Dict:
        """Assemble the full JSON-serialisable report."""
        creatures = self.creatures_frame()

        rankings = {
            metric: self._records(self.movesets_frame(ranked(results.movesets, metric)))
            for metric in METRICS
        }

        per_creature = {
            self._creature_name(cid): self._records(self.movesets_frame(entries))
            for cid, entries in sorted(results.per_creature.items())
            if entries
        }

        by_attack_type = {
            self._type_name(type_id): self._top_by_metric(entries)
            for type_id, entries in sorted(results.by_attack_type.items())
        }

        counters = {
            self._type_pair_name(first, second): self._top_by_metric(entries)
            for (first, second), entries in sorted(results.counters.items())
        }

        return {
            "metadata": {
                "version": REPORT_VERSION,
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "source": source_name,
                "simulation": params.to_dict(),
                "total_creatures": len(self.data.creatures),
                "total_abilities": len(self.data.abilities),
                "total_types": len(self.data.type_chart.effectiveness),
                "total_movesets": len(results.movesets),
                "rejected_movesets": results.rejected,
                "excluded_movesets": results.excluded,
            },
            "creatures": self._records(creatures),
            "creature_rankings": self.creature_rankings(creatures),
            "abilities": self._records(self.abilities_frame()),
            "type_chart": self._records(self.type_chart_frame()),
            "rankings": rankings,
            "per_creature": per_creature,
            "by_attack_type": by_attack_type,
            "counters": counters,
        }

    def write(
        self,
        results: RankingResults,
        params: SimulationParameters,
        output_dir: Path,
        source_name: str,
    ) -> Path:
        """Write the report and refresh the ``rankings_latest.json`` link.

        Returns:
            Path to the written JSON file.
        """
        report = self.build_report(results, params, source_name)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        stem = Path(source_name).stem or "game_master"
        output_file = output_dir / f"rankings_{stem.lower()}.json"

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

        latest_link = output_dir / "rankings_latest.json"
        if latest_link.exists() or latest_link.is_symlink():
            latest_link.unlink()
        latest_link.symlink_to(output_file.name)

        logger.info(
            "Wrote %s (%d movesets, %d type-pair buckets)",
            output_file, len(results.movesets), len(results.counters),
        )
        return output_file
