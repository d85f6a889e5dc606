"""Tests for src.gamemaster_pipeline.reporting."""

import json

import pytest

from src.combat_engine.models import SimulationParameters
from src.combat_engine.ranking import METRICS, RankingAggregator
from src.gamemaster_pipeline.reporting import (
    ABILITY_COLUMNS,
    CREATURE_COLUMNS,
    MOVESET_COLUMNS,
    TYPE_CHART_COLUMNS,
    RankingReportWriter,
)

PARAMS = SimulationParameters(strike_interval=2.5, duration=100.0)


@pytest.fixture(scope="module")
def results(sample_data):
    return RankingAggregator(
        sample_data.creatures, sample_data.abilities, sample_data.type_chart, PARAMS
    ).rank()


@pytest.fixture(scope="module")
def writer(sample_data):
    return RankingReportWriter(sample_data, top_n=3)


@pytest.fixture(scope="module")
def report(writer, results):
    return writer.build_report(results, PARAMS, "GAME_MASTER")


# ── Tables ───────────────────────────────────────────────────────────


class TestFrames:
    def test_creatures_sorted_by_max_cp(self, writer):
        df = writer.creatures_frame()
        assert list(df.columns) == CREATURE_COLUMNS
        assert list(df["max_cp"]) == sorted(df["max_cp"], reverse=True)

    def test_creature_names_resolved(self, writer):
        df = writer.creatures_frame().set_index("name")
        assert df.loc["CHARMANDER", "types"] == "FIRE"
        assert df.loc["SQUIRTLE", "fast_abilities"] == ["WATER_GUN", "TACKLE"]
        # Dangling ability id falls back to the number
        assert df.loc["RATTATA", "charged_abilities"] == ["BODY_SLAM", "99"]

    def test_abilities_sorted_by_name(self, writer):
        df = writer.abilities_frame()
        assert list(df.columns) == ABILITY_COLUMNS
        assert list(df["name"]) == sorted(df["name"])

    def test_type_chart_lists_non_neutral_entries(self, writer):
        df = writer.type_chart_frame()
        assert list(df.columns) == TYPE_CHART_COLUMNS
        entries = list(zip(df["attacker"], df["defender"], df["multiplier"]))
        assert entries == [
            ("FIRE", "FIRE", 0.5),
            ("FIRE", "WATER", 0.5),
            ("WATER", "FIRE", 2.0),
            ("WATER", "WATER", 0.5),
        ]

    def test_movesets_frame_names(self, writer, results):
        df = writer.movesets_frame(results.movesets)
        assert list(df.columns) == MOVESET_COLUMNS
        assert len(df) == len(results.movesets)
        assert set(df["creature"]) == {"CHARMANDER", "SQUIRTLE", "RATTATA"}

    def test_empty_movesets_frame(self, writer):
        df = writer.movesets_frame([])
        assert df.empty
        assert list(df.columns) == MOVESET_COLUMNS


# ── Report ───────────────────────────────────────────────────────────


class TestBuildReport:
    def test_top_level_keys(self, report):
        assert set(report) == {
            "metadata", "creatures", "creature_rankings", "abilities",
            "type_chart", "rankings", "per_creature", "by_attack_type", "counters",
        }

    def test_metadata(self, report):
        meta = report["metadata"]
        assert meta["version"] == "1.0"
        assert meta["source"] == "GAME_MASTER"
        assert meta["simulation"]["strike_interval"] == 2.5
        assert meta["total_creatures"] == 3
        assert meta["total_abilities"] == 6
        assert meta["total_types"] == 3
        assert meta["total_movesets"] == 9
        assert meta["rejected_movesets"] == 1

    def test_all_metrics_ranked(self, report):
        assert set(report["rankings"]) == set(METRICS)
        for metric, rows in report["rankings"].items():
            values = [row[metric] for row in rows]
            assert values == sorted(values, reverse=True)

    def test_creature_rankings(self, report):
        assert set(report["creature_rankings"]) == {"max_cp", "tankiness", "strength"}
        tank = report["creature_rankings"]["tankiness"]
        assert tank[0]["name"] == "SQUIRTLE"

    def test_per_creature_keyed_by_name(self, report):
        assert set(report["per_creature"]) == {"CHARMANDER", "SQUIRTLE", "RATTATA"}
        assert len(report["per_creature"]["RATTATA"]) == 1

    def test_type_chart_section(self, report):
        assert len(report["type_chart"]) == 4
        assert report["type_chart"][2] == {
            "attacker_id": 3, "attacker": "WATER",
            "defender_id": 2, "defender": "FIRE", "multiplier": 2.0,
        }

    def test_attack_types_ranked_by_both_metrics(self, report):
        assert set(report["by_attack_type"]) == {"NORMAL", "FIRE", "WATER"}
        for entry in report["by_attack_type"].values():
            assert set(entry) == {"dps", "damage_till_faint"}
            for metric, rows in entry.items():
                assert len(rows) <= 3
                values = [row[metric] for row in rows]
                assert values == sorted(values, reverse=True)

    def test_attack_type_lists_truncated_to_top_n(self, report):
        # NORMAL: TACKLE and BODY_SLAM parts from all three creatures
        assert len(report["by_attack_type"]["NORMAL"]["dps"]) == 3
        assert len(report["by_attack_type"]["NORMAL"]["damage_till_faint"]) == 3

    def test_counters_keyed_by_type_pair(self, report):
        assert "NORMAL-NORMAL" in report["counters"]
        assert "FIRE-WATER" in report["counters"]
        assert "WATER-FIRE" not in report["counters"]
        entry = report["counters"]["FIRE-FIRE"]
        assert set(entry) == {"dps", "damage_till_faint"}
        assert len(entry["dps"]) == 3
        assert entry["dps"][0]["creature"] == "SQUIRTLE"

    def test_json_serialisable(self, report):
        json.dumps(report)


# ── Writing ──────────────────────────────────────────────────────────


class TestWrite:
    def test_writes_file_and_latest_link(self, tmp_path, writer, results):
        output = writer.write(results, PARAMS, tmp_path, "GAME_MASTER")
        assert output == tmp_path / "rankings_game_master.json"
        assert output.exists()

        latest = tmp_path / "rankings_latest.json"
        assert latest.is_symlink()
        with open(latest) as f:
            assert json.load(f)["metadata"]["total_movesets"] == 9

    def test_rewrite_replaces_link(self, tmp_path, writer, results):
        writer.write(results, PARAMS, tmp_path, "GAME_MASTER")
        writer.write(results, PARAMS, tmp_path, "OTHER_DUMP.bin")
        latest = tmp_path / "rankings_latest.json"
        assert latest.resolve() == (tmp_path / "rankings_other_dump.json").resolve()
