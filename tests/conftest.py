"""Shared fixtures for the ranking test suite."""

import pytest

from src.combat_engine.combat_simulator import CombatSimulator
from src.combat_engine.models import SimulationParameters
from src.gamemaster_pipeline.config import DEFAULT_EXCLUDED_CREATURES
from src.gamemaster_pipeline.extraction import RecordExtractor

from wire_builder import (
    ability_template,
    creature_template,
    game_master,
    item_template,
    type_template,
    varint_field,
)

# Type ids used by the sample game master
NORMAL, FIRE, WATER = 1, 2, 3


# ------------------------------------------------------------------
# Lightweight factories – cheap to construct, no I/O
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def simulator():
    return CombatSimulator()


@pytest.fixture(scope="module")
def extractor():
    return RecordExtractor(excluded_creatures=DEFAULT_EXCLUDED_CREATURES)


@pytest.fixture
def scenario_params():
    """100-second battle against an opponent striking every 2.5 seconds."""
    return SimulationParameters(strike_interval=2.5, duration=100.0)


# ------------------------------------------------------------------
# Synthetic game master dumps
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def single_creature_dump():
    """One type, one fast + one charged ability, one creature."""
    return game_master(
        type_template("NORMAL", NORMAL, [1.0]),
        ability_template(1, "TACKLE", type_id=NORMAL, power=10.0,
                         duration_ms=1000, energy=10),
        ability_template(2, "BODY_SLAM", type_id=NORMAL, power=50.0,
                         duration_ms=2000, energy=-50),
        creature_template(1, "TESTMON", attack=100, defense=100, stamina=100,
                          types=(NORMAL,), fast=(1,), charged=(2,)),
    )


@pytest.fixture(scope="module")
def sample_dump():
    """Three types, six abilities, four creatures (one excluded, one with
    a dangling ability id) plus out-of-scope templates."""
    return game_master(
        type_template("NORMAL", NORMAL, [1.0, 1.0, 1.0]),
        type_template("FIRE", FIRE, [1.0, 0.5, 0.5]),
        type_template("WATER", WATER, [1.0, 2.0, 0.5]),
        ability_template(1, "TACKLE", type_id=NORMAL, power=10.0,
                         duration_ms=1000, energy=10),
        ability_template(2, "EMBER", type_id=FIRE, power=10.0,
                         duration_ms=1000, energy=10),
        ability_template(3, "WATER_GUN", type_id=WATER, power=6.0,
                         duration_ms=500, energy=7),
        ability_template(10, "BODY_SLAM", type_id=NORMAL, power=50.0,
                         duration_ms=2000, energy=-50),
        ability_template(11, "FLAMETHROWER", type_id=FIRE, power=70.0,
                         duration_ms=2900, energy=-50),
        ability_template(12, "HYDRO_PUMP", type_id=WATER, power=90.0,
                         duration_ms=3300, energy=-100),
        creature_template(4, "CHARMANDER", attack=128, defense=108, stamina=78,
                          types=(FIRE,), fast=(2, 1), charged=(11, 10)),
        creature_template(7, "SQUIRTLE", attack=112, defense=142, stamina=88,
                          types=(WATER,), fast=(3, 1), charged=(12, 10)),
        creature_template(19, "RATTATA", attack=103, defense=70, stamina=60,
                          types=(NORMAL,), fast=(1,), charged=(10, 99)),
        creature_template(144, "ARTICUNO", attack=192, defense=249, stamina=180,
                          types=(WATER, NORMAL), fast=(3,), charged=(12,)),
        item_template("SPAWN_V0001_POKEMON_BULBASAUR", 2, varint_field(1, 5)),
        item_template("BADGE_BATTLE_ATTACK_WON", 4, varint_field(3, 1)),
        preamble=varint_field(1, 42),
    )


@pytest.fixture(scope="module")
def sample_data(extractor, sample_dump):
    return extractor.extract(sample_dump)
