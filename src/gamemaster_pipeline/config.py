from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"

# Input file names inside the raw data directory
FILE_NAMES = {
    "game_master": "GAME_MASTER",
    "legacy_moves": "legacy_moves.csv",
    "excluded": "excluded_creatures.txt",
}

# Column names expected in the legacy moves CSV
LEGACY_MOVES_COLUMNS = ["Creature", "Ability"]

# Creatures left out of every ranking unless an exclusion file overrides this
DEFAULT_EXCLUDED_CREATURES = frozenset({
    "ARTICUNO",
    "CELEBI",
    "ENTEI",
    "HO_OH",
    "LUGIA",
    "MEW",
    "MEWTWO",
    "MOLTRES",
    "RAIKOU",
    "SUICUNE",
    "ZAPDOS",
})

# Entries kept per attacking-type and per type-pair list in the written report
REPORT_TOP_N = 20
