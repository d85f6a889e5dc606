"""Input file loading for a ranking run.

Three inputs live side by side in the raw data directory:
- the binary game master dump (required)
- a legacy moves CSV of creature/ability name pairs (optional)
- an excluded creatures list, one name per line, ``#`` comments (optional)
"""

import logging
from pathlib import Path
from typing import FrozenSet, List, Tuple

import pandas as pd

from src.gamemaster_pipeline.classification import normalize_name
from src.gamemaster_pipeline.config import (
    DEFAULT_EXCLUDED_CREATURES,
    FILE_NAMES,
    LEGACY_MOVES_COLUMNS,
)

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Raised when an input file cannot be read."""


class GameMasterIngester:
    """Reads the game master dump and its companion lists from *data_dir*."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path(self, file_key: str) -> Path:
        return self.data_dir / FILE_NAMES[file_key]

    def _resolve_path(self, file_key: str) -> Path:
        """Build the full file path for a given file key, raising if missing."""
        filepath = self._path(file_key)
        if not filepath.exists():
            raise FileNotFoundError(f"Expected file not found: {filepath}")
        return filepath

    # ------------------------------------------------------------------
    # Game master
    # ------------------------------------------------------------------
    def read_game_master(self) -> bytes:
        """Load the whole game master dump into memory."""
        filepath = self._resolve_path("game_master")
        logger.info("Reading game master: %s", filepath.name)
        data = filepath.read_bytes()
        logger.info("Loaded %d bytes", len(data))
        return data

    # ------------------------------------------------------------------
    # Legacy moves
    # ------------------------------------------------------------------
    def read_legacy_moves(self) -> List[Tuple[str, str]]:
        """Read (creature name, ability name) pairs.

        Names are normalized to template spelling (``Dragon Breath`` ->
        ``DRAGON_BREATH``). Rows with a blank name are dropped. A missing
        file means no legacy moves.
        """
        filepath = self._path("legacy_moves")
        if not filepath.exists():
            logger.info("No legacy moves file at %s", filepath)
            return []

        logger.info("Reading legacy moves: %s", filepath.name)
        df = pd.read_csv(filepath, quotechar='"', dtype=str, skipinitialspace=True)

        missing = set(LEGACY_MOVES_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Legacy moves file missing columns: {sorted(missing)}")

        for col in LEGACY_MOVES_COLUMNS:
            df[col] = df[col].apply(normalize_name)
        df = df.dropna(subset=LEGACY_MOVES_COLUMNS).reset_index(drop=True)

        pairs = list(zip(df["Creature"], df["Ability"]))
        logger.info("Loaded %d legacy moves", len(pairs))
        return pairs

    # ------------------------------------------------------------------
    # Excluded creatures
    # ------------------------------------------------------------------
    def read_excluded_creatures(self) -> FrozenSet[str]:
        """Read the excluded creature names, falling back to the defaults."""
        filepath = self._path("excluded")
        if not filepath.exists():
            logger.info(
                "No exclusion file at %s, using %d default exclusions",
                filepath, len(DEFAULT_EXCLUDED_CREATURES),
            )
            return DEFAULT_EXCLUDED_CREATURES

        logger.info("Reading excluded creatures: %s", filepath.name)
        names = set()
        for line in filepath.read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0]
            name = normalize_name(line)
            if name:
                names.add(name)
        logger.info("Loaded %d excluded creatures", len(names))
        return frozenset(names)

    def read_all(self) -> dict:
        """Read all three inputs.

        Returns:
            dict with keys: 'game_master', 'legacy_moves', 'excluded'

        Raises:
            IngestionError: if any file cannot be read.
        """
        try:
            return {
                "game_master": self.read_game_master(),
                "legacy_moves": self.read_legacy_moves(),
                "excluded": self.read_excluded_creatures(),
            }
        except Exception as e:
            raise IngestionError(f"Failed to read input files: {e}") from e
