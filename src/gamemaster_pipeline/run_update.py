"""Run the complete game master ranking pipeline.

Usage:
    python -m src.gamemaster_pipeline.run_update [data_dir] [output_dir]

Examples:
    python -m src.gamemaster_pipeline.run_update
    python -m src.gamemaster_pipeline.run_update /path/to/raw /path/to/out
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from src.combat_engine.models import SimulationParameters
from src.combat_engine.ranking import RankingAggregator
from src.gamemaster_pipeline.config import FILE_NAMES, PROCESSED_DATA_DIR, RAW_DATA_DIR
from src.gamemaster_pipeline.extraction import RecordExtractor
from src.gamemaster_pipeline.ingestion import GameMasterIngester
from src.gamemaster_pipeline.legacy_moves import apply_legacy_moves
from src.gamemaster_pipeline.reporting import RankingReportWriter
from src.logging_config import setup_logging

logger = logging.getLogger(__name__)


def run_pipeline(
    data_dir: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    params: Optional[SimulationParameters] = None,
) -> Path:
    """Run the complete ranking pipeline.

    Args:
        data_dir: Directory holding the game master dump and the optional
            legacy moves / exclusion lists. Defaults to ``data/raw/``.
        output_dir: Directory for JSON output.
            Defaults to ``data/processed/``.
        params: Simulation settings. Defaults to the values in
            :mod:`src.combat_engine.config`.

    Returns:
        Path to the generated JSON file.

    Raises:
        FileNotFoundError: If the data directory doesn't exist.
        IngestionError: If an input file cannot be read.
        DecodeError: If the game master envelope is corrupt.
    """
    if data_dir is None:
        data_dir = RAW_DATA_DIR
    if output_dir is None:
        output_dir = PROCESSED_DATA_DIR
    if params is None:
        params = SimulationParameters()

    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found: {data_dir}")

    logger.info("Starting ranking pipeline (data: %s)", data_dir)

    # 1. Ingest
    logger.info("Step 1/5: Reading input files...")
    inputs = GameMasterIngester(data_dir).read_all()

    # 2. Decode and extract records
    logger.info("Step 2/5: Decoding game master...")
    extractor = RecordExtractor(excluded_creatures=inputs["excluded"])
    data = extractor.extract(inputs["game_master"])

    # 3. Legacy moves
    logger.info("Step 3/5: Applying legacy moves...")
    apply_legacy_moves(data, inputs["legacy_moves"])

    # 4. Simulate and rank
    logger.info("Step 4/5: Simulating movesets...")
    aggregator = RankingAggregator(
        data.creatures, data.abilities, data.type_chart, params
    )
    results = aggregator.rank()

    # 5. Output JSON
    logger.info("Step 5/5: Generating JSON output...")
    writer = RankingReportWriter(data)
    output_file = writer.write(
        results, params, Path(output_dir), FILE_NAMES["game_master"]
    )

    logger.info("Pipeline complete! Output: %s", output_file)
    logger.info(
        "  %d creatures, %d abilities, %d ranked movesets",
        len(data.creatures), len(data.abilities), len(results.movesets),
    )
    return output_file


if __name__ == "__main__":
    setup_logging()

    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    output_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else None

    try:
        output = run_pipeline(data_dir, output_dir)
        print(f"Pipeline complete: {output}")
    except Exception:
        logger.exception("Pipeline failed")
        sys.exit(1)
