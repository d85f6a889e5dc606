import logging
import logging.handlers
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE_NAME = "moveset_ranker.log"

# Per-record / per-moveset DEBUG output is very chatty on a full dump
_QUIET_LOGGERS = (
    "src.gamemaster_pipeline.extraction",
    "src.combat_engine.combat_simulator",
)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    verbose_records: bool = False,
) -> None:
    """Configure logging for a ranking run.

    Args:
        log_level: Console level name ("DEBUG", "INFO", ...).
        log_dir: Directory for the rotating log file. Defaults to ``logs/``.
        verbose_records: Keep DEBUG output for every decoded record and
            simulated moveset in the log file.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return  # Already configured

    log_dir = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger.setLevel(logging.DEBUG)

    # File handler with rotation (5MB max, keep 3 backups)
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME, maxBytes=5 * 1024 * 1024, backupCount=3
    )
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    if not verbose_records:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "Logging initialized (level=%s, file=%s)", log_level, log_dir / LOG_FILE_NAME
    )
