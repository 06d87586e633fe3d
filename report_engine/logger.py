import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from . import settings

PACKAGE_LOGGER = "report_engine"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    log_level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Configures the report engine logger: a minimal console stream for the
    operator plus a rotating ``reports.log`` file with full context.

    Every module logs through ``logging.getLogger(__name__)``, so configuring
    the package logger once in the entry script is enough.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Already configured by an earlier call
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    log_dir = log_dir or settings.BASE_DIR / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / "reports.log",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    # requests logs every connection at INFO through urllib3
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger
