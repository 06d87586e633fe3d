import logging

from report_engine.logger import setup_logger


def test_setup_logger_writes_rotating_file(tmp_path):
    logger = setup_logger("report_engine.test_logger", log_dir=tmp_path)
    try:
        assert len(logger.handlers) == 2
        # A second call does not stack handlers
        assert setup_logger("report_engine.test_logger", log_dir=tmp_path) is logger
        assert len(logger.handlers) == 2

        logger.info("✅ Export saved")
        for handler in logger.handlers:
            handler.flush()
        assert "INFO - ✅ Export saved" in (tmp_path / "reports.log").read_text(encoding="utf-8")
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
