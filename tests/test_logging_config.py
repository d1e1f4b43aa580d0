import logging

from weekplanner.utils.logging_config import setup_logging


class TestSetupLogging:
    """Tests for application logging configuration."""

    def test_repeated_setup_adds_one_handler(self):
        """Importing the app twice must not duplicate log lines."""
        setup_logging()
        count = len(logging.getLogger().handlers)
        setup_logging()
        assert len(logging.getLogger().handlers) == count

    def test_noisy_loggers_quieted(self):
        setup_logging()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
