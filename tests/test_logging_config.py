"""
Logging Configuration Tests - Ngage Judging Engine
tests/test_logging_config.py
"""

import json
import logging

import structlog

from ngage_judging.config import Settings
from ngage_judging.logging_config import configure_logging


class TestConfigureLogging:

    def teardown_method(self):
        structlog.reset_defaults()
        logging.getLogger().setLevel(logging.WARNING)

    def test_json_events(self, capsys):
        """Test that events render as JSON with their keyword context."""
        configure_logging(Settings(_env_file=None, LOG_FORMAT="json", LOG_LEVEL="INFO"))
        structlog.get_logger("ngage_judging.test").info("leaderboard_built", event_id="evt_1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "leaderboard_built"
        assert record["event_id"] == "evt_1"
        assert record["level"] == "info"

    def test_level_applied(self):
        configure_logging(Settings(_env_file=None, LOG_LEVEL="WARNING"))
        assert logging.getLogger().level == logging.WARNING

    def test_console_renderer(self):
        configure_logging(Settings(_env_file=None, LOG_FORMAT="console"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
