"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import structlog

from vaultseek.config.models import LoggingConfig, LogOutputConfig
from vaultseek.core.logging import (
    clear_query_id,
    configure_logging,
    get_logger,
    get_query_id,
    set_query_id,
)
from vaultseek.core.progress import suppress_console_logs


def _json_lines(path: Path) -> list[dict[str, object]]:
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestQueryIdCorrelation:
    """Query ID context variable tests."""

    def setup_method(self) -> None:
        clear_query_id()

    def test_given_query_id_when_set_then_can_retrieve(self) -> None:
        """Query ID can be set and retrieved."""
        result = set_query_id("q-123")

        assert result == "q-123"
        assert get_query_id() == "q-123"

    def test_given_no_id_when_set_then_generates_short_hex(self) -> None:
        """Set generates a 12 character hex ID when none is provided."""
        qid = set_query_id()

        assert len(qid) == 12
        int(qid, 16)

    def test_given_two_queries_when_set_then_ids_differ(self) -> None:
        """Successive queries get distinct correlation IDs."""
        first = set_query_id()
        second = set_query_id()

        assert first != second
        assert get_query_id() == second

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        set_query_id("to-clear")

        clear_query_id()

        assert get_query_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_query_id()

    def teardown_method(self) -> None:
        logging.getLogger().handlers.clear()
        clear_query_id()

    def test_given_config_object_when_configure_then_takes_precedence(
        self, tmp_path: Path
    ) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When - config's DEBUG overrides the level="ERROR" param
        configure_logging(config=config, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_multi_output_config_when_configure_then_each_output_filters(
        self, tmp_path: Path
    ) -> None:
        """Multiple outputs receive logs according to their own levels."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_query_id_when_logging_then_lines_carry_it(self, tmp_path: Path) -> None:
        """Every line emitted under a query carries its correlation ID."""
        # Given
        log_file = tmp_path / "q.log"
        configure_logging(
            config=LoggingConfig(
                level="DEBUG",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )
        logger = get_logger("ranker")

        # When
        logger.debug("before")
        qid = set_query_id()
        logger.debug("during", candidates=3)

        # Then
        before, during = _json_lines(log_file)
        assert "query_id" not in before
        assert during["query_id"] == qid
        assert during["logger"] == "ranker"
        assert during["candidates"] == 3

    def test_given_suppressed_console_when_logging_then_file_still_written(
        self, tmp_path: Path
    ) -> None:
        """Progress-bar suppression only silences console handlers."""
        log_file = tmp_path / "s.log"
        configure_logging(
            config=LoggingConfig(
                level="INFO",
                outputs=[
                    LogOutputConfig(format="console", destination="stderr"),
                    LogOutputConfig(format="json", destination=str(log_file)),
                ],
            )
        )

        with suppress_console_logs():
            get_logger().info("while suppressed")

        assert "while suppressed" in log_file.read_text()
