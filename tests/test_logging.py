"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

from ordinal.core.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers, root.level = handlers, level


class TestLoggingConfig:
    def test_get_logger_returns_bound_logger(self) -> None:
        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        get_logger("test").info("list_registered", table="phones")

        line = capsys.readouterr().out.strip().split("\n")[-1]
        data = json.loads(line)
        assert data["event"] == "list_registered"
        assert data["table"] == "phones"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=False)
        get_logger("test").info("list_registered", table="phones")

        out = capsys.readouterr().out
        assert "list_registered" in out
        assert not out.strip().startswith("{")

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="INFO")
        get_logger("test").debug("position_changed")
        assert "position_changed" not in capsys.readouterr().out

    def test_sqlalchemy_echo_is_quieted(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_level_name_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="LOUD"):
            configure_logging(level="LOUD")

    def test_stdlib_loggers_share_the_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        logging.getLogger("plain").warning("from stdlib")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"


class TestOperationLogging:
    def test_scope_fallback_warns(self, capsys: pytest.CaptureFixture[str]) -> None:
        from types import SimpleNamespace

        from sqlalchemy import Column, Integer, MetaData, Table

        from ordinal.core.scope import FieldEquality, resolve_scope

        configure_logging(json_output=True)
        table = Table("t", MetaData(), Column("id", Integer, primary_key=True))
        resolve_scope(SimpleNamespace(), FieldEquality(field="owner"), table)

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["event"] == "scope_fallback"
        assert data["level"] == "warning"
        assert data["field"] == "owner"
