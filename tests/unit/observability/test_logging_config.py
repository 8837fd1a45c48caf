# tests/unit/observability/test_logging_config.py
"""针对日志配置与 Rich 面板渲染器的单元测试。"""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from i18n_behavior.config import I18nSettings, LoggingSettings
from i18n_behavior.observability.logging_config import (
    APP_LOGGER_NAME,
    HybridPanelRenderer,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def test_panel_renderer_includes_event_and_fields() -> None:
    renderer = HybridPanelRenderer(show_timestamp=False)
    output = renderer(
        None,
        "info",
        {"event": "记录已保存", "level": "info", "logger": "i18n_behavior.test", "table": "product"},
    )

    assert "记录已保存" in output
    assert "INFO" in output
    assert "i18n_behavior.test" in output
    assert "table" in output and "'product'" in output


def test_panel_renderer_skips_empty_event() -> None:
    assert HybridPanelRenderer()(None, "info", {"event": "  "}) == ""


def test_setup_logging_sets_levels() -> None:
    setup_logging(log_level="DEBUG", log_format="console")

    assert logging.getLogger(APP_LOGGER_NAME).level == logging.DEBUG
    assert logging.getLogger().level == logging.WARNING


def test_json_format_emits_structured_lines(capsys: pytest.CaptureFixture[str]) -> None:
    settings = I18nSettings(logging=LoggingSettings(level="INFO", format="json"))
    setup_logging_from_config(settings, service="i18n-test")

    structlog.get_logger(f"{APP_LOGGER_NAME}.test").info("拆分完成", table="product")

    lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    data = json.loads(lines[-1])
    assert data["event"] == "拆分完成"
    assert data["table"] == "product"
    assert data["service"] == "i18n-test"
    assert data["level"] == "info"
