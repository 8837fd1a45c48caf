# tests/integration/cli/test_cli.py
"""针对 i18n-behavior 命令行工具的集成测试。"""

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from i18n_behavior.cli.main import app
from tests.helpers.factories import make_database, make_table

runner = CliRunner()
ENV = {"I18N_LOGGING__LEVEL": "WARNING"}


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


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    path = tmp_path / "schema.json"
    path.write_text(
        make_database(make_table(), make_table(name="category", i18n=False)).model_dump_json(),
        encoding="utf-8",
    )
    return path


def test_split_command_shows_partition(schema_file: Path) -> None:
    result = runner.invoke(app, ["split", str(schema_file)], env=ENV)

    assert result.exit_code == 0, result.output
    assert "product_i18n" in result.output
    assert "翻译表" in result.output
    assert "SET NULL" in result.output


def test_ddl_command_renders_all_tables(schema_file: Path) -> None:
    result = runner.invoke(app, ["ddl", str(schema_file), "--dialect", "postgresql"], env=ENV)

    assert result.exit_code == 0, result.output
    assert "CREATE TABLE product " in result.output
    assert "CREATE TABLE product_i18n " in result.output
    assert "CREATE TABLE category " in result.output
    assert "ON DELETE SET NULL" in result.output


def test_ddl_command_rejects_unknown_dialect(schema_file: Path) -> None:
    result = runner.invoke(app, ["ddl", str(schema_file), "-d", "oracle"], env=ENV)

    assert result.exit_code == 1
    assert "不支持的 SQL 方言" in result.output


def test_methods_command_lists_signatures(schema_file: Path) -> None:
    result = runner.invoke(app, ["methods", str(schema_file)], env=ENV)

    assert result.exit_code == 0, result.output
    assert "join_with_i18n(" in result.output
    assert "get_translation(" in result.output


def test_invalid_configuration_exits_with_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text(
        make_database(make_table(parameters={"i18n_columns": "missing"})).model_dump_json(),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["split", str(path)], env=ENV)

    assert result.exit_code == 1
    assert "拆分失败" in result.output


def test_malformed_schema_file(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tables": [{"name": "x", "columns": [{"name": "a", "type": "GEOMETRY"}]}]}))

    result = runner.invoke(app, ["split", str(path)], env=ENV)

    assert result.exit_code == 1
    assert "格式错误" in result.output
