# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

from collections.abc import Generator
from typing import Any

import pytest
from pytest_mock import MockerFixture
from rich.console import Console
from sqlalchemy import Engine, MetaData
from sqlalchemy.orm import Session

from i18n_behavior.config import DatabaseSettings, I18nSettings
from i18n_behavior.persistence import (
    SqlAlchemyTranslatableRepository,
    create_db_engine,
    create_sessionmaker,
)
from i18n_behavior.schema import I18nSplit, I18nTables, TableSpec, build_tables, split_table
from tests.helpers.factories import make_table


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        kwargs.setdefault("width", 200)
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture
def product_table() -> TableSpec:
    return make_table()


@pytest.fixture
def product_split(product_table: TableSpec) -> I18nSplit:
    return split_table(product_table)


@pytest.fixture
def metadata() -> MetaData:
    return MetaData()


@pytest.fixture
def product_tables(product_split: I18nSplit, metadata: MetaData) -> I18nTables:
    return build_tables(product_split, metadata)


@pytest.fixture
def engine(metadata: MetaData, product_tables: I18nTables) -> Generator[Engine, None, None]:
    """内存 SQLite 引擎，已创建 product 与 product_i18n 两张表。"""
    settings = I18nSettings(database=DatabaseSettings(url="sqlite:///:memory:"))
    engine = create_db_engine(settings)
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    factory = create_sessionmaker(engine)
    with factory() as session:
        yield session


@pytest.fixture
def repository(session: Session, product_tables: I18nTables) -> SqlAlchemyTranslatableRepository:
    return SqlAlchemyTranslatableRepository(session, product_tables)
