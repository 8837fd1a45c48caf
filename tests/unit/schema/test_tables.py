# tests/unit/schema/test_tables.py
"""针对 TableSpec -> SQLAlchemy Table 物化与 DDL 渲染的单元测试。"""

import pytest
from sqlalchemy import Integer, MetaData, String, Text

from i18n_behavior.exceptions import ConfigError
from i18n_behavior.schema import (
    ColumnSpec,
    SchemaSplitter,
    TableSpec,
    build_database_tables,
    build_table,
    build_tables,
    render_ddl,
    split_table,
)
from tests.helpers.factories import make_database, make_table


def test_build_tables_creates_linked_pair() -> None:
    metadata = MetaData()
    tables = build_tables(split_table(make_table()), metadata)

    assert set(metadata.tables) == {"product", "product_i18n"}
    assert [c.name for c in tables.base.c] == ["id", "price"]
    assert [c.name for c in tables.translation.primary_key.columns] == ["id", "locale"]
    assert isinstance(tables.translation.c.id.type, Integer)
    assert isinstance(tables.translation.c.name.type, String)
    assert isinstance(tables.translation.c.description.type, Text)
    assert tables.translation.c.locale.type.length == 5
    assert tables.translation.c.locale.nullable is False

    (fk,) = tables.translation.foreign_key_constraints
    assert fk.name == "fk_product_i18n_product"
    assert fk.ondelete == "SET NULL"
    assert fk.onupdate == "CASCADE"
    assert fk.referred_table is tables.base


def test_build_tables_is_idempotent() -> None:
    metadata = MetaData()
    split = split_table(make_table())
    first = build_tables(split, metadata)
    second = build_tables(split, metadata)

    assert first.base is second.base
    assert first.translation is second.translation


def test_owner_and_key_clauses() -> None:
    tables = build_tables(split_table(make_table()), MetaData())

    (owner,) = tables.owner_clause((7,))
    (key,) = tables.key_clause((7,))
    assert owner.left is tables.translation.c.id
    assert key.left is tables.base.c.id


def test_build_database_tables_replaces_existing_translation_table() -> None:
    """symfony 兼容模式下，既有翻译表只生成一次（拆分后的版本）。"""
    base = make_table(
        columns=(
            ColumnSpec(name="id", type="INTEGER", primary_key=True, autoincrement=True),
            ColumnSpec(name="price", type="FLOAT"),
        ),
        parameters={},
    )
    existing = TableSpec(
        name="product_i18n",
        columns=(
            ColumnSpec(name="id", type="INTEGER", primary_key=True),
            ColumnSpec(name="culture", type="VARCHAR", size=7, primary_key=True),
            ColumnSpec(name="name", type="VARCHAR", size=255),
        ),
    )
    plain = make_table(name="category", i18n=False)
    database = make_database(base, existing, plain)
    metadata = MetaData()

    tables = build_database_tables(database, SchemaSplitter().split_database(database), metadata)

    assert list(tables) == ["product", "product_i18n", "category"]
    assert tables["product_i18n"].foreign_key_constraints
    assert [c.name for c in tables["product_i18n"].primary_key.columns] == ["id", "culture"]


def test_render_ddl_orders_tables_by_dependency() -> None:
    metadata = MetaData()
    build_tables(split_table(make_table()), metadata)

    statements = render_ddl(metadata)

    assert statements[0].startswith("CREATE TABLE product ")
    assert statements[1].startswith("CREATE TABLE product_i18n ")
    assert "PRIMARY KEY (id, locale)" in statements[1]
    assert "ON DELETE SET NULL" in statements[1]
    assert "ON UPDATE CASCADE" in statements[1]
    assert "DEFAULT 'en_US'" in statements[1]


def test_autoincrement_only_for_single_integer_key() -> None:
    """单一整数自增主键在 SQLite 上不复用已删除的值。"""
    metadata = MetaData()
    build_tables(split_table(make_table()), metadata)
    build_table(
        make_table(
            name="tag",
            columns=(ColumnSpec(name="code", type="VARCHAR", size=8, primary_key=True),),
            i18n=False,
        ),
        metadata,
    )

    statements = {s.split()[2]: s for s in render_ddl(metadata)}

    assert "AUTOINCREMENT" in statements["product"]
    assert "AUTOINCREMENT" not in statements["product_i18n"]
    assert "AUTOINCREMENT" not in statements["tag"]


def test_render_ddl_postgresql() -> None:
    metadata = MetaData()
    build_tables(split_table(make_table()), metadata)

    statements = render_ddl(metadata, "postgresql")

    assert "SERIAL" in statements[0]
    assert "AUTOINCREMENT" not in statements[0]
    assert "VARCHAR(5)" in statements[1]


def test_render_ddl_unknown_dialect() -> None:
    with pytest.raises(ConfigError, match="不支持的 SQL 方言"):
        render_ddl(MetaData(), "oracle")  # type: ignore[arg-type]
