# tests/helpers/factories.py
"""
提供用于创建一致、可预测的测试数据的工厂函数。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from i18n_behavior.schema.types import ColumnSpec, DatabaseSpec, TableSpec

# ---- 全局共享的、可预测的常量 ----
TEST_DEFAULT_LOCALE = "en_US"
TEST_OTHER_LOCALE = "fr_FR"


def product_columns() -> tuple[ColumnSpec, ...]:
    return (
        ColumnSpec(name="id", type="INTEGER", primary_key=True, autoincrement=True),
        ColumnSpec(name="price", type="FLOAT"),
        ColumnSpec(name="name", type="VARCHAR", size=255),
        ColumnSpec(name="description", type="LONGVARCHAR"),
    )


def make_table(
    *,
    name: str = "product",
    columns: tuple[ColumnSpec, ...] | None = None,
    parameters: Mapping[str, Any] | None = None,
    i18n: bool = True,
    **extra: Any,
) -> TableSpec:
    """
    创建一张表定义。默认是带 i18n 行为、可翻译列为 name 与 description 的 product 表。
    """
    behaviors: dict[str, dict[str, Any]] = {}
    if i18n:
        behaviors["i18n"] = dict(
            parameters if parameters is not None else {"i18n_columns": "name, description"}
        )
    return TableSpec(
        name=name,
        columns=columns if columns is not None else product_columns(),
        behaviors=behaviors,
        **extra,
    )


def make_database(*tables: TableSpec) -> DatabaseSpec:
    return DatabaseSpec(tables=tables or (make_table(),))


class CountingLoader:
    """内存中的 TranslationLoader，记录每次 fetch_translation 调用。"""

    def __init__(self, rows: Mapping[tuple[tuple, str], Mapping[str, Any]] | None = None):
        self.rows = dict(rows or {})
        self.calls: list[tuple[tuple, str]] = []

    def fetch_translation(self, split, owner_key: tuple, locale: str):
        self.calls.append((owner_key, locale))
        return self.rows.get((owner_key, locale))
