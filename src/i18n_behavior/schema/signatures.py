# src/i18n_behavior/schema/signatures.py
"""生成给代码生成协作方使用的访问器与查询方法签名。"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from .types import ColumnSpec, I18nSplit

_PY_TYPES = {
    "INTEGER": "int",
    "BIGINT": "int",
    "SMALLINT": "int",
    "TINYINT": "int",
    "BOOLEAN": "bool",
    "FLOAT": "float",
    "DOUBLE": "float",
    "REAL": "float",
    "DECIMAL": "Decimal",
    "NUMERIC": "Decimal",
    "DATE": "date",
    "TIME": "time",
    "TIMESTAMP": "datetime",
    "BLOB": "bytes",
}


class MethodSignature(BaseModel):
    """一个生成成员的签名。kind 区分属性与方法，owner 区分记录类与查询类。"""

    model_config = ConfigDict(frozen=True)

    name: str
    owner: Literal["record", "query", "translation_query"]
    kind: Literal["property", "method"]
    params: tuple[str, ...] = ()
    returns: str = "None"
    translated: bool = False

    def render(self) -> str:
        if self.kind == "property":
            return f"{self.name}: {self.returns}"
        return f"{self.name}({', '.join(self.params)}) -> {self.returns}"


def _py_type(column: ColumnSpec) -> str:
    py_type = _PY_TYPES.get(column.type, "str")
    return py_type if column.required or column.primary_key else f"{py_type} | None"


def generated_methods(split: I18nSplit) -> list[MethodSignature]:
    """
    列出拆分后实体对外暴露的成员。

    可翻译列与未翻译时签名一致，只是 translated 标记为 True。
    """
    record_type = split.type_name
    translation_type = split.translation_type_name
    signatures: list[MethodSignature] = []

    for column in split.base.columns:
        signatures.append(
            MethodSignature(name=column.name, owner="record", kind="property", returns=_py_type(column))
        )
    for name in split.translatable_columns:
        column = split.translation.get_column(name)
        signatures.append(
            MethodSignature(
                name=name, owner="record", kind="property", returns=_py_type(column), translated=True
            )
        )

    locale_names = ["locale"]
    if split.config.locale_alias:
        locale_names.append(split.config.locale_alias)
    for name in locale_names:
        signatures += [
            MethodSignature(name=f"get_{name}", owner="record", kind="method", returns="str"),
            MethodSignature(
                name=f"set_{name}", owner="record", kind="method", params=("locale: str | None",), returns=record_type
            ),
        ]

    signatures += [
        MethodSignature(
            name="get_translation",
            owner="record",
            kind="method",
            params=("locale: str | None = None",),
            returns=translation_type,
        ),
        MethodSignature(name="get_current_translation", owner="record", kind="method", returns=translation_type),
        MethodSignature(
            name="remove_translation", owner="record", kind="method", params=("locale: str",), returns=record_type
        ),
        MethodSignature(
            name="join_i18n",
            owner="query",
            kind="method",
            params=("locale: str | None = None", "alias: str | None = None", "join_type: JoinType = JoinType.LEFT"),
            returns="EntityQuery",
        ),
        MethodSignature(
            name="join_with_i18n",
            owner="query",
            kind="method",
            params=("locale: str | None = None", "join_type: JoinType = JoinType.LEFT"),
            returns="EntityQuery",
        ),
        MethodSignature(
            name="use_i18n_query",
            owner="query",
            kind="method",
            params=("locale: str | None = None", "alias: str | None = None", "join_type: JoinType | None = None"),
            returns="TranslationQuery",
        ),
        MethodSignature(name="end_use", owner="translation_query", kind="method", returns="EntityQuery"),
    ]
    return signatures
