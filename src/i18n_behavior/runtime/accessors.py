# src/i18n_behavior/runtime/accessors.py
"""
代理访问层：为拆分后的实体生成记录类。

每一列对应一个属性，外部签名与未翻译时一致；可翻译列的读写通过
`TranslatableRecord.get/set` 转发到当前语言的翻译记录。
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from ..exceptions import ConfigError
from ..schema.types import I18nSplit
from .records import TranslatableRecord
from .resolver import TranslationResolver

logger = structlog.get_logger(__name__)

# 实例属性在 __init__ 中赋值，dir(TranslatableRecord) 中看不到
_INSTANCE_ATTRIBUTES = frozenset({"is_new", "is_deleted"})


class FieldAccessor:
    """把属性读写转发给记录的 get/set。"""

    def __init__(self, name: str, *, translated: bool = False):
        self.name = name
        self.translated = translated

    def __get__(self, obj: Optional[TranslatableRecord], owner: Any = None) -> Any:
        if obj is None:
            return self
        return obj.get(self.name)

    def __set__(self, obj: TranslatableRecord, value: Any) -> None:
        obj.set(self.name, value)

    def __repr__(self) -> str:
        kind = "translated" if self.translated else "column"
        return f"<FieldAccessor {self.name!r} ({kind})>"


class LocaleAliasAccessor:
    """语言访问器的别名（例如 culture），纯命名转发。"""

    def __get__(self, obj: Optional[TranslatableRecord], owner: Any = None) -> Any:
        if obj is None:
            return self
        return obj.get_locale()

    def __set__(self, obj: TranslatableRecord, value: Optional[str]) -> None:
        obj.set_locale(value)


def _reserved_names() -> frozenset[str]:
    return frozenset(dir(TranslatableRecord)) | _INSTANCE_ATTRIBUTES


def _check_name(split: I18nSplit, name: str, reserved: frozenset[str]) -> None:
    if name.startswith("_") or name in reserved or not name.isidentifier():
        raise ConfigError(
            f"表 {split.base.name!r} 的列名 {name!r} 与记录接口冲突，无法生成访问器"
        )


def _alias_methods(alias: str) -> dict[str, Any]:
    def getter(self: TranslatableRecord) -> str:
        return self.get_locale()

    def setter(self: TranslatableRecord, locale: Optional[str]) -> TranslatableRecord:
        return self.set_locale(locale)

    getter.__name__ = f"get_{alias}"
    setter.__name__ = f"set_{alias}"
    return {
        alias: LocaleAliasAccessor(),
        getter.__name__: getter,
        setter.__name__: setter,
    }


def build_record_class(
    split: I18nSplit,
    *,
    resolver: Optional[TranslationResolver] = None,
    name: Optional[str] = None,
) -> type[TranslatableRecord]:
    """
    为拆分结果生成记录类。

    Args:
        split: Schema Splitter 的输出。
        resolver: 该类实例默认使用的解析器；默认创建不访问存储的解析器。
        name: 类名，默认使用基础表的类型名。

    Raises:
        ConfigError: 列名或别名与记录接口冲突。
    """
    reserved = _reserved_names()
    namespace: dict[str, Any] = {
        "__i18n__": split,
        "__module__": __name__,
        "_default_resolver": resolver or TranslationResolver(split),
    }

    for column in split.base_columns:
        _check_name(split, column, reserved)
        namespace[column] = FieldAccessor(column)
    for column in split.translatable_columns:
        _check_name(split, column, reserved)
        namespace[column] = FieldAccessor(column, translated=True)

    alias = split.config.locale_alias
    if alias and alias != "locale":
        for member in (alias, f"get_{alias}", f"set_{alias}"):
            if member in namespace or member in reserved:
                raise ConfigError(f"语言别名 {alias!r} 与记录成员 {member!r} 冲突")
        namespace.update(_alias_methods(alias))

    record_class = type(name or split.type_name, (TranslatableRecord,), namespace)
    logger.debug(
        "记录类已生成",
        record_class=record_class.__name__,
        translated=list(split.translatable_columns),
        locale_alias=alias,
    )
    return record_class
