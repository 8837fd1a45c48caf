# src/i18n_behavior/runtime/records.py
"""
运行期记录：基础记录与翻译记录。

基础记录直接持有它的翻译记录（locale -> TranslationRecord 的映射），
翻译记录只通过所属键（owner_key）与基础记录关联，该键仅用于持久化。
一条基础记录对每个语言至多持有一条翻译记录。
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Optional

from ..exceptions import UnknownFieldError

if TYPE_CHECKING:
    from ..schema.types import I18nSplit
    from .resolver import TranslationResolver


class TranslationRecord:
    """翻译表中的一行；身份为 (owner_key, locale)。"""

    def __init__(
        self,
        split: "I18nSplit",
        locale: str,
        owner_key: Optional[tuple] = None,
        values: Mapping[str, Any] | None = None,
        *,
        is_new: bool = True,
    ):
        self._split = split
        self._locale = locale
        self.owner_key = owner_key
        self._values: dict[str, Any] = {}
        self._modified: set[str] = set()
        self.is_new = is_new
        self.is_deleted = False
        for name, value in (values or {}).items():
            self._check_field(name)
            self._values[name] = value

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def identity(self) -> tuple[Optional[tuple], str]:
        return self.owner_key, self._locale

    @property
    def values(self) -> Mapping[str, Any]:
        return MappingProxyType(self._values)

    @property
    def modified_columns(self) -> frozenset[str]:
        return frozenset(self._modified)

    @property
    def is_modified(self) -> bool:
        return bool(self._modified)

    @property
    def is_linked(self) -> bool:
        return self.owner_key is not None

    def _check_field(self, name: str) -> None:
        if name not in self._split.translatable_columns:
            raise UnknownFieldError(
                f"{self._split.translation_type_name} 没有可翻译字段 {name!r}"
            )

    def get(self, name: str) -> Any:
        self._check_field(name)
        return self._values.get(name)

    def set(self, name: str, value: Any) -> "TranslationRecord":
        self._check_field(name)
        if name not in self._values or self._values[name] != value:
            self._values[name] = value
            self._modified.add(name)
        return self

    def link(self, owner_key: Optional[tuple]) -> None:
        """关联到基础记录的主键；None 表示解除关联。"""
        self.owner_key = owner_key

    def _mark_persisted(self) -> None:
        self.is_new = False
        self._modified.clear()

    def __repr__(self) -> str:
        return (
            f"<{self._split.translation_type_name} owner={self.owner_key!r} "
            f"locale={self._locale!r} new={self.is_new}>"
        )


class TranslatableRecord:
    """
    基础记录：持有非翻译数据、当前语言与已解析的翻译记录。

    由 `build_record_class` 生成具体子类；不要直接实例化本类。
    """

    __i18n__: ClassVar["I18nSplit"]
    _default_resolver: ClassVar[Optional["TranslationResolver"]] = None

    def __init__(self, **values: Any):
        if getattr(type(self), "__i18n__", None) is None:
            raise TypeError("请通过 build_record_class 生成记录类")
        self._values: dict[str, Any] = {}
        self._modified: set[str] = set()
        self._translations: dict[str, TranslationRecord] = {}
        self._pending_removals: set[str] = set()
        self._known_absent: set[str] = set()
        self._current_locale: Optional[str] = None
        self._resolver: Optional["TranslationResolver"] = None
        self._persisted_key: Optional[tuple] = None
        self.is_new = True
        self.is_deleted = False
        for name, value in values.items():
            self.set(name, value)

    @classmethod
    def _from_storage(
        cls, values: Mapping[str, Any], resolver: Optional["TranslationResolver"] = None
    ) -> "TranslatableRecord":
        record = cls()
        record._values.update(
            {name: values[name] for name in cls.__i18n__.base_columns if name in values}
        )
        record._resolver = resolver
        record.is_new = False
        record._persisted_key = record.primary_key
        return record

    # ---- 元数据 ----

    @property
    def split(self) -> "I18nSplit":
        return self.__i18n__

    @property
    def resolver(self) -> "TranslationResolver":
        resolver = self._resolver or type(self)._default_resolver
        if resolver is None:
            raise TypeError(f"{type(self).__name__} 未绑定翻译解析器")
        return resolver

    def bind(self, resolver: "TranslationResolver") -> "TranslatableRecord":
        self._resolver = resolver
        return self

    @property
    def primary_key(self) -> Optional[tuple]:
        """主键值元组；任一主键列为空时返回 None。"""
        key = tuple(self._values.get(name) for name in self.split.key_columns)
        if any(value is None for value in key):
            return None
        return key

    @property
    def persisted_key(self) -> Optional[tuple]:
        """存储中当前的主键；新记录为 None。主键被修改后保存前与 primary_key 不同。"""
        return self._persisted_key

    @property
    def is_modified(self) -> bool:
        return (
            bool(self._modified)
            or bool(self._pending_removals)
            or any(t.is_new or t.is_modified for t in self._translations.values())
        )

    @property
    def modified_columns(self) -> frozenset[str]:
        return frozenset(self._modified)

    # ---- 字段访问 ----

    def get(self, name: str) -> Any:
        """读取字段；可翻译字段从当前语言的翻译记录读取。"""
        if self.split.is_translatable(name):
            return self.get_current_translation().get(name)
        if name in self.split.base_columns:
            return self._values.get(name)
        raise UnknownFieldError(f"{type(self).__name__} 没有字段 {name!r}")

    def set(self, name: str, value: Any) -> "TranslatableRecord":
        """写入字段；可翻译字段写入当前语言的翻译记录。"""
        if self.split.is_translatable(name):
            self.get_current_translation().set(name, value)
            return self
        if name not in self.split.base_columns:
            raise UnknownFieldError(f"{type(self).__name__} 没有字段 {name!r}")
        if name not in self._values or self._values[name] != value:
            self._values[name] = value
            self._modified.add(name)
        return self

    # ---- 语言 ----

    def get_locale(self) -> str:
        return self._current_locale or self.split.default_locale

    def set_locale(self, locale: Optional[str]) -> "TranslatableRecord":
        """
        切换当前语言。只修改当前语言，不立即解析翻译；
        解析推迟到下一次读写可翻译字段。None 表示恢复默认语言。
        """
        if locale is not None and (not isinstance(locale, str) or not locale.strip()):
            raise ValueError(f"非法的语言代码: {locale!r}")
        self._current_locale = locale
        return self

    @property
    def locale(self) -> str:
        return self.get_locale()

    @locale.setter
    def locale(self, value: Optional[str]) -> None:
        self.set_locale(value)

    # ---- 翻译 ----

    @property
    def translations(self) -> Mapping[str, TranslationRecord]:
        return MappingProxyType(self._translations)

    @property
    def pending_removals(self) -> frozenset[str]:
        return frozenset(self._pending_removals)

    def get_translation(self, locale: Optional[str] = None) -> TranslationRecord:
        return self.resolver.resolve(self, locale or self.get_locale())

    def get_current_translation(self) -> TranslationRecord:
        return self.resolver.resolve(self, self.get_locale())

    def remove_translation(self, locale: str) -> "TranslatableRecord":
        self.resolver.remove(self, locale)
        return self

    def _attach_translation(self, translation: TranslationRecord) -> TranslationRecord:
        self._translations[translation.locale] = translation
        self._known_absent.discard(translation.locale)
        return translation

    def _mark_absent(self, locale: str) -> None:
        if locale not in self._translations:
            self._known_absent.add(locale)

    def _mark_persisted(self) -> None:
        self.is_new = False
        self._modified.clear()
        self._pending_removals.clear()
        self._persisted_key = self.primary_key

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} key={self.primary_key!r} "
            f"locale={self.get_locale()!r} new={self.is_new}>"
        )
