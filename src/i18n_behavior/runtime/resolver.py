# src/i18n_behavior/runtime/resolver.py
"""
包含翻译解析的核心逻辑：为基础记录返回（必要时创建）指定语言的翻译记录。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog

from ..exceptions import ResolutionError
from .records import TranslationRecord

if TYPE_CHECKING:
    from ..persistence.interfaces import TranslationLoader
    from ..schema.types import I18nSplit
    from .records import TranslatableRecord

logger = structlog.get_logger(__name__)


class TranslationResolver:
    """
    按 (基础记录, 语言) 解析翻译记录。

    解析器本身无状态：已解析的翻译由基础记录持有，
    因此同一解析器可以被多条记录共享。
    """

    def __init__(self, split: "I18nSplit", loader: Optional["TranslationLoader"] = None):
        """
        初始化解析器。

        Args:
            split: 拆分结果，提供列与语言配置。
            loader: 持久化协作方；为 None 时从不访问存储。
        """
        self._split = split
        self._loader = loader

    @property
    def split(self) -> "I18nSplit":
        return self._split

    @property
    def loader(self) -> Optional["TranslationLoader"]:
        return self._loader

    def _owner_key(self, record: "TranslatableRecord") -> tuple:
        key = record.primary_key
        if key is None:
            raise ResolutionError(
                f"{type(record).__name__} 尚无主键，翻译记录暂时无法关联"
            )
        return key

    def resolve(self, record: "TranslatableRecord", locale: str) -> TranslationRecord:
        """
        返回 record 在 locale 下的翻译记录。

        1. 已挂载的记录直接返回，多次调用得到同一个实例；
        2. 已持久化且有主键的基础记录，首次访问某语言时委托持久化协作方
           读取一次（避免重复创建已存在的翻译）；
        3. 否则新建翻译记录并挂载；基础记录尚无主键时推迟关联。
        """
        if not locale:
            raise ValueError("语言代码不能为空")

        attached = record._translations.get(locale)
        if attached is not None:
            return attached

        try:
            owner_key: Optional[tuple] = self._owner_key(record)
        except ResolutionError:
            owner_key = None
            logger.debug("基础记录尚无主键，推迟关联翻译", locale=locale)

        if (
            owner_key is not None
            and not record.is_new
            and self._loader is not None
            and locale not in record._known_absent
            and locale not in record._pending_removals
        ):
            # 主键修改尚未保存时，存储中的行仍挂在旧主键下
            stored_key = record.persisted_key or owner_key
            row = self._loader.fetch_translation(self._split, stored_key, locale)
            if row is not None:
                values = {
                    name: row[name]
                    for name in self._split.translatable_columns
                    if name in row
                }
                logger.debug("从存储加载翻译", key=stored_key, locale=locale)
                return record._attach_translation(
                    TranslationRecord(
                        self._split, locale, stored_key, values, is_new=False
                    )
                )
            record._mark_absent(locale)

        return record._attach_translation(
            TranslationRecord(self._split, locale, owner_key)
        )

    def remove(self, record: "TranslatableRecord", locale: str) -> None:
        """
        移除 locale 的翻译。已持久化的基础记录会在下次保存时删除对应行；
        未挂载或已移除的语言不报错。
        """
        translation = record._translations.pop(locale, None)
        if translation is not None:
            translation.is_deleted = True
        if record.is_new:
            return
        if locale in record._pending_removals:
            return
        if translation is None and locale in record._known_absent:
            return
        record._pending_removals.add(locale)
        record._known_absent.add(locale)
        logger.debug("翻译已标记删除", key=record.primary_key, locale=locale)
