# src/i18n_behavior/persistence/interfaces.py
"""
定义运行期组件依赖的持久化协作方接口协议 (Protocols)。
解析器只依赖这些协议，而不是具体的仓库实现。
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..schema.types import I18nSplit


class TranslationLoader(Protocol):
    """按 (所属键, 语言) 读取单条翻译行的协作方。"""

    def fetch_translation(
        self, split: "I18nSplit", owner_key: tuple, locale: str
    ) -> Mapping[str, Any] | None:
        """返回翻译行（列名 -> 值），不存在时返回 None。"""
        ...
