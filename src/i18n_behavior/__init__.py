# src/i18n_behavior/__init__.py
"""
i18n-behavior：把带 i18n 行为的表拆成基础表与翻译表，并在运行期
通过代理访问层与查询构建器把二者重新呈现为一个实体。
"""

from .config import I18nSettings, LocaleConfig
from .exceptions import (
    ConfigError,
    I18nBehaviorError,
    QueryCompositionError,
    ResolutionError,
    UnknownFieldError,
)
from .query import EntityQuery, JoinType, TranslationQuery
from .runtime import (
    TranslatableRecord,
    TranslationRecord,
    TranslationResolver,
    build_record_class,
)
from .schema import (
    DatabaseSpec,
    I18nSplit,
    SchemaSplitter,
    TableSpec,
    split_table,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DatabaseSpec",
    "EntityQuery",
    "I18nBehaviorError",
    "I18nSettings",
    "I18nSplit",
    "JoinType",
    "LocaleConfig",
    "QueryCompositionError",
    "ResolutionError",
    "SchemaSplitter",
    "TableSpec",
    "TranslatableRecord",
    "TranslationQuery",
    "TranslationRecord",
    "TranslationResolver",
    "UnknownFieldError",
    "build_record_class",
    "split_table",
]
