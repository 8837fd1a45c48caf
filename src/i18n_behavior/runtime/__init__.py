# src/i18n_behavior/runtime/__init__.py
"""运行期：记录、翻译解析器与代理访问层。"""

from .accessors import build_record_class
from .records import TranslatableRecord, TranslationRecord
from .resolver import TranslationResolver

__all__ = [
    "TranslatableRecord",
    "TranslationRecord",
    "TranslationResolver",
    "build_record_class",
]
