# src/i18n_behavior/query/__init__.py
from .composer import EntityQuery, JoinType, TranslationJoin, TranslationQuery

__all__ = ["EntityQuery", "JoinType", "TranslationJoin", "TranslationQuery"]
