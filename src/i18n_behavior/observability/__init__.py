# src/i18n_behavior/observability/__init__.py
"""日志配置。"""

from .logging_config import setup_logging, setup_logging_from_config

__all__ = ["setup_logging", "setup_logging_from_config"]
