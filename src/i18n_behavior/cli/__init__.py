# src/i18n_behavior/cli/__init__.py
"""
i18n-behavior 命令行工具。

入口点为 i18n_behavior.cli.main:app。
"""

from .main import app

__all__ = ["app"]
