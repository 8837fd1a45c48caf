# src/i18n_behavior/observability/logging_config.py
"""
集中配置日志：structlog ⇄ 标准 logging，console 模式用 Rich 面板渲染。

- console：开发时的面板输出（本地时间，键列对齐，长值折行）；
- json   ：结构化输出（ISO-8601，UTC），供日志平台聚合。
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Literal

import structlog
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

if TYPE_CHECKING:
    from i18n_behavior.config import I18nSettings

APP_LOGGER_NAME = "i18n_behavior"

_LEVEL_STYLES: dict[str, tuple[str, str]] = {
    "debug": ("cyan", "DEBUG   "),
    "info": ("green", "INFO    "),
    "warning": ("yellow", "WARNING "),
    "error": ("bold red", "ERROR   "),
    "critical": ("magenta", "CRITICAL"),
}


class HybridPanelRenderer:
    """
    structlog 处理器：把一条事件渲染为 Rich 面板字符串。

    标题为等宽级别标签和 logger 名称，正文为事件消息与键值表。
    """

    def __init__(
        self,
        *,
        kv_truncate_at: int = 256,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_key_width: int = 15,
    ) -> None:
        self._console = Console()
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_key_width = kv_key_width

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event_msg = str(event_dict.pop("event", "")).strip()
        if not event_msg:
            return ""

        timestamp = event_dict.pop("timestamp", "")
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = event_dict.pop("logger", "unknown")
        event_dict.pop("_record", None)
        event_dict.pop("_from_structlog", None)

        border_style, level_text = _LEVEL_STYLES.get(level, ("dim", level.upper()))

        title_parts = [f"[{border_style}]{level_text}[/]"]
        if self._show_logger_name:
            title_parts.append(f"[cyan dim]({logger_name})[/]")

        body: list[Any] = [Text(event_msg)]
        if event_dict:
            body.append(self._kv_table(event_dict))

        subtitle = (
            Text(str(timestamp), style="dim")
            if self._show_timestamp and timestamp
            else None
        )
        with self._console.capture() as capture:
            self._console.print(
                Panel(
                    Group(*body),
                    title=Text.from_markup(" ".join(title_parts)),
                    title_align="left",
                    subtitle=subtitle,
                    subtitle_align="right",
                    border_style=border_style,
                    expand=False,
                )
            )
        return capture.get().rstrip()

    def _kv_table(self, kv: MutableMapping[str, Any]) -> Table:
        table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
        table.add_column(style="dim", justify="right", width=self._kv_key_width)
        table.add_column(style="bright_white", overflow="fold")
        for key, value in sorted(kv.items()):
            value_repr = repr(value)
            # 超长字符串去引号，改善折行
            if len(value_repr) > self._kv_truncate_at and value_repr[:1] in ("'", '"'):
                value_repr = value_repr[1:-1]
            table.add_row(f"{key} :", Text(value_repr))
        return table


def setup_logging(
    *,
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    root_level: str | None = None,
    service: str | None = None,
) -> None:
    """
    配置全局 structlog 日志系统。

    Args:
        log_level: i18n_behavior logger 的最低级别。
        log_format: 'console'（面板输出）或 'json'（结构化输出）。
        root_level: 根 logger 级别；默认 WARNING 以压低第三方噪声。
        service: 通过 contextvars 绑定到所有日志的服务名。
    """
    timestamper = (
        structlog.processors.TimeStamper(fmt="iso", utc=True)
        if log_format == "json"
        else structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False)
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    final_renderer: Processor = (
        HybridPanelRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_renderer,
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            timestamper,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)

    logging.getLogger("sqlalchemy.engine.Engine").setLevel(logging.WARNING)

    structlog.get_logger(f"{APP_LOGGER_NAME}.logging_config").debug(
        "日志系统已配置完成。",
        log_format=log_format,
        app_log_level=log_level.upper(),
    )


def setup_logging_from_config(
    settings: "I18nSettings", *, service: str = "i18n-behavior"
) -> None:
    """根据 I18nSettings 一键初始化日志系统。"""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        service=service,
    )
