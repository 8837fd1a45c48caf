# src/i18n_behavior/config.py
"""
i18n-behavior 配置（Pydantic v2）

包含两类配置：
- LocaleConfig：单张表的 i18n 行为参数，在构建期从 schema 的行为参数解析而来；
- I18nSettings：进程级运行配置（数据库、日志、默认语言），从环境变量加载。

默认语言不是全局状态：它作为 LocaleConfig 的显式字段，随拆分结果传入
所有解析器与访问器。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_LOCALE = "en_US"
DEFAULT_LOCALE_COLUMN = "locale"
DEFAULT_LOCALE_LENGTH = 5

# 行为参数中可识别的键
KNOWN_PARAMETERS = frozenset(
    {
        "i18n_columns",
        "default_locale",
        "locale_column",
        "locale_length",
        "locale_alias",
        "i18n_table",
        "i18n_phpname",
        "i18n_pk_column",
    }
)


def _split_names(value: Any) -> tuple[str, ...]:
    """把 "a, b" 或 ["a", "b"] 统一转成去空白的名称元组。"""
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(str(item).strip() for item in items if str(item).strip())


# ===================== 表级 i18n 参数 =====================


class LocaleConfig(BaseModel):
    """单张表的 i18n 行为配置。"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_locale: str = Field(default=DEFAULT_LOCALE, min_length=1)
    locale_column: str = Field(default=DEFAULT_LOCALE_COLUMN, min_length=1)
    locale_length: int = Field(default=DEFAULT_LOCALE_LENGTH, gt=0)
    locale_alias: Optional[str] = Field(default=None)
    i18n_table: Optional[str] = Field(default=None)
    i18n_phpname: Optional[str] = Field(default=None)
    i18n_pk_column: Optional[str] = Field(default=None)
    i18n_columns: tuple[str, ...] = Field(default=())

    @field_validator("i18n_columns", mode="before")
    @classmethod
    def _parse_columns(cls, v: Any) -> tuple[str, ...]:
        return _split_names(v)

    @field_validator(
        "locale_alias", "i18n_table", "i18n_phpname", "i18n_pk_column", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @model_validator(mode="after")
    def _check_default_fits(self) -> "LocaleConfig":
        if len(self.default_locale) > self.locale_length:
            raise ValueError(
                f"默认语言 {self.default_locale!r} 超出语言列长度 {self.locale_length}"
            )
        return self

    @classmethod
    def from_parameters(
        cls, parameters: Mapping[str, Any], *, default_locale: str | None = None
    ) -> "LocaleConfig":
        """
        从 schema 行为参数构造配置。

        Args:
            parameters: 行为参数映射，值通常是配置文件中的字符串。
            default_locale: 参数中未声明 default_locale 时使用的进程级默认值。

        Raises:
            ConfigError: 参数未知或校验失败。
        """
        unknown = sorted(set(parameters) - KNOWN_PARAMETERS)
        if unknown:
            raise ConfigError(f"未知的 i18n 行为参数: {', '.join(unknown)}")

        data = {k: v for k, v in parameters.items() if v is not None}
        if "default_locale" not in data and default_locale:
            data["default_locale"] = default_locale
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"非法的 i18n 行为参数: {e}") from e


# ===================== 运行配置 =====================


class DatabaseSettings(BaseModel):
    """仓库使用的同步数据库连接。"""

    url: str = Field(default="sqlite:///i18n.db")
    echo: bool = Field(default=False, description="SQLAlchemy echo（调试）")


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


class I18nSettings(BaseSettings):
    """
    i18n-behavior 进程级配置模型。
    """

    default_locale: str = Field(default=DEFAULT_LOCALE, min_length=1)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="I18N_",
        case_sensitive=False,
        extra="ignore",
        env_file_encoding="utf-8",
    )
