# src/i18n_behavior/cli/main.py
"""
i18n-behavior 命令行工具。

输入为 JSON 格式的 DatabaseSpec（表、列、外键与行为参数）：
- split   ：展示每张 i18n 表的拆分结果；
- ddl     ：输出拆分后整个 schema 的 CREATE TABLE 语句；
- methods ：列出拆分后实体对外暴露的访问器与查询方法。
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy import MetaData

from i18n_behavior.config import I18nSettings
from i18n_behavior.exceptions import ConfigError
from i18n_behavior.observability.logging_config import setup_logging_from_config
from i18n_behavior.schema import (
    DatabaseSpec,
    I18nSplit,
    SchemaSplitter,
    build_database_tables,
    generated_methods,
    render_ddl,
)

app = typer.Typer(
    name="i18n-behavior",
    help="🌐 i18n 表拆分与代码生成工具。",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

SCHEMA_ARGUMENT = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON 格式的 schema 文件。"),
]


@app.callback()
def main(ctx: typer.Context):
    """加载配置并初始化日志。"""
    try:
        settings = I18nSettings()
    except ValidationError as e:
        console.print(f"[bold red]❌ 启动失败：无法加载配置: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    setup_logging_from_config(settings, service="i18n-behavior-cli")
    ctx.obj = settings


def _load_splits(ctx: typer.Context, path: Path) -> tuple[DatabaseSpec, dict[str, I18nSplit]]:
    settings: I18nSettings = ctx.obj
    try:
        database = DatabaseSpec.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        console.print(f"[bold red]❌ schema 文件格式错误: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    try:
        splits = SchemaSplitter(default_locale=settings.default_locale).split_database(database)
    except ConfigError as e:
        console.print(f"[bold red]❌ 拆分失败: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    if not splits:
        console.print("[yellow]⚠️ schema 中没有声明 i18n 行为的表。[/yellow]")
    return database, splits


@app.command("split")
def split(ctx: typer.Context, schema: SCHEMA_ARGUMENT):
    """展示每张 i18n 表的拆分结果。"""
    _, splits = _load_splits(ctx, schema)
    for name, result in splits.items():
        table = Table(title=f"{name} → {result.translation.name}", show_lines=False)
        table.add_column("列", style="cyan")
        table.add_column("类型")
        table.add_column("位置", style="magenta")
        for column in result.base.columns:
            table.add_row(column.name, column.type, "基础表")
        for column in result.translation.columns:
            if column.name in result.owner_columns:
                where = "所属键"
            elif column.name == result.locale_column:
                where = "语言列"
            else:
                where = "翻译表"
            table.add_row(column.name, column.type, where)
        console.print(table)
        console.print(
            f"默认语言: [green]{result.default_locale}[/green]  "
            f"外键: {result.foreign_key.name} "
            f"(ON DELETE {result.foreign_key.on_delete}, ON UPDATE {result.foreign_key.on_update})",
            soft_wrap=True,
        )
        if result.symfony_compat:
            console.print("[dim]symfony 兼容模式：沿用既有翻译表[/dim]")


@app.command("ddl")
def ddl(
    ctx: typer.Context,
    schema: SCHEMA_ARGUMENT,
    dialect: Annotated[
        str, typer.Option("--dialect", "-d", help="SQL 方言：sqlite 或 postgresql。")
    ] = "sqlite",
):
    """输出拆分后整个 schema 的 CREATE TABLE 语句。"""
    database, splits = _load_splits(ctx, schema)
    metadata = MetaData()
    try:
        build_database_tables(database, splits, metadata)
        statements = render_ddl(metadata, dialect)  # type: ignore[arg-type]
    except ConfigError as e:
        console.print(f"[bold red]❌ 生成 DDL 失败: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e
    for statement in statements:
        console.print(f"{statement};\n", markup=False, highlight=False, soft_wrap=True)


@app.command("methods")
def methods(ctx: typer.Context, schema: SCHEMA_ARGUMENT):
    """列出拆分后实体对外暴露的访问器与查询方法。"""
    _, splits = _load_splits(ctx, schema)
    for name, result in splits.items():
        table = Table(title=f"{result.type_name} ({name})")
        table.add_column("所属", style="dim")
        table.add_column("签名", style="cyan")
        table.add_column("翻译", justify="center")
        for signature in generated_methods(result):
            table.add_row(
                signature.owner, signature.render(), "✓" if signature.translated else ""
            )
        console.print(table)


if __name__ == "__main__":
    app()
