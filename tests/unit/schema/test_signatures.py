# tests/unit/schema/test_signatures.py
"""针对生成方法签名的单元测试。"""

from i18n_behavior.schema import generated_methods, split_table
from tests.helpers.factories import make_table


def _by_name(split):
    return {s.name: s for s in generated_methods(split)}


def test_translated_columns_keep_their_signature() -> None:
    """可翻译列在记录上暴露的签名与拆分前一致。"""
    signatures = _by_name(split_table(make_table()))

    assert signatures["name"].render() == "name: str | None"
    assert signatures["name"].translated is True
    assert signatures["description"].translated is True
    assert signatures["price"].render() == "price: float | None"
    assert signatures["price"].translated is False
    assert signatures["id"].render() == "id: int"


def test_query_methods_are_listed() -> None:
    signatures = _by_name(split_table(make_table()))

    assert signatures["join_with_i18n"].owner == "query"
    assert signatures["use_i18n_query"].returns == "TranslationQuery"
    assert signatures["end_use"].owner == "translation_query"
    assert signatures["get_translation"].returns == "ProductI18n"
    assert (
        signatures["remove_translation"].render()
        == "remove_translation(locale: str) -> Product"
    )


def test_locale_alias_adds_accessors() -> None:
    split = split_table(make_table(parameters={"i18n_columns": "name", "locale_alias": "culture"}))
    signatures = _by_name(split)

    assert {"get_locale", "set_locale", "get_culture", "set_culture"} <= set(signatures)
    assert signatures["set_culture"].render() == "set_culture(locale: str | None) -> Product"
