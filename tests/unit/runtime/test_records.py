# tests/unit/runtime/test_records.py
"""针对记录类与代理访问层的单元测试（不访问存储）。"""

import pytest

from i18n_behavior.exceptions import ConfigError, UnknownFieldError
from i18n_behavior.runtime import TranslatableRecord, TranslationRecord, build_record_class
from i18n_behavior.runtime.accessors import FieldAccessor
from i18n_behavior.schema import ColumnSpec, I18nSplit, split_table
from tests.helpers.factories import TEST_OTHER_LOCALE, make_table, product_columns


@pytest.fixture
def Product(product_split: I18nSplit) -> type[TranslatableRecord]:
    return build_record_class(product_split)


def test_generated_class_exposes_every_column(Product) -> None:
    assert Product.__name__ == "Product"
    assert isinstance(Product.name, FieldAccessor)
    assert Product.name.translated is True
    assert Product.price.translated is False
    assert Product.id.translated is False


def test_translated_field_reads_current_locale(Product) -> None:
    """切换语言后，可翻译字段读写的是该语言的翻译记录。"""
    product = Product(price=12.5, name="Chair")

    assert product.get_locale() == "en_US"
    assert product.name == "Chair"
    assert product.price == 12.5

    product.set_locale(TEST_OTHER_LOCALE)
    assert product.name is None
    product.name = "Chaise"

    product.set_locale("en_US")
    assert product.name == "Chair"
    assert product.get_translation(TEST_OTHER_LOCALE).get("name") == "Chaise"
    assert set(product.translations) == {"en_US", TEST_OTHER_LOCALE}


def test_set_locale_defers_resolution(Product) -> None:
    product = Product(price=1.0)
    product.set_locale(TEST_OTHER_LOCALE)

    assert product.translations == {}
    assert product.locale == TEST_OTHER_LOCALE


def test_set_locale_none_restores_default(Product) -> None:
    product = Product()
    product.locale = "de_DE"
    product.set_locale(None)
    assert product.get_locale() == "en_US"


@pytest.mark.parametrize("bad", ["", "   ", 42])
def test_set_locale_rejects_invalid_values(Product, bad) -> None:
    with pytest.raises(ValueError):
        Product().set_locale(bad)


def test_get_translation_returns_same_instance(Product) -> None:
    product = Product()
    first = product.get_translation("de_DE")

    assert product.get_translation("de_DE") is first
    assert product.get_current_translation() is product.get_translation()
    assert first.locale == "de_DE"


def test_unknown_field_raises(Product) -> None:
    product = Product()
    with pytest.raises(UnknownFieldError):
        product.get("colour")
    with pytest.raises(KeyError):
        product.set("colour", "red")
    with pytest.raises(UnknownFieldError):
        Product(colour="red")


def test_modification_tracking(Product) -> None:
    product = Product()
    assert product.is_modified is False

    product.price = 3.0
    assert product.modified_columns == {"price"}

    product.name = "Lamp"
    translation = product.get_current_translation()
    assert translation.modified_columns == {"name"}
    assert product.is_modified is True


def test_new_record_defers_translation_link(Product) -> None:
    """尚无主键的基础记录：翻译记录可以创建，但暂不关联。"""
    product = Product(name="Desk")
    translation = product.get_current_translation()

    assert product.primary_key is None
    assert translation.owner_key is None
    assert translation.is_linked is False


def test_explicit_key_links_immediately(Product) -> None:
    product = Product(id=5)
    assert product.get_current_translation().owner_key == (5,)


def test_persisted_key_tracks_storage(Product) -> None:
    product = Product(id=5)
    assert product.persisted_key is None

    stored = Product._from_storage({"id": 3, "price": 1.0})
    stored.id = 8
    assert stored.primary_key == (8,)
    assert stored.persisted_key == (3,)

    stored._mark_persisted()
    assert stored.persisted_key == (8,)


def test_remove_translation_on_new_record(Product) -> None:
    product = Product(name="Desk")
    translation = product.get_current_translation()

    product.remove_translation("en_US")

    assert translation.is_deleted is True
    assert "en_US" not in product.translations
    assert product.pending_removals == frozenset()


def test_translation_record_rejects_non_translatable_fields(product_split: I18nSplit) -> None:
    translation = TranslationRecord(product_split, "en_US", (1,))
    with pytest.raises(UnknownFieldError):
        translation.set("price", 1.0)
    with pytest.raises(UnknownFieldError):
        TranslationRecord(product_split, "en_US", (1,), {"price": 1.0})
    assert translation.identity == ((1,), "en_US")


def test_base_class_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        TranslatableRecord()


# ---- 语言别名 ----


def test_locale_alias_is_pure_renaming() -> None:
    split = split_table(make_table(parameters={"i18n_columns": "name", "locale_alias": "culture"}))
    Product = build_record_class(split)
    product = Product()

    product.culture = "fr_FR"
    assert product.get_locale() == "fr_FR"
    assert product.get_culture() == "fr_FR"
    assert product.set_culture("de_DE") is product
    assert product.locale == "de_DE"


def test_locale_alias_collision_raises() -> None:
    split = split_table(make_table(parameters={"i18n_columns": "name", "locale_alias": "price"}))
    with pytest.raises(ConfigError, match="语言别名"):
        build_record_class(split)


def test_column_name_colliding_with_record_interface_raises() -> None:
    columns = (*product_columns(), ColumnSpec(name="translations", type="VARCHAR"))
    split = split_table(make_table(columns=columns))
    with pytest.raises(ConfigError, match="冲突"):
        build_record_class(split)


def test_locales_are_isolated(Product) -> None:
    product = Product()
    product.name = "Microwave oven"
    product.set_locale("fr_FR")
    product.name = "Four micro-ondes"

    product.set_locale("en_US")
    assert product.name == "Microwave oven"
    product.set_locale("fr_FR")
    assert product.name == "Four micro-ondes"
    assert product.get_translation("en_US") is not product.get_translation("fr_FR")
