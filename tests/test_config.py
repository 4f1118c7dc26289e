"""Tests for the field catalog, entity records and TOML config loading."""

import pytest
from pydantic import ValidationError

from doccomposer.config import CONFIG_ENV_VAR, ComposerConfig, config_from_mapping, load_composer_config
from doccomposer.entity import EntityRecord
from doccomposer.errors import UnknownFieldError
from doccomposer.fields import DEFAULT_MEMBER_FIELDS, FieldCatalog, FieldDefinition, MemberField


class TestFieldCatalog:
    def test_default_labels(self, catalog):
        assert catalog.label("first_name") == "Ad"
        assert catalog.label(MemberField.TC_IDENTITY) == "TC Kimlik"
        assert len(catalog) == 11

    def test_contains_and_index(self, catalog):
        assert "city" in catalog
        assert MemberField.CITY in catalog
        assert "shoe_size" not in catalog
        assert catalog.index("last_name") == 1

    def test_unknown_key(self, catalog):
        with pytest.raises(UnknownFieldError) as exc_info:
            catalog.get("shoe_size")
        assert exc_info.value.key == "shoe_size"

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValidationError):
            FieldCatalog(fields=(FieldDefinition(key="a", label="A"), FieldDefinition(key="a", label="B")))

    def test_from_pairs_keeps_order(self):
        catalog = FieldCatalog.from_pairs([("b", "B"), ("a", "A")])
        assert catalog.keys == ("b", "a")


class TestEntityRecord:
    def test_values_are_stringified(self):
        record = EntityRecord(id="1", fields={"membership_number": 1024, "phone": None})
        assert record.value("membership_number") == "1024"
        assert record.value("phone") == ""

    def test_value_is_stripped(self):
        assert EntityRecord(id="1", fields={"first_name": "  Ali "}).value("first_name") == "Ali"

    def test_checked_value(self):
        record = EntityRecord(id="1", fields={"first_name": "Ali"})
        assert record.checked_value("first_name", DEFAULT_MEMBER_FIELDS) == "Ali"
        with pytest.raises(UnknownFieldError):
            record.checked_value("x", DEFAULT_MEMBER_FIELDS)

    def test_from_row(self):
        record = EntityRecord.from_row({"id": 7, "first_name": "Ali", "is_active": True})
        assert record.id == "7"
        assert "id" not in record.fields
        assert record.value("is_active") == "True"

    def test_display_name(self):
        assert EntityRecord(id="1", fields={"first_name": "Ali", "last_name": "Veli"}).display_name == "Ali Veli"
        assert EntityRecord(id="1", label="Özel").display_name == "Özel"
        assert EntityRecord(id="42").display_name == "42"

    def test_records_are_frozen_and_hashable(self):
        record = EntityRecord(id="1")
        with pytest.raises(ValidationError):
            record.id = "2"
        assert len({record, EntityRecord(id="1")}) == 1

    def test_refreshed_record_is_unequal_but_same_member(self):
        stale = EntityRecord(id="1", fields={"phone": "0555"})
        fresh = EntityRecord(id="1", fields={"phone": "0532"})
        assert stale != fresh
        assert hash(stale) == hash(fresh)
        assert len({stale, fresh}) == 2

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            EntityRecord(id="")


class TestComposerConfig:
    def test_defaults(self):
        config = ComposerConfig()
        assert config.debounce_seconds == 0.5
        assert config.search_limit == 20
        assert config.max_fields == 5
        assert (config.min_font_size, config.max_font_size) == (8, 24)
        assert config.fields == DEFAULT_MEMBER_FIELDS

    def test_field_cap_cannot_be_raised(self):
        with pytest.raises(ValidationError):
            ComposerConfig(max_fields=6)
        assert ComposerConfig(max_fields=3).max_fields == 3

    def test_font_bounds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ComposerConfig(min_font_size=20, max_font_size=10)

    def test_clamp(self):
        config = ComposerConfig()
        assert config.clamp_font_size(3) == 8
        assert config.clamp_font_size(30) == 24
        assert config.clamp_font_size(11) == 11

    def test_from_mapping_with_fields(self):
        config = config_from_mapping(
            {
                "composer": {"debounce_seconds": 0.2, "max_fields": 3},
                "fields": [{"key": "first_name", "label": "İsim"}, {"key": "city", "label": "Şehir"}],
            }
        )
        assert config.debounce_seconds == 0.2
        assert config.max_fields == 3
        assert config.fields.keys == ("first_name", "city")
        assert config.fields.label("city") == "Şehir"


class TestLoadComposerConfig:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "doccomposer.toml"
        path.write_text('[composer]\nsearch_limit = 7\n\n[[fields]]\nkey = "first_name"\nlabel = "Ad"\n', encoding="utf-8")
        config = load_composer_config(path)
        assert config.search_limit == 7
        assert len(config.fields) == 1

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text("[composer]\nmin_query_length = 2\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_composer_config().min_query_length == 2

    def test_cwd_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "doccomposer.toml").write_text("[composer]\nmax_fields = 4\n", encoding="utf-8")
        assert load_composer_config().max_fields == 4

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_composer_config(tmp_path / "absent.toml") == ComposerConfig()

    def test_invalid_file_is_skipped(self, tmp_path, caplog):
        path = tmp_path / "bad.toml"
        path.write_text("[composer\nsearch_limit = ", encoding="utf-8")
        with caplog.at_level("WARNING"):
            assert load_composer_config(path) == ComposerConfig()
        assert "Ignoring unreadable composer config" in caplog.text

    def test_invalid_value_is_skipped(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[composer]\nsearch_limit = 0\n", encoding="utf-8")
        assert load_composer_config(path).search_limit == 20
