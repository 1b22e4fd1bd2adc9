"""Tests for migration config models, config I/O, settings and the field transformer."""

import io

import pytest
from pydantic import ValidationError

from eavmigrate.config.logging import get_logger, setup_logging
from eavmigrate.config.settings import Settings
from eavmigrate.model.migration_config import FieldRule, JoinTableSpec, MigrationConfig
from eavmigrate.model.records import Insert, Update, intent_for
from eavmigrate.transform.fields import RecordTransformer
from eavmigrate.transform.tables import TableNameMapper
from eavmigrate.utils.config_io import load_config, load_config_from_json, save_config_to_json


def test_default_config_layout():
    """Test the built-in join table list and primary keys."""
    config = MigrationConfig()
    names = [spec.name for spec in config.join_tables]
    assert names[0] == "eav_entity_type"
    assert "catalog_eav_attribute" in names
    assert config.primary_key("eav_attribute") == "attribute_id"
    assert config.primary_key("catalog_eav_attribute") is None
    option = next(spec for spec in config.join_tables if spec.name == "eav_attribute_option")
    assert option.key_fields == []


def test_duplicate_join_tables_rejected():
    """Test a join table listed twice fails validation."""
    with pytest.raises(ValidationError):
        MigrationConfig(join_tables=[JoinTableSpec(name="a"), JoinTableSpec(name="a")])


def test_unknown_converter_rejected():
    """Test FieldRule only accepts known converters."""
    with pytest.raises(ValidationError):
        FieldRule(convert={"is_global": "float"})


def test_config_json_round_trip(tmp_path):
    """Test saving and loading a config file."""
    config = MigrationConfig(
        table_map={"eav_attribute": "eav_attribute_v2"},
        join_tables=[JoinTableSpec(name="eav_attribute_label", key_fields=["attribute_id", "store_id"])],
        field_rules={"eav_attribute": FieldRule(rename={"label": "frontend_label"})},
    )
    path = tmp_path / "nested" / "config.json"
    save_config_to_json(config, path)
    loaded = load_config_from_json(path)
    assert loaded == config
    assert load_config(None) == MigrationConfig()


def test_load_config_errors(tmp_path):
    """Test missing, empty and invalid config files."""
    with pytest.raises(FileNotFoundError):
        load_config_from_json(tmp_path / "missing.json")
    empty = tmp_path / "empty.json"
    empty.write_text("  ", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config_from_json(empty)
    invalid = tmp_path / "invalid.json"
    invalid.write_text('{"join_tables": "nope"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_config_from_json(invalid)


def test_settings_read_environment(monkeypatch, tmp_path):
    """Test settings pick up EAVMIGRATE_ variables."""
    monkeypatch.setenv("EAVMIGRATE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("EAVMIGRATE_BACKUP_SUFFIX", "_orig")
    monkeypatch.setenv("EAVMIGRATE_LOG_FILE", str(tmp_path / "logs" / "run.log"))
    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.backup_suffix == "_orig"
    assert (tmp_path / "logs").is_dir()


def test_table_name_mapper():
    """Test renamed and unchanged table names."""
    mapper = TableNameMapper({"eav_attribute": "eav_attribute_v2"})
    assert mapper.destination("eav_attribute") == "eav_attribute_v2"
    assert mapper.destination("eav_attribute_set") == "eav_attribute_set"


def test_transformer_keeps_destination_only_fields():
    """Test the seed survives where the source has nothing to say."""
    transformer = RecordTransformer(FieldRule(), ["attribute_id", "attribute_code", "note"])
    row = transformer.transform(
        {"attribute_id": 1, "attribute_code": "name", "legacy": True},
        {"attribute_code": "old", "note": "kept"},
    )
    assert row == {"attribute_id": 1, "attribute_code": "name", "note": "kept"}
    assert transformer.transform({"attribute_id": 2}) == {"attribute_id": 2, "attribute_code": None, "note": None}


def test_transformer_rules():
    """Test rename, ignore, convert and defaults."""
    rule = FieldRule(
        rename={"label": "frontend_label"},
        ignore=["attribute_model"],
        convert={"is_global": "bool_int", "frontend_label": "null_if_empty", "position": "int"},
        defaults={"is_visible": 1},
    )
    transformer = RecordTransformer(
        rule, ["attribute_id", "frontend_label", "is_global", "is_visible", "attribute_model", "position"]
    )
    row = transformer.transform(
        {"attribute_id": 3, "label": " ", "is_global": "true", "attribute_model": "X", "position": "7"},
        {"attribute_model": "Y"},
    )
    assert row["frontend_label"] is None
    assert row["is_global"] == 1
    assert row["is_visible"] == 1
    assert row["attribute_model"] == "Y"
    assert row["position"] == 7


def test_transformer_without_known_shape_copies_everything():
    """Test a destination with no known columns receives every source field."""
    transformer = RecordTransformer(FieldRule(), [])
    assert transformer.transform({"a": 1, "b": 2}) == {"a": 1, "b": 2}


def test_intent_for_row():
    """Test rows with an id become updates and rows without one become inserts."""
    assert intent_for({"attribute_id": 5, "code": "x"}, "attribute_id") == Update(id=5, fields={"code": "x"})
    assert intent_for({"attribute_id": None, "code": "x"}, "attribute_id") == Insert(fields={"code": "x"})
    assert intent_for({"code": "x"}, None) == Insert(fields={"code": "x"})


def test_setup_logging_levels_and_stream():
    """Test console logs go to the given stream and bad level names are rejected."""
    stream = io.StringIO()
    setup_logging(level="warning", stream=stream)
    get_logger("tests").warning("table skipped")
    get_logger("tests").info("not shown")
    assert "table skipped" in stream.getvalue()
    assert "not shown" not in stream.getvalue()

    with pytest.raises(ValueError):
        setup_logging(level="LOUD")
    setup_logging()
