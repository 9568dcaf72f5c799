"""
Tests for engine configuration loading.

Covers:
- Schema defaults
- YAML parsing and unknown key rejection
- Semantic validation
- get_active_config end to end (packaged and tmp_path sets)
- Checksum stability
"""

from __future__ import annotations

import dataclasses

import pytest
import yaml

from pantry_config import get_active_config
from pantry_config.loader import compute_checksum, load_engine_config, parse_engine_config
from pantry_config.schema import EngineConfig, ExpiryConfig
from pantry_config.validator import validate_engine_config
from pantry_engines.expiry import ExpiryThresholds
from pantry_kernel.exceptions import ConfigNotFoundError, ConfigValidationError


def _write(tmp_path, name, data):
    path = tmp_path / f"{name}.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestSchema:
    def test_defaults(self):
        config = EngineConfig.defaults()

        assert config.expiry.critical_days == 7
        assert config.expiry.soon_days == 30
        assert config.movements.unknown_item_name == "N/A"
        assert config.movements.recent_limit == 5
        assert config.valuation.display_places == 2

    def test_thresholds(self):
        assert ExpiryConfig(3, 10).thresholds() == ExpiryThresholds(3, 10)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineConfig().version = 2


class TestParse:
    def test_partial_sections_use_defaults(self):
        config = parse_engine_config({"config_id": "kitchen", "expiry": {"critical_days": 3}})

        assert config.config_id == "kitchen"
        assert config.expiry.critical_days == 3
        assert config.expiry.soon_days == 30
        assert config.movements.recent_limit == 5

    def test_empty_mapping(self):
        config = parse_engine_config({})

        assert config.config_id == "builtin"
        assert config.checksum == compute_checksum(config)

    def test_unknown_section_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_engine_config({"alerts": {}})

        assert exc_info.value.code == "CONFIG_INVALID"
        assert exc_info.value.field == "alerts"

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_engine_config({"expiry": {"critical_dayz": 3}})

        assert exc_info.value.field == "expiry.critical_dayz"

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigValidationError):
            parse_engine_config({"movements": [1, 2]})

    @pytest.mark.parametrize("version", ["two", None, True, [1]])
    def test_non_integer_version_rejected(self, version):
        with pytest.raises(ConfigValidationError) as exc_info:
            parse_engine_config({"version": version})

        assert exc_info.value.field == "version"

    def test_numeric_string_version_accepted(self):
        assert parse_engine_config({"version": "4"}).version == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "blank.yaml"
        path.write_text("", encoding="utf-8")

        assert load_engine_config(path).config_id == "builtin"


class TestValidate:
    @pytest.mark.parametrize(
        "data,field",
        [
            ({"expiry": {"critical_days": -1}}, "expiry.critical_days"),
            ({"expiry": {"critical_days": 10, "soon_days": 10}}, "expiry.soon_days"),
            ({"movements": {"unknown_item_name": "  "}}, "movements.unknown_item_name"),
            ({"movements": {"recent_limit": 0}}, "movements.recent_limit"),
            ({"movements": {"trailing_days": 0}}, "movements.trailing_days"),
            ({"valuation": {"display_places": -2}}, "valuation.display_places"),
            ({"valuation": {"currency": "EURO"}}, "valuation.currency"),
        ],
    )
    def test_rejects(self, data, field):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_engine_config(parse_engine_config(data))

        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "data,field",
        [
            ({"expiry": {"critical_days": True, "soon_days": 30}}, "expiry.critical_days"),
            ({"expiry": {"critical_days": 0, "soon_days": True}}, "expiry.soon_days"),
            ({"movements": {"recent_limit": True}}, "movements.recent_limit"),
            ({"movements": {"trailing_days": True}}, "movements.trailing_days"),
            ({"valuation": {"display_places": False}}, "valuation.display_places"),
        ],
    )
    def test_rejects_booleans(self, data, field):
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_engine_config(parse_engine_config(data))

        assert exc_info.value.field == field

    def test_yaml_boolean_threshold_rejected(self, tmp_path):
        path = tmp_path / "flag.yaml"
        path.write_text("expiry:\n  critical_days: true\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            validate_engine_config(load_engine_config(path))

    def test_accepts_defaults(self):
        config = EngineConfig.defaults()

        assert validate_engine_config(config) is config


class TestChecksum:
    def test_stable(self):
        assert compute_checksum(EngineConfig()) == compute_checksum(EngineConfig())

    def test_ignores_checksum_field(self):
        assert compute_checksum(EngineConfig()) == compute_checksum(EngineConfig(checksum="x"))

    def test_changes_with_content(self):
        assert compute_checksum(EngineConfig()) != compute_checksum(
            EngineConfig(expiry=ExpiryConfig(critical_days=3))
        )


class TestGetActiveConfig:
    def test_packaged_default(self):
        config = get_active_config()

        assert config.config_id == "default"
        assert config.expiry.critical_days == 7
        assert config.movements.unknown_item_name == "N/A"
        assert config.valuation.currency == "USD"
        assert len(config.checksum) == 64

    def test_custom_directory(self, tmp_path):
        _write(
            tmp_path,
            "bistro",
            {"config_id": "bistro", "version": 3, "expiry": {"critical_days": 2, "soon_days": 10}},
        )

        config = get_active_config("bistro", config_dir=tmp_path)

        assert config.version == 3
        assert config.expiry.thresholds() == ExpiryThresholds(2, 10)

    def test_missing_set(self, tmp_path):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            get_active_config("nope", config_dir=tmp_path)

        assert exc_info.value.code == "CONFIG_NOT_FOUND"

    def test_invalid_set(self, tmp_path):
        _write(tmp_path, "bad", {"expiry": {"critical_days": 40, "soon_days": 30}})

        with pytest.raises(ConfigValidationError):
            get_active_config("bad", config_dir=tmp_path)

    def test_emits_config_trace(self, tmp_path, captured_logs):
        _write(tmp_path, "traced", {"config_id": "traced"})

        config = get_active_config("traced", config_dir=tmp_path)

        traces = [r for r in captured_logs() if r["message"] == "PANTRY_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == "traced"
        assert traces[0]["checksum"] == config.checksum
