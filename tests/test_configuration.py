import json
import os
import tempfile

import pytest
from hypothesis import given, strategies as st

from configuration.config_manager import ConfigManager, PassCheckConfig
from screening.errors import ConfigLoadError, InvalidConfigurationError


@pytest.fixture
def settings_file():
    """Create a temporary JSON settings file for testing"""
    created = []

    def _write(content):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write(content if isinstance(content, str) else json.dumps(content))
        created.append(f.name)
        return f.name

    yield _write
    for filename in created:
        os.unlink(filename)


def test_defaults():
    config = PassCheckConfig()

    assert config.false_positive_probability == 0.001
    assert config.min_length is None
    assert config.max_length is None
    assert config.max_num_passwords is None
    assert config.ignore_case is False
    assert config.password_data_file is None


def test_config_is_immutable():
    config = PassCheckConfig()

    with pytest.raises(AttributeError):
        config.ignore_case = True
    assert config.with_overrides(ignore_case=True).ignore_case is True
    assert config.ignore_case is False


@pytest.mark.parametrize("kwargs", [
    {"false_positive_probability": 0},
    {"false_positive_probability": -0.5},
    {"false_positive_probability": 1.0},
    {"min_length": -2},
    {"max_length": -2},
    {"min_length": 10, "max_length": 4},
    {"max_num_passwords": 0},
    {"ignore_case": "yes"},
    {"password_data_file": 42},
])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        PassCheckConfig(**kwargs)


def test_from_mapping_accepts_option_names():
    # Arrange
    mapping = {
        "falsePositiveProbability": 0.01,
        "minLength": 4,
        "maxLength": -1,
        "maxNumPasswords": 1000,
        "ignoreCase": True,
        "passwordDataFile": "words.dat",
    }

    # Act
    config = PassCheckConfig.from_mapping(mapping)

    # Assert
    assert config == PassCheckConfig(0.01, 4, None, 1000, True, "words.dat")


def test_from_mapping_accepts_field_names():
    config = PassCheckConfig.from_mapping({"ignore_case": True, "max_num_passwords": -1})

    assert config.ignore_case is True
    assert config.max_num_passwords is None


def test_from_mapping_rejects_unknown_options():
    with pytest.raises(InvalidConfigurationError) as error_info:
        PassCheckConfig.from_mapping({"falsePositiveProbabilty": 0.01})
    assert "falsePositiveProbabilty" in str(error_info.value)


def test_to_ingest_settings():
    settings = PassCheckConfig(0.05, 2, 20, 7, True).to_ingest_settings()

    assert settings.false_positive_probability == 0.05
    assert settings.min_length == 2
    assert settings.max_length == 20
    assert settings.max_items == 7
    assert settings.ignore_case is True


@given(probability=st.floats(min_value=0, max_value=1, exclude_min=True, exclude_max=True))
def test_any_probability_inside_the_open_interval_is_accepted(probability):
    assert PassCheckConfig(false_positive_probability=probability).false_positive_probability == probability


class TestConfigManager:

    def test_load_without_file_or_environment(self):
        assert ConfigManager(environ={}).load() == PassCheckConfig()

    def test_load_settings_file(self, settings_file):
        # Arrange
        path = settings_file({"falsePositiveProbability": 0.02, "ignoreCase": True})

        # Act
        config = ConfigManager(environ={}).load(path)

        # Assert
        assert config.false_positive_probability == 0.02
        assert config.ignore_case is True

    def test_environment_overrides_file(self, settings_file):
        # Arrange
        path = settings_file({"falsePositiveProbability": 0.02, "minLength": 3})
        environ = {
            "PASSCHECK_FALSE_POSITIVE_PROBABILITY": "0.005",
            "PASSCHECK_IGNORE_CASE": "true",
            "PASSCHECK_MAX_NUM_PASSWORDS": "500",
            "PASSCHECK_PASSWORD_DATA_FILE": "/srv/words.dat",
            "UNRELATED": "ignored",
        }

        # Act
        config = ConfigManager(environ=environ).load(path)

        # Assert
        assert config == PassCheckConfig(0.005, 3, None, 500, True, "/srv/words.dat")

    def test_environment_disabled_sentinel(self):
        config = ConfigManager(environ={"PASSCHECK_MIN_LENGTH": "-1"}).load()

        assert config.min_length is None

    @pytest.mark.parametrize("environ", [
        {"PASSCHECK_IGNORE_CASE": "maybe"},
        {"PASSCHECK_MIN_LENGTH": "eight"},
        {"PASSCHECK_FALSE_POSITIVE_PROBABILITY": "low"},
    ])
    def test_invalid_environment_values(self, environ):
        with pytest.raises(ConfigLoadError) as error_info:
            ConfigManager(environ=environ).load()
        assert list(environ)[0] in str(error_info.value)

    def test_environment_value_out_of_range(self):
        with pytest.raises(InvalidConfigurationError):
            ConfigManager(environ={"PASSCHECK_FALSE_POSITIVE_PROBABILITY": "2"}).load()

    def test_missing_settings_file(self, tmp_path):
        missing = str(tmp_path / "missing.json")

        with pytest.raises(ConfigLoadError) as error_info:
            ConfigManager(environ={}).load(missing)
        assert f"Reading the settings file {missing} failed" in str(error_info.value)

    def test_malformed_settings_file(self, settings_file):
        path = settings_file("{not json")

        with pytest.raises(ConfigLoadError) as error_info:
            ConfigManager(environ={}).load(path)
        assert "is not valid JSON" in str(error_info.value)

    def test_settings_file_must_hold_an_object(self, settings_file):
        path = settings_file([1, 2, 3])

        with pytest.raises(ConfigLoadError):
            ConfigManager(environ={}).load(path)

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("PASSCHECK_MAX_LENGTH", "64")

        assert ConfigManager().load().max_length == 64
