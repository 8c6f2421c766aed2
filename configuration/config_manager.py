import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from screening.errors import ConfigLoadError, InvalidConfigurationError
from screening.word_list import IngestSettings

DISABLED = -1

# option name -> field name
OPTION_ALIASES = {
    "falsePositiveProbability": "false_positive_probability",
    "minLength": "min_length",
    "maxLength": "max_length",
    "maxNumPasswords": "max_num_passwords",
    "ignoreCase": "ignore_case",
    "passwordDataFile": "password_data_file",
}

ENV_PREFIX = "PASSCHECK_"


@dataclass(frozen=True)
class PassCheckConfig:
    """
    Settings for a not-leaked assertion and the word list it is built from.
    None disables a length bound or the password cap.
    """
    false_positive_probability: float = 0.001
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    max_num_passwords: Optional[int] = None
    ignore_case: bool = False
    password_data_file: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.ignore_case, bool):
            raise InvalidConfigurationError(f"ignore_case must be a boolean, got {self.ignore_case!r}")
        if self.password_data_file is not None and not isinstance(self.password_data_file, str):
            raise InvalidConfigurationError(
                f"password_data_file must be a path string, got {self.password_data_file!r}"
            )
        # remaining checks are shared with the ingestor
        self.to_ingest_settings()

    def to_ingest_settings(self) -> IngestSettings:
        return IngestSettings(
            false_positive_probability=self.false_positive_probability,
            min_length=self.min_length,
            max_length=self.max_length,
            max_items=self.max_num_passwords,
            ignore_case=self.ignore_case,
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "PassCheckConfig":
        """Builds a config from option names or field names, -1 meaning disabled"""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in mapping.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidConfigurationError(f"Unknown configuration option: {key}")
            if name in ("min_length", "max_length", "max_num_passwords") and value == DISABLED:
                value = None
            values[name] = value
        return cls(**values)

    def with_overrides(self, **changes) -> "PassCheckConfig":
        return replace(self, **changes)


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_int(raw: str) -> int:
    return int(raw.strip())


ENV_PARSERS = {
    "false_positive_probability": float,
    "min_length": _parse_int,
    "max_length": _parse_int,
    "max_num_passwords": _parse_int,
    "ignore_case": _parse_bool,
    "password_data_file": str,
}


class ConfigManager():
    """
    Loads PassCheckConfig values from an optional JSON settings file,
    overlaid with PASSCHECK_* environment variables
    Args:
        environ: the environment to read overrides from, os.environ by default
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def read_settings_file(self, path: str) -> dict:
        """Reads the JSON settings file, which must hold an object"""
        try:
            with open(path, "r", encoding="utf-8") as file:
                settings = json.load(file)
        except OSError as e:
            raise ConfigLoadError(f"Reading the settings file {path} failed:\n{e}") from e
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Settings file {path} is not valid JSON:\n{e}") from e
        if not isinstance(settings, dict):
            raise ConfigLoadError(f"Settings file {path} must contain a JSON object")
        return settings

    def read_environment(self) -> dict:
        overrides = {}
        for name, parse in ENV_PARSERS.items():
            key = ENV_PREFIX + name.upper()
            if key not in self.environ:
                continue
            try:
                overrides[name] = parse(self.environ[key])
            except ValueError as e:
                raise ConfigLoadError(f"Environment variable {key} is invalid:\n{e}") from e
        return overrides

    def load(self, path: Optional[str] = None) -> PassCheckConfig:
        settings = self.read_settings_file(path) if path is not None else {}
        settings.update(self.read_environment())
        return PassCheckConfig.from_mapping(settings)
