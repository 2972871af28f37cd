import copy
import logging
import os

import yaml

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


class Config:
    """Configuration manager: defaults, then a YAML file, then env vars."""

    DEFAULTS = {
        "server": {
            "host": "0.0.0.0",
            "port": 3000,
            "debug": False,
        },
        "logging": {
            "level": "INFO",
        },
        "stats": {
            "interval_seconds": 60,
        },
        "schema": {
            "record_path": None,
            "filter_path": None,
        },
    }

    # env var -> (section, key, converter)
    ENV_OVERRIDES = {
        "SERVER_HOST": ("server", "host", str),
        "SERVER_PORT": ("server", "port", int),
        "SERVER_DEBUG": ("server", "debug", _parse_bool),
        "LOG_LEVEL": ("logging", "level", str.upper),
        "STATS_INTERVAL_SECONDS": ("stats", "interval_seconds", int),
    }

    def __init__(self, config_path=None, environ=None):
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is not None:
            try:
                with open(config_path, "r") as f:
                    user_config = yaml.safe_load(f)

                if user_config and isinstance(user_config, dict):
                    self._config = self._deep_merge(self._config, user_config)
                    logger.info("Loaded config from %s", config_path)
            except FileNotFoundError:
                logger.warning("Config file %s not found, using defaults", config_path)
            except yaml.YAMLError:
                logger.warning("Invalid YAML in %s, using defaults", config_path)

        self._apply_env(os.environ if environ is None else environ)

        level = str(self._config["logging"]["level"]).upper()
        self._config["logging"]["level"] = level
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {level!r}, expected one of {LOG_LEVELS}")

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def _apply_env(self, environ):
        for var, (section, key, convert) in self.ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None:
                continue
            try:
                self._config[section][key] = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {var}: {raw!r}") from None

    def get(self, key, default=None):
        """Get a top-level config key."""
        return self._config.get(key, default)

    def __getitem__(self, key):
        return self._config[key]

    def __contains__(self, key):
        return key in self._config
