"""Configuration helpers for the Beauty Tracker app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_STORAGE_KEY = "beauty_store_snapshot"
DEFAULT_SUGGESTION_KEYWORD = "party"


@dataclass
class AppConfig:
    """Configuration values for the app.

    Storage settings pick the key-value backend that holds the single store
    blob; ``suggestion_keyword`` drives which look the neglected-category
    insight recommends.
    """

    storage_backend: str = "json"
    storage_path: Optional[str] = None
    storage_key: str = DEFAULT_STORAGE_KEY
    suggestion_keyword: str = DEFAULT_SUGGESTION_KEYWORD
    log_level: str = "INFO"
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables, which take
        precedence.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("APP_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        storage_backend = get_value("storage_backend", "json")
        storage_path = get_value("storage_path")
        storage_key = get_value("storage_key", DEFAULT_STORAGE_KEY)
        suggestion_keyword = get_value("suggestion_keyword", DEFAULT_SUGGESTION_KEYWORD)
        log_level = get_value("log_level", "INFO")

        return cls(
            storage_backend=str(storage_backend or "json").lower(),
            storage_path=storage_path or None,
            storage_key=str(storage_key or DEFAULT_STORAGE_KEY),
            suggestion_keyword=str(suggestion_keyword or DEFAULT_SUGGESTION_KEYWORD),
            log_level=str(log_level or "INFO").upper(),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal ``key: value`` config file."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
