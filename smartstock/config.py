# Configuration for the SmartStock webhook
# Read from config.json next to main.py; every key is optional

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / 'config.json'

AMBIGUITY_POLICIES = ('primary', 'clarify')


@dataclass
class Settings:
    catalog_url: Optional[str] = None
    api_key: Optional[str] = None
    catalog_path: Optional[str] = None
    catalog_timeout: int = 10
    catalog_max_retries: int = 2
    # 'primary' answers with the first candidate, 'clarify' asks the user to pick
    ambiguity_policy: str = 'primary'
    strip_punctuation: bool = True
    summary_limit: int = 10
    webhook_port: int = 8080
    log_path: Optional[str] = None
    log_level: str = 'INFO'
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 5

    def validate(self) -> 'Settings':
        if self.ambiguity_policy not in AMBIGUITY_POLICIES:
            raise ConfigError(f"ambiguity_policy must be one of {AMBIGUITY_POLICIES}, "
                              f"got {self.ambiguity_policy!r}")
        for name in ('catalog_timeout', 'catalog_max_retries', 'summary_limit', 'webhook_port',
                     'log_max_bytes', 'log_backup_count'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.strip_punctuation, bool):
            raise ConfigError(f"strip_punctuation must be true or false, got {self.strip_punctuation!r}")
        return self


def load_settings(path=None) -> Settings:
    """Load config.json (or `path`). A missing file means defaults."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info(f"No config at {config_path}, using defaults")
        return Settings()

    try:
        with open(config_path) as f:
            raw = json.load(f)
    except ValueError as e:
        raise ConfigError(f"{config_path} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
    return Settings(**{k: v for k, v in raw.items() if k in known}).validate()
