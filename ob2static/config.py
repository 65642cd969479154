"""Configuration loading for ob2static.

Settings come from a YAML file and can be overridden per field by
``OB2STATIC_<FIELD>`` environment variables, which is the usual way to
pass secrets.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ob2static.core.models import ConfigError

ENV_PREFIX = "OB2STATIC_"

EXPORT_REQUIRED = ["vault_path", "bucket", "easyimage_api_endpoint", "easyimage_api_key"]
DEPLOY_REQUIRED = ["webhook_token", "user", "repo", "event_type"]


@dataclass
class ExporterConfig:
    """Everything an export run and the deploy trigger need."""

    vault_path: Optional[Path] = None

    # Object store
    endpoint: str = ""
    region: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket: str = ""

    # Image host
    easyimage_api_key: str = ""
    easyimage_api_endpoint: str = ""

    # Deploy trigger
    webhook_token: str = ""
    user: str = ""
    repo: str = ""
    event_type: str = ""

    # Layout of the published site
    posts_prefix: str = "posts"
    registry_key: str = "images.json"
    link_prefix: str = "/post"

    timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExporterConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return _coerce(cls(**dict(data)))

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "ExporterConfig":
        """Return a copy with ``OB2STATIC_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for f in fields(self):
            value = environ.get(ENV_PREFIX + f.name.upper())
            if value is not None:
                overrides[f.name] = value
        return _coerce(replace(self, **overrides))

    def missing(self, required: List[str]) -> List[str]:
        return [name for name in required if not getattr(self, name)]

    def validate(self, required: List[str] = EXPORT_REQUIRED) -> None:
        """Raise ConfigError naming every required field left empty."""
        missing = self.missing(required)
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")


def _coerce(config: ExporterConfig) -> ExporterConfig:
    if config.vault_path is not None and not isinstance(config.vault_path, Path):
        config.vault_path = Path(config.vault_path).expanduser()
    try:
        config.timeout = float(config.timeout)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout: {config.timeout!r}") from e
    for name in ("posts_prefix", "registry_key", "link_prefix"):
        setattr(config, name, str(getattr(config, name)))
    config.posts_prefix = config.posts_prefix.strip("/")
    return config


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ExporterConfig:
    """Load configuration from a YAML file and the environment.

    Args:
        path: YAML file; only the environment is used when omitted
        environ: Environment mapping (default: os.environ)

    Returns:
        ExporterConfig with overrides applied

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    data: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

    return ExporterConfig.from_dict(data).with_env(environ)
