"""Configuration: where the store lives.

Resolution order for the store path:
    1. GIFBOX_STORE environment variable (a .env file is honoured by the CLI)
    2. `store_path` in the YAML config file (--config, GIFBOX_CONFIG, or
       ~/.config/gifbox/config.yaml when present)
    3. ~/.gifbox
"""

import os
from pathlib import Path

import yaml

DEFAULT_STORE = "~/.gifbox"
DEFAULT_CONFIG = "~/.config/gifbox/config.yaml"


def load_config(config_path: str | Path) -> dict:
    """Load configuration from YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty or not a mapping
    """
    path = Path(config_path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if not config:
        raise ValueError(f"Empty config file: {config_path}")
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return config


def store_path(config_path: str | Path | None = None) -> Path:
    """Resolve the store root directory."""
    from_env = os.environ.get("GIFBOX_STORE")
    if from_env:
        return Path(from_env).expanduser()

    config_path = config_path or os.environ.get("GIFBOX_CONFIG")
    if config_path is None and Path(DEFAULT_CONFIG).expanduser().exists():
        config_path = DEFAULT_CONFIG

    if config_path is not None:
        config = load_config(config_path)
        if config.get("store_path"):
            return Path(config["store_path"]).expanduser()

    return Path(DEFAULT_STORE).expanduser()
