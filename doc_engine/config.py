"""
Configuration — loads settings from .docengine.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml

from .types import IndexOptions


_DEFAULTS = {
    "index_paragraphs": False,
    "index_list_items": False,
    "index_block_quotes": False,
    "store": "memory",
    "store_dir": ".docengine/docs",
    "log_dir": "",
    "log_level": "INFO",
    "metrics": False,
}

_STORE_KINDS = ("memory", "file")

# Config file search locations
_CONFIG_FILENAMES = [".docengine.yaml", ".docengine.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    # Search CWD first, then home directory
    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Engine configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .docengine.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}
        index_section = yd.get("index", {}) if isinstance(yd.get("index"), dict) else {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str, section=yd):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = section.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool, section=yd) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = section.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        # Optional index kinds
        self.INDEX_PARAGRAPHS = _get_bool("DOCENGINE_INDEX_PARAGRAPHS", "paragraphs",
                                          _DEFAULTS["index_paragraphs"], section=index_section)
        self.INDEX_LIST_ITEMS = _get_bool("DOCENGINE_INDEX_LIST_ITEMS", "list_items",
                                          _DEFAULTS["index_list_items"], section=index_section)
        self.INDEX_BLOCK_QUOTES = _get_bool("DOCENGINE_INDEX_BLOCK_QUOTES", "block_quotes",
                                            _DEFAULTS["index_block_quotes"], section=index_section)

        # Store backend
        self.STORE = _get("DOCENGINE_STORE", "store", _DEFAULTS["store"]).lower()
        if self.STORE not in _STORE_KINDS:
            self.STORE = _DEFAULTS["store"]
        self.STORE_DIR = _get("DOCENGINE_STORE_DIR", "store_dir", _DEFAULTS["store_dir"])

        # Logging
        self.LOG_DIR = _get("DOCENGINE_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.LOG_LEVEL = _get("DOCENGINE_LOG_LEVEL", "log_level",
                              _DEFAULTS["log_level"]).upper()

        # Edit metrics
        self.METRICS = _get_bool("DOCENGINE_METRICS", "metrics", _DEFAULTS["metrics"])
        self.METRICS_ROOT = _get("DOCENGINE_METRICS_ROOT", "metrics_root", os.getcwd())

    def index_options(self) -> IndexOptions:
        """Translate the index switches into an :class:`IndexOptions` flag."""
        options = IndexOptions.NONE
        if self.INDEX_PARAGRAPHS:
            options |= IndexOptions.PARAGRAPHS
        if self.INDEX_LIST_ITEMS:
            options |= IndexOptions.LIST_ITEMS
        if self.INDEX_BLOCK_QUOTES:
            options |= IndexOptions.BLOCK_QUOTES
        return options

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
