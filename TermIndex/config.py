"""
Configuration loading for TermIndex.

The configuration is a JSON file (``//`` line comments allowed). Values from
the file are merged over ``DEFAULT_CONFIG``, so a file only needs to contain
the keys it changes.
"""
import copy
import json
import os
from typing import Any, Dict, Optional

from .errors import ConfigError

CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.json")

DEFAULT_CONFIG: Dict[str, Any] = {
    "preprocessing": {
        "lowercase": True,
        "stop_words": {"use": True, "file": None},
        "short_tokens": {"remove": False, "min_word_length": 2},
    },
    "stemming": {
        "use": True,
        "algorithm": "porter",
    },
    "pipeline_order": ["lowercase", "stop_words", "short_tokens", "stemming"],
    "index": {
        "tf_method": "relative_freq",
        "idf_method": "inv_doc_freq_smooth",
        "workers": 1,
    },
    "source": {
        "id_columns": ["president", "date"],
        "text_column": "speech",
        "table": "stateofunion",
    },
    "database": {
        "path": None,
        "dictionary_table": "dictionary",
        "postings_table": "postings",
    },
    "search": {
        "top_k": 5,
    },
}


def _strip_comments(content: str) -> str:
    filtered_lines = []
    for line in content.splitlines():
        line_without_comment = line.split("//")[0]
        if line_without_comment.strip():
            filtered_lines.append(line_without_comment)
    return "\n".join(filtered_lines)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``overrides`` into a copy of ``base``.

    Args:
        base: Configuration providing the defaults
        overrides: Configuration values taking precedence

    Returns:
        New merged configuration dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file, handling comments.

    Without an explicit path the package's ``config.json`` is used when it
    exists, otherwise the built-in defaults.

    Args:
        config_file: Path to configuration file (optional)

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: The explicit file is missing or is not valid JSON
    """
    if config_file is None:
        if not os.path.exists(CONFIG_PATH):
            return copy.deepcopy(DEFAULT_CONFIG)
        config_file = CONFIG_PATH

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {config_file}: {e}") from e

    try:
        loaded = json.loads(_strip_comments(content) or "{}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid configuration file {config_file}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Configuration file {config_file} must contain a JSON object")

    return merge_config(DEFAULT_CONFIG, loaded)
