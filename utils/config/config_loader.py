"""
Configuration loading for the chat companion.

Settings come from YAML files in the `configs` directory:

1. `companion_<environment>.yaml`, if present, otherwise
2. `companion.yaml`,

deep-merged over `DEFAULT_CONFIG`. Relative history and lexicon paths are
resolved against the project root.
"""

import copy
import logging
import os

import yaml

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

DEFAULT_CONFIG = {
    "history": {
        "path": "data/chat_history.json",
        "corpus_export_path": "data/corpus.txt",
    },
    "generator": {
        "min_response_length": 5,
        "max_response_length": 25,
        "bias_probability": 0.5,
        "seed": None,
    },
    "tagger": {
        # "nltk" or "lexicon"
        "backend": "nltk",
        "lexicon_path": None,
        "download": True,
    },
    "logging": {
        "log_file": None,
        "console_json": False,
        "console_level": "WARNING",
    },
}


def merge_config(base, override):
    """Recursively merges `override` into a copy of `base`."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(config_path, logger):
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded companion config from {config_path}")
        return config
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error loading companion config from {config_path}: {e}")
        return None


def load_config(environment="development", config_dir=None, logger=None):
    """
    Load the companion configuration.

    Args:
        environment (str): Selects `companion_<environment>.yaml` when it exists.
        config_dir (str, optional): Directory holding the YAML files.
            Defaults to `<project root>/configs`.
        logger (logging.Logger, optional): Receives load messages. Defaults to the
            module logger.

    Returns:
        dict: The merged configuration.
    """
    logger = logger or logging.getLogger(__name__)
    if config_dir is None:
        config_dir = os.path.join(PROJECT_ROOT, "configs")

    config_paths = [
        os.path.join(config_dir, f"companion_{environment}.yaml"),
        os.path.join(config_dir, "companion.yaml"),
    ]

    config = copy.deepcopy(DEFAULT_CONFIG)
    for config_path in config_paths:
        if os.path.exists(config_path):
            loaded = _read_yaml(config_path, logger)
            if loaded is not None:
                config = merge_config(DEFAULT_CONFIG, loaded)
                break

    for section, key in (("history", "path"), ("history", "corpus_export_path"),
                         ("tagger", "lexicon_path")):
        value = config[section].get(key)
        if value and not os.path.isabs(value):
            config[section][key] = os.path.join(PROJECT_ROOT, value)

    return config
