#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("repometa")

CONFIG_FILE_NAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def setup_logging(level="WARNING"):
    """Configure the repometa logger to write to stderr."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True
    )
    logger.setLevel(level)


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPOMETA_CONFIG environment variable
    2. ~/.repometa/config.{json,toml,yaml,yml}
    """
    if 'REPOMETA_CONFIG' in os.environ:
        path = Path(os.environ['REPOMETA_CONFIG'])
        if path.exists():
            return path

    repometa_dir = Path.home() / '.repometa'
    for filename in CONFIG_FILE_NAMES:
        path = repometa_dir / filename
        if path.exists():
            return path

    # Nothing on disk; report where a config would go
    return repometa_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "git": {
            # "" reads system, XDG, global and repository files; "local" only the repository's
            "configuration_scope": "",
            # "" means origin, else the first remote
            "remote_name": ""
        },
        "paths": {
            # None follows the platform
            "case_sensitive": None
        },
        "logging": {
            "level": "WARNING"
        },
        "output": {
            "format": "jsonl"
        }
    }


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f)
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            if isinstance(file_config, dict):
                config = merge_configs(config, file_config)
            elif file_config is not None:
                logger.error(f"Ignoring config from {config_path}: expected a mapping")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REPOMETA_SECTION_KEY
    For example: REPOMETA_GIT_REMOTE_NAME=upstream
    """
    env_prefix = "REPOMETA_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest key in current_level that prefixes the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config
