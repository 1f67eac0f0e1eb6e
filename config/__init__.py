"""
Config Package
Contains the JSON configuration files and helpers to read them.
"""

import os
import json

# Get the directory where this file is located
CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_SETTINGS = {
    'host': '0.0.0.0',
    'port': 8000,
    'debug': False,
    'log_level': 'INFO',
    'log_json': False,
    'pending_choice_timeout_minutes': 30,
    'session_timeout_minutes': 30,
}


def load_json(filename):
    """Load a JSON file from the config directory."""
    filepath = os.path.join(CONFIG_DIR, filename)
    with open(filepath, 'r') as f:
        return json.load(f)


def get_settings_path(filename='settings.json'):
    return os.path.join(CONFIG_DIR, filename)


def load_settings(filename='settings.json'):
    """
    Load service settings, falling back to defaults for missing keys.

    A missing settings file is not an error; unknown keys are kept as-is.
    """
    settings = dict(DEFAULT_SETTINGS)
    if os.path.exists(get_settings_path(filename)):
        settings.update(load_json(filename))
    return settings


__all__ = [
    'CONFIG_DIR',
    'DEFAULT_SETTINGS',
    'load_json',
    'get_settings_path',
    'load_settings',
]
