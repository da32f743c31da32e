"""
Configuration loader
"""
import logging
import yaml
from pathlib import Path
from typing import Any

from enigma.models import GameSettings


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/game.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> GameSettings:
    """
    Load game settings from YAML file
    
    Args:
        config_path: Path to config file
        
    Returns:
        GameSettings object (missing keys fall back to defaults)
    """
    path = Path(config_path)
    
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    
    return GameSettings(**data)


def update_setting(key: str, value: Any, config_path: str = DEFAULT_CONFIG_PATH) -> GameSettings:
    """
    Update a single setting in the config file
    
    Args:
        key: Setting name (must be a GameSettings field)
        value: New value
        config_path: Path to config file

    Returns:
        The re-validated settings
    """
    if key not in GameSettings.model_fields:
        raise KeyError(f"Unknown setting: {key}")

    path = Path(config_path)
    
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    # Read current config
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    
    data[key] = value
    settings = GameSettings(**data)
    
    # Write back
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
    
    logger.info(f"✅ Updated {key} to {value}")
    return settings
