"""
Configuration Loader — Priority-based config resolution.

Loading priority (highest wins):
  1. Environment variables (HOST, PORT, PUBLIC_BASE_URL, WHATSAPP_*)
  2. Explicit path or TOOLDOCK_CONFIG_PATH env var
  3. ~/.tooldock/tooldock.json (default location)
  4. Built-in defaults
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .models import ToolDockConfig

logger = logging.getLogger("tooldock.config.loader")

# Default config file locations (checked in order)
_DEFAULT_CONFIG_PATHS = [
    "~/.tooldock/tooldock.json",
    "~/.tooldock/tooldock.yaml",
    "~/.tooldock/tooldock.yml",
]


def _resolve_config_path(explicit_path: Optional[str] = None) -> Optional[Path]:
    """First existing file among: explicit path, TOOLDOCK_CONFIG_PATH, defaults."""
    candidates = [
        (explicit_path, "Explicit config path"),
        (os.getenv("TOOLDOCK_CONFIG_PATH"), "TOOLDOCK_CONFIG_PATH"),
    ]
    for raw, label in candidates:
        if not raw:
            continue
        p = Path(raw).expanduser()
        if p.exists():
            return p
        logger.warning(f"{label} not found: {raw}")

    for default in _DEFAULT_CONFIG_PATHS:
        p = Path(default).expanduser()
        if p.exists():
            logger.info(f"Found config at default location: {p}")
            return p
    return None


def _load_file_config(path: Path) -> dict:
    """Load config data from a JSON or YAML file."""
    try:
        with open(path, "r") as f:
            if path.suffix in [".yaml", ".yml"]:
                return yaml.safe_load(f) or {}
            elif path.suffix == ".json":
                return json.load(f)
            else:
                logger.warning(f"Unsupported config format: {path.suffix}")
                return {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {path}: {e}")
        return {}


def _env_overrides() -> Dict[str, Dict[str, Any]]:
    """Collect the env vars that override file values, grouped by section."""
    overrides: Dict[str, Dict[str, Any]] = {"gateway": {}, "channel": {}, "logging": {}}

    if os.getenv("HOST"):
        overrides["gateway"]["host"] = os.getenv("HOST")
    if os.getenv("PORT"):
        overrides["gateway"]["port"] = int(os.getenv("PORT"))
    if os.getenv("PUBLIC_BASE_URL"):
        overrides["gateway"]["public_base_url"] = os.getenv("PUBLIC_BASE_URL")

    for env_key, field in (
        ("WHATSAPP_API_URL", "api_url"),
        ("WHATSAPP_API_TOKEN", "api_token"),
        ("WHATSAPP_PHONE_NUMBER_ID", "phone_number_id"),
        ("WHATSAPP_VERIFY_TOKEN", "verify_token"),
    ):
        if os.getenv(env_key):
            overrides["channel"][field] = os.getenv(env_key)

    if os.getenv("LOG_LEVEL"):
        overrides["logging"]["level"] = os.getenv("LOG_LEVEL")

    return {k: v for k, v in overrides.items() if v}


def load_config(config_path: Optional[str] = None) -> ToolDockConfig:
    """
    Load configuration with priority: env vars > config file > defaults.
    """
    load_dotenv()

    config_data: Dict[str, Any] = {}

    resolved_path = _resolve_config_path(config_path)
    if resolved_path:
        file_data = _load_file_config(resolved_path)
        if isinstance(file_data, dict):
            config_data.update(file_data)
            logger.info(f"Loaded config from: {resolved_path}")
    else:
        logger.info("No config file found, using defaults + env vars")

    # Shallow merge per section: env values win over file values
    for section, values in _env_overrides().items():
        merged = dict(config_data.get(section) or {})
        merged.update(values)
        config_data[section] = merged

    return ToolDockConfig(**config_data)
