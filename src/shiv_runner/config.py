# noqa: D401
"""Configuration management for the shiv profile runner."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import DEFAULT_LOG_LEVEL, get_logger
from .models import ProfileSelection

LOGGER = get_logger(__name__)

# Shipped configuration root, next to the installed package
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent / "configs"

# ProfileSelection field -> environment variable
SELECTOR_ENV_VARS: Dict[str, str] = {
    "machine": "MACHINE",
    "extruder": "EXTRUDER",
    "material": "MATERIAL",
}


class RunnerSettings(BaseSettings):
    """Engine location and runner behaviour.

    Environment variables use the ``SHIV_`` prefix, e.g. ``SHIV_BIN_PATH``.
    """

    model_config = SettingsConfigDict(env_prefix="SHIV_", env_ignore_empty=True, extra="ignore")

    bin_path: str = "shiv"
    config_dir: Path = DEFAULT_CONFIG_DIR
    log_level: str = DEFAULT_LOG_LEVEL


def load_selection(environ: Optional[Mapping[str, str]] = None) -> ProfileSelection:
    """Resolve the profile selectors from an environment mapping.

    Unset or empty variables fall back to the model defaults.

    Args:
        environ: Variables to read (defaults to ``os.environ``)

    Returns:
        ProfileSelection instance
    """
    env = os.environ if environ is None else environ

    values = {}
    for field_name, var_name in SELECTOR_ENV_VARS.items():
        value = env.get(var_name)
        if value:
            values[field_name] = value

    selection = ProfileSelection(**values)
    LOGGER.debug(
        "Resolved profile selection",
        machine=selection.machine,
        extruder=selection.extruder,
        material=selection.material,
    )
    return selection


def load_settings() -> RunnerSettings:
    """Load runner settings from the process environment."""
    return RunnerSettings()


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "RunnerSettings",
    "SELECTOR_ENV_VARS",
    "load_selection",
    "load_settings",
]
