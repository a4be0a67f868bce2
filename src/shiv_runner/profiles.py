"""Configuration layer stack for shiv profiles."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .logging import get_logger
from .models import ProfileSelection

LOGGER = get_logger(__name__)

GLOBAL_LAYER = "global"


def config_layers(selection: ProfileSelection) -> List[str]:
    """Return the layer names relative to the configuration root.

    Order is global, machine, extruder, material. shiv applies ``-c`` files
    in argument order, so later layers override earlier ones.
    """
    machine = selection.machine
    return [
        GLOBAL_LAYER,
        f"{machine}/{machine}",
        f"{machine}/{selection.extruder}",
        f"{machine}/{selection.material}",
    ]


def build_config_stack(selection: ProfileSelection, config_dir: str | Path) -> List[Path]:
    """Join the layer names onto the configuration root.

    Files are not checked for existence; shiv reports missing layers itself.
    """
    root = Path(config_dir)
    stack = [root / layer for layer in config_layers(selection)]
    LOGGER.debug("Built config stack", layers=[str(path) for path in stack])
    return stack


__all__ = ["GLOBAL_LAYER", "build_config_stack", "config_layers"]
