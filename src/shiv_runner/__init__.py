# noqa: D401
"""shiv-runner - Profile resolver and launcher for the shiv slicing engine."""

__version__ = "0.1.0"

from .config import RunnerSettings, load_selection, load_settings
from .invocation import build_invocation, derive_output_path, detect_compression, gcode_variables
from .models import Compression, Invocation, ProfileSelection, RunResult
from .process import (
    LaunchError,
    ProcessLauncher,
    ShivRunnerError,
    SubprocessLauncher,
    get_launcher,
    run_timed,
)
from .profiles import build_config_stack, config_layers

__all__ = [
    "__version__",
    # Config
    "RunnerSettings",
    "load_selection",
    "load_settings",
    # Models
    "Compression",
    "Invocation",
    "ProfileSelection",
    "RunResult",
    # Profiles
    "build_config_stack",
    "config_layers",
    # Invocation
    "build_invocation",
    "derive_output_path",
    "detect_compression",
    "gcode_variables",
    # Process
    "LaunchError",
    "ProcessLauncher",
    "ShivRunnerError",
    "SubprocessLauncher",
    "get_launcher",
    "run_timed",
]
