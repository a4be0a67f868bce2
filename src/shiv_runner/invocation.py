"""Command composition for the shiv slicing engine.

Turns an input geometry path, the configuration stack and any pass-through
flags into the argument vector shiv expects::

    [-S gcode_variable=k=v ...] -c <global> -c <machine> -c <extruder>
    -c <material> -o <output> [extra ...] <input>
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .logging import get_logger
from .models import Compression, Invocation, ProfileSelection

LOGGER = get_logger(__name__)

OUTPUT_SUFFIX = "_s.gcode"
STRIPPED_SUFFIXES = (".stl", ".STL")
STDIN_INPUT = "-"

_COMPRESSION_BY_SUFFIX = {
    compression.suffix: compression
    for compression in Compression
    if compression is not Compression.NONE
}


def _strip_suffix(value: str, suffix: str) -> str:
    if value.endswith(suffix):
        return value[: -len(suffix)]
    return value


def derive_output_path(input_path: str) -> str:
    """Derive the G-code path from an STL path.

    ``.stl`` and ``.STL`` are each stripped if present, in that order, then
    ``_s.gcode`` is appended. Other casings are left in place.

    Examples:
        >>> derive_output_path("part.stl")
        'part_s.gcode'
        >>> derive_output_path("noext")
        'noext_s.gcode'
    """
    base = input_path
    for suffix in STRIPPED_SUFFIXES:
        base = _strip_suffix(base, suffix)
    return base + OUTPUT_SUFFIX


def detect_compression(input_path: str) -> Compression:
    """Return the compression format implied by the final suffix."""
    return _COMPRESSION_BY_SUFFIX.get(Path(input_path).suffix, Compression.NONE)


def format_date(moment: datetime) -> str:
    """Format a timestamp the way ``date`` prints it in the C locale.

    The day is space padded and the zone name is included when known, e.g.
    ``Tue Mar  5 14:07:09 UTC 2024``. Naive timestamps omit the zone.
    """
    fields = [moment.strftime("%a %b"), f"{moment.day:2d}", moment.strftime("%H:%M:%S")]
    zone = moment.strftime("%Z")
    if zone:
        fields.append(zone)
    fields.append(str(moment.year))
    return " ".join(fields)


def gcode_variables(
    selection: ProfileSelection,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Values stamped into the G-code header via ``-S gcode_variable``."""
    return {
        "date": format_date(now or datetime.now().astimezone()),
        "machine": selection.machine,
        "extruder": selection.extruder,
        "material": selection.material,
    }


def build_invocation(
    input_path: str,
    extra_args: Sequence[str],
    config_stack: Sequence[str | Path],
    bin_path: str = "shiv",
    variables: Optional[Mapping[str, str]] = None,
) -> Invocation:
    """Assemble the engine command.

    Args:
        input_path: Geometry file given on the command line
        extra_args: Pass-through flags, kept in their original order
        config_stack: Configuration layers, lowest precedence first
        bin_path: shiv executable
        variables: Optional G-code variables to stamp

    Returns:
        Invocation ready to launch
    """
    compression = detect_compression(input_path)
    source_path = _strip_suffix(input_path, compression.suffix) if compression.suffix else input_path
    output_path = derive_output_path(source_path)

    args: List[str] = []
    for key, value in (variables or {}).items():
        args.extend(["-S", f"gcode_variable={key}={value}"])
    for layer in config_stack:
        args.extend(["-c", str(layer)])
    args.extend(["-o", output_path])
    args.extend(extra_args)
    args.append(STDIN_INPUT if compression is not Compression.NONE else input_path)

    invocation = Invocation(
        binary=bin_path,
        args=args,
        input_path=input_path,
        output_path=output_path,
        compression=compression,
    )
    LOGGER.debug(
        "Assembled invocation",
        command=invocation.command,
        compression=compression.value,
    )
    return invocation


__all__ = [
    "OUTPUT_SUFFIX",
    "STDIN_INPUT",
    "build_invocation",
    "derive_output_path",
    "detect_compression",
    "format_date",
    "gcode_variables",
]
