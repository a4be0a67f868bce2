# noqa: D401
"""Data models for the shiv profile runner."""

from __future__ import annotations

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MACHINE = "ultra3d"
DEFAULT_EXTRUDER = "left"
DEFAULT_MATERIAL = "inland_pla"


class Compression(Enum):
    """Compression formats accepted for the input geometry file."""

    NONE = "none"
    GZIP = "gz"
    BZIP2 = "bz2"
    XZ = "xz"
    LZ4 = "lz4"

    @property
    def suffix(self) -> str:
        """File suffix for this format, empty for uncompressed input."""
        return "" if self is Compression.NONE else f".{self.value}"


class ProfileSelection(BaseModel):
    """Active machine/extruder/material choice."""

    model_config = ConfigDict(frozen=True)

    machine: str = DEFAULT_MACHINE
    extruder: str = DEFAULT_EXTRUDER
    material: str = DEFAULT_MATERIAL

    def as_tuple(self) -> Tuple[str, str, str]:
        """Return (machine, extruder, material) in config layer order."""
        return (self.machine, self.extruder, self.material)


class Invocation(BaseModel):
    """Fully composed command for the slicing engine."""

    model_config = ConfigDict(frozen=True)

    binary: str
    args: List[str] = Field(default_factory=list)
    input_path: str
    output_path: str
    compression: Compression = Compression.NONE

    @property
    def command(self) -> List[str]:
        """Argument vector including the engine executable."""
        return [self.binary, *self.args]

    @property
    def reads_stdin(self) -> bool:
        """Whether the engine reads decompressed geometry from stdin."""
        return self.compression is not Compression.NONE


class RunResult(BaseModel):
    """Outcome of a single engine run."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    elapsed_seconds: float

    @property
    def succeeded(self) -> bool:
        """Whether the engine exited with status 0."""
        return self.exit_code == 0


__all__ = [
    "Compression",
    "DEFAULT_EXTRUDER",
    "DEFAULT_MACHINE",
    "DEFAULT_MATERIAL",
    "Invocation",
    "ProfileSelection",
    "RunResult",
]
