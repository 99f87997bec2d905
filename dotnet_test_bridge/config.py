"""Configuration models for discovery and runner execution."""

import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class RunnerConfig(BaseModel):
    """Configuration shared by every framework runner.

    ``search_roots`` replaces the program directories taken from the
    environment when set.
    """

    runner_path: Path | None = None
    search_roots: Sequence[Path] | None = None
    timeout: float | None = Field(default=None, gt=0)
    extra_args: Sequence[str] = ()


class CoverageConfig(BaseModel):
    """Coverage console wrapping the runner command line.

    The registration mode is read from the ``register`` key.
    """

    model_config = ConfigDict(populate_by_name=True)

    console_path: Path
    register_mode: str = Field(default="user", alias="register")


class EngineConfig(BaseModel):
    """Top-level configuration loaded from the config file."""

    work_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "dotnet-test-bridge"
    )
    max_parallel_scans: PositiveInt = 4
    legacy_xunit_ancestry: bool = False
    coverage: CoverageConfig | None = None
    frameworks: Mapping[str, Mapping[str, Any]] = Field(
        default_factory=dict,
        description="Runner settings per framework key, validated by its manifest",
    )
