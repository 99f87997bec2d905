"""Load engine configuration from YAML files."""

import asyncio
from pathlib import Path

import yaml
from pydantic import ValidationError

from dotnet_test_bridge.config import EngineConfig


async def load_engine_config(path: Path) -> EngineConfig:
    """Load and validate an engine configuration file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated engine configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, not valid YAML or fails validation

    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty config file: {path}")

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config schema in {path}: {e}") from e
