"""Configuration loading utilities for metamesh."""

from .schema import (
    ScenarioConfig,
    dump_config,
    load_config,
)

__all__ = ["ScenarioConfig", "dump_config", "load_config"]
