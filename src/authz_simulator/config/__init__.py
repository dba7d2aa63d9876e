"""Configuration module for authz-simulator."""

from __future__ import annotations

from authz_simulator.config._config import SimulatorConfig, configure, get_global_config

__all__ = ["SimulatorConfig", "configure", "get_global_config"]
